"""
Order resolution API routes.
"""

import asyncio

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
import structlog

from models.order import ExportRequest, ResolveRequest, ResolveResponse
from services.export_service import get_export_service
from services.resolution_service import get_resolution_service
from routes.errors import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter()

# One resolution run at a time per process
_resolve_lock = asyncio.Lock()


@router.post("", response_model=ResolveResponse)
async def resolve_order(data: ResolveRequest):
    """
    Resolve a freeform order against the given catalog.

    Returns every non-blank line in input order. A remote matcher failure
    fails the whole request (503) and returns no lines.
    """
    try:
        service = get_resolution_service()
        async with _resolve_lock:
            lines = await service.resolve(data.order_text, data.catalog)

        return ResolveResponse.from_lines(lines)

    except Exception as e:
        return handle_error(e)


@router.post("/export", response_class=PlainTextResponse)
async def export_resolved_lines(data: ExportRequest):
    """
    Render resolved lines as tab-separated text for a spreadsheet.
    """
    try:
        service = get_export_service()
        return PlainTextResponse(service.to_clipboard_text(data.lines))

    except Exception as e:
        return handle_error(e)
