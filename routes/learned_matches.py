"""
Learned match API routes.

List, confirm, delete, export and import the remembered
order-text → catalog item matches.
"""

from fastapi import APIRouter, Query, Request
from fastapi.responses import Response
import structlog

from exceptions import LearnedMatchImportError, LearnedMatchNotFoundError
from models.learned_match import (
    LearnedMatchConfirmRequest,
    LearnedMatchEntry,
    LearnedMatchImportResponse,
    LearnedMatchListResponse,
)
from services.learning_service import get_learning_service
from services.resolution_service import get_resolution_service
from routes.errors import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=LearnedMatchListResponse)
async def list_learned_matches():
    """
    List all learned matches, oldest first.
    """
    try:
        service = get_learning_service()
        matches = service.get_all()

        return LearnedMatchListResponse(data=matches, total=len(matches))

    except Exception as e:
        return handle_error(e)


@router.post("/confirm", response_model=LearnedMatchEntry, status_code=201)
async def confirm_learned_match(data: LearnedMatchConfirmRequest):
    """
    Confirm (or correct) the catalog item for a piece of order text.

    Overwrites any existing match for the same normalized text.
    """
    try:
        service = get_resolution_service()
        return service.confirm_match(data.original_text, data.catalog_item)

    except Exception as e:
        return handle_error(e)


@router.delete("", status_code=204)
async def delete_learned_match(
    text: str = Query(..., min_length=1, description="Normalized order text")
):
    """
    Delete the learned match for a text.
    """
    try:
        service = get_learning_service()
        if not service.delete(text):
            raise LearnedMatchNotFoundError(text)

        return Response(status_code=204)

    except Exception as e:
        return handle_error(e)


@router.get("/export")
async def export_learned_matches():
    """
    Download all learned matches as a JSON file.
    """
    try:
        service = get_learning_service()
        return Response(
            content=service.export_all(),
            media_type="application/json",
            headers={"Content-Disposition": 'attachment; filename="learned_matches.json"'}
        )

    except Exception as e:
        return handle_error(e)


@router.post("/import", response_model=LearnedMatchImportResponse)
async def import_learned_matches(request: Request):
    """
    Merge an exported JSON list into the learned matches.

    Invalid records are skipped; the request fails (422) only if the body
    is not a JSON list or holds no valid record.
    """
    try:
        service = get_learning_service()
        body = await request.body()

        if not service.import_merge(body.decode("utf-8", errors="replace")):
            raise LearnedMatchImportError()

        return LearnedMatchImportResponse(success=True, total=len(service))

    except Exception as e:
        return handle_error(e)
