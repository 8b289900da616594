"""
Catalog API routes.

Parses price lists into catalog snapshots. Nothing is stored server
side; clients send the snapshot back with each resolve request.
"""

from fastapi import APIRouter, UploadFile, File
import structlog

from models.catalog import CatalogParseRequest, CatalogResponse
from parsers.catalog_parser import parse_catalog_text
from routes.errors import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter()


def _to_response(text: str) -> CatalogResponse:
    result = parse_catalog_text(text)
    return CatalogResponse(data=result.items, total=len(result.items))


@router.post("/parse", response_model=CatalogResponse)
async def parse_catalog(data: CatalogParseRequest):
    """
    Parse pasted catalog text.

    One product per line: description<TAB>price.
    """
    try:
        return _to_response(data.text)

    except Exception as e:
        return handle_error(e)


@router.post("/upload", response_model=CatalogResponse)
async def upload_catalog(file: UploadFile = File(...)):
    """
    Parse an uploaded catalog file (.txt or .tsv).
    """
    try:
        content = await file.read()
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError:
            # Spreadsheet exports on Windows
            text = content.decode("latin-1")

        logger.info("catalog_uploaded", filename=file.filename, size=len(content))
        return _to_response(text)

    except Exception as e:
        return handle_error(e)
