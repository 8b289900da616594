"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.catalog import (
    CatalogItem,
    CatalogParseRequest,
    CatalogResponse,
)
from models.order import (
    OrderLine,
    PendingLine,
    ResolvedLine,
    ResolveRequest,
    ResolveResponse,
    ExportRequest,
)
from models.learned_match import (
    LearnedMatchEntry,
    LearnedMatchListResponse,
    LearnedMatchConfirmRequest,
    LearnedMatchImportResponse,
)
from models.remote_match import (
    NOT_FOUND_INDEX,
    RemoteMatchItem,
    RemoteMatchPayload,
    RemoteMatchResult,
)

__all__ = [
    # Base
    "BaseSchema",

    # Catalog
    "CatalogItem",
    "CatalogParseRequest",
    "CatalogResponse",

    # Order
    "OrderLine",
    "PendingLine",
    "ResolvedLine",
    "ResolveRequest",
    "ResolveResponse",
    "ExportRequest",

    # Learned matches
    "LearnedMatchEntry",
    "LearnedMatchListResponse",
    "LearnedMatchConfirmRequest",
    "LearnedMatchImportResponse",

    # Remote matcher
    "NOT_FOUND_INDEX",
    "RemoteMatchItem",
    "RemoteMatchPayload",
    "RemoteMatchResult",
]
