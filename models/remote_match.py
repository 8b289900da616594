"""
Remote matcher contract schemas.

RemoteMatchPayload validates the raw JSON the matcher returns before any
of it is used. RemoteMatchResult is what the orchestrator consumes.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional

from models.base import BaseSchema
from models.catalog import CatalogItem

# catalogIndex value meaning "no product found"
NOT_FOUND_INDEX = -1


class RemoteMatchItem(BaseModel):
    """One entry of the matcher's mappedItems array, as sent."""

    model_config = ConfigDict(extra="ignore")

    originalRequest: Optional[str] = None
    quantity: Any = None
    catalogIndex: Optional[int] = None
    conversionLog: Optional[str] = None


class RemoteMatchPayload(BaseModel):
    """Top-level matcher response."""

    model_config = ConfigDict(extra="ignore")

    mappedItems: list[RemoteMatchItem]


class RemoteMatchResult(BaseSchema):
    """
    Validated per-line matcher result.

    catalog_item is None for the not-found sentinel. quantity is already
    coerced to a positive number.
    """

    original_request: Optional[str] = None
    quantity: float = Field(1, gt=0)
    catalog_item: Optional[CatalogItem] = None
    conversion_note: Optional[str] = None
