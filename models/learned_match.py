"""
Learned match schemas.

A learned match remembers which catalog item a piece of order text
resolved to. Stored and exchanged with camelCase keys
(originalText, productId, productDescription, createdAt).
"""

from pydantic import ConfigDict, Field, field_validator
from datetime import datetime, timezone

from models.base import BaseSchema
from models.catalog import CatalogItem


class LearnedMatchEntry(BaseSchema):
    """
    One learned match, unique per normalized_text.

    normalized_text is trimmed and case-folded.
    """

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True,
        populate_by_name=True
    )

    normalized_text: str = Field(..., min_length=1, alias="originalText")
    catalog_item_id: str = Field(..., min_length=1, alias="productId")
    catalog_description_snapshot: str = Field(..., min_length=1, alias="productDescription")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="createdAt"
    )

    @field_validator("normalized_text")
    @classmethod
    def text_casefolded(cls, v: str) -> str:
        """Keys are always stored normalized."""
        return v.strip().casefold()

    def to_record(self) -> dict:
        """Serialize to the storage/export record format."""
        return self.model_dump(mode="json", by_alias=True)


class LearnedMatchListResponse(BaseSchema):
    """List of learned matches."""

    data: list[LearnedMatchEntry]
    total: int


class LearnedMatchConfirmRequest(BaseSchema):
    """Confirm or correct the catalog item for a piece of order text."""

    original_text: str = Field(..., min_length=1)
    catalog_item: CatalogItem


class LearnedMatchImportResponse(BaseSchema):
    """Result of an import-merge."""

    success: bool
    total: int
