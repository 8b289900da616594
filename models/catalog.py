"""
Catalog schemas.

The catalog is owned by the ingestion step. The resolution pipeline only
reads it, so CatalogItem is frozen.
"""

from pydantic import ConfigDict, Field

from models.base import BaseSchema


class CatalogItem(BaseSchema):
    """A purchasable product with its unit price."""

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        frozen=True
    )

    id: str = Field(..., min_length=1, description="Catalog item id")
    description: str = Field(
        ...,
        min_length=1,
        description="Product description as written in the catalog",
        examples=["CABO FLEX 2,5MM PRETO"]
    )
    price: float = Field(..., ge=0, description="Unit price")


class CatalogParseRequest(BaseSchema):
    """Raw tab-delimited catalog text."""

    text: str = Field(..., description="One product per line: description<TAB>price")


class CatalogResponse(BaseSchema):
    """Parsed catalog."""

    data: list[CatalogItem]
    total: int
