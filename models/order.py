"""
Order line schemas.

OrderLine is the parsed input unit, ResolvedLine the output unit of a
resolution run. position_index is the join key between lines sent to the
remote matcher and result slots.
"""

from pydantic import Field
from typing import Optional
from uuid import uuid4

from models.base import BaseSchema
from models.catalog import CatalogItem


class OrderLine(BaseSchema):
    """One non-blank line of a customer order."""

    position_index: int = Field(..., ge=0, description="0-based position in the order")
    text: str = Field(..., min_length=1, description="Line text as written")
    quantity: float = Field(1, gt=0, description="Leading quantity, 1 when absent")


class PendingLine(BaseSchema):
    """Line queued for the remote matcher."""

    position_index: int = Field(..., ge=0)
    text: str


class ResolvedLine(BaseSchema):
    """
    Order line reduced to a quantity and a catalog reference.

    matched_item is None when nothing in the catalog matched. That is a
    valid outcome, not an error.
    """

    id: str = Field(default_factory=lambda: str(uuid4()), description="Unique per resolution run")
    quantity: float = Field(..., gt=0)
    original_text: str
    matched_item: Optional[CatalogItem] = None
    is_learned: bool = False
    conversion_note: Optional[str] = None

    @property
    def is_matched(self) -> bool:
        return self.matched_item is not None

    @property
    def line_total(self) -> float:
        """Quantity times unit price, 0 when unmatched."""
        if self.matched_item is None:
            return 0.0
        return self.quantity * self.matched_item.price


class ResolveRequest(BaseSchema):
    """Request body for POST /api/resolve."""

    order_text: str = Field(..., description="Freeform multi-line order")
    catalog: list[CatalogItem] = Field(..., description="Catalog snapshot to match against")


class ResolveResponse(BaseSchema):
    """Resolved order."""

    data: list[ResolvedLine]
    total: int
    matched: int
    unmatched: int
    total_value: float

    @classmethod
    def from_lines(cls, lines: list[ResolvedLine]) -> "ResolveResponse":
        matched = sum(1 for line in lines if line.is_matched)
        return cls(
            data=lines,
            total=len(lines),
            matched=matched,
            unmatched=len(lines) - matched,
            total_value=round(sum(line.line_total for line in lines), 2)
        )


class ExportRequest(BaseSchema):
    """Resolved lines to render as spreadsheet clipboard text."""

    lines: list[ResolvedLine]
