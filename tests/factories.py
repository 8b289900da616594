"""
Test data factories.

Uses factory pattern to generate consistent test data.
"""

from datetime import datetime, timezone
from typing import Optional

from exceptions import DatabaseError
from models.catalog import CatalogItem
from models.remote_match import RemoteMatchResult
from services.learned_match_store import InMemoryLearnedMatchStore


class CatalogItemFactory:
    """
    Factory for creating test CatalogItem objects.

    Usage:
        item = CatalogItemFactory.create()
        item = CatalogItemFactory.create(description="CABO FLEX 4MM")
        items = CatalogItemFactory.create_batch(5)
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        id: Optional[str] = None,
        description: Optional[str] = None,
        price: float = 10.0
    ) -> CatalogItem:
        counter = cls._next_counter()
        return CatalogItem(
            id=id or f"cat-{counter}",
            description=description or f"PRODUTO TESTE {counter}",
            price=price
        )

    @classmethod
    def create_batch(cls, count: int, **overrides) -> list[CatalogItem]:
        return [cls.create(**overrides) for _ in range(count)]


class LearnedMatchRecordFactory:
    """Factory for export/import records (camelCase keys)."""

    @classmethod
    def create(
        cls,
        original_text: str = "1 rolo cabo 2.5mm preto",
        product_id: str = "c1",
        product_description: str = "CABO FLEX 2,5MM PRETO",
        created_at: Optional[str] = None
    ) -> dict:
        return {
            "originalText": original_text,
            "productId": product_id,
            "productDescription": product_description,
            "createdAt": created_at or datetime.now(timezone.utc).isoformat()
        }


class RemoteMatchResultFactory:
    """Factory for matcher results."""

    @classmethod
    def matched(
        cls,
        catalog_item: CatalogItem,
        original_request: Optional[str] = None,
        quantity: float = 1,
        conversion_note: Optional[str] = None
    ) -> RemoteMatchResult:
        return RemoteMatchResult(
            original_request=original_request,
            quantity=quantity,
            catalog_item=catalog_item,
            conversion_note=conversion_note
        )

    @classmethod
    def not_found(cls, original_request: Optional[str] = None, quantity: float = 1) -> RemoteMatchResult:
        return RemoteMatchResult(
            original_request=original_request,
            quantity=quantity,
            catalog_item=None
        )


class FakeMatcher:
    """
    RemoteMatcher stand-in.

    Returns queued results (or raises a queued error) and records every
    call so tests can assert on batch contents.
    """

    def __init__(self, results: Optional[list[RemoteMatchResult]] = None, error: Optional[Exception] = None):
        self.results = results or []
        self.error = error
        self.calls: list[tuple[list[CatalogItem], list[str]]] = []

    async def match(self, catalog: list[CatalogItem], texts: list[str]) -> list[RemoteMatchResult]:
        self.calls.append((catalog, list(texts)))
        if self.error is not None:
            raise self.error
        return self.results

    @property
    def call_count(self) -> int:
        return len(self.calls)


class FailingLearnedMatchStore(InMemoryLearnedMatchStore):
    """In-memory store whose writes always fail, as a broken backend would."""

    def write(self, payload: str) -> None:
        raise DatabaseError("write", "storage unavailable")
