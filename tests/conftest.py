"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest
from unittest.mock import patch
from typing import Generator

from models.catalog import CatalogItem
from services.conversion_service import ConversionService
from services.learned_match_store import InMemoryLearnedMatchStore
from services.learning_service import LearningService
from services.resolution_service import ResolutionService

from tests.factories import FakeMatcher


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder backed by a shared row list."""

    def __init__(self, rows: list):
        self._rows = rows
        self._filters: dict = {}
        self._action = "select"
        self._payload = None

    def select(self, *args, **kwargs):
        self._action = "select"
        return self

    def upsert(self, data):
        self._action = "upsert"
        self._payload = data
        return self

    def delete(self):
        self._action = "delete"
        return self

    def eq(self, column, value):
        self._filters[column] = value
        return self

    def limit(self, count):
        return self

    def _matches(self, row: dict) -> bool:
        return all(row.get(column) == value for column, value in self._filters.items())

    def execute(self) -> MockSupabaseResponse:
        if self._action == "upsert":
            self._rows[:] = [row for row in self._rows if row["key"] != self._payload["key"]]
            self._rows.append(dict(self._payload))
            return MockSupabaseResponse(data=[self._payload])
        if self._action == "delete":
            removed = [row for row in self._rows if self._matches(row)]
            self._rows[:] = [row for row in self._rows if not self._matches(row)]
            return MockSupabaseResponse(data=removed)
        return MockSupabaseResponse(data=[row for row in self._rows if self._matches(row)])


class MockSupabaseClient:
    """Mock Supabase client with in-memory tables."""

    def __init__(self):
        self._tables: dict[str, list] = {}

    def set_table_data(self, table_name: str, data: list):
        """Configure mock rows for a table."""
        self._tables[table_name] = list(data)

    def rows(self, table_name: str) -> list:
        return self._tables.setdefault(table_name, [])

    def table(self, name: str) -> MockSupabaseQuery:
        return MockSupabaseQuery(self.rows(name))


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("app_storage", [...])
    """
    with patch("services.learned_match_store.get_supabase_client", return_value=mock_supabase):
        yield mock_supabase


# ===================
# DOMAIN FIXTURES
# ===================

@pytest.fixture
def sample_catalog() -> list[CatalogItem]:
    """Small electrical supply catalog."""
    return [
        CatalogItem(id="c1", description="CABO FLEX 2,5MM PRETO", price=1.2),
        CatalogItem(id="c2", description="CABO FLEX 4MM PRETO", price=2.1),
        CatalogItem(id="c3", description="TOMADA 2P+T 10A MG", price=12.5),
        CatalogItem(id="c4", description="PARAFUSO 6MM C/ BUCHA", price=0.35),
        CatalogItem(id="c5", description="ELETRODUTO 3/4 PRETO", price=7.9),
    ]


@pytest.fixture
def memory_store() -> InMemoryLearnedMatchStore:
    return InMemoryLearnedMatchStore()


@pytest.fixture
def learning_service(memory_store) -> LearningService:
    return LearningService(store=memory_store)


@pytest.fixture
def fake_matcher() -> FakeMatcher:
    return FakeMatcher()


@pytest.fixture
def conversion_service() -> ConversionService:
    return ConversionService(quantity_threshold=20)


@pytest.fixture
def resolution_service(learning_service, fake_matcher, conversion_service) -> ResolutionService:
    return ResolutionService(
        learning_service=learning_service,
        matcher=fake_matcher,
        conversion_service=conversion_service
    )


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client(resolution_service, learning_service):
    """
    FastAPI test client wired to in-memory services.

    Usage:
        def test_endpoint(test_client, fake_matcher):
            fake_matcher.results = [...]
            response = test_client.post("/api/resolve", json={...})
    """
    from fastapi.testclient import TestClient
    from main import app

    with patch("routes.resolution.get_resolution_service", return_value=resolution_service):
        with patch("routes.learned_matches.get_resolution_service", return_value=resolution_service):
            with patch("routes.learned_matches.get_learning_service", return_value=learning_service):
                yield TestClient(app)
