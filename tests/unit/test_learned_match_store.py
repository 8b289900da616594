"""
Unit tests for learned match storage backends.

Run: pytest tests/unit/test_learned_match_store.py -v
"""

from unittest.mock import MagicMock, patch

import pytest

from config.database import get_supabase_client
from exceptions import AppError, DatabaseError
from services.learned_match_store import (
    InMemoryLearnedMatchStore,
    JsonFileLearnedMatchStore,
    SupabaseLearnedMatchStore,
    create_learned_match_store,
)


class TestJsonFileLearnedMatchStore:
    """Tests for JsonFileLearnedMatchStore"""

    def test_read_missing_file_returns_none(self, tmp_path):
        """Should treat a missing file as empty storage."""
        store = JsonFileLearnedMatchStore(tmp_path / "matches.json")

        assert store.read() is None

    def test_write_then_read(self, tmp_path):
        """Should create parent directories and round-trip the payload."""
        store = JsonFileLearnedMatchStore(tmp_path / "nested" / "matches.json")

        store.write('[{"originalText": "cabo"}]')

        assert store.read() == '[{"originalText": "cabo"}]'
        assert list((tmp_path / "nested").iterdir()) == [tmp_path / "nested" / "matches.json"]

    def test_write_replaces_previous_payload(self, tmp_path):
        """Should overwrite, not append."""
        store = JsonFileLearnedMatchStore(tmp_path / "matches.json")
        store.write("[1]")
        store.write("[2]")

        assert store.read() == "[2]"

    def test_clear_removes_file(self, tmp_path):
        """Should delete the file and tolerate a second clear."""
        path = tmp_path / "matches.json"
        store = JsonFileLearnedMatchStore(path)
        store.write("[]")

        store.clear()
        store.clear()

        assert not path.exists()

    def test_failed_replace_leaves_no_temp_file(self, tmp_path):
        """Should raise DatabaseError and remove the temp file."""
        path = tmp_path / "matches.json"
        store = JsonFileLearnedMatchStore(path)
        store.write("[1]")

        with patch("services.learned_match_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(DatabaseError):
                store.write("[2]")

        assert list(tmp_path.iterdir()) == [path]
        assert store.read() == "[1]"


class TestSupabaseLearnedMatchStore:
    """Tests for SupabaseLearnedMatchStore"""

    def test_read_without_row_returns_none(self, mock_db, mock_supabase):
        """Should return None when no row exists for the key."""
        store = SupabaseLearnedMatchStore(table="app_storage", key="kf_learned_matches")

        assert store.read() is None

    def test_write_upserts_single_row(self, mock_db, mock_supabase):
        """Should keep exactly one row per key."""
        store = SupabaseLearnedMatchStore(table="app_storage", key="kf_learned_matches")

        store.write("[1]")
        store.write("[2]")

        rows = mock_supabase.rows("app_storage")
        assert rows == [{"key": "kf_learned_matches", "value": "[2]"}]
        assert store.read() == "[2]"

    def test_clear_deletes_row(self, mock_db, mock_supabase):
        """Should remove only this key's row."""
        mock_supabase.set_table_data("app_storage", [
            {"key": "kf_learned_matches", "value": "[]"},
            {"key": "other", "value": "x"},
        ])
        store = SupabaseLearnedMatchStore(table="app_storage", key="kf_learned_matches")

        store.clear()

        assert mock_supabase.rows("app_storage") == [{"key": "other", "value": "x"}]


class TestCreateLearnedMatchStore:
    """Tests for create_learned_match_store()"""

    def test_memory_backend(self):
        assert isinstance(create_learned_match_store("memory"), InMemoryLearnedMatchStore)

    def test_json_backend(self):
        assert isinstance(create_learned_match_store("json"), JsonFileLearnedMatchStore)

    def test_supabase_backend(self, mock_db):
        assert isinstance(create_learned_match_store("supabase"), SupabaseLearnedMatchStore)


class TestSupabaseClient:
    """Tests for get_supabase_client()"""

    def test_unconfigured_raises_app_error(self):
        """Should raise the application DatabaseError, not a bare exception."""
        get_supabase_client.cache_clear()
        try:
            with patch("config.database.settings", MagicMock(supabase_configured=False)):
                with pytest.raises(DatabaseError) as exc_info:
                    get_supabase_client()
        finally:
            get_supabase_client.cache_clear()

        assert isinstance(exc_info.value, AppError)
        assert exc_info.value.code == "DATABASE_ERROR"
        assert exc_info.value.details["operation"] == "connect"
