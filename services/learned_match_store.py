"""
Durable storage backends for learned matches.

The cache serializes the whole learned match list to one JSON string and
hands it to a store. Every write replaces the stored value completely, so
readers never see a partial update.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union
import os
import tempfile
import structlog

from config import get_supabase_client
from config.settings import settings
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class LearnedMatchStore(ABC):
    """Holds one serialized learned match list."""

    @abstractmethod
    def read(self) -> Optional[str]:
        """Return the stored payload, or None if nothing was stored yet."""

    @abstractmethod
    def write(self, payload: str) -> None:
        """Replace the stored payload."""

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored payload."""


class InMemoryLearnedMatchStore(LearnedMatchStore):
    """Process-local store. Used by tests and the memory backend."""

    def __init__(self, payload: Optional[str] = None):
        self.payload = payload
        self.write_count = 0

    def read(self) -> Optional[str]:
        return self.payload

    def write(self, payload: str) -> None:
        self.payload = payload
        self.write_count += 1

    def clear(self) -> None:
        self.payload = None


class JsonFileLearnedMatchStore(LearnedMatchStore):
    """
    Store the payload in a JSON file.

    Writes go to a temp file in the same directory and are moved into
    place with os.replace.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            return self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error("learned_match_file_read_failed", path=str(self.path), error=str(e))
            raise DatabaseError("read", str(e), details={"path": str(self.path)})

    def write(self, payload: str) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.error("learned_match_file_write_failed", path=str(self.path), error=str(e))
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise DatabaseError("write", str(e), details={"path": str(self.path)})

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("learned_match_file_clear_failed", path=str(self.path), error=str(e))
            raise DatabaseError("delete", str(e), details={"path": str(self.path)})


class SupabaseLearnedMatchStore(LearnedMatchStore):
    """
    Store the payload as one row of a Supabase key-value table.

    Table columns: key (text, unique), value (text).
    """

    def __init__(self, table: Optional[str] = None, key: Optional[str] = None):
        self.db = get_supabase_client()
        self.table = table or settings.learned_match_table
        self.key = key or settings.learned_match_key

    def read(self) -> Optional[str]:
        try:
            response = (
                self.db.table(self.table)
                .select("value")
                .eq("key", self.key)
                .execute()
            )
        except Exception as e:
            logger.error("learned_match_select_failed", table=self.table, error=str(e))
            raise DatabaseError("select", str(e))

        if not response.data:
            return None
        return response.data[0].get("value")

    def write(self, payload: str) -> None:
        try:
            self.db.table(self.table).upsert({"key": self.key, "value": payload}).execute()
        except Exception as e:
            logger.error("learned_match_upsert_failed", table=self.table, error=str(e))
            raise DatabaseError("upsert", str(e))

    def clear(self) -> None:
        try:
            self.db.table(self.table).delete().eq("key", self.key).execute()
        except Exception as e:
            logger.error("learned_match_delete_failed", table=self.table, error=str(e))
            raise DatabaseError("delete", str(e))


def create_learned_match_store(backend: Optional[str] = None) -> LearnedMatchStore:
    """
    Build the store selected by LEARNED_MATCH_BACKEND.

    Args:
        backend: Override for settings.learned_match_backend

    Returns:
        LearnedMatchStore instance
    """
    backend = backend or settings.learned_match_backend
    logger.info("learned_match_store_selected", backend=backend)

    if backend == "supabase":
        return SupabaseLearnedMatchStore()
    if backend == "memory":
        return InMemoryLearnedMatchStore()
    return JsonFileLearnedMatchStore(settings.learned_match_path)
