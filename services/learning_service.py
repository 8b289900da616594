"""
Learned match cache.

Remembers which catalog item an order line resolved to, keyed by the
normalized line text, so repeat requests skip the remote matcher.

The full list lives in memory and is written through to the injected
LearnedMatchStore on every mutation.
"""

from typing import Any, Optional, Union
import json
import structlog
from pydantic import ValidationError as PydanticValidationError

from models.catalog import CatalogItem
from models.learned_match import LearnedMatchEntry
from services.learned_match_store import LearnedMatchStore, create_learned_match_store
from utils.text_utils import normalize_text

logger = structlog.get_logger(__name__)

REQUIRED_RECORD_FIELDS = ("originalText", "productId", "productDescription")


def _record_to_entry(record: Any) -> Optional[LearnedMatchEntry]:
    """
    Build an entry from an export/storage record.

    Returns None when any required field is missing or blank. A bad
    createdAt is replaced with the current time rather than dropping the
    record.
    """
    if not isinstance(record, dict):
        return None

    values = {}
    for field_name in REQUIRED_RECORD_FIELDS:
        value = record.get(field_name)
        if value is None or isinstance(value, (dict, list, bool)):
            return None
        value = str(value).strip()
        if not value:
            return None
        values[field_name] = value

    created_at = record.get("createdAt")
    if created_at:
        try:
            return LearnedMatchEntry.model_validate({**values, "createdAt": created_at})
        except PydanticValidationError:
            logger.debug("learned_match_created_at_invalid", value=str(created_at)[:50])

    return LearnedMatchEntry.model_validate(values)


class LearningService:
    """
    Learned match cache operations.

    Keys are unique: writing an existing key replaces the entry.
    """

    def __init__(self, store: Optional[LearnedMatchStore] = None):
        self.store = store if store is not None else create_learned_match_store()
        self._entries: dict[str, LearnedMatchEntry] = {}
        self.reload()

    # ===================
    # LOADING / PERSISTENCE
    # ===================

    def reload(self) -> None:
        """
        Load entries from the store.

        Unreadable or non-list payloads are treated as corruption: the
        store is cleared and the cache starts empty.
        """
        payload = self.store.read()
        self._entries = {}

        if not payload:
            return

        try:
            records = json.loads(payload)
        except json.JSONDecodeError as e:
            logger.warning("learned_matches_corrupted", reason="invalid_json", error=str(e))
            self.store.clear()
            return

        if not isinstance(records, list):
            logger.warning("learned_matches_corrupted", reason="not_a_list")
            self.store.clear()
            return

        for record in records:
            entry = _record_to_entry(record)
            if entry is not None:
                self._entries[entry.normalized_text] = entry

        logger.info("learned_matches_loaded", count=len(self._entries))

    @staticmethod
    def _serialize(entries: dict[str, LearnedMatchEntry], indent: Optional[int] = None) -> str:
        return json.dumps(
            [entry.to_record() for entry in entries.values()],
            ensure_ascii=False,
            indent=indent
        )

    def _commit(self, entries: dict[str, LearnedMatchEntry]) -> None:
        """
        Write entries to the store, then make them visible.

        If the store write fails the in-memory cache is left unchanged.
        """
        self.store.write(self._serialize(entries))
        self._entries = entries

    # ===================
    # READ OPERATIONS
    # ===================

    def lookup(self, normalized_text: str) -> Optional[str]:
        """
        Get the catalog item id learned for a normalized text.

        Args:
            normalized_text: Key produced by normalize_text

        Returns:
            Catalog item id or None
        """
        entry = self._entries.get(normalize_text(normalized_text))
        return entry.catalog_item_id if entry else None

    def get(self, normalized_text: str) -> Optional[LearnedMatchEntry]:
        """Get the full entry for a key."""
        return self._entries.get(normalize_text(normalized_text))

    def get_all(self) -> list[LearnedMatchEntry]:
        """All entries, oldest write first."""
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    # ===================
    # WRITE OPERATIONS
    # ===================

    def upsert(self, original_text: str, catalog_item: CatalogItem) -> LearnedMatchEntry:
        """
        Remember that original_text resolves to catalog_item.

        An existing entry for the same key is removed and the new one is
        appended with a fresh timestamp.

        Args:
            original_text: Order line as written
            catalog_item: Item it resolved to

        Returns:
            The stored entry
        """
        return self.upsert_many([(original_text, catalog_item)])[0]

    def upsert_many(self, matches: list[tuple[str, CatalogItem]]) -> list[LearnedMatchEntry]:
        """
        Remember several matches with a single store write.

        Either every match is stored or, if the store write fails, none is.

        Args:
            matches: (original_text, catalog_item) pairs

        Returns:
            The stored entries, in input order
        """
        entries = dict(self._entries)
        saved = []
        for original_text, catalog_item in matches:
            key = normalize_text(original_text)
            entry = LearnedMatchEntry(
                normalized_text=key,
                catalog_item_id=catalog_item.id,
                catalog_description_snapshot=catalog_item.description
            )
            entries.pop(key, None)
            entries[key] = entry
            saved.append(entry)

        if not saved:
            return saved

        self._commit(entries)

        for entry in saved:
            logger.info("learned_match_saved", text=entry.normalized_text, catalog_item_id=entry.catalog_item_id)
        return saved

    def delete(self, normalized_text: str) -> bool:
        """
        Forget a learned match.

        Returns:
            True if an entry was removed
        """
        key = normalize_text(normalized_text)
        if key not in self._entries:
            logger.debug("learned_match_delete_missing", text=key)
            return False

        entries = dict(self._entries)
        del entries[key]
        self._commit(entries)

        logger.info("learned_match_deleted", text=key)
        return True

    # ===================
    # BULK OPERATIONS
    # ===================

    def export_all(self) -> str:
        """Full dump as a pretty-printed JSON list of records."""
        return self._serialize(self._entries, indent=2)

    def import_merge(self, payload: Union[str, list]) -> bool:
        """
        Merge exported records into the cache.

        Records missing originalText, productId or productDescription are
        dropped. Valid records overwrite entries with the same key in place
        and are appended otherwise.

        Args:
            payload: JSON text or an already decoded list

        Returns:
            False if the payload is not a list or holds no valid record
            (nothing is written in that case), True otherwise
        """
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as e:
                logger.warning("learned_match_import_unparseable", error=str(e))
                return False

        if not isinstance(payload, list):
            logger.warning("learned_match_import_not_a_list", payload_type=type(payload).__name__)
            return False

        valid = [entry for entry in map(_record_to_entry, payload) if entry is not None]
        if not valid:
            logger.warning("learned_match_import_no_valid_records", received=len(payload))
            return False

        entries = dict(self._entries)
        for entry in valid:
            entries[entry.normalized_text] = entry
        self._commit(entries)

        logger.info(
            "learned_matches_imported",
            received=len(payload),
            imported=len(valid),
            total=len(self._entries)
        )
        return True


# Singleton instance
_learning_service: Optional[LearningService] = None


def get_learning_service() -> LearningService:
    """Get or create LearningService instance."""
    global _learning_service
    if _learning_service is None:
        _learning_service = LearningService()
    return _learning_service
