"""
Order line resolution.

Turns freeform order text into ResolvedLine records:

1. Parse lines and look each one up in the learned match cache.
   Cache hits are resolved locally and get the unit conversion applied.
2. Send every remaining line to the remote matcher in ONE batch.
3. Put each batch result back at the position of the line it answers
   and learn every line the matcher resolved.

The batch is a subsequence of the order, so results are mapped back
through the pending queue, never by their offset in the response.
A failed batch fails the whole run.
"""

from typing import Optional
import structlog

from exceptions import (
    CatalogItemNotFoundError,
    EmptyCatalogError,
    RemoteMatchError,
    UnfilledSlotError,
)
from models.catalog import CatalogItem
from models.learned_match import LearnedMatchEntry
from models.order import OrderLine, PendingLine, ResolvedLine
from models.remote_match import RemoteMatchResult
from parsers.order_text_parser import coerce_quantity, parse_order_text
from services.conversion_service import ConversionService, get_conversion_service
from services.learning_service import LearningService, get_learning_service
from services.matcher_service import RemoteMatcher, get_matcher_service
from utils.text_utils import normalize_text

logger = structlog.get_logger(__name__)


class ResolutionService:
    """
    Resolution pipeline entry point.

    Collaborators are injected so tests can use an in-memory store and a
    fake matcher.
    """

    def __init__(
        self,
        learning_service: Optional[LearningService] = None,
        matcher: Optional[RemoteMatcher] = None,
        conversion_service: Optional[ConversionService] = None
    ):
        self.learning = learning_service if learning_service is not None else get_learning_service()
        self.matcher = matcher if matcher is not None else get_matcher_service()
        self.conversion = conversion_service if conversion_service is not None else get_conversion_service()

    # ===================
    # RESOLUTION
    # ===================

    async def resolve(self, raw_order_text: str, catalog: list[CatalogItem]) -> list[ResolvedLine]:
        """
        Resolve a freeform order against a catalog snapshot.

        Args:
            raw_order_text: Multi-line order text
            catalog: Catalog snapshot for this run

        Returns:
            One ResolvedLine per non-blank input line, in input order

        Raises:
            EmptyCatalogError: If the catalog is empty
            RemoteMatchError: If the remote batch fails (nothing is returned)
            UnfilledSlotError: If merging left a position empty
        """
        return await self.resolve_lines(parse_order_text(raw_order_text), catalog)

    async def resolve_lines(self, lines: list[OrderLine], catalog: list[CatalogItem]) -> list[ResolvedLine]:
        """Resolve already parsed lines. See resolve()."""
        if not catalog:
            raise EmptyCatalogError()

        logger.info("resolution_started", lines=len(lines), catalog_size=len(catalog))

        catalog_by_id = {item.id: item for item in catalog}
        slots: list[Optional[ResolvedLine]] = [None] * len(lines)
        pending: list[PendingLine] = []

        for slot_index, line in enumerate(lines):
            resolved = self._resolve_from_cache(line, catalog_by_id)
            if resolved is not None:
                slots[slot_index] = resolved
            else:
                pending.append(PendingLine(position_index=slot_index, text=line.text))

        cache_hits = len(lines) - len(pending)

        if pending:
            results = await self._match_batch(pending, catalog)
            self._merge_batch(slots, pending, results)

        resolved_lines = self._collect(slots)

        logger.info(
            "resolution_completed",
            lines=len(resolved_lines),
            cache_hits=cache_hits,
            remote_lines=len(pending),
            unmatched=sum(1 for line in resolved_lines if not line.is_matched)
        )
        return resolved_lines

    def _resolve_from_cache(
        self,
        line: OrderLine,
        catalog_by_id: dict[str, CatalogItem]
    ) -> Optional[ResolvedLine]:
        """Resolve a line from the learned match cache, or None on a miss."""
        item_id = self.learning.lookup(normalize_text(line.text))
        if item_id is None:
            return None

        catalog_item = catalog_by_id.get(item_id)
        if catalog_item is None:
            # Learned against an older catalog
            logger.debug("learned_match_stale", text=line.text, catalog_item_id=item_id)
            return None

        quantity, note = self.conversion.apply(line.text, line.quantity)
        return ResolvedLine(
            quantity=quantity,
            original_text=line.text,
            matched_item=catalog_item,
            is_learned=True,
            conversion_note=note
        )

    async def _match_batch(
        self,
        pending: list[PendingLine],
        catalog: list[CatalogItem]
    ) -> list[RemoteMatchResult]:
        """
        Run the single remote batch call.

        Raises:
            RemoteMatchError: On any matcher failure or a short response
        """
        texts = [line.text for line in pending]

        try:
            results = await self.matcher.match(catalog, texts)
        except RemoteMatchError:
            raise
        except Exception as e:
            logger.error("remote_match_failed", error=str(e), error_type=type(e).__name__)
            raise RemoteMatchError(f"Remote matching failed: {e}") from e

        if not isinstance(results, list):
            raise RemoteMatchError("Remote matcher returned a non-list result")

        if len(results) < len(pending):
            logger.error("remote_match_short_response", sent=len(pending), received=len(results))
            raise RemoteMatchError(
                f"Remote matcher returned {len(results)} results for {len(pending)} lines",
                details={"sent": len(pending), "received": len(results)}
            )

        if len(results) > len(pending):
            logger.warning("remote_match_extra_results_ignored", sent=len(pending), received=len(results))

        return results[:len(pending)]

    def _merge_batch(
        self,
        slots: list[Optional[ResolvedLine]],
        pending: list[PendingLine],
        results: list[RemoteMatchResult]
    ) -> None:
        """
        Write batch results into their original positions and learn matches.

        Result k answers pending[k], which sits at pending[k].position_index.
        """
        to_learn: list[tuple[str, CatalogItem]] = []

        for offset, result in enumerate(results):
            if offset >= len(pending):
                break

            line = pending[offset]
            if not isinstance(result, RemoteMatchResult):
                raise RemoteMatchError(
                    "Remote matcher returned an unexpected result type",
                    details={"offset": offset, "type": type(result).__name__}
                )

            if result.original_request and normalize_text(result.original_request) != normalize_text(line.text):
                logger.debug(
                    "remote_match_request_echo_differs",
                    sent=line.text,
                    echoed=result.original_request
                )

            # Keyed by the text that was sent, never the model's echo
            slots[line.position_index] = ResolvedLine(
                quantity=coerce_quantity(result.quantity),
                original_text=line.text,
                matched_item=result.catalog_item,
                is_learned=result.catalog_item is not None,
                conversion_note=result.conversion_note
            )

            if result.catalog_item is not None:
                to_learn.append((line.text, result.catalog_item))

        # Learn only once the whole batch merged cleanly, in one store write
        self.learning.upsert_many(to_learn)

    @staticmethod
    def _collect(slots: list[Optional[ResolvedLine]]) -> list[ResolvedLine]:
        """
        Return the filled slots in order.

        Raises:
            UnfilledSlotError: If any slot is still empty
        """
        missing = [index for index, slot in enumerate(slots) if slot is None]
        if missing:
            logger.error("resolution_slot_unfilled", positions=missing, total=len(slots))
            raise UnfilledSlotError(missing, len(slots))
        return list(slots)

    # ===================
    # MANUAL MATCHES
    # ===================

    def confirm_match(self, original_text: str, catalog_item: CatalogItem) -> LearnedMatchEntry:
        """
        Confirm the item a line resolved to, so the next run hits the cache.

        Args:
            original_text: Order line as written
            catalog_item: Item the user accepted

        Returns:
            The stored learned match
        """
        logger.info("match_confirmed", text=original_text, catalog_item_id=catalog_item.id)
        return self.learning.upsert(original_text, catalog_item)

    def correct_match(
        self,
        original_text: str,
        catalog_item_id: str,
        catalog: list[CatalogItem]
    ) -> LearnedMatchEntry:
        """
        Replace the item a line resolved to with one picked by the user.

        Raises:
            CatalogItemNotFoundError: If the id is not in the catalog snapshot
        """
        catalog_item = next((item for item in catalog if item.id == catalog_item_id), None)
        if catalog_item is None:
            raise CatalogItemNotFoundError(catalog_item_id)

        logger.info("match_corrected", text=original_text, catalog_item_id=catalog_item_id)
        return self.learning.upsert(original_text, catalog_item)


# Singleton instance
_resolution_service: Optional[ResolutionService] = None


def get_resolution_service() -> ResolutionService:
    """Get or create ResolutionService instance."""
    global _resolution_service
    if _resolution_service is None:
        _resolution_service = ResolutionService()
    return _resolution_service
