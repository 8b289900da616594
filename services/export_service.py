"""
Export service: renders resolved lines for pasting into a spreadsheet.

Tab-separated, pt-BR number formatting, unmatched lines left out.
"""

from typing import Optional
import structlog

from models.order import ResolvedLine
from utils.text_utils import format_brl_number, format_quantity

logger = structlog.get_logger(__name__)

CLIPBOARD_HEADER = "QTD\tDESCRIÇÃO\tVALOR UNITÁRIO\tVALOR TOTAL"


class ExportService:
    """Spreadsheet clipboard export."""

    def to_clipboard_text(self, lines: list[ResolvedLine]) -> str:
        """
        Build tab-separated rows: quantity, description, unit price, line total.

        Args:
            lines: Resolved lines in display order

        Returns:
            Header plus one row per matched line, newline separated
        """
        rows = [CLIPBOARD_HEADER]
        for line in lines:
            if line.matched_item is None:
                continue
            rows.append(
                f"{format_quantity(line.quantity)}\t"
                f"{line.matched_item.description}\t"
                f"{format_brl_number(line.matched_item.price)}\t"
                f"{format_brl_number(line.line_total)}"
            )

        logger.info("clipboard_export_generated", rows=len(rows) - 1, skipped=len(lines) - (len(rows) - 1))
        return "\n".join(rows)


# Singleton instance
_export_service: Optional[ExportService] = None


def get_export_service() -> ExportService:
    """Get or create ExportService instance."""
    global _export_service
    if _export_service is None:
        _export_service = ExportService()
    return _export_service
