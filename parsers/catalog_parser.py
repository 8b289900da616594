"""
Catalog text parser.

Parses a pasted or uploaded price list with one product per line:

    CABO FLEX 2,5MM PRETO<TAB>R$ 1,20

Prices use "." as thousands separator and "," as decimal separator and
may carry an "R$" prefix. Lines missing either field are skipped.
"""

from dataclasses import dataclass, field
from typing import Optional
import re
import structlog

from models.catalog import CatalogItem

logger = structlog.get_logger(__name__)

CURRENCY_PREFIX_PATTERN = re.compile(r"^R\$\s?")
PRICE_PATTERN = re.compile(r"^\d+(?:\.\d+)?")


@dataclass
class SkippedCatalogLine:
    """A line that could not be read as a product (non-fatal)."""
    line: int
    reason: str


@dataclass
class CatalogParseResult:
    """Result of parsing catalog text."""
    items: list[CatalogItem] = field(default_factory=list)
    skipped: list[SkippedCatalogLine] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.items) > 0


def parse_price(raw: str) -> Optional[float]:
    """
    Parse a BRL price.

    "R$ 1.234,56" → 1234.56, "12,5" → 12.5, "abc" → None
    """
    cleaned = CURRENCY_PREFIX_PATTERN.sub("", raw.strip())
    cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    match = PRICE_PATTERN.match(cleaned)
    if not match:
        return None
    return float(match.group(0))


def parse_catalog_text(text: str) -> CatalogParseResult:
    """
    Parse tab-delimited catalog text.

    Item ids are "cat-<line index>" so they stay stable for the same file.

    Args:
        text: Raw catalog content

    Returns:
        CatalogParseResult with items and skipped lines
    """
    result = CatalogParseResult()

    for index, line in enumerate((text or "").split("\n")):
        trimmed = line.strip()
        if not trimmed:
            continue

        parts = trimmed.split("\t")
        if len(parts) < 2:
            result.skipped.append(SkippedCatalogLine(line=index, reason="missing_price_column"))
            continue

        description = parts[0].strip()
        price = parse_price(parts[1])

        if not description or price is None:
            result.skipped.append(SkippedCatalogLine(line=index, reason="unparseable"))
            continue

        result.items.append(CatalogItem(id=f"cat-{index}", description=description, price=price))

    logger.info(
        "catalog_parsed",
        items=len(result.items),
        skipped=len(result.skipped)
    )
    return result
