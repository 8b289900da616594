"""
Text parsers for order lines and catalogs.
"""

from parsers.order_text_parser import (
    parse_order_text,
    coerce_quantity,
    extract_quantity,
)
from parsers.catalog_parser import (
    parse_catalog_text,
    CatalogParseResult,
)

__all__ = [
    "parse_order_text",
    "coerce_quantity",
    "extract_quantity",
    "parse_catalog_text",
    "CatalogParseResult",
]
