"""
Order text parser.

Splits a freeform multi-line order into OrderLine records and pulls the
leading quantity off each line. Never fails: blank lines are dropped and
unreadable quantities fall back to 1.
"""

import math
import re
from typing import Any
import structlog

from models.order import OrderLine
from utils.text_utils import parse_decimal

logger = structlog.get_logger(__name__)

DEFAULT_QUANTITY = 1.0

# "10 cabo", "2,5 m fio", "1.5x tomada"
LEADING_QUANTITY_PATTERN = re.compile(r"^(\d+(?:[.,]\d+)?)")


def coerce_quantity(value: Any) -> float:
    """
    Coerce any quantity value to a positive number.

    Accepts ints, floats and numeric strings (comma or dot decimals).
    Anything missing, non-numeric, non-finite or not positive becomes 1.

    Args:
        value: Raw quantity from the parser or the remote matcher

    Returns:
        Positive float quantity
    """
    if isinstance(value, bool) or value is None:
        return DEFAULT_QUANTITY

    if isinstance(value, (int, float)):
        quantity = float(value)
    elif isinstance(value, str):
        parsed = parse_decimal(value)
        if parsed is None:
            return DEFAULT_QUANTITY
        quantity = parsed
    else:
        return DEFAULT_QUANTITY

    if not math.isfinite(quantity) or quantity <= 0:
        return DEFAULT_QUANTITY
    return quantity


def extract_quantity(text: str) -> float:
    """
    Extract the leading quantity of an order line.

    "10 cabo flex" → 10, "2,5 m fio" → 2.5, "cabo flex" → 1, "0 tomada" → 1
    """
    match = LEADING_QUANTITY_PATTERN.match(text.strip())
    if not match:
        return DEFAULT_QUANTITY
    return coerce_quantity(match.group(1))


def split_order_lines(raw_text: str) -> list[str]:
    """Split raw text on line breaks, dropping blank lines."""
    if not raw_text:
        return []
    return [line.strip() for line in raw_text.splitlines() if line.strip()]


def parse_order_text(raw_text: str) -> list[OrderLine]:
    """
    Parse a multi-line order into positioned lines.

    Args:
        raw_text: Freeform order text, one product per line

    Returns:
        OrderLine list; position_index runs 0..N-1 over non-blank lines
    """
    lines = [
        OrderLine(
            position_index=index,
            text=text,
            quantity=extract_quantity(text)
        )
        for index, text in enumerate(split_order_lines(raw_text))
    ]

    logger.debug("order_text_parsed", line_count=len(lines))
    return lines
