"""
Text utilities for order lines and Brazilian number formatting.

normalize_text defines the learned match key, so it must stay idempotent.
"""

from typing import Optional


def normalize_text(text: Optional[str]) -> str:
    """
    Normalize order text into a learned match key.

    - "  1 Rolo Cabo 2.5mm  " → "1 rolo cabo 2.5mm"
    - "CABO FLEX" → "cabo flex"

    Args:
        text: Raw order line (may be None)

    Returns:
        Trimmed, case-folded text ("" for empty input)
    """
    if not text:
        return ""
    return text.strip().casefold()


def parse_decimal(value: str) -> Optional[float]:
    """
    Parse a number written with comma or dot as decimal separator.

    "2,5" → 2.5, "10" → 10.0, "abc" → None
    """
    try:
        return float(value.strip().replace(",", "."))
    except (ValueError, AttributeError):
        return None


def format_brl_number(value: float) -> str:
    """
    Format a number the pt-BR way with two decimals.

    1234.5 → "1.234,50"
    """
    formatted = f"{value:,.2f}"
    # Swap separators: 1,234.50 -> 1.234,50
    return formatted.replace(",", "_").replace(".", ",").replace("_", ".")


def format_quantity(value: float) -> str:
    """
    Render a quantity in plain decimal notation.

    1.0 → "1", 1.5 → "1.5", 1234567.5 → "1234567.5" (never "1.23457e+06")
    """
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.6f}".rstrip("0").rstrip(".")
