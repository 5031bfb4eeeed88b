"""Helpers for parsing and displaying money amounts."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CENT = Decimal("0.01")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_amount(value: Any) -> str:
    """Round to 2 decimals for display and drop trailing zeros (120.50 -> 120.5)."""
    amount = _to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        return "0"
    return text


def parse_amount(value: Any, field_name: str = "amount") -> float:
    """Parse a numeric amount that may arrive as a form string."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid value for {field_name}: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(_to_decimal(str(value).strip().replace(",", ".")))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid value for {field_name}: {value!r}") from exc
