"""Decimal helpers for money and percentage arithmetic."""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from core.constants import HUNDRED

ZERO = Decimal("0")


def to_decimal(value: Any, default: Optional[Decimal] = None) -> Decimal:
    """
    Convert a stored or user-supplied number into a Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1") rather than its
    binary expansion. None and empty strings return default (or 0).
    """
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return default if default is not None else ZERO
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValueError(f"Invalid decimal value: {value!r}") from e


def percentage_of(amount: Decimal, percentage: Decimal) -> Decimal:
    """Return percentage% of amount (no rounding)."""
    return amount * (percentage / HUNDRED)


def is_significantly_different(a: Decimal, b: Decimal, tolerance: Decimal) -> bool:
    """True when a and b differ by more than tolerance."""
    return abs(a - b) > tolerance
