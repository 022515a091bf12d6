"""
Monetary utility functions.

All monetary values use :class:`decimal.Decimal` so that balances net out
exactly and the settlement tolerance below compares reliably.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable


# ── Constants ────────────────────────────────────────────────────────────────

ZERO = Decimal("0")
CENT = Decimal("0.01")

# Tolerance shared by custom-split validation and balance zeroing.
EPSILON = Decimal("0.01")


# ── Comparisons ──────────────────────────────────────────────────────────────

def amounts_match(left: Decimal, right: Decimal) -> bool:
    """Return ``True`` when two amounts agree within :data:`EPSILON`."""
    return abs(left - right) <= EPSILON


# ── Rounding & splitting ─────────────────────────────────────────────────────

def round_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def round_whole(value: Decimal) -> int:
    """Round half away from zero to an ``int``."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def split_evenly(amount: Decimal, parts: int) -> list[Decimal]:
    """
    Split *amount* into *parts* cent-exact shares.

    Every share is the amount divided evenly and truncated to the cent; the
    leftover cents go one each to the first shares, so the shares always
    sum back to the cent-rounded *amount*.

    >>> split_evenly(Decimal("100"), 3)
    [Decimal('33.34'), Decimal('33.33'), Decimal('33.33')]
    """
    if parts <= 0:
        raise ValueError("Cannot split an amount into zero parts.")

    total = round_cents(amount)
    base = (total / parts).quantize(CENT, rounding=ROUND_DOWN)
    remainder = int((total - base * parts) / CENT)

    return [base + CENT if i < remainder else base for i in range(parts)]


def sum_amounts(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, ZERO)


# ── Serialisation helpers ────────────────────────────────────────────────────

def decimal_to_float(value: Decimal) -> float:
    """Convert Decimal → float for JSON serialisation."""
    return float(value)


def as_decimal(value: int | float | str | Decimal) -> Decimal:
    """
    Convert a raw value to :class:`~decimal.Decimal`, keeping ``NaN`` and
    infinities so that callers can report them.

    Booleans are rejected even though Python treats them as integers.

    Raises
    ------
    ValueError
        If *value* cannot be interpreted as a decimal number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert {value!r} to Decimal: not a number")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValueError(f"Cannot convert {value!r} to Decimal: {exc}") from exc


def to_decimal(value: int | float | str | Decimal) -> Decimal:
    """
    Safely convert a raw value to a finite :class:`~decimal.Decimal`.

    Raises
    ------
    ValueError
        If *value* is not a number, or is ``NaN`` / infinite.
    """
    result = as_decimal(value)
    if not result.is_finite():
        raise ValueError(f"Cannot convert {value!r} to Decimal: not a finite number")
    return result
