"""Decimal helpers shared by the calculators."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

Number = Decimal | int | float | str


def to_decimal(value: Number | None) -> Decimal:
    """Coerce a number to Decimal, going through str for floats."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize_currency(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(base: Decimal, percentage: Decimal) -> Decimal:
    """``base * percentage / 100``, unrounded."""
    return base * percentage / HUNDRED
