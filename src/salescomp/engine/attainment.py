"""Attainment and payout-fraction calculation.

Zero-goal convention: with ``goal <= 0`` attainment is 0 when there is no
actual progress and ``over_perf_cap`` otherwise.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel

from salescomp.core.numbers import ZERO, Number, to_decimal


class PayoutResult(BaseModel):
    attainment: Decimal
    effective_attainment: Decimal
    qualifies: bool
    payout_fraction: Decimal


def attainment_ratio(goal_value: Number, actual_value: Number, over_perf_cap: Number) -> Decimal:
    """``actual / goal`` clamped below at 0, with the zero-goal convention applied."""
    goal = to_decimal(goal_value)
    actual = to_decimal(actual_value)
    if goal <= ZERO:
        return ZERO if actual <= ZERO else to_decimal(over_perf_cap)
    return max(actual / goal, ZERO)


def calculate_payout(
    goal_value: Number,
    actual_value: Number,
    min_attainment: Number,
    over_perf_cap: Number,
) -> PayoutResult:
    """Turn a goal/actual pair into an attainment ratio and a capped payout fraction."""
    cap = to_decimal(over_perf_cap)
    attainment = attainment_ratio(goal_value, actual_value, cap)
    effective = min(max(attainment, ZERO), cap)
    qualifies = attainment >= to_decimal(min_attainment)
    return PayoutResult(
        attainment=attainment,
        effective_attainment=effective,
        qualifies=qualifies,
        payout_fraction=effective if qualifies else ZERO,
    )
