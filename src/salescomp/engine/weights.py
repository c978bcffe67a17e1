"""Weight validation for buckets, sub-goal weights and product target percents."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from salescomp.core.exceptions import InvalidWeightsError
from salescomp.core.numbers import ONE, ZERO, Number, to_decimal

DEFAULT_TOLERANCE = Decimal("0.001")


def weights_total(weights: Iterable[Number]) -> Decimal:
    return sum((to_decimal(w) for w in weights), ZERO)


def validate_weights_sum(weights: Iterable[Number], tolerance: Decimal = DEFAULT_TOLERANCE) -> bool:
    """True when ``weights`` sum to 1.0 within ``tolerance``.

    An empty sequence is never valid; callers that treat "nothing active"
    as a skip condition must check for emptiness first.
    """
    values = [to_decimal(w) for w in weights]
    if not values:
        return False
    return abs(weights_total(values) - ONE) <= tolerance


def require_weights_sum(
    label: str, weights: Iterable[Number], tolerance: Decimal = DEFAULT_TOLERANCE
) -> None:
    """Raise :class:`InvalidWeightsError` unless ``weights`` pass validation."""
    values = [to_decimal(w) for w in weights]
    if not validate_weights_sum(values, tolerance):
        raise InvalidWeightsError(label, weights_total(values))
