"""Monthly commission rate resolution.

Resolution order, first match wins:

1. Transfer path: the customer is marked ``transferred``, or (reorg rule
   on) was assigned to the current rep on/after the reorg date. Uses the
   transfer segment rate or the percent fallback; with ``use_greater`` the
   standard rate competes, and a flat fee can replace the percentage.
2. ``own`` customers skip transfer handling entirely.
3. Standard path: matrix rate for title/segment/recency status, falling
   back to :data:`DEFAULT_RATES`.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from salescomp.core.exceptions import RateNotFoundError
from salescomp.core.numbers import ZERO, percent_of
from salescomp.core.periods import months_between
from salescomp.models.config import (
    CommissionRules,
    CustomerStatus,
    MonthlyRateMatrix,
    TransferStatus,
)
from salescomp.models.defaults import DEFAULT_RATES
from salescomp.models.outputs import RatePath, RateSource

ACTIVE_WINDOW_MONTHS = 6


class CustomerHistory(BaseModel):
    """What the resolver needs to know about a customer's past."""

    last_order_date: Optional[date] = None  # most recent order before this one
    transfer_date: Optional[date] = None
    transfer_status: TransferStatus = TransferStatus.AUTO


class RateResolution(BaseModel):
    status: CustomerStatus
    path: RatePath
    source: RateSource
    percentage: Decimal
    flat_fee: Optional[Decimal] = None

    def commission_for(self, base: Decimal) -> Decimal:
        if self.flat_fee is not None:
            return self.flat_fee
        return percent_of(base, self.percentage)


def resolve_customer_status(
    last_order_date: date | None, as_of: date, inactivity_threshold: int
) -> CustomerStatus:
    """Classify a customer by how long ago they last ordered."""
    if last_order_date is None:
        return CustomerStatus.NEW_BUSINESS
    months = months_between(last_order_date, as_of)
    if months >= inactivity_threshold:
        return CustomerStatus.NEW_BUSINESS
    if months < ACTIVE_WINDOW_MONTHS:
        return CustomerStatus.SIX_MONTH_ACTIVE
    return CustomerStatus.TWELVE_MONTH_ACTIVE


class RateResolver:
    """Pure resolver over one title's rate matrix and the commission rules."""

    def __init__(
        self,
        matrix: MonthlyRateMatrix,
        rules: CommissionRules,
        default_rates: dict[tuple[str, CustomerStatus], Decimal] | None = None,
    ) -> None:
        self._matrix = matrix
        self._rules = rules
        self._defaults = DEFAULT_RATES if default_rates is None else default_rates

    def resolve(
        self,
        *,
        title: str,
        segment_id: str,
        history: CustomerHistory,
        order_date: date,
        base_amount: Decimal | None = None,
    ) -> RateResolution:
        special = self._matrix.special_rules
        status = resolve_customer_status(
            history.last_order_date, order_date, special.inactivity_threshold
        )
        if self.uses_transfer_path(history):
            return self._transfer_rate(title, segment_id, status, base_amount)
        percentage, source = self.standard_rate(title, segment_id, status)
        return RateResolution(
            status=status, path=RatePath.STANDARD, source=source, percentage=percentage
        )

    def uses_transfer_path(self, history: CustomerHistory) -> bool:
        if not self._matrix.special_rules.rep_transfer.enabled:
            return False
        if history.transfer_status == TransferStatus.TRANSFERRED:
            return True
        if history.transfer_status == TransferStatus.OWN:
            return False
        return (
            self._rules.apply_reorg_rule
            and history.transfer_date is not None
            and history.transfer_date >= self._rules.reorg_date
        )

    def standard_rate(
        self, title: str, segment_id: str, status: CustomerStatus
    ) -> tuple[Decimal, RateSource]:
        rate = self._matrix.lookup(title, segment_id, status)
        if rate is not None and rate.active:
            return rate.percentage, RateSource.MATRIX
        default = self._defaults.get((segment_id, status))
        if default is None:
            raise RateNotFoundError(title, segment_id, status.value)
        return default, RateSource.DEFAULT

    def _transfer_rate(
        self,
        title: str,
        segment_id: str,
        status: CustomerStatus,
        base_amount: Decimal | None,
    ) -> RateResolution:
        rule = self._matrix.special_rules.rep_transfer
        if segment_id in rule.segment_rates:
            percentage, source = rule.segment_rates[segment_id], RateSource.TRANSFER_SEGMENT
        else:
            percentage, source = rule.percent_fallback, RateSource.TRANSFER_FALLBACK

        if rule.use_greater:
            try:
                standard, standard_source = self.standard_rate(title, segment_id, status)
            except RateNotFoundError:
                standard = None
            if standard is not None and standard > percentage:
                percentage, source = standard, standard_source

        if rule.flat_fee > ZERO:
            flat_wins = not rule.use_greater or (
                base_amount is not None and rule.flat_fee > percent_of(base_amount, percentage)
            )
            if flat_wins:
                return RateResolution(
                    status=status,
                    path=RatePath.TRANSFER,
                    source=RateSource.FLAT_FEE,
                    percentage=ZERO,
                    flat_fee=rule.flat_fee,
                )

        return RateResolution(
            status=status, path=RatePath.TRANSFER, source=source, percentage=percentage
        )
