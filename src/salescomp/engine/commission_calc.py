"""Per-order monthly commission calculation over one configuration snapshot."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Iterable

from salescomp.core.exceptions import RateNotFoundError
from salescomp.core.numbers import ZERO, percent_of, quantize_currency
from salescomp.engine.order_history import OrderHistoryIndex
from salescomp.engine.rate_resolver import CustomerHistory, RateResolver
from salescomp.models.config import IncentiveType
from salescomp.models.outputs import (
    AppliedSpiff,
    MonthlyCommissionRecord,
    MonthlyRunSummary,
    RepMonthlySummary,
    SkipReason,
)
from salescomp.models.records import OrderLineItem, is_excluded
from salescomp.models.snapshot import MonthlySnapshot

logger = logging.getLogger(__name__)


class CommissionCalculator:
    """Turns a month of line items into one commission record per order.

    Each order is computed from its own lines plus the read-only snapshot
    and history index, so the result is independent of processing order.
    Orders that cannot be resolved are counted in the summary by reason;
    ``excluded_product`` counts line items, every other reason counts orders.
    """

    def __init__(self, snapshot: MonthlySnapshot, history: OrderHistoryIndex) -> None:
        self._snapshot = snapshot
        self._rules = snapshot.rules
        self._history = history
        self._reps = snapshot.rep_by_sales_person()
        self._customers = snapshot.customer_index()
        self._resolvers: dict[str, RateResolver] = {}

    def resolver_for(self, title: str) -> RateResolver:
        if title not in self._resolvers:
            self._resolvers[title] = RateResolver(self._snapshot.matrix_for(title), self._rules)
        return self._resolvers[title]

    def is_excluded(self, item: OrderLineItem) -> bool:
        return is_excluded(item, self._rules)

    def calculate(
        self,
        line_items: Iterable[OrderLineItem],
        sales_person: str | None = None,
        calculated_at: datetime | None = None,
    ) -> tuple[list[MonthlyCommissionRecord], MonthlyRunSummary]:
        calculated_at = calculated_at or datetime.now(timezone.utc)
        summary = MonthlyRunSummary(
            commission_month=self._snapshot.commission_month,
            sales_person=sales_person,
            calculated_at=calculated_at,
        )

        orders: dict[str, list[OrderLineItem]] = defaultdict(list)
        for item in line_items:
            if sales_person is None or item.sales_person == sales_person:
                orders[item.order_id].append(item)

        records: list[MonthlyCommissionRecord] = []
        for order_id in sorted(orders, key=lambda oid: (orders[oid][0].order_date, oid)):
            summary.orders_processed += 1
            record = self._calculate_order(order_id, orders[order_id], summary, calculated_at)
            if record is None:
                continue
            records.append(record)
            self._tally(summary, record)

        summary.total_commission = quantize_currency(summary.total_commission)
        summary.total_spiffs = quantize_currency(summary.total_spiffs)
        return records, summary

    def _skip(self, summary: MonthlyRunSummary, order_id: str, reason: SkipReason, detail: str) -> None:
        summary.count_skip(reason)
        logger.debug("Skipping order %s (%s): %s", order_id, reason.value, detail)

    def _calculate_order(
        self,
        order_id: str,
        lines: list[OrderLineItem],
        summary: MonthlyRunSummary,
        calculated_at: datetime,
    ) -> MonthlyCommissionRecord | None:
        head = lines[0]
        rep = self._reps.get(head.sales_person)
        if rep is None:
            self._skip(summary, order_id, SkipReason.UNKNOWN_REP, head.sales_person)
            return None
        if not rep.active:
            self._skip(summary, order_id, SkipReason.INACTIVE_REP, head.sales_person)
            return None

        customer = self._customers.get(head.customer_id)
        if customer is None:
            self._skip(summary, order_id, SkipReason.MISSING_CUSTOMER, head.customer_id)
            return None
        if customer.is_retail:
            self._skip(summary, order_id, SkipReason.RETAIL_ACCOUNT, customer.customer_id)
            return None

        included = [line for line in lines if not self.is_excluded(line)]
        excluded_count = len(lines) - len(included)
        if excluded_count:
            summary.count_skip(SkipReason.EXCLUDED_PRODUCT, excluded_count)
        if not included:
            logger.debug("Skipping order %s: every line is excluded", order_id)
            return None

        use_order_value = self._rules.use_order_value
        base = sum((line.base_amount(use_order_value) for line in included), ZERO)
        history = CustomerHistory(
            last_order_date=self._history.last_order_before(customer.customer_id, head.order_date),
            transfer_date=customer.transfer_date,
            transfer_status=customer.transfer_status,
        )
        try:
            resolution = self.resolver_for(rep.title).resolve(
                title=rep.title,
                segment_id=customer.segment,
                history=history,
                order_date=head.order_date,
                base_amount=base,
            )
        except RateNotFoundError as exc:
            self._skip(summary, order_id, SkipReason.MISSING_RATE, str(exc))
            return None

        commission = quantize_currency(resolution.commission_for(base))
        spiffs = self._apply_spiffs(included)
        spiff_amount = sum((s.amount for s in spiffs), ZERO)
        return MonthlyCommissionRecord(
            commission_month=self._snapshot.commission_month,
            order_id=order_id,
            order_num=head.order_num,
            order_date=head.order_date,
            rep_id=rep.rep_id,
            rep_name=rep.name,
            rep_title=rep.title,
            sales_person=head.sales_person,
            customer_id=customer.customer_id,
            customer_name=customer.customer_name or head.customer_name,
            account_type=customer.account_type,
            segment_id=customer.segment,
            customer_status=resolution.status,
            rate_path=resolution.path,
            rate_source=resolution.source,
            order_value=sum((line.order_value or line.revenue for line in lines), ZERO),
            commission_base=base,
            commission_rate=resolution.percentage,
            flat_fee=resolution.flat_fee,
            commission_amount=commission,
            spiffs=spiffs,
            spiff_amount=spiff_amount,
            total_amount=commission + spiff_amount,
            excluded_line_count=excluded_count,
            calculated_at=calculated_at,
        )

    def _apply_spiffs(self, lines: list[OrderLineItem]) -> list[AppliedSpiff]:
        applied: list[AppliedSpiff] = []
        for line in lines:
            for spiff in self._snapshot.spiffs:
                if not spiff.applies_to(line.product_num, line.order_date):
                    continue
                if spiff.incentive_type == IncentiveType.FLAT:
                    amount = spiff.incentive_value * line.quantity
                else:
                    amount = percent_of(line.base_amount(self._rules.use_order_value),
                                        spiff.incentive_value)
                applied.append(AppliedSpiff(
                    spiff_id=spiff.spiff_id,
                    name=spiff.name,
                    product_num=line.product_num,
                    line_id=line.line_id,
                    incentive_type=spiff.incentive_type,
                    incentive_value=spiff.incentive_value,
                    amount=quantize_currency(amount),
                ))
        return applied

    def _tally(self, summary: MonthlyRunSummary, record: MonthlyCommissionRecord) -> None:
        summary.commissions_calculated += 1
        summary.total_commission += record.commission_amount
        summary.total_spiffs += record.spiff_amount
        rep_summary = summary.by_rep.setdefault(
            record.sales_person,
            RepMonthlySummary(
                commission_month=record.commission_month,
                sales_person=record.sales_person,
                rep_name=record.rep_name,
            ),
        )
        rep_summary.orders += 1
        rep_summary.revenue += record.commission_base
        rep_summary.commission += record.commission_amount
        rep_summary.spiffs += record.spiff_amount
