"""Derive quarterly bucket actuals from a quarter's order lines."""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Iterable

from salescomp.core.numbers import ZERO
from salescomp.engine.order_history import OrderHistoryIndex
from salescomp.engine.rate_resolver import resolve_customer_status
from salescomp.models.config import (
    BucketMetric,
    CommissionRules,
    CustomerStatus,
    QuarterlyConfig,
    SubGoalKind,
)
from salescomp.models.records import (
    OrderLineItem,
    RepQuarterActuals,
    SalesRep,
    index_reps_by_sales_person,
    is_excluded,
)

REVENUE_METRICS = {
    BucketMetric.NEW_BUSINESS_REVENUE,
    BucketMetric.PRODUCT_MIX_REVENUE,
    BucketMetric.MAINTAIN_REVENUE,
}


class QuarterActualsAggregator:
    """Sums revenue per rep into the buckets that declare a revenue metric.

    New-business vs maintain revenue is split by the customer's recency
    status at the time of each order. Product-mix revenue is keyed by the
    SKU of each active product sub-goal. Activity counts are not derivable
    from orders and stay with the stored actuals.
    """

    def __init__(
        self,
        config: QuarterlyConfig,
        rules: CommissionRules,
        inactivity_threshold: int = 12,
    ) -> None:
        self._config = config
        self._rules = rules
        self._threshold = inactivity_threshold
        self._buckets = [
            b for b in config.active_buckets if b.metric in REVENUE_METRICS
        ]
        self._sku_goals: dict[str, list[tuple[str, str]]] = defaultdict(list)
        for bucket in self._buckets:
            if bucket.metric != BucketMetric.PRODUCT_MIX_REVENUE:
                continue
            for sub_goal in config.active_sub_goals(bucket.code):
                if sub_goal.kind == SubGoalKind.PRODUCT:
                    self._sku_goals[sub_goal.sku].append((bucket.code, sub_goal.sub_goal_id))

    @property
    def derives_anything(self) -> bool:
        return bool(self._buckets)

    def aggregate(
        self,
        reps: Iterable[SalesRep],
        line_items: Iterable[OrderLineItem],
        history: OrderHistoryIndex,
    ) -> dict[str, RepQuarterActuals]:
        reps = list(reps)
        by_sales_person = index_reps_by_sales_person(reps)
        actuals = {
            rep.rep_id: RepQuarterActuals(
                rep_id=rep.rep_id,
                quarter_id=self._config.key,
                bucket_actuals={b.code: ZERO for b in self._buckets},
            )
            for rep in reps
        }
        if not self._buckets:
            return actuals

        for item in line_items:
            rep = by_sales_person.get(item.sales_person)
            if rep is None or rep.rep_id not in actuals or is_excluded(item, self._rules):
                continue
            amount = item.base_amount(self._rules.use_order_value)
            status = resolve_customer_status(
                history.last_order_before(item.customer_id, item.order_date),
                item.order_date,
                self._threshold,
            )
            self._add(actuals[rep.rep_id], item, amount, status)
        return actuals

    def _add(
        self,
        target: RepQuarterActuals,
        item: OrderLineItem,
        amount: Decimal,
        status: CustomerStatus,
    ) -> None:
        is_new = status == CustomerStatus.NEW_BUSINESS
        for bucket in self._buckets:
            if bucket.metric == BucketMetric.NEW_BUSINESS_REVENUE and is_new:
                target.bucket_actuals[bucket.code] += amount
            elif bucket.metric == BucketMetric.MAINTAIN_REVENUE and not is_new:
                target.bucket_actuals[bucket.code] += amount
        for bucket_code, sub_goal_id in self._sku_goals.get(item.product_num, []):
            target.bucket_actuals[bucket_code] += amount
            target.sub_goal_actuals[sub_goal_id] = (
                target.sub_goal_actuals.get(sub_goal_id, ZERO) + amount
            )
