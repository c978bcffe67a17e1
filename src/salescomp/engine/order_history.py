"""Per-customer order-date index used to derive recency status."""

from __future__ import annotations

import bisect
from collections import defaultdict
from datetime import date
from typing import Iterable

from salescomp.models.records import OrderLineItem


class OrderHistoryIndex:
    """Sorted order dates per customer, answering "last order before D"."""

    def __init__(self, line_items: Iterable[OrderLineItem]) -> None:
        by_customer: dict[str, set[date]] = defaultdict(set)
        for item in line_items:
            by_customer[item.customer_id].add(item.order_date)
        self._dates = {cid: sorted(dates) for cid, dates in by_customer.items()}

    def last_order_before(self, customer_id: str, day: date) -> date | None:
        dates = self._dates.get(customer_id)
        if not dates:
            return None
        pos = bisect.bisect_left(dates, day)
        return dates[pos - 1] if pos else None

    def __len__(self) -> int:
        return len(self._dates)
