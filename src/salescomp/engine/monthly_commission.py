"""Monthly commission run over one configuration snapshot."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from salescomp.core.periods import month_bounds, shift_months
from salescomp.engine.base import BaseCalculationService
from salescomp.engine.commission_calc import CommissionCalculator
from salescomp.engine.order_history import OrderHistoryIndex
from salescomp.engine.snapshot_loader import SnapshotLoader
from salescomp.models.outputs import MonthlyRunSummary

logger = logging.getLogger(__name__)


class MonthlyCommissionService(BaseCalculationService):
    """Calculates one month of order commissions and replaces the stored records.

    Re-running a month rewrites every record keyed by (month, order id) and
    deletes records the run no longer produces, so corrections never leave
    duplicates or stale rows behind.
    """

    def calculate(self, year: int, month: int, sales_person: str | None = None) -> MonthlyRunSummary:
        snapshot = SnapshotLoader(self._config_store, self._records).load_monthly(year, month)
        logger.info(
            "Calculating monthly commissions for %s%s",
            snapshot.commission_month, f" ({sales_person})" if sales_person else " (all reps)",
        )

        start, end = month_bounds(year, month)
        lookback = max(
            self._settings.calculation.history_lookback_months,
            *(m.special_rules.inactivity_threshold for m in snapshot.rate_matrices),
            self._settings.calculation.default_inactivity_threshold,
        )
        history_items = self._records.list_line_items(shift_months(start, -lookback), end)
        month_items = [i for i in history_items if start <= i.order_date <= end]

        calculator = CommissionCalculator(snapshot, OrderHistoryIndex(history_items))
        records, summary = calculator.calculate(
            month_items, sales_person=sales_person, calculated_at=datetime.now(timezone.utc)
        )

        self._records.replace_monthly_records(
            snapshot.commission_month, records, sales_person=sales_person
        )
        self._records.replace_rep_summaries(
            snapshot.commission_month, summary.by_rep.values(), sales_person=sales_person
        )
        self._records.put_run_summary(summary)
        logger.info(
            "Month %s: %d orders, %d commissions, total %s (+%s spiffs), skipped %s",
            summary.commission_month, summary.orders_processed, summary.commissions_calculated,
            summary.total_commission, summary.total_spiffs,
            {reason.value: count for reason, count in summary.skipped.items()},
        )
        return summary
