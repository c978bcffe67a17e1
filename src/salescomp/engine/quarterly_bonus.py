"""Quarterly bonus run over one configuration snapshot."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from salescomp.core.exceptions import ConfigurationError
from salescomp.core.periods import quarter_bounds, quarter_key, shift_months
from salescomp.engine.actuals import QuarterActualsAggregator
from salescomp.engine.base import BaseCalculationService
from salescomp.engine.bucket_scorer import BucketScorer
from salescomp.engine.order_history import OrderHistoryIndex
from salescomp.engine.snapshot_loader import SnapshotLoader
from salescomp.models.outputs import CommissionEntry, QuarterlyRunSummary, RepBonusResult
from salescomp.models.records import RepQuarterActuals, SalesRep
from salescomp.models.snapshot import QuarterlySnapshot

logger = logging.getLogger(__name__)


class QuarterlyBonusService(BaseCalculationService):
    """Scores every active rep for a quarter and replaces the stored entries.

    An invalid bucket configuration aborts the whole run before anything is
    written. A rep whose title has no role scale or budget is reported in
    ``failed_reps`` and the remaining reps are still scored.
    """

    def calculate(self, quarter_id: str, rep_id: str | None = None) -> QuarterlyRunSummary:
        key = quarter_key(quarter_id)
        logger.info("Calculating quarterly bonus for %s%s", key, f" (rep {rep_id})" if rep_id else "")

        snapshot = SnapshotLoader(self._config_store, self._records).load_quarterly(key)
        scorer = BucketScorer(snapshot.config, self._settings.calculation.weight_tolerance)

        reps = [
            r for r in snapshot.reps
            if r.active and (rep_id is None or r.rep_id == rep_id)
        ]
        actuals = self._collect_actuals(snapshot, reps)

        calculated_at = datetime.now(timezone.utc)
        summary = QuarterlyRunSummary(quarter_id=key, rep_id=rep_id, calculated_at=calculated_at)
        entries: list[CommissionEntry] = []
        results: list[RepBonusResult] = []
        for rep in reps:
            summary.reps_processed += 1
            try:
                result = scorer.score(rep, actuals[rep.rep_id], calculated_at)
            except ConfigurationError as exc:
                logger.error("Quarter %s: cannot score rep %s: %s", key, rep.rep_id, exc)
                summary.failed_reps[rep.rep_id] = str(exc)
                continue
            results.append(result)
            entries.extend(result.entries)
            summary.commissions_calculated += len(result.entries)
            summary.total_commission += result.total_payout
            summary.by_rep[rep.rep_id] = result.total_payout

        scope = {rep_id} if rep_id is not None else None
        self._records.replace_commission_entries(key, entries, rep_ids=scope)
        self._records.replace_bonus_results(key, results, rep_ids=scope)
        self._records.put_run_summary(summary)
        logger.info(
            "Quarter %s: %d reps, %d entries, total %s, %d failed",
            key, summary.reps_processed, summary.commissions_calculated,
            summary.total_commission, len(summary.failed_reps),
        )
        return summary

    def _collect_actuals(
        self, snapshot: QuarterlySnapshot, reps: list[SalesRep]
    ) -> dict[str, RepQuarterActuals]:
        """Derived-from-orders actuals overlaid with whatever the store holds."""
        config = snapshot.config
        calc = self._settings.calculation
        aggregator = QuarterActualsAggregator(
            config, snapshot.rules, calc.default_inactivity_threshold
        )

        derived: dict[str, RepQuarterActuals] = {}
        if aggregator.derives_anything:
            start, end = quarter_bounds(config.key)
            history_items = self._records.list_line_items(
                shift_months(start, -calc.history_lookback_months), end
            )
            quarter_items = [i for i in history_items if start <= i.order_date <= end]
            derived = aggregator.aggregate(reps, quarter_items, OrderHistoryIndex(history_items))

        stored = {a.rep_id: a for a in self._records.list_quarter_actuals(config.key)}
        actuals: dict[str, RepQuarterActuals] = {}
        for rep in reps:
            base = derived.get(rep.rep_id) or RepQuarterActuals(rep_id=rep.rep_id, quarter_id=config.key)
            override = stored.get(rep.rep_id)
            actuals[rep.rep_id] = override.merged_over(base) if override else base
        return actuals
