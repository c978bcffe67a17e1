"""Quarterly weighted-bucket bonus scoring."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from salescomp.core.exceptions import (
    BudgetNotFoundError,
    ConfigurationError,
    RoleScaleNotFoundError,
)
from salescomp.core.numbers import ONE, ZERO, quantize_currency
from salescomp.engine.attainment import attainment_ratio, calculate_payout
from salescomp.engine.weights import DEFAULT_TOLERANCE, require_weights_sum
from salescomp.models.config import Bucket, Budget, QuarterlyConfig, SubGoalKind
from salescomp.models.outputs import CommissionEntry, RepBonusResult
from salescomp.models.records import RepQuarterActuals, SalesRep


class BucketScorer:
    """Scores reps against one quarter's bucket configuration.

    The configuration is validated on construction: a quarter whose active
    bucket weights (or active sub-goal weights / product target percents)
    do not sum to 100% is rejected before any rep is scored.
    """

    def __init__(self, config: QuarterlyConfig, tolerance: Decimal = DEFAULT_TOLERANCE) -> None:
        self._config = config
        self._tolerance = tolerance
        self.validate()

    def validate(self) -> None:
        cfg = self._config
        active = cfg.active_buckets
        if not active:
            raise ConfigurationError(f"Quarter {cfg.quarter_id} has no active buckets")
        require_weights_sum(
            f"{cfg.quarter_id} bucket weights", [b.weight for b in active], self._tolerance
        )
        for bucket in active:
            if not bucket.has_sub_goals:
                continue
            sub_goals = cfg.active_sub_goals(bucket.code)
            if not sub_goals:
                continue
            require_weights_sum(
                f"Bucket {bucket.code} sub-goal weights",
                [s.sub_weight for s in sub_goals],
                self._tolerance,
            )
            products = [s for s in sub_goals if s.kind == SubGoalKind.PRODUCT]
            if products:
                require_weights_sum(
                    f"Bucket {bucket.code} product target percents",
                    [p.target_percent for p in products],
                    self._tolerance,
                )

    def max_bonus_for(self, title: str) -> Decimal:
        scale = self._config.role_scale_for(title)
        if scale is None:
            raise RoleScaleNotFoundError(title)
        return self._config.max_bonus_per_rep * scale.percentage

    def score(
        self,
        rep: SalesRep,
        actuals: RepQuarterActuals,
        calculated_at: datetime | None = None,
    ) -> RepBonusResult:
        """Score every active bucket for ``rep`` and total the capped bonus."""
        cfg = self._config
        calculated_at = calculated_at or datetime.now(timezone.utc)
        max_bonus = self.max_bonus_for(rep.title)
        budget = cfg.budget_for(rep.title)
        if budget is None:
            raise BudgetNotFoundError(rep.title)

        entries: list[CommissionEntry] = []
        weighted_total = ZERO
        for bucket in cfg.active_buckets:
            goal, actual = self._goal_and_actual(bucket, budget, actuals)
            result = calculate_payout(goal, actual, cfg.min_attainment, cfg.over_perf_cap)
            weighted = bucket.weight * result.payout_fraction
            weighted_total += weighted
            entries.append(CommissionEntry(
                quarter_id=cfg.key,
                rep_id=rep.rep_id,
                rep_name=rep.name,
                rep_title=rep.title,
                bucket_code=bucket.code,
                bucket_name=bucket.name,
                bucket_weight=bucket.weight,
                goal_value=goal,
                actual_value=actual,
                attainment=result.attainment,
                payout_fraction=result.payout_fraction,
                weighted_score=weighted,
                payout=quantize_currency(weighted * max_bonus),
                max_bonus=quantize_currency(max_bonus),
                calculated_at=calculated_at,
            ))

        total = min(weighted_total * max_bonus, max_bonus)
        return RepBonusResult(
            quarter_id=cfg.key,
            rep_id=rep.rep_id,
            rep_name=rep.name,
            rep_title=rep.title,
            max_bonus=quantize_currency(max_bonus),
            total_payout=quantize_currency(total),
            entries=entries,
        )

    def _bucket_goal(self, bucket: Bucket, budget: Budget) -> Decimal:
        goal = budget.goal_for(bucket.code)
        if goal is None:
            raise ConfigurationError(
                f"Budget for {budget.title!r} has no goal for bucket {bucket.code}"
            )
        return goal

    def _goal_and_actual(
        self, bucket: Bucket, budget: Budget, actuals: RepQuarterActuals
    ) -> tuple[Decimal, Decimal]:
        sub_goals = self._config.active_sub_goals(bucket.code) if bucket.has_sub_goals else []
        if not sub_goals:
            return self._bucket_goal(bucket, budget), actuals.bucket_actuals.get(bucket.code, ZERO)

        # Sub-goals are normalized individually; the bucket is scored in ratio space.
        needs_budget = any(s.kind == SubGoalKind.PRODUCT for s in sub_goals)
        bucket_goal = self._bucket_goal(bucket, budget) if needs_budget else ZERO
        actual = ZERO
        for sub_goal in sub_goals:
            ratio = attainment_ratio(
                sub_goal.goal_for(bucket_goal),
                actuals.sub_goal_actuals.get(sub_goal.sub_goal_id, ZERO),
                self._config.over_perf_cap,
            )
            actual += sub_goal.sub_weight * ratio
        return ONE, actual
