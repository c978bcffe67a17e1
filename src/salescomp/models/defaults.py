"""Default configuration consulted when the store has nothing better."""

from __future__ import annotations

from decimal import Decimal

from salescomp.models.config import (
    ActivitySubGoal,
    Bucket,
    BucketMetric,
    Budget,
    CommissionRules,
    CustomerStatus,
    MonthlyRateMatrix,
    ProductSubGoal,
    QuarterlyConfig,
    Rate,
    RoleScale,
    SpecialRules,
)

# (segment_id, status) -> percent
DEFAULT_RATES: dict[tuple[str, CustomerStatus], Decimal] = {
    ("distributor", CustomerStatus.NEW_BUSINESS): Decimal("8.0"),
    ("distributor", CustomerStatus.SIX_MONTH_ACTIVE): Decimal("5.0"),
    ("distributor", CustomerStatus.TWELVE_MONTH_ACTIVE): Decimal("3.0"),
    ("wholesale", CustomerStatus.NEW_BUSINESS): Decimal("10.0"),
    ("wholesale", CustomerStatus.SIX_MONTH_ACTIVE): Decimal("7.0"),
    ("wholesale", CustomerStatus.TWELVE_MONTH_ACTIVE): Decimal("5.0"),
}

DEFAULT_SPECIAL_RULES = SpecialRules()

DEFAULT_COMMISSION_RULES = CommissionRules()

DEFAULT_BUCKETS: list[Bucket] = [
    Bucket(code="A", name="New Business", weight=Decimal("0.30"),
           metric=BucketMetric.NEW_BUSINESS_REVENUE),
    Bucket(code="B", name="Product Mix", weight=Decimal("0.25"), has_sub_goals=True,
           metric=BucketMetric.PRODUCT_MIX_REVENUE),
    Bucket(code="C", name="Maintain Business", weight=Decimal("0.25"),
           metric=BucketMetric.MAINTAIN_REVENUE),
    Bucket(code="D", name="Effort", weight=Decimal("0.20"), has_sub_goals=True,
           metric=BucketMetric.ACTIVITY_COUNT),
]

DEFAULT_SUB_GOALS: list[ProductSubGoal | ActivitySubGoal] = [
    ProductSubGoal(sub_goal_id="focus-primary", sku="FOCUS-1",
                   target_percent=Decimal("0.60"), sub_weight=Decimal("0.50")),
    ProductSubGoal(sub_goal_id="focus-secondary", sku="FOCUS-2",
                   target_percent=Decimal("0.40"), sub_weight=Decimal("0.50")),
    ActivitySubGoal(sub_goal_id="calls", activity="Phone Calls",
                    goal=Decimal("1200"), sub_weight=Decimal("0.50"), data_source="crm"),
    ActivitySubGoal(sub_goal_id="meetings", activity="Meetings",
                    goal=Decimal("60"), sub_weight=Decimal("0.50"), data_source="crm"),
]

DEFAULT_ROLE_SCALES: list[RoleScale] = [
    RoleScale(role="Sr. Account Executive", percentage=Decimal("1.0")),
    RoleScale(role="Account Executive", percentage=Decimal("0.85")),
    RoleScale(role="Jr. Account Executive", percentage=Decimal("0.70")),
    RoleScale(role="Account Manager", percentage=Decimal("0.60")),
]

DEFAULT_BUDGETS: list[Budget] = [
    Budget(title="Sr. Account Executive",
           goals={"A": Decimal("500000"), "B": Decimal("100000"), "C": Decimal("300000"), "D": Decimal("50")}),
    Budget(title="Account Executive",
           goals={"A": Decimal("400000"), "B": Decimal("80000"), "C": Decimal("250000"), "D": Decimal("40")}),
    Budget(title="Jr. Account Executive",
           goals={"A": Decimal("300000"), "B": Decimal("60000"), "C": Decimal("200000"), "D": Decimal("30")}),
    Budget(title="Account Manager",
           goals={"A": Decimal("250000"), "B": Decimal("50000"), "C": Decimal("150000"), "D": Decimal("25")}),
]


def default_quarterly_config(quarter_id: str) -> QuarterlyConfig:
    """A complete, valid quarterly configuration used for seeding."""
    return QuarterlyConfig(
        quarter_id=quarter_id,
        max_bonus_per_rep=Decimal("25000"),
        over_perf_cap=Decimal("1.25"),
        min_attainment=Decimal("0.75"),
        buckets=[b.model_copy() for b in DEFAULT_BUCKETS],
        sub_goals=[s.model_copy() for s in DEFAULT_SUB_GOALS],
        role_scales=[r.model_copy() for r in DEFAULT_ROLE_SCALES],
        budgets=[b.model_copy(deep=True) for b in DEFAULT_BUDGETS],
    )


def default_rate_matrix(title: str) -> MonthlyRateMatrix:
    """The default rates and special rules materialized for one title."""
    return MonthlyRateMatrix(
        title=title,
        rates=[
            Rate(title=title, segment_id=segment, status=status, percentage=pct)
            for (segment, status), pct in DEFAULT_RATES.items()
        ],
        special_rules=DEFAULT_SPECIAL_RULES.model_copy(deep=True),
    )
