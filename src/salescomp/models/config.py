"""Configuration documents read from the config store.

Ratios (bucket weights, sub-weights, target percents, role scales,
attainment thresholds) are fractions of 1. Commission rates, spiff
percentages and transfer rates are whole percentages (8.0 == 8%).
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from salescomp.core.periods import quarter_key


class CustomerStatus(StrEnum):
    NEW_BUSINESS = "new_business"
    SIX_MONTH_ACTIVE = "6_month_active"
    TWELVE_MONTH_ACTIVE = "12_month_active"


class TransferStatus(StrEnum):
    AUTO = "auto"
    OWN = "own"
    TRANSFERRED = "transferred"


class IncentiveType(StrEnum):
    FLAT = "flat"
    PERCENTAGE = "percentage"


class SubGoalKind(StrEnum):
    PRODUCT = "product"
    ACTIVITY = "activity"


class BucketMetric(StrEnum):
    """Where a bucket's actual value comes from when derived from orders."""

    NEW_BUSINESS_REVENUE = "new_business_revenue"
    PRODUCT_MIX_REVENUE = "product_mix_revenue"
    MAINTAIN_REVENUE = "maintain_revenue"
    ACTIVITY_COUNT = "activity_count"


# ---------------------------------------------------------------------------
# Quarterly bonus configuration
# ---------------------------------------------------------------------------

class Bucket(BaseModel):
    """One weighted category of quarterly goal attainment."""

    code: str
    name: str = ""
    weight: Decimal = Decimal("0")
    has_sub_goals: bool = False
    active: bool = True
    metric: Optional[BucketMetric] = None

    model_config = {"str_strip_whitespace": True, "frozen": True}


class ProductSubGoal(BaseModel):
    """Per-product share of a product-mix bucket."""

    model_config = {"frozen": True}

    kind: Literal["product"] = "product"
    sub_goal_id: str
    bucket_code: str = "B"
    sku: str = ""
    target_percent: Decimal = Decimal("0")  # share of the bucket's budget
    sub_weight: Decimal = Decimal("0")
    active: bool = True

    def goal_for(self, bucket_goal: Decimal) -> Decimal:
        return bucket_goal * self.target_percent


class ActivitySubGoal(BaseModel):
    """Count-based effort goal (calls, visits, demos ...)."""

    model_config = {"frozen": True}

    kind: Literal["activity"] = "activity"
    sub_goal_id: str
    bucket_code: str = "D"
    activity: str = ""
    goal: Decimal = Decimal("0")
    sub_weight: Decimal = Decimal("0")
    data_source: str = ""
    active: bool = True

    def goal_for(self, bucket_goal: Decimal) -> Decimal:
        return self.goal


SubGoal = Annotated[Union[ProductSubGoal, ActivitySubGoal], Field(discriminator="kind")]


class RoleScale(BaseModel):
    """Share of ``max_bonus_per_rep`` a title is eligible for."""

    model_config = {"frozen": True}

    role: str
    percentage: Decimal


class Budget(BaseModel):
    """Per-bucket goal values for one title."""

    model_config = {"frozen": True}

    title: str
    goals: dict[str, Decimal] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _fold_bucket_columns(cls, data: Any) -> Any:
        # Stored budgets may be flat: {"title": ..., "bucketA": 500000, ...}
        if not isinstance(data, dict):
            return data
        goals = dict(data.get("goals") or {})
        rest: dict[str, Any] = {}
        for key, value in data.items():
            if key.startswith("bucket") and len(key) > len("bucket"):
                goals.setdefault(key[len("bucket"):].upper(), value)
            elif key != "goals":
                rest[key] = value
        rest["goals"] = goals
        return rest

    def goal_for(self, bucket_code: str) -> Decimal | None:
        return self.goals.get(bucket_code)


def _percent_to_ratio(value: Any) -> Any:
    # Legacy documents hold 125 / 75 instead of 1.25 / 0.75.
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return value
    return number / 100 if number > 10 else number


class QuarterlyConfig(BaseModel):
    """Everything the bucket scorer needs for one quarter."""

    model_config = {"frozen": True}

    quarter_id: str
    max_bonus_per_rep: Decimal = Decimal("25000")
    over_perf_cap: Decimal = Decimal("1.25")
    min_attainment: Decimal = Decimal("0.75")
    buckets: list[Bucket] = Field(default_factory=list)
    sub_goals: list[SubGoal] = Field(default_factory=list)
    role_scales: list[RoleScale] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize_thresholds(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            for key in ("over_perf_cap", "min_attainment"):
                if data.get(key) is not None:
                    data[key] = _percent_to_ratio(data[key])
        return data

    @property
    def key(self) -> str:
        return quarter_key(self.quarter_id)

    @property
    def active_buckets(self) -> list[Bucket]:
        return [b for b in self.buckets if b.active]

    def active_sub_goals(self, bucket_code: str) -> list[ProductSubGoal | ActivitySubGoal]:
        return [s for s in self.sub_goals if s.active and s.bucket_code == bucket_code]

    def role_scale_for(self, title: str) -> RoleScale | None:
        return next((r for r in self.role_scales if r.role == title), None)

    def budget_for(self, title: str) -> Budget | None:
        return next((b for b in self.budgets if b.title == title), None)


# ---------------------------------------------------------------------------
# Monthly commission configuration
# ---------------------------------------------------------------------------

class Rate(BaseModel):
    """One cell of the title x segment x status rate matrix."""

    model_config = {"frozen": True}

    title: str
    segment_id: str
    status: CustomerStatus
    percentage: Decimal
    active: bool = True


class RepTransferRule(BaseModel):
    """Rate rule for customers moved between reps."""

    model_config = {"frozen": True}

    enabled: bool = True
    flat_fee: Decimal = Decimal("0")
    percent_fallback: Decimal = Decimal("2.0")
    use_greater: bool = True
    segment_rates: dict[str, Decimal] = Field(
        default_factory=lambda: {"wholesale": Decimal("4.0"), "distributor": Decimal("2.0")}
    )


class SpecialRules(BaseModel):
    model_config = {"frozen": True}

    rep_transfer: RepTransferRule = RepTransferRule()
    inactivity_threshold: int = 12  # months


class MonthlyRateMatrix(BaseModel):
    """Rate matrix and special rules for one title."""

    model_config = {"frozen": True}

    title: str = ""
    rates: list[Rate] = Field(default_factory=list)
    special_rules: SpecialRules = SpecialRules()

    def lookup(self, title: str, segment_id: str, status: CustomerStatus) -> Rate | None:
        return next(
            (
                r for r in self.rates
                if r.title == title and r.segment_id == segment_id and r.status == status
            ),
            None,
        )


class Spiff(BaseModel):
    """Time-bounded product incentive layered on top of base commission."""

    model_config = {"frozen": True}

    spiff_id: str
    name: str = ""
    product_num: str
    incentive_type: IncentiveType
    incentive_value: Decimal
    start_date: date
    end_date: Optional[date] = None
    is_active: bool = True

    def applies_to(self, product_num: str, on: date) -> bool:
        if not self.is_active or product_num != self.product_num:
            return False
        if on < self.start_date:
            return False
        return self.end_date is None or on <= self.end_date


class CommissionRules(BaseModel):
    """Global switches for the monthly commission run."""

    model_config = {"frozen": True}

    exclude_shipping: bool = True
    exclude_cc_processing: bool = True
    use_order_value: bool = True
    apply_reorg_rule: bool = True
    reorg_date: date = date(2025, 7, 1)
