"""Output records and run summaries written back to the record store."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field

from salescomp.models.config import CustomerStatus, IncentiveType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RatePath(StrEnum):
    STANDARD = "standard"
    TRANSFER = "transfer"


class RateSource(StrEnum):
    MATRIX = "matrix"
    DEFAULT = "default"
    TRANSFER_SEGMENT = "transfer_segment"
    TRANSFER_FALLBACK = "transfer_fallback"
    FLAT_FEE = "flat_fee"


class SkipReason(StrEnum):
    UNKNOWN_REP = "unknown_rep"
    INACTIVE_REP = "inactive_rep"
    MISSING_CUSTOMER = "missing_customer"
    RETAIL_ACCOUNT = "retail_account"
    MISSING_RATE = "missing_rate"
    EXCLUDED_PRODUCT = "excluded_product"


# ---------------------------------------------------------------------------
# Quarterly bonus outputs
# ---------------------------------------------------------------------------

class CommissionEntry(BaseModel):
    """Bucket-level quarterly bonus result for one rep."""

    quarter_id: str
    rep_id: str
    rep_name: str = ""
    rep_title: str = ""
    bucket_code: str
    bucket_name: str = ""
    bucket_weight: Decimal
    goal_value: Decimal
    actual_value: Decimal
    attainment: Decimal
    payout_fraction: Decimal
    weighted_score: Decimal
    payout: Decimal
    max_bonus: Decimal
    calculated_at: datetime = Field(default_factory=_utcnow)

    @property
    def entry_id(self) -> str:
        return f"{self.quarter_id}_{self.rep_id}_{self.bucket_code}"


class RepBonusResult(BaseModel):
    """Total quarterly bonus for one rep, capped at ``max_bonus``."""

    quarter_id: str
    rep_id: str
    rep_name: str = ""
    rep_title: str = ""
    max_bonus: Decimal
    total_payout: Decimal
    entries: list[CommissionEntry] = Field(default_factory=list)


class QuarterlyRunSummary(BaseModel):
    quarter_id: str
    rep_id: Optional[str] = None
    reps_processed: int = 0
    commissions_calculated: int = 0
    total_commission: Decimal = Decimal("0")
    by_rep: dict[str, Decimal] = Field(default_factory=dict)
    failed_reps: dict[str, str] = Field(default_factory=dict)
    calculated_at: datetime = Field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# Monthly commission outputs
# ---------------------------------------------------------------------------

class AppliedSpiff(BaseModel):
    spiff_id: str
    name: str = ""
    product_num: str
    line_id: str
    incentive_type: IncentiveType
    incentive_value: Decimal
    amount: Decimal


class MonthlyCommissionRecord(BaseModel):
    """Commission earned on one order in one commission month."""

    commission_month: str
    order_id: str
    order_num: str = ""
    order_date: date
    rep_id: str
    rep_name: str = ""
    rep_title: str = ""
    sales_person: str
    customer_id: str
    customer_name: str = ""
    account_type: str = ""
    segment_id: str
    customer_status: CustomerStatus
    rate_path: RatePath
    rate_source: RateSource
    order_value: Decimal
    commission_base: Decimal
    commission_rate: Decimal
    flat_fee: Optional[Decimal] = None
    commission_amount: Decimal
    spiffs: list[AppliedSpiff] = Field(default_factory=list)
    spiff_amount: Decimal = Decimal("0")
    total_amount: Decimal
    excluded_line_count: int = 0
    calculated_at: datetime = Field(default_factory=_utcnow)

    @property
    def record_id(self) -> str:
        return f"{self.commission_month}_order_{self.order_id}"

    def comparable(self) -> dict:
        """Record contents without the run timestamp, for idempotence checks."""
        return self.model_dump(exclude={"calculated_at"})


class RepMonthlySummary(BaseModel):
    commission_month: str
    sales_person: str
    rep_name: str = ""
    orders: int = 0
    revenue: Decimal = Decimal("0")
    commission: Decimal = Decimal("0")
    spiffs: Decimal = Decimal("0")


class MonthlyRunSummary(BaseModel):
    commission_month: str
    sales_person: Optional[str] = None
    orders_processed: int = 0
    commissions_calculated: int = 0
    total_commission: Decimal = Decimal("0")
    total_spiffs: Decimal = Decimal("0")
    by_rep: dict[str, RepMonthlySummary] = Field(default_factory=dict)
    skipped: dict[SkipReason, int] = Field(default_factory=dict)
    calculated_at: datetime = Field(default_factory=_utcnow)

    def count_skip(self, reason: SkipReason, count: int = 1) -> None:
        self.skipped[reason] = self.skipped.get(reason, 0) + count


class ExportFile(BaseModel):
    """Metadata for an exported output file."""

    filename: str
    file_type: str = "csv"
    path: str = ""
    record_count: int = 0
    description: str = ""
