"""Protocol interfaces for all SalesComp abstractions.

All inter-layer communication uses these Protocols (structural typing,
no inheritance required, easy to test with isinstance()).
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Protocol, runtime_checkable

from salescomp.models.config import CommissionRules, MonthlyRateMatrix, QuarterlyConfig, Spiff
from salescomp.models.outputs import (
    CommissionEntry,
    MonthlyCommissionRecord,
    MonthlyRunSummary,
    QuarterlyRunSummary,
    RepBonusResult,
    RepMonthlySummary,
)
from salescomp.core.types import CommissionMonth, QuarterId, RepId, SalesPerson
from salescomp.models.records import Customer, OrderLineItem, RepQuarterActuals, SalesRep


# ---------------------------------------------------------------------------
# Persistence: Config Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IConfigStore(Protocol):
    """Configuration documents. Reads never mutate; puts are administrative."""

    def get_quarterly_config(self, quarter_id: QuarterId) -> QuarterlyConfig: ...

    def list_rate_matrices(self) -> list[MonthlyRateMatrix]: ...

    def get_commission_rules(self) -> CommissionRules: ...

    def list_spiffs(self) -> list[Spiff]: ...

    def list_reps(self) -> list[SalesRep]: ...

    def put_quarterly_config(self, config: QuarterlyConfig) -> None: ...

    def put_rate_matrix(self, matrix: MonthlyRateMatrix) -> None: ...

    def put_commission_rules(self, rules: CommissionRules) -> None: ...

    def put_spiff(self, spiff: Spiff) -> None: ...

    def put_rep(self, rep: SalesRep) -> None: ...


# ---------------------------------------------------------------------------
# Persistence: Record Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IRecordStore(Protocol):
    """Input records and calculation outputs."""

    def list_customers(self) -> list[Customer]: ...

    def list_line_items(self, start: date, end: date) -> list[OrderLineItem]: ...

    def list_quarter_actuals(self, quarter_id: QuarterId) -> list[RepQuarterActuals]: ...

    def replace_commission_entries(
        self, quarter_id: QuarterId, entries: Iterable[CommissionEntry],
        rep_ids: set[RepId] | None = None,
    ) -> None: ...

    def list_commission_entries(self, quarter_id: QuarterId) -> list[CommissionEntry]: ...

    def replace_bonus_results(
        self, quarter_id: QuarterId, results: Iterable[RepBonusResult],
        rep_ids: set[RepId] | None = None,
    ) -> None: ...

    def replace_monthly_records(
        self, commission_month: CommissionMonth, records: Iterable[MonthlyCommissionRecord],
        sales_person: SalesPerson | None = None,
    ) -> None: ...

    def list_monthly_records(self, commission_month: CommissionMonth) -> list[MonthlyCommissionRecord]: ...

    def replace_rep_summaries(
        self, commission_month: CommissionMonth, summaries: Iterable[RepMonthlySummary],
        sales_person: SalesPerson | None = None,
    ) -> None: ...

    def put_run_summary(self, summary: QuarterlyRunSummary | MonthlyRunSummary) -> None: ...

    def put_customer(self, customer: Customer) -> None: ...

    def put_line_items(self, items: Iterable[OrderLineItem]) -> None: ...

    def put_quarter_actuals(self, actuals: RepQuarterActuals) -> None: ...


# ---------------------------------------------------------------------------
# Persistence: Cache Backend
# ---------------------------------------------------------------------------

@runtime_checkable
class ICacheBackend(Protocol):
    """Redis-compatible cache interface."""

    def get(self, key: str) -> str | None: ...

    def setex(self, key: str, ttl: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# Persistence: File Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IFileStore(Protocol):
    """S3-compatible file storage interface for exports."""

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str: ...
