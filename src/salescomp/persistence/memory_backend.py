"""In-memory backends for unit tests: dict-backed fakes."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from salescomp.core.exceptions import ConfigNotFoundError
from salescomp.core.periods import quarter_key
from salescomp.models.config import CommissionRules, MonthlyRateMatrix, QuarterlyConfig, Spiff
from salescomp.models.defaults import DEFAULT_COMMISSION_RULES
from salescomp.models.outputs import (
    CommissionEntry,
    MonthlyCommissionRecord,
    MonthlyRunSummary,
    QuarterlyRunSummary,
    RepBonusResult,
    RepMonthlySummary,
)
from salescomp.models.records import Customer, OrderLineItem, RepQuarterActuals, SalesRep


class MemoryConfigStore:
    """Dict-backed IConfigStore for unit tests."""

    def __init__(self) -> None:
        self._quarters: dict[str, QuarterlyConfig] = {}
        self._matrices: dict[str, MonthlyRateMatrix] = {}
        self._rules: CommissionRules | None = None
        self._spiffs: dict[str, Spiff] = {}
        self._reps: dict[str, SalesRep] = {}

    def get_quarterly_config(self, quarter_id: str) -> QuarterlyConfig:
        key = quarter_key(quarter_id)
        try:
            return self._quarters[key]
        except KeyError:
            raise ConfigNotFoundError(f"No quarterly configuration for {key}") from None

    def list_rate_matrices(self) -> list[MonthlyRateMatrix]:
        return list(self._matrices.values())

    def get_commission_rules(self) -> CommissionRules:
        return self._rules or DEFAULT_COMMISSION_RULES

    def list_spiffs(self) -> list[Spiff]:
        return list(self._spiffs.values())

    def list_reps(self) -> list[SalesRep]:
        return list(self._reps.values())

    def put_quarterly_config(self, config: QuarterlyConfig) -> None:
        self._quarters[config.key] = config

    def put_rate_matrix(self, matrix: MonthlyRateMatrix) -> None:
        self._matrices[matrix.title] = matrix

    def put_commission_rules(self, rules: CommissionRules) -> None:
        self._rules = rules

    def put_spiff(self, spiff: Spiff) -> None:
        self._spiffs[spiff.spiff_id] = spiff

    def put_rep(self, rep: SalesRep) -> None:
        self._reps[rep.rep_id] = rep


class MemoryRecordStore:
    """Dict-backed IRecordStore for unit tests."""

    def __init__(self) -> None:
        self.customers: dict[str, Customer] = {}
        self.line_items: dict[str, OrderLineItem] = {}
        self.quarter_actuals: dict[tuple[str, str], RepQuarterActuals] = {}
        self.entries: dict[str, CommissionEntry] = {}
        self.bonus_results: dict[tuple[str, str], RepBonusResult] = {}
        self.monthly_records: dict[str, MonthlyCommissionRecord] = {}
        self.rep_summaries: dict[tuple[str, str], RepMonthlySummary] = {}
        self.run_summaries: list[QuarterlyRunSummary | MonthlyRunSummary] = []

    def list_customers(self) -> list[Customer]:
        return list(self.customers.values())

    def list_line_items(self, start: date, end: date) -> list[OrderLineItem]:
        return [i for i in self.line_items.values() if start <= i.order_date <= end]

    def list_quarter_actuals(self, quarter_id: str) -> list[RepQuarterActuals]:
        return [a for (q, _), a in self.quarter_actuals.items() if q == quarter_id]

    def replace_commission_entries(
        self, quarter_id: str, entries: Iterable[CommissionEntry], rep_ids: set[str] | None = None
    ) -> None:
        fresh = {e.entry_id: e for e in entries}
        for entry_id, entry in list(self.entries.items()):
            if entry.quarter_id != quarter_id or entry_id in fresh:
                continue
            if rep_ids is None or entry.rep_id in rep_ids:
                del self.entries[entry_id]
        self.entries.update(fresh)

    def list_commission_entries(self, quarter_id: str) -> list[CommissionEntry]:
        return [e for e in self.entries.values() if e.quarter_id == quarter_id]

    def replace_bonus_results(
        self, quarter_id: str, results: Iterable[RepBonusResult], rep_ids: set[str] | None = None
    ) -> None:
        fresh = {(r.quarter_id, r.rep_id): r for r in results}
        for key in list(self.bonus_results):
            quarter, rep_id = key
            if quarter != quarter_id or key in fresh:
                continue
            if rep_ids is None or rep_id in rep_ids:
                del self.bonus_results[key]
        self.bonus_results.update(fresh)

    def replace_monthly_records(
        self, commission_month: str, records: Iterable[MonthlyCommissionRecord],
        sales_person: str | None = None,
    ) -> None:
        fresh = {r.record_id: r for r in records}
        for record_id, record in list(self.monthly_records.items()):
            if record.commission_month != commission_month or record_id in fresh:
                continue
            if sales_person is None or record.sales_person == sales_person:
                del self.monthly_records[record_id]
        self.monthly_records.update(fresh)

    def list_monthly_records(self, commission_month: str) -> list[MonthlyCommissionRecord]:
        return [r for r in self.monthly_records.values() if r.commission_month == commission_month]

    def replace_rep_summaries(
        self, commission_month: str, summaries: Iterable[RepMonthlySummary],
        sales_person: str | None = None,
    ) -> None:
        fresh = {(s.commission_month, s.sales_person): s for s in summaries}
        for key in list(self.rep_summaries):
            month, person = key
            if month != commission_month or key in fresh:
                continue
            if sales_person is None or person == sales_person:
                del self.rep_summaries[key]
        self.rep_summaries.update(fresh)

    def put_run_summary(self, summary: QuarterlyRunSummary | MonthlyRunSummary) -> None:
        self.run_summaries.append(summary)

    def put_customer(self, customer: Customer) -> None:
        self.customers[customer.customer_id] = customer

    def put_line_items(self, items: Iterable[OrderLineItem]) -> None:
        for item in items:
            self.line_items[item.line_id] = item

    def put_quarter_actuals(self, actuals: RepQuarterActuals) -> None:
        self.quarter_actuals[(actuals.quarter_id, actuals.rep_id)] = actuals


class MemoryCacheBackend:
    """Dict-backed ICacheBackend for unit tests."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def setex(self, key: str, ttl: int, value: str) -> None:
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)


class MemoryFileStore:
    """Dict-backed IFileStore for unit tests."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        self.files[path] = data
        return path
