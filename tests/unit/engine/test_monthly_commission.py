"""Tests for MonthlyCommissionService end to end over memory stores."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from salescomp.core.config import AppSettings
from salescomp.engine.monthly_commission import MonthlyCommissionService
from salescomp.models.defaults import default_rate_matrix
from salescomp.models.outputs import SkipReason
from tests.fakes import MemoryConfigStore, MemoryRecordStore
from tests.fakes.builders import make_customer, make_line, make_rep


@pytest.fixture
def config_store():
    store = MemoryConfigStore()
    store.put_rate_matrix(default_rate_matrix("Account Executive"))
    store.put_rep(make_rep())
    store.put_rep(make_rep("rep-2", sales_person="bsmith", name="Bob Smith"))
    return store


@pytest.fixture
def record_store():
    store = MemoryRecordStore()
    store.put_customer(make_customer())
    store.put_customer(make_customer("cust-2", sales_person="bsmith"))
    store.put_line_items([
        make_line("old", date(2024, 12, 1), amount="10"),  # history only
        make_line("o1", date(2025, 5, 10), amount="1000"),
        make_line("o2", date(2025, 5, 12), amount="500", customer_id="cust-2", sales_person="bsmith"),
        make_line("o9", date(2025, 6, 1), amount="999"),  # next month
    ])
    return store


@pytest.fixture
def service(config_store, record_store):
    return MonthlyCommissionService(
        settings=AppSettings(), config_store=config_store, record_store=record_store,
    )


def test_calculates_one_record_per_order(service, record_store):
    summary = service.calculate(2025, 5)

    assert summary.commission_month == "2025-05"
    assert summary.orders_processed == 2
    records = {r.order_id: r for r in record_store.list_monthly_records("2025-05")}
    assert set(records) == {"o1", "o2"}
    # cust-1 last ordered 2024-12-01 -> 6-month active wholesale 7%
    assert records["o1"].commission_amount == Decimal("70.00")
    assert records["o2"].commission_amount == Decimal("50.00")
    assert summary.total_commission == Decimal("120.00")
    assert set(record_store.rep_summaries) == {("2025-05", "jdoe"), ("2025-05", "bsmith")}
    assert record_store.run_summaries == [summary]


def test_rerun_is_idempotent(service, record_store):
    service.calculate(2025, 5)
    first = {k: r.comparable() for k, r in record_store.monthly_records.items()}
    service.calculate(2025, 5)
    second = {k: r.comparable() for k, r in record_store.monthly_records.items()}
    assert second == first
    assert len(record_store.monthly_records) == 2


def test_rerun_after_fix_removes_stale_records(service, record_store):
    service.calculate(2025, 5)
    record_store.put_customer(make_customer(account_type="Retail"))

    summary = service.calculate(2025, 5)

    assert summary.skipped == {SkipReason.RETAIL_ACCOUNT: 1}
    assert [r.order_id for r in record_store.list_monthly_records("2025-05")] == ["o2"]


def test_sales_person_filter_leaves_other_reps_alone(service, record_store):
    service.calculate(2025, 5)
    record_store.put_customer(make_customer(account_type="Retail"))

    service.calculate(2025, 5, sales_person="bsmith")

    assert {r.order_id for r in record_store.list_monthly_records("2025-05")} == {"o1", "o2"}


def test_rerun_after_fix_removes_stale_rep_summary(service, record_store):
    service.calculate(2025, 5)
    assert record_store.rep_summaries[("2025-05", "jdoe")].commission == Decimal("70.00")
    record_store.put_customer(make_customer(account_type="Retail"))

    service.calculate(2025, 5)

    assert set(record_store.rep_summaries) == {("2025-05", "bsmith")}


def test_sales_person_filter_keeps_other_rep_summaries(service, record_store):
    service.calculate(2025, 5)
    record_store.put_customer(make_customer("cust-2", sales_person="bsmith", account_type="Retail"))

    summary = service.calculate(2025, 5, sales_person="bsmith")

    assert summary.sales_person == "bsmith"
    assert set(record_store.rep_summaries) == {("2025-05", "jdoe")}
    assert record_store.rep_summaries[("2025-05", "jdoe")].commission == Decimal("70.00")
