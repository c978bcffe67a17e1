"""Tests for CSV exports."""

from __future__ import annotations

import csv
import io
from datetime import date

import pytest

from salescomp.core.config import AppSettings
from salescomp.core.exceptions import StoreError
from salescomp.engine.exports import ExportService
from salescomp.engine.monthly_commission import MonthlyCommissionService
from salescomp.engine.quarterly_bonus import QuarterlyBonusService
from salescomp.models.defaults import default_quarterly_config, default_rate_matrix
from tests.fakes import MemoryConfigStore, MemoryFileStore, MemoryRecordStore
from tests.fakes.builders import make_customer, make_line, make_rep


@pytest.fixture
def stores():
    config_store = MemoryConfigStore()
    config_store.put_quarterly_config(default_quarterly_config("Q4_2025"))
    config_store.put_rate_matrix(default_rate_matrix("Account Executive"))
    config_store.put_rep(make_rep())
    record_store = MemoryRecordStore()
    record_store.put_customer(make_customer())
    record_store.put_line_items([
        make_line("o1", date(2025, 10, 5), amount="400000"),
        make_line("o2", date(2025, 10, 20), amount="1000"),
    ])
    return config_store, record_store, MemoryFileStore()


def _wiring(stores, file_store=True):
    config_store, record_store, files = stores
    return {
        "settings": AppSettings(),
        "config_store": config_store,
        "record_store": record_store,
        "file_store": files if file_store else None,
    }


def _rows(data: bytes) -> list[dict[str, str]]:
    return list(csv.DictReader(io.StringIO(data.decode("utf-8"))))


def test_quarter_export_writes_one_row_per_entry(stores):
    QuarterlyBonusService(**_wiring(stores)).calculate("Q4_2025")

    export = ExportService(**_wiring(stores)).export_quarter("Q4 2025")

    files = stores[2]
    assert export.path == "exports/quarterly/Q4_2025.csv"
    assert export.record_count == 4
    rows = _rows(files.files[export.path])
    assert [r["bucket_code"] for r in rows] == ["A", "B", "C", "D"]
    assert rows[0]["attainment_pct"] == "100.00"
    assert rows[0]["bucket_weight_pct"] == "30.00"
    assert rows[0]["payout"] == "6375.00"


def test_month_export(stores):
    MonthlyCommissionService(**_wiring(stores)).calculate(2025, 10)

    export = ExportService(**_wiring(stores)).export_month(2025, 10)

    assert export.path == "exports/monthly/2025-10.csv"
    rows = _rows(stores[2].files[export.path])
    assert [r["order_id"] for r in rows] == ["o1", "o2"]
    assert rows[1]["customer_status"] == "6_month_active"
    assert rows[1]["commission_amount"] == "70.00"


def test_export_without_file_store_raises(stores):
    with pytest.raises(StoreError):
        ExportService(**_wiring(stores, file_store=False)).export_quarter("Q4_2025")
