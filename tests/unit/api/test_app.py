"""Tests for the FastAPI invocation surface."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from salescomp.api.app import create_app
from salescomp.core.config import AppSettings
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
    record_store.put_line_items([make_line("o1", date(2025, 10, 5), amount="400000")])
    return config_store, record_store, MemoryFileStore()


@pytest.fixture
def client(stores):
    config_store, record_store, file_store = stores
    app = create_app(
        settings=AppSettings(),
        config_store=config_store,
        record_store=record_store,
        file_store=file_store,
    )
    with TestClient(app) as test_client:
        yield test_client


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_ready_reports_services(self, client):
        body = client.get("/ready").json()
        assert body["status"] == "ready"
        assert {s["service"] for s in body["services"]} == {
            "QuarterlyBonusService", "MonthlyCommissionService",
        }


class TestCalculations:
    def test_quarterly_run(self, client, stores):
        resp = client.post("/calculations/quarterly", json={"quarter_id": "Q4 2025"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["quarter_id"] == "Q4_2025"
        assert Decimal(body["total_commission"]) == Decimal("6375.00")
        assert len(stores[1].entries) == 4

    def test_monthly_run(self, client):
        resp = client.post("/calculations/monthly", json={"year": 2025, "month": 10})
        assert resp.status_code == 200
        body = resp.json()
        assert body["commission_month"] == "2025-10"
        assert Decimal(body["total_commission"]) == Decimal("40000.00")

    def test_missing_quarter_is_404(self, client):
        resp = client.post("/calculations/quarterly", json={"quarter_id": "Q1_2030"})
        assert resp.status_code == 404
        assert resp.json()["error"] == "ConfigNotFoundError"

    def test_malformed_quarter_is_422(self, client):
        resp = client.post("/calculations/quarterly", json={"quarter_id": "fourth quarter"})
        assert resp.status_code == 422
        assert resp.json()["error"] == "PeriodError"

    def test_invalid_weights_are_422(self, client, stores):
        config = default_quarterly_config("Q4_2025")
        config = config.model_copy(update={
            "buckets": [
                b.model_copy(update={"weight": Decimal("0.40")}) if b.code == "A" else b
                for b in config.buckets
            ],
        })
        stores[0].put_quarterly_config(config)
        resp = client.post("/calculations/quarterly", json={"quarter_id": "Q4_2025"})
        assert resp.status_code == 422
        assert "must sum to 100%" in resp.json()["detail"]

    def test_month_out_of_range_is_rejected(self, client):
        resp = client.post("/calculations/monthly", json={"year": 2025, "month": 13})
        assert resp.status_code == 422


class TestExports:
    def test_quarterly_export(self, client, stores):
        client.post("/calculations/quarterly", json={"quarter_id": "Q4_2025"})
        resp = client.post("/exports/quarterly/Q4_2025")
        assert resp.status_code == 200
        assert resp.json()["path"] == "exports/quarterly/Q4_2025.csv"
        assert resp.json()["record_count"] == 4
        assert list(stores[2].files) == ["exports/quarterly/Q4_2025.csv"]

    def test_monthly_export(self, client):
        client.post("/calculations/monthly", json={"year": 2025, "month": 10})
        resp = client.post("/exports/monthly/2025/10")
        assert resp.json() == {
            "filename": "2025-10.csv",
            "file_type": "csv",
            "path": "exports/monthly/2025-10.csv",
            "record_count": 1,
            "description": "Monthly commission records for 2025-10",
        }
