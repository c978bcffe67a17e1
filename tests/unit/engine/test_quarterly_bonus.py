"""Tests for QuarterlyBonusService end to end over memory stores."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from salescomp.core.config import AppSettings
from salescomp.core.exceptions import ConfigNotFoundError, InvalidWeightsError
from salescomp.engine.quarterly_bonus import QuarterlyBonusService
from salescomp.models.defaults import default_quarterly_config
from salescomp.models.records import RepQuarterActuals
from tests.fakes import MemoryConfigStore, MemoryRecordStore
from tests.fakes.builders import make_line, make_rep

QUARTER = "Q4_2025"


@pytest.fixture
def config_store():
    store = MemoryConfigStore()
    store.put_quarterly_config(default_quarterly_config(QUARTER))
    store.put_rep(make_rep())
    return store


@pytest.fixture
def record_store():
    store = MemoryRecordStore()
    store.put_line_items([make_line("o1", date(2025, 10, 5), amount="400000")])
    store.put_quarter_actuals(RepQuarterActuals(
        rep_id="rep-1", quarter_id=QUARTER,
        sub_goal_actuals={"calls": Decimal("1200"), "meetings": Decimal("60")},
    ))
    return store


@pytest.fixture
def service(config_store, record_store):
    return QuarterlyBonusService(
        settings=AppSettings(), config_store=config_store, record_store=record_store,
    )


class TestCalculate:
    def test_scores_derived_and_stored_actuals(self, service, record_store):
        summary = service.calculate("Q4 2025")

        assert summary.quarter_id == QUARTER
        assert summary.reps_processed == 1
        assert summary.commissions_calculated == 4
        # A: 400k/400k -> 0.30, D: calls+meetings -> 0.20, of 21,250
        assert summary.total_commission == Decimal("10625.00")
        assert summary.by_rep == {"rep-1": Decimal("10625.00")}
        assert len(record_store.entries) == 4
        assert record_store.bonus_results[(QUARTER, "rep-1")].total_payout == Decimal("10625.00")
        assert record_store.run_summaries == [summary]

    def test_stored_actuals_override_derived(self, service, record_store):
        record_store.put_quarter_actuals(RepQuarterActuals(
            rep_id="rep-1", quarter_id=QUARTER,
            bucket_actuals={"A": Decimal("0")},
            sub_goal_actuals={"calls": Decimal("1200"), "meetings": Decimal("60")},
        ))
        summary = service.calculate(QUARTER)
        assert summary.total_commission == Decimal("4250.00")

    def test_rerun_replaces_entries(self, service, record_store):
        service.calculate(QUARTER)
        first = {k: e.payout for k, e in record_store.entries.items()}
        service.calculate(QUARTER)
        assert {k: e.payout for k, e in record_store.entries.items()} == first

    def test_invalid_weights_abort_before_writing(self, config_store, service, record_store):
        config = default_quarterly_config(QUARTER)
        config = config.model_copy(update={
            "buckets": [
                b.model_copy(update={"weight": Decimal("0.40")}) if b.code == "A" else b
                for b in config.buckets
            ],
        })
        config_store.put_quarterly_config(config)
        with pytest.raises(InvalidWeightsError):
            service.calculate(QUARTER)
        assert record_store.entries == {}
        assert record_store.run_summaries == []

    def test_rep_without_role_scale_is_reported_not_fatal(self, config_store, service, record_store):
        config_store.put_rep(make_rep("rep-2", title="Intern", sales_person="intern"))
        summary = service.calculate(QUARTER)
        assert summary.reps_processed == 2
        assert "rep-2" in summary.failed_reps
        assert "rep-1" in summary.by_rep
        assert all(e.rep_id == "rep-1" for e in record_store.entries.values())

    def test_inactive_reps_are_not_scored(self, config_store, service):
        config_store.put_rep(make_rep("rep-2", sales_person="gone", active=False))
        assert service.calculate(QUARTER).reps_processed == 1

    def test_rep_filter_keeps_other_reps_entries(self, config_store, service, record_store):
        config_store.put_rep(make_rep("rep-2", sales_person="bsmith", name="Bob Smith"))
        service.calculate(QUARTER)
        assert len(record_store.entries) == 8

        summary = service.calculate(QUARTER, rep_id="rep-2")
        assert summary.reps_processed == 1
        assert len(record_store.entries) == 8

    def test_missing_configuration(self, service):
        with pytest.raises(ConfigNotFoundError):
            service.calculate("Q1_2030")


class TestRerunReplacesTotals:
    def test_rep_failing_on_rerun_loses_previous_total(self, config_store, service, record_store):
        service.calculate(QUARTER)
        assert record_store.bonus_results[(QUARTER, "rep-1")].total_payout == Decimal("10625.00")

        config = default_quarterly_config(QUARTER)
        config_store.put_quarterly_config(config.model_copy(update={
            "role_scales": [s for s in config.role_scales if s.role != "Account Executive"],
        }))
        summary = service.calculate(QUARTER)

        assert "rep-1" in summary.failed_reps
        assert record_store.entries == {}
        assert record_store.bonus_results == {}

    def test_rep_filter_keeps_other_reps_totals(self, config_store, service, record_store):
        config_store.put_rep(make_rep("rep-2", sales_person="bsmith", name="Bob Smith"))
        service.calculate(QUARTER)
        config_store.put_rep(make_rep("rep-2", sales_person="bsmith", active=False))

        summary = service.calculate(QUARTER, rep_id="rep-2")

        assert summary.rep_id == "rep-2"
        assert set(record_store.bonus_results) == {(QUARTER, "rep-1")}
        assert {e.rep_id for e in record_store.entries.values()} == {"rep-1"}
