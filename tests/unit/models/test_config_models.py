"""Tests for configuration documents."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from salescomp.models.config import (
    ActivitySubGoal,
    Budget,
    CustomerStatus,
    IncentiveType,
    ProductSubGoal,
    QuarterlyConfig,
    Spiff,
)
from salescomp.models.defaults import default_quarterly_config, default_rate_matrix


class TestQuarterlyConfig:
    def test_legacy_whole_percent_thresholds_are_normalized(self):
        config = QuarterlyConfig(quarter_id="Q4 2025", over_perf_cap=125, min_attainment=75)
        assert config.over_perf_cap == Decimal("1.25")
        assert config.min_attainment == Decimal("0.75")

    def test_ratio_thresholds_are_kept(self):
        config = QuarterlyConfig(quarter_id="Q4_2025", over_perf_cap="1.5", min_attainment="0.8")
        assert config.over_perf_cap == Decimal("1.5")
        assert config.min_attainment == Decimal("0.8")

    def test_key_is_canonical(self):
        assert QuarterlyConfig(quarter_id="Q4 2025").key == "Q4_2025"

    def test_sub_goals_discriminate_on_kind(self):
        config = QuarterlyConfig.model_validate({
            "quarter_id": "Q1_2026",
            "sub_goals": [
                {"kind": "product", "sub_goal_id": "p1", "sku": "X", "target_percent": "1", "sub_weight": "0.5"},
                {"kind": "activity", "sub_goal_id": "a1", "goal": "100", "sub_weight": "0.5"},
            ],
        })
        assert isinstance(config.sub_goals[0], ProductSubGoal)
        assert isinstance(config.sub_goals[1], ActivitySubGoal)
        assert config.active_sub_goals("B")[0].sub_goal_id == "p1"
        assert config.active_sub_goals("D")[0].sub_goal_id == "a1"

    def test_unknown_sub_goal_kind_is_rejected(self):
        with pytest.raises(ValidationError):
            QuarterlyConfig.model_validate({
                "quarter_id": "Q1_2026",
                "sub_goals": [{"kind": "mystery", "sub_goal_id": "m"}],
            })

    def test_default_config_lookups(self):
        config = default_quarterly_config("Q4_2025")
        assert [b.code for b in config.active_buckets] == ["A", "B", "C", "D"]
        assert config.role_scale_for("Account Manager").percentage == Decimal("0.60")
        assert config.budget_for("Account Executive").goal_for("A") == Decimal("400000")
        assert config.role_scale_for("Intern") is None


class TestBudget:
    def test_folds_flat_bucket_columns(self):
        budget = Budget.model_validate({"title": "AE", "bucketA": 1000, "bucketb": 200})
        assert budget.goals == {"A": Decimal("1000"), "B": Decimal("200")}

    def test_explicit_goals_win_over_flat_columns(self):
        budget = Budget.model_validate({"title": "AE", "goals": {"A": 5}, "bucketA": 1000})
        assert budget.goal_for("A") == Decimal("5")
        assert budget.goal_for("Z") is None


class TestSubGoals:
    def test_product_goal_is_share_of_bucket_goal(self):
        sub = ProductSubGoal(sub_goal_id="p", sku="X", target_percent=Decimal("0.6"))
        assert sub.goal_for(Decimal("100000")) == Decimal("60000.0")

    def test_activity_goal_is_its_own_count(self):
        sub = ActivitySubGoal(sub_goal_id="calls", goal=Decimal("1200"))
        assert sub.goal_for(Decimal("999")) == Decimal("1200")


class TestSpiff:
    @pytest.fixture
    def spiff(self):
        return Spiff(
            spiff_id="s1", product_num="FOCUS-1", incentive_type=IncentiveType.FLAT,
            incentive_value=Decimal("25"), start_date=date(2025, 1, 1), end_date=date(2025, 3, 31),
        )

    def test_window_is_inclusive(self, spiff):
        assert spiff.applies_to("FOCUS-1", date(2025, 1, 1))
        assert spiff.applies_to("FOCUS-1", date(2025, 3, 31))
        assert not spiff.applies_to("FOCUS-1", date(2025, 4, 1))
        assert not spiff.applies_to("FOCUS-1", date(2024, 12, 31))

    def test_other_products_and_inactive_spiffs_do_not_apply(self, spiff):
        assert not spiff.applies_to("FOCUS-2", date(2025, 2, 1))
        inactive = spiff.model_copy(update={"is_active": False})
        assert not inactive.applies_to("FOCUS-1", date(2025, 2, 1))

    def test_open_ended_window(self, spiff):
        open_ended = spiff.model_copy(update={"end_date": None})
        assert open_ended.applies_to("FOCUS-1", date(2030, 1, 1))


class TestRateMatrix:
    def test_default_matrix_lookup(self):
        matrix = default_rate_matrix("Account Executive")
        rate = matrix.lookup("Account Executive", "wholesale", CustomerStatus.SIX_MONTH_ACTIVE)
        assert rate is not None
        assert rate.percentage == Decimal("7.0")
        assert matrix.lookup("Other Title", "wholesale", CustomerStatus.SIX_MONTH_ACTIVE) is None
