"""Tests for quarter / month identifiers."""

from __future__ import annotations

from datetime import date

import pytest

from salescomp.core.exceptions import PeriodError
from salescomp.core.periods import (
    commission_month,
    month_bounds,
    months_between,
    parse_quarter,
    quarter_bounds,
    quarter_containing,
    quarter_key,
    shift_months,
)


class TestQuarters:
    @pytest.mark.parametrize("raw", ["Q4 2025", "Q4_2025", "q4-2025", " Q4 2025 "])
    def test_accepts_common_spellings(self, raw):
        assert parse_quarter(raw) == (2025, 4)
        assert quarter_key(raw) == "Q4_2025"

    @pytest.mark.parametrize("raw", ["", "Q5 2025", "2025 Q4", "Q4"])
    def test_rejects_malformed(self, raw):
        with pytest.raises(PeriodError):
            parse_quarter(raw)

    def test_quarter_bounds(self):
        assert quarter_bounds("Q1_2024") == (date(2024, 1, 1), date(2024, 3, 31))
        assert quarter_bounds("Q4_2025") == (date(2025, 10, 1), date(2025, 12, 31))

    @pytest.mark.parametrize("day, expected", [
        (date(2025, 1, 1), "Q1_2025"),
        (date(2025, 3, 31), "Q1_2025"),
        (date(2025, 4, 1), "Q2_2025"),
        (date(2025, 12, 31), "Q4_2025"),
    ])
    def test_quarter_containing(self, day, expected):
        assert quarter_containing(day) == expected
        assert quarter_bounds(expected)[0] <= day <= quarter_bounds(expected)[1]


class TestMonths:
    def test_month_bounds_leap_year(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_commission_month_key(self):
        assert commission_month(2025, 5) == "2025-05"

    def test_invalid_month_raises(self):
        with pytest.raises(PeriodError):
            commission_month(2025, 13)

    def test_shift_months_clamps_day(self):
        assert shift_months(date(2025, 3, 31), -1) == date(2025, 2, 28)
        assert shift_months(date(2025, 1, 15), -24) == date(2023, 1, 15)
        assert shift_months(date(2025, 11, 1), 2) == date(2026, 1, 1)

    def test_months_between_counts_whole_months(self):
        assert months_between(date(2025, 1, 15), date(2025, 7, 15)) == 6
        assert months_between(date(2025, 1, 15), date(2025, 7, 14)) == 5
        assert months_between(date(2025, 1, 31), date(2025, 2, 28)) == 0
        assert months_between(date(2024, 6, 1), date(2025, 6, 1)) == 12
