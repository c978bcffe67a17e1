"""Quarter and month identifiers and their date bounds."""

from __future__ import annotations

import calendar
import re
from datetime import date

from salescomp.core.exceptions import PeriodError

_QUARTER_RE = re.compile(r"^\s*Q([1-4])[\s_-]*(\d{4})\s*$", re.IGNORECASE)


def parse_quarter(quarter_id: str) -> tuple[int, int]:
    """Parse ``"Q4 2025"`` / ``"Q4_2025"`` into ``(2025, 4)``."""
    match = _QUARTER_RE.match(quarter_id or "")
    if match is None:
        raise PeriodError(f"Malformed quarter identifier {quarter_id!r}")
    return int(match.group(2)), int(match.group(1))


def quarter_key(quarter_id: str) -> str:
    """Canonical storage key for a quarter, e.g. ``"Q4_2025"``."""
    year, quarter = parse_quarter(quarter_id)
    return f"Q{quarter}_{year}"


def quarter_containing(day: date) -> str:
    """Storage key of the quarter that contains ``day``."""
    return f"Q{(day.month - 1) // 3 + 1}_{day.year}"


def quarter_bounds(quarter_id: str) -> tuple[date, date]:
    """First and last calendar day of a quarter (inclusive)."""
    year, quarter = parse_quarter(quarter_id)
    first_month = (quarter - 1) * 3 + 1
    start, _ = month_bounds(year, first_month)
    _, end = month_bounds(year, first_month + 2)
    return start, end


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month (inclusive)."""
    if not 1 <= month <= 12:
        raise PeriodError(f"Month must be between 1 and 12 (got {month})")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def commission_month(year: int, month: int) -> str:
    """``"YYYY-MM"`` key used to partition monthly records."""
    month_bounds(year, month)
    return f"{year:04d}-{month:02d}"


def shift_months(day: date, months: int) -> date:
    """Move ``day`` by whole months, clamping to the end of the target month."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def months_between(earlier: date, later: date) -> int:
    """Whole calendar months elapsed from ``earlier`` to ``later``.

    A month only counts once the day-of-month has been reached, so
    2025-01-31 -> 2025-02-28 is 0 months and 2025-01-15 -> 2025-07-15 is 6.
    """
    months = (later.year - earlier.year) * 12 + (later.month - earlier.month)
    if later.day < earlier.day:
        months -= 1
    return months
