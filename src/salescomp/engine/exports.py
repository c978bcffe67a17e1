"""CSV exports of stored calculation results to the file store."""

from __future__ import annotations

import csv
import io
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from salescomp.core.exceptions import StoreError
from salescomp.core.numbers import CENT, HUNDRED
from salescomp.core.periods import commission_month, quarter_key
from salescomp.engine.base import BaseCalculationService
from salescomp.models.outputs import CommissionEntry, ExportFile, MonthlyCommissionRecord

logger = logging.getLogger(__name__)

QUARTERLY_COLUMNS = [
    "quarter", "rep_name", "rep_title", "bucket_code", "bucket_name", "goal", "actual",
    "attainment_pct", "bucket_weight_pct", "weighted_score_pct", "payout", "max_bonus",
    "calculated_at",
]

MONTHLY_COLUMNS = [
    "commission_month", "order_id", "order_num", "order_date", "sales_person", "rep_name",
    "customer_id", "customer_name", "segment_id", "customer_status", "rate_path",
    "rate_source", "commission_base", "commission_rate", "flat_fee", "commission_amount",
    "spiff_amount", "total_amount",
]


def _to_csv(columns: list[str], rows: Iterable[dict]) -> bytes:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({k: "" if v is None else str(v) for k, v in row.items()})
    return buffer.getvalue().encode("utf-8")


def _pct(ratio: Decimal) -> Decimal:
    return (ratio * HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)


def _entry_row(entry: CommissionEntry) -> dict:
    return {
        "quarter": entry.quarter_id,
        "rep_name": entry.rep_name or entry.rep_id,
        "rep_title": entry.rep_title,
        "bucket_code": entry.bucket_code,
        "bucket_name": entry.bucket_name,
        "goal": entry.goal_value,
        "actual": entry.actual_value,
        "attainment_pct": _pct(entry.attainment),
        "bucket_weight_pct": _pct(entry.bucket_weight),
        "weighted_score_pct": _pct(entry.weighted_score),
        "payout": entry.payout,
        "max_bonus": entry.max_bonus,
        "calculated_at": entry.calculated_at.isoformat(),
    }


def commission_entries_csv(entries: Iterable[CommissionEntry]) -> bytes:
    ordered = sorted(entries, key=lambda e: (e.rep_id, e.bucket_code))
    return _to_csv(QUARTERLY_COLUMNS, (_entry_row(e) for e in ordered))


def monthly_records_csv(records: Iterable[MonthlyCommissionRecord]) -> bytes:
    ordered = sorted(records, key=lambda r: (r.sales_person, r.order_date, r.order_id))
    return _to_csv(MONTHLY_COLUMNS, (r.model_dump(mode="json") for r in ordered))


class ExportService(BaseCalculationService):
    """Writes the stored results for a period as a CSV file."""

    def _write(self, path: str, data: bytes) -> str:
        if self._files is None:
            raise StoreError("No file store configured for exports")
        return self._files.write(path, data, content_type="text/csv")

    def export_quarter(self, quarter_id: str) -> ExportFile:
        key = quarter_key(quarter_id)
        entries = self._records.list_commission_entries(key)
        filename = f"{key}.csv"
        path = self._write(
            f"{self._settings.s3.export_prefix}/quarterly/{filename}",
            commission_entries_csv(entries),
        )
        logger.info("Exported %d commission entries for %s to %s", len(entries), key, path)
        return ExportFile(
            filename=filename,
            path=path,
            record_count=len(entries),
            description=f"Quarterly bonus entries for {key}",
        )

    def export_month(self, year: int, month: int) -> ExportFile:
        month_key = commission_month(year, month)
        records = self._records.list_monthly_records(month_key)
        filename = f"{month_key}.csv"
        path = self._write(
            f"{self._settings.s3.export_prefix}/monthly/{filename}",
            monthly_records_csv(records),
        )
        logger.info("Exported %d monthly records for %s to %s", len(records), month_key, path)
        return ExportFile(
            filename=filename,
            path=path,
            record_count=len(records),
            description=f"Monthly commission records for {month_key}",
        )
