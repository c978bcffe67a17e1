"""Calculation and export endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from salescomp.engine.exports import ExportService
from salescomp.engine.monthly_commission import MonthlyCommissionService
from salescomp.engine.quarterly_bonus import QuarterlyBonusService
from salescomp.models.outputs import ExportFile, MonthlyRunSummary, QuarterlyRunSummary

router = APIRouter(tags=["calculations"])


class QuarterlyRunRequest(BaseModel):
    quarter_id: str
    rep_id: str | None = None


class MonthlyRunRequest(BaseModel):
    year: int = Field(ge=2000, le=2100)
    month: int = Field(ge=1, le=12)
    sales_person: str | None = None


def _wiring(request: Request) -> dict:
    state = request.app.state
    return {
        "settings": state.settings,
        "config_store": state.config_store,
        "record_store": state.record_store,
        "file_store": state.file_store,
    }


def quarterly_service(request: Request) -> QuarterlyBonusService:
    return QuarterlyBonusService(**_wiring(request))


def monthly_service(request: Request) -> MonthlyCommissionService:
    return MonthlyCommissionService(**_wiring(request))


def export_service(request: Request) -> ExportService:
    return ExportService(**_wiring(request))


@router.post("/calculations/quarterly", response_model=QuarterlyRunSummary)
def run_quarterly(body: QuarterlyRunRequest, request: Request) -> QuarterlyRunSummary:
    """Calculate quarterly bonuses for every active rep (or one rep)."""
    return quarterly_service(request).calculate(body.quarter_id, rep_id=body.rep_id)


@router.post("/calculations/monthly", response_model=MonthlyRunSummary)
def run_monthly(body: MonthlyRunRequest, request: Request) -> MonthlyRunSummary:
    """Calculate monthly order commissions (optionally for one sales person)."""
    return monthly_service(request).calculate(body.year, body.month, sales_person=body.sales_person)


@router.post("/exports/quarterly/{quarter_id}", response_model=ExportFile)
def export_quarterly(quarter_id: str, request: Request) -> ExportFile:
    return export_service(request).export_quarter(quarter_id)


@router.post("/exports/monthly/{year}/{month}", response_model=ExportFile)
def export_monthly(year: int, month: int, request: Request) -> ExportFile:
    return export_service(request).export_month(year, month)
