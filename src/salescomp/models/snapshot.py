"""Immutable configuration snapshots, loaded once at the start of a run."""

from __future__ import annotations

from pydantic import BaseModel

from salescomp.models.config import (
    CommissionRules,
    MonthlyRateMatrix,
    QuarterlyConfig,
    Spiff,
)
from salescomp.models.records import Customer, SalesRep, index_reps_by_sales_person


class QuarterlySnapshot(BaseModel):
    """Read-only inputs for one quarterly bonus run."""

    model_config = {"frozen": True}

    config: QuarterlyConfig
    rules: CommissionRules = CommissionRules()
    reps: tuple[SalesRep, ...] = ()


class MonthlySnapshot(BaseModel):
    """Read-only inputs for one monthly commission run."""

    model_config = {"frozen": True}

    commission_month: str
    rate_matrices: tuple[MonthlyRateMatrix, ...] = ()
    rules: CommissionRules = CommissionRules()
    spiffs: tuple[Spiff, ...] = ()
    reps: tuple[SalesRep, ...] = ()
    customers: tuple[Customer, ...] = ()

    def matrix_for(self, title: str) -> MonthlyRateMatrix:
        for matrix in self.rate_matrices:
            if matrix.title == title:
                return matrix
        return MonthlyRateMatrix(title=title)

    def rep_by_sales_person(self) -> dict[str, SalesRep]:
        return index_reps_by_sales_person(self.reps)

    def customer_index(self) -> dict[str, Customer]:
        return {c.customer_id: c for c in self.customers}
