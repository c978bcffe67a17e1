"""Type aliases used across the SalesComp engine."""

from __future__ import annotations

from typing import Any

JsonDict = dict[str, Any]
QuarterId = str  # "Q4_2025"
CommissionMonth = str  # "YYYY-MM"
RepId = str
SalesPerson = str  # order-system username
