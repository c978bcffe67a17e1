"""SalesComp exception hierarchy."""

from __future__ import annotations

from decimal import Decimal


class SalesCompError(Exception):
    """Base exception for all SalesComp errors."""


class ConfigurationError(SalesCompError):
    """Configuration is inconsistent; the affected calculation must not run."""


class InvalidWeightsError(ConfigurationError):
    """A set of weights does not sum to 100%."""

    def __init__(self, label: str, total: Decimal) -> None:
        self.label = label
        self.total = total
        super().__init__(f"{label} must sum to 100% (got {total * 100:.2f}%)")


class RoleScaleNotFoundError(ConfigurationError):
    """No role scale configured for a rep title."""

    def __init__(self, title: str) -> None:
        self.title = title
        super().__init__(f"No role scale configured for title {title!r}")


class BudgetNotFoundError(ConfigurationError):
    """No budget configured for a rep title."""

    def __init__(self, title: str) -> None:
        self.title = title
        super().__init__(f"No budget configured for title {title!r}")


class ConfigNotFoundError(SalesCompError):
    """No configuration document found in the store."""


class RateNotFoundError(SalesCompError):
    """No commission rate (configured or default) for a segment/status pair."""

    def __init__(self, title: str, segment_id: str, status: str) -> None:
        self.title = title
        self.segment_id = segment_id
        self.status = status
        super().__init__(
            f"No rate for title={title!r}, segment={segment_id!r}, status={status!r}"
        )


class PeriodError(SalesCompError):
    """Malformed quarter or month identifier."""


class StoreError(SalesCompError):
    """Config/record store operation failed."""


class CacheError(SalesCompError):
    """Redis cache operation failed."""
