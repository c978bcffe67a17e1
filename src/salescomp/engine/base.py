"""Base service with common dependency wiring for calculation runs."""

from __future__ import annotations

from typing import Any

from salescomp.core.config import AppSettings
from salescomp.core.protocols import IConfigStore, IFileStore, IRecordStore


class BaseCalculationService:
    """Common base for the SalesComp run services.

    Settings and stores are injected at construction time; a service holds
    no per-run state between invocations.
    """

    def __init__(
        self,
        *,
        settings: AppSettings,
        config_store: IConfigStore,
        record_store: IRecordStore,
        file_store: IFileStore | None = None,
    ) -> None:
        self._settings = settings
        self._config_store = config_store
        self._records = record_store
        self._files = file_store

    async def health_check(self) -> dict[str, Any]:
        """Return service health status."""
        return {
            "service": self.__class__.__name__,
            "status": "healthy",
            "environment": self._settings.environment,
        }
