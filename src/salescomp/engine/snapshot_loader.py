"""Builds the immutable configuration snapshot a run works from."""

from __future__ import annotations

import logging
from typing import Iterable, TypeVar

from pydantic import BaseModel

from salescomp.core.periods import commission_month, quarter_key
from salescomp.core.protocols import IConfigStore, IRecordStore
from salescomp.models.snapshot import MonthlySnapshot, QuarterlySnapshot

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _detached(models: Iterable[M]) -> tuple[M, ...]:
    return tuple(m.model_copy(deep=True) for m in models)


class SnapshotLoader:
    """Reads every configuration document a run needs exactly once.

    Documents are deep-copied so later writes to the store, or to objects a
    store hands out, never reach a snapshot that is already in use.
    """

    def __init__(self, config_store: IConfigStore, record_store: IRecordStore) -> None:
        self._config = config_store
        self._records = record_store

    def load_quarterly(self, quarter_id: str) -> QuarterlySnapshot:
        key = quarter_key(quarter_id)
        snapshot = QuarterlySnapshot(
            config=self._config.get_quarterly_config(key).model_copy(deep=True),
            rules=self._config.get_commission_rules().model_copy(deep=True),
            reps=_detached(self._config.list_reps()),
        )
        logger.info(
            "Loaded quarterly snapshot %s: %d buckets, %d reps",
            key, len(snapshot.config.buckets), len(snapshot.reps),
        )
        return snapshot

    def load_monthly(self, year: int, month: int) -> MonthlySnapshot:
        snapshot = MonthlySnapshot(
            commission_month=commission_month(year, month),
            rate_matrices=_detached(self._config.list_rate_matrices()),
            rules=self._config.get_commission_rules().model_copy(deep=True),
            spiffs=_detached(self._config.list_spiffs()),
            reps=_detached(self._config.list_reps()),
            customers=_detached(self._records.list_customers()),
        )
        logger.info(
            "Loaded monthly snapshot %s: %d rate matrices, %d spiffs, %d customers",
            snapshot.commission_month, len(snapshot.rate_matrices),
            len(snapshot.spiffs), len(snapshot.customers),
        )
        return snapshot
