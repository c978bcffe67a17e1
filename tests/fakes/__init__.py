"""Shared test doubles: re-exported memory backends."""

from __future__ import annotations

from salescomp.persistence.memory_backend import (
    MemoryCacheBackend,
    MemoryConfigStore,
    MemoryFileStore,
    MemoryRecordStore,
)

__all__ = ["MemoryCacheBackend", "MemoryConfigStore", "MemoryFileStore", "MemoryRecordStore"]
