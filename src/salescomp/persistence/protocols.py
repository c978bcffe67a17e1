"""Re-export persistence protocols from core for convenience."""

from __future__ import annotations

from salescomp.core.protocols import (
    ICacheBackend,
    IConfigStore,
    IFileStore,
    IRecordStore,
)

__all__ = ["ICacheBackend", "IConfigStore", "IFileStore", "IRecordStore"]
