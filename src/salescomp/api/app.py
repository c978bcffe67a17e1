"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from salescomp import __version__
from salescomp.api.routes import calculations, health
from salescomp.core.config import AppSettings
from salescomp.core.exceptions import (
    ConfigNotFoundError,
    ConfigurationError,
    PeriodError,
    SalesCompError,
    StoreError,
)
from salescomp.core.logging import configure_logging
from salescomp.core.protocols import IConfigStore, IFileStore, IRecordStore
from salescomp.persistence import create_persistence

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[SalesCompError], int]] = [
    (ConfigNotFoundError, 404),
    (ConfigurationError, 422),
    (PeriodError, 422),
    (StoreError, 502),
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize and tear down application resources."""
    settings: AppSettings = app.state.settings
    configure_logging(settings)
    if app.state.config_store is None or app.state.record_store is None:
        config_store, record_store, file_store = create_persistence(settings)
        app.state.config_store = app.state.config_store or config_store
        app.state.record_store = app.state.record_store or record_store
        app.state.file_store = app.state.file_store or file_store
    logger.info("SalesComp API started (environment=%s)", settings.environment)
    yield


async def _salescomp_error(request: Request, exc: Exception) -> JSONResponse:
    status = 500
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status = code
            break
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status,
        content={"error": exc.__class__.__name__, "detail": str(exc)},
    )


def create_app(
    settings: AppSettings | None = None,
    config_store: IConfigStore | None = None,
    record_store: IRecordStore | None = None,
    file_store: IFileStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Stores passed in explicitly are used as-is; anything left ``None`` is
    built from settings when the application starts.
    """
    app = FastAPI(
        title="SalesComp Commission Engine",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings or AppSettings()
    app.state.config_store = config_store
    app.state.record_store = record_store
    app.state.file_store = file_store

    app.add_exception_handler(SalesCompError, _salescomp_error)
    app.include_router(health.router)
    app.include_router(calculations.router)
    return app
