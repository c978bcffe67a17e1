"""Health check endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from salescomp.api.routes.calculations import monthly_service, quarterly_service

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(request: Request) -> dict[str, Any]:
    services = [
        await quarterly_service(request).health_check(),
        await monthly_service(request).health_check(),
    ]
    return {"status": "ready", "services": services}
