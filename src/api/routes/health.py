# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints.

This module provides health and readiness endpoints for the API.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src import __version__
from src.api.dependencies import get_app_settings, get_sync_runtime
from src.core.config.settings import Settings
from src.domains.sync.factory import SyncRuntime
from src.models.api import SyncStatusResponse

logger = logging.getLogger(__name__)

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


class ComponentHealth(BaseModel):
    """Individual component health status."""
    status: str = Field(description="Component status")
    latency_ms: float | None = Field(None, description="Response latency in ms")
    message: str | None = Field(None, description="Additional status message")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(description="Overall health status")
    timestamp: datetime = Field(description="Current server timestamp")
    version: str = Field(description="API version")
    environment: str = Field(description="Deployment environment")
    uptime_seconds: int = Field(description="Server uptime in seconds")
    store: ComponentHealth = Field(description="Remote document store health")
    sync: SyncStatusResponse = Field(description="Sync engine status")


class ReadinessResponse(BaseModel):
    """Readiness check response model."""
    ready: bool = Field(description="Whether the service is ready")
    checks: dict[str, Any] = Field(description="Individual check results")


async def check_store(runtime: SyncRuntime) -> ComponentHealth:
    """Ping the remote document store."""
    start = time.time()
    try:
        reachable = await runtime.store.ping()
    except Exception as e:
        logger.error("Store health check failed: %s", e)
        return ComponentHealth(status="unhealthy", message=str(e))

    latency = (time.time() - start) * 1000
    if not reachable:
        return ComponentHealth(
            status="unhealthy",
            latency_ms=round(latency, 2),
            message="Store unreachable",
        )
    return ComponentHealth(status="healthy", latency_ms=round(latency, 2))


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_app_settings),
    runtime: SyncRuntime = Depends(get_sync_runtime),
) -> HealthResponse:
    """Check if the API is healthy.

    An unreachable store degrades the service rather than failing it:
    edits are still accepted into the local cache.

    Returns:
        HealthResponse with store and sync status.
    """
    store_health = await check_store(runtime)

    return HealthResponse(
        status="healthy" if store_health.status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        environment=settings.environment,
        uptime_seconds=int(time.time() - _server_start_time),
        store=store_health,
        sync=SyncStatusResponse.from_status(runtime.engine.status),
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    runtime: SyncRuntime = Depends(get_sync_runtime),
) -> ReadinessResponse:
    """Check if the API is ready to accept traffic.

    Returns:
        ReadinessResponse with individual check results.
    """
    store_health = await check_store(runtime)
    checks: dict[str, Any] = {
        "store": {"status": store_health.status, "latency_ms": store_health.latency_ms},
        "sync": {"online": runtime.engine.online, "subscribers": runtime.engine.subscriber_count},
    }
    # The cache alone is enough to serve reads and accept edits
    return ReadinessResponse(ready=True, checks=checks)
