# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

The sync runtime and the content service are created by the application
lifespan and stored on app.state; endpoints receive them through these
dependencies instead of importing module-level instances.

Example:
    @router.get("/status")
    async def get_status(engine: SyncEngine = Depends(get_sync_engine)):
        ...
"""

from fastapi import HTTPException, Request, status

from src.core.config.settings import Settings
from src.domains.content.service import ContentService
from src.domains.sync.engine import SyncEngine
from src.domains.sync.factory import SyncRuntime


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


def get_sync_runtime(request: Request) -> SyncRuntime:
    """Get the running sync runtime.

    Raises:
        HTTPException: 503 if the runtime has not been started.
    """
    runtime: SyncRuntime | None = getattr(request.app.state, "sync_runtime", None)
    if runtime is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Sync runtime not initialized",
        )
    return runtime


def get_sync_engine(request: Request) -> SyncEngine:
    """Get the sync engine."""
    return get_sync_runtime(request).engine


def get_content_service(request: Request) -> ContentService:
    """Get the content service.

    Raises:
        HTTPException: 503 if the service has not been started.
    """
    service: ContentService | None = getattr(request.app.state, "content_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Content service not initialized",
        )
    return service
