# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Sync API endpoints.

This module provides endpoints over the sync engine:
- GET /status - Connectivity and last sync time
- GET /data - Current cached dataset
- PUT /data - Replace the whole dataset
- POST /resync - Push the cached dataset to the remote store
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from src.api.dependencies import get_content_service, get_sync_engine
from src.domains.content.service import ContentService
from src.domains.sync.engine import SyncEngine
from src.models.api import SyncStatusResponse, SyncWriteResponse
from src.models.dataset import Dataset

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/status",
    response_model=SyncStatusResponse,
    summary="Get sync status",
)
async def get_sync_status(
    engine: SyncEngine = Depends(get_sync_engine),
) -> SyncStatusResponse:
    """Return connectivity and the last successful sync time."""
    return SyncStatusResponse.from_status(engine.status)


@router.get(
    "/data",
    response_model=Dataset,
    summary="Get dataset",
    description="Return the cached dataset with every collection present.",
)
async def get_dataset(
    engine: SyncEngine = Depends(get_sync_engine),
) -> Dataset:
    """Return the cached dataset."""
    return engine.read()


@router.put(
    "/data",
    response_model=SyncWriteResponse,
    summary="Replace dataset",
    description=(
        "Replace the whole dataset. The change is always cached; success is "
        "false when it could not be forwarded to the remote store."
    ),
)
async def replace_dataset(
    payload: dict[str, Any] = Body(...),
    engine: SyncEngine = Depends(get_sync_engine),
    service: ContentService = Depends(get_content_service),
) -> SyncWriteResponse:
    """Replace the whole dataset.

    Args:
        payload: New dataset; missing collections are stored as empty.
        engine: Sync engine.
        service: Content service.

    Returns:
        Write outcome and the resulting status.
    """
    success = await service.replace(payload)
    if not success:
        logger.warning("Dataset replacement not confirmed by remote store")
    return SyncWriteResponse(
        success=success,
        status=SyncStatusResponse.from_status(engine.status),
    )


@router.post(
    "/resync",
    response_model=SyncWriteResponse,
    summary="Resynchronize",
    description="Push the cached dataset to the remote store. Requires connectivity.",
)
async def resync(
    engine: SyncEngine = Depends(get_sync_engine),
) -> SyncWriteResponse:
    """Push the cached dataset to the remote store.

    Raises:
        HTTPException: 409 while offline.
    """
    if not engine.online:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Cannot resync while offline",
        )

    success = await engine.resync()
    return SyncWriteResponse(
        success=success,
        status=SyncStatusResponse.from_status(engine.status),
    )
