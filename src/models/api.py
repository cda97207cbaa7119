# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request and response models for the HTTP API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.models.dataset import SyncStatus


class SyncStatusResponse(BaseModel):
    """Connectivity and last sync time."""

    online: bool = Field(description="Whether the remote store is reachable")
    last_synced: datetime | None = Field(None, description="Last successful sync")

    @classmethod
    def from_status(cls, status: SyncStatus) -> "SyncStatusResponse":
        return cls(online=status.online, last_synced=status.last_synced)


class SyncWriteResponse(BaseModel):
    """Result of a dataset write or resync."""

    success: bool = Field(description="False when the change is only cached locally")
    status: SyncStatusResponse


class RecordListResponse(BaseModel):
    """Records of one collection."""

    collection: str
    items: list[dict[str, Any]]
    total: int


class RecordMutationResponse(BaseModel):
    """A created, updated or deleted record."""

    collection: str
    record: dict[str, Any]
    synced: bool = Field(description="False when the change is only cached locally")
