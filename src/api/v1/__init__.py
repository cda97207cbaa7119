# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    sync: Sync status, dataset read/replace and resync endpoints.
    content: Record endpoints for the portal collections.
"""

from fastapi import APIRouter

from src.api.v1 import content, sync

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

router.include_router(sync.router, prefix="/sync", tags=["Sync"])
router.include_router(content.router, prefix="/content", tags=["Content"])

__all__ = ["router"]
