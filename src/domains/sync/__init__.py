# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Offline-first data synchronization.

Components:
- SyncEngine: cache/remote consistency, subscriber fan-out, resync
- build_sync_runtime: explicit construction from settings
"""

from src.domains.sync.engine import SyncEngine
from src.domains.sync.factory import (
    SyncRuntime,
    build_sync_runtime,
    create_cache,
    create_store,
)

__all__ = [
    "SyncEngine",
    "SyncRuntime",
    "build_sync_runtime",
    "create_cache",
    "create_store",
]
