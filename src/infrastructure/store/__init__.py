# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Remote document store adapters.

Components:
- StoreAdapter: contract the sync engine depends on
- RedisDocumentStore: Redis SET/PUBLISH plus pub/sub watches
- InMemoryDocumentStore: process-local store for development and tests

Example:
    from src.infrastructure.store import RedisDocumentStore

    store = RedisDocumentStore(settings)
    await store.connect()
    handle = store.watch_document("data", on_change)
"""

from src.infrastructure.store.base import (
    ChangeCallback,
    StoreAdapter,
    StoreError,
    WatchHandle,
)
from src.infrastructure.store.memory import InMemoryDocumentStore
from src.infrastructure.store.redis_store import RedisDocumentStore

__all__ = [
    "ChangeCallback",
    "InMemoryDocumentStore",
    "RedisDocumentStore",
    "StoreAdapter",
    "StoreError",
    "WatchHandle",
]
