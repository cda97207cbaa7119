# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Durable local cache.

The cache is the offline source of truth: every dataset edit lands here
before it is forwarded to the remote store.

Example:
    from src.infrastructure.cache import FileCache

    cache = FileCache(settings.cache.directory)
    cache.set(settings.sync.storage_key, dataset.to_json())
"""

from src.infrastructure.cache.base import CacheError, DurableCache
from src.infrastructure.cache.file_cache import FileCache
from src.infrastructure.cache.memory import MemoryCache

__all__ = [
    "CacheError",
    "DurableCache",
    "FileCache",
    "MemoryCache",
]
