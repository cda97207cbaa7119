# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for EduVerse.

Example:
    >>> from src.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.sync.store_backend)
    'redis'
"""

from src.core.config.settings import (
    APISettings,
    CacheSettings,
    CORSSettings,
    RedisSettings,
    Settings,
    SyncSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "APISettings",
    "CacheSettings",
    "CORSSettings",
    "RedisSettings",
    "Settings",
    "SyncSettings",
    "clear_settings_cache",
    "get_settings",
]
