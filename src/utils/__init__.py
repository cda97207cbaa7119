# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for EduVerse.

This package contains cross-cutting utilities:
- logging: Structured logging with structlog
- datetime: Timezone-aware datetime operations
"""

from src.utils.datetime import ensure_utc, format_iso, parse_iso, utc_now
from src.utils.logging import (
    attach_sync_status,
    bind_context,
    clear_context,
    detach_sync_status,
    get_logger,
    setup_logging,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "attach_sync_status",
    "detach_sync_status",
    # Datetime
    "utc_now",
    "ensure_utc",
    "format_iso",
    "parse_iso",
]
