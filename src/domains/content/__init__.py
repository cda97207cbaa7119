# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content domain: record-level editing of portal collections."""

from src.domains.content.service import (
    ID_PREFIXES,
    ContentService,
    ContentServiceError,
    MutationResult,
    RecordNotFoundError,
    UnknownCollectionError,
)

__all__ = [
    "ID_PREFIXES",
    "ContentService",
    "ContentServiceError",
    "MutationResult",
    "RecordNotFoundError",
    "UnknownCollectionError",
]
