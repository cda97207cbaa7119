# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Data models shared by the sync engine, services and API."""

from src.models.dataset import (
    COLLECTIONS,
    Dataset,
    Record,
    Subscriber,
    SyncStatus,
    normalize_dataset,
)

__all__ = [
    "COLLECTIONS",
    "Dataset",
    "Record",
    "Subscriber",
    "SyncStatus",
    "normalize_dataset",
]
