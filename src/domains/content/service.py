# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content service for managing portal collections.

This module provides the ContentService class for:
- Keeping the latest dataset snapshot and sync status
- Record add/update/delete per collection (batches, subjects, lectures,
  notes, DPPs, students)
- Wholesale dataset replacement

Every mutation builds a complete new dataset from the latest snapshot and
hands it to the sync engine, so the remote document is always replaced as
a whole.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

from src.domains.sync.engine import SyncEngine
from src.models.dataset import COLLECTIONS, Dataset, Record, SyncStatus

logger = logging.getLogger(__name__)

ID_PREFIXES: dict[str, str] = {
    "batches": "batch",
    "subjects": "subject",
    "lectures": "lecture",
    "notes": "note",
    "dpps": "dpp",
    "students": "student",
}


class ContentServiceError(Exception):
    """Base exception for content service errors."""

    pass


class UnknownCollectionError(ContentServiceError):
    """Raised when a collection name is not one of the known collections."""

    pass


class RecordNotFoundError(ContentServiceError):
    """Raised when a record id does not exist in its collection."""

    pass


@dataclass
class MutationResult:
    """Outcome of a record mutation.

    Attributes:
        record: The record as stored (the removed one for deletes).
        synced: False when the change is only cached locally.
    """

    record: Record
    synced: bool


class ContentService:
    """Service for reading and editing portal content.

    Mutations are built from the latest snapshot, so two mutations awaited
    concurrently overwrite each other (last write wins); await them in turn.

    Attributes:
        engine: Sync engine the service reads from and writes through.
    """

    def __init__(self, engine: SyncEngine) -> None:
        """Initialize content service.

        Args:
            engine: Started sync engine.
        """
        self.engine = engine
        self._data = Dataset()
        self._status = engine.status
        self._unsubscribe: Callable[[], None] | None = None

    def start(self) -> None:
        """Subscribe to the engine. The current snapshot arrives immediately."""
        if self._unsubscribe is None:
            self._unsubscribe = self.engine.subscribe(self._on_change)

    def stop(self) -> None:
        """Unsubscribe from the engine."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_change(self, dataset: Dataset, status: SyncStatus) -> None:
        self._data = dataset
        self._status = status

    @property
    def data(self) -> Dataset:
        return self._data

    @property
    def sync_status(self) -> SyncStatus:
        return self._status

    # ========== Queries ==========

    def _records(self, collection: str) -> list[Record]:
        if collection not in COLLECTIONS:
            raise UnknownCollectionError(f"Unknown collection: {collection}")
        return self._data.collection(collection)

    def list_records(self, collection: str) -> list[Record]:
        """List the records of a collection.

        Raises:
            UnknownCollectionError: If collection is not known.
        """
        return list(self._records(collection))

    def get_record(self, collection: str, record_id: str) -> Record:
        """Get a single record by id.

        Raises:
            UnknownCollectionError: If collection is not known.
            RecordNotFoundError: If no record has this id.
        """
        for record in self._records(collection):
            if record.get("id") == record_id:
                return record
        raise RecordNotFoundError(f"{collection} record not found: {record_id}")

    # ========== Mutations ==========

    def _new_id(self, collection: str) -> str:
        existing = {str(r.get("id")) for r in self._records(collection)}
        millis = int(time.time() * 1000)
        record_id = f"{ID_PREFIXES[collection]}_{millis}"
        while record_id in existing:
            millis += 1
            record_id = f"{ID_PREFIXES[collection]}_{millis}"
        return record_id

    async def add_record(self, collection: str, record: Mapping[str, Any]) -> MutationResult:
        """Append a record with a generated id.

        Fields supplied by the caller, including "id", take precedence
        over the generated ones.

        Args:
            collection: Target collection.
            record: Record fields.

        Returns:
            The stored record and the sync flag.

        Raises:
            UnknownCollectionError: If collection is not known.
        """
        new_record: Record = {"id": self._new_id(collection), **record}
        records = [*self._records(collection), new_record]

        synced = await self.engine.write(self._data.with_collection(collection, records))
        logger.info("Added %s record %s (synced=%s)", collection, new_record["id"], synced)
        return MutationResult(record=new_record, synced=synced)

    async def update_record(
        self,
        collection: str,
        record_id: str,
        updates: Mapping[str, Any],
    ) -> MutationResult:
        """Shallow-merge updates into an existing record.

        Raises:
            UnknownCollectionError: If collection is not known.
            RecordNotFoundError: If no record has this id.
        """
        current = self.get_record(collection, record_id)
        updated: Record = {**current, **updates}
        records = [
            updated if r.get("id") == record_id else r for r in self._records(collection)
        ]

        synced = await self.engine.write(self._data.with_collection(collection, records))
        logger.info("Updated %s record %s (synced=%s)", collection, record_id, synced)
        return MutationResult(record=updated, synced=synced)

    async def delete_record(self, collection: str, record_id: str) -> MutationResult:
        """Remove a record.

        Raises:
            UnknownCollectionError: If collection is not known.
            RecordNotFoundError: If no record has this id.
        """
        removed = self.get_record(collection, record_id)
        records = [r for r in self._records(collection) if r.get("id") != record_id]

        synced = await self.engine.write(self._data.with_collection(collection, records))
        logger.info("Deleted %s record %s (synced=%s)", collection, record_id, synced)
        return MutationResult(record=removed, synced=synced)

    async def replace(self, dataset: Dataset | Mapping[str, Any]) -> bool:
        """Replace the whole dataset."""
        return await self.engine.write(dataset)
