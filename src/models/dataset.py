# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Dataset and sync status models.

The Dataset is the full snapshot of portal content: six named collections
of loosely-typed records. Records are passed through untouched; only the
collection structure is enforced.

Example:
    >>> dataset = normalize_dataset({"batches": [{"id": "b1", "name": "X"}]})
    >>> dataset.subjects
    []
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field

from src.utils.datetime import format_iso

logger = logging.getLogger(__name__)

# A single content record (batch, subject, lecture, ...)
Record = dict[str, Any]

COLLECTIONS: tuple[str, ...] = (
    "batches",
    "subjects",
    "lectures",
    "notes",
    "dpps",
    "students",
)


class Dataset(BaseModel):
    """Full content snapshot with every known collection present.

    Unknown top-level keys are kept as extras so that payloads written by
    newer clients survive a round trip through this process.

    Attributes:
        batches: Student batches.
        subjects: Subjects taught within batches.
        lectures: Recorded lectures.
        notes: Lecture notes.
        dpps: Daily practice problem sets.
        students: Enrolled students.
    """

    model_config = ConfigDict(extra="allow")

    batches: list[Record] = Field(default_factory=list)
    subjects: list[Record] = Field(default_factory=list)
    lectures: list[Record] = Field(default_factory=list)
    notes: list[Record] = Field(default_factory=list)
    dpps: list[Record] = Field(default_factory=list)
    students: list[Record] = Field(default_factory=list)

    def collection(self, name: str) -> list[Record]:
        """Return the records of a named collection.

        Raises:
            KeyError: If name is not a known collection.
        """
        if name not in COLLECTIONS:
            raise KeyError(name)
        return getattr(self, name)

    def with_collection(self, name: str, records: list[Record]) -> "Dataset":
        """Return a copy with one collection replaced."""
        if name not in COLLECTIONS:
            raise KeyError(name)
        return self.model_copy(update={name: records})

    def to_document(self) -> dict[str, Any]:
        """Render as a JSON-compatible document for stores and caches."""
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        """Serialize to the string form kept in the durable cache."""
        return self.model_dump_json()


def _normalize_collection(name: str, value: Any) -> list[Record]:
    if value is None:
        return []
    if isinstance(value, Mapping):
        # Sparse arrays come back from document stores keyed by index
        value = list(value.values())
    if not isinstance(value, list):
        logger.warning("Discarding malformed collection %s (%s)", name, type(value).__name__)
        return []

    records = [record for record in value if isinstance(record, Mapping)]
    if len(records) != len(value):
        logger.warning(
            "Dropped %d malformed records from collection %s",
            len(value) - len(records),
            name,
        )
    return [dict(record) for record in records]


def normalize_dataset(raw: Any) -> Dataset:
    """Build a Dataset from an arbitrary payload.

    Missing or null collections default to empty lists, non-list
    collections are replaced by empty lists and non-mapping records are
    dropped. Payloads that are not mappings at all yield an empty Dataset.
    Normalizing an already normalized Dataset returns an equal Dataset.

    Args:
        raw: Dataset, mapping, or anything read back from a store or cache.

    Returns:
        A Dataset with every collection present.
    """
    if isinstance(raw, Dataset):
        raw = raw.model_dump()
    if not isinstance(raw, Mapping):
        if raw is not None:
            logger.warning("Discarding malformed dataset payload (%s)", type(raw).__name__)
        return Dataset()

    data = dict(raw)
    for name in COLLECTIONS:
        data[name] = _normalize_collection(name, raw.get(name))
    return Dataset.model_validate(data)


@dataclass
class SyncStatus:
    """Connectivity flag plus last successful sync time.

    A single instance is owned by the sync engine, updated field by field,
    and handed to every subscriber.

    Attributes:
        online: Whether the remote store is considered reachable.
        last_synced: When local and remote state last matched.
    """

    online: bool
    last_synced: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "online": self.online,
            "last_synced": format_iso(self.last_synced),
        }


# Receives every dataset change together with the shared status
Subscriber = Callable[[Dataset, SyncStatus], None]
