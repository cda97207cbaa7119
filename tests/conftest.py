# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from collections.abc import Generator
from typing import Any

import pytest

from src.core.config.settings import SyncSettings
from src.domains.sync.engine import SyncEngine
from src.infrastructure.cache import MemoryCache
from src.infrastructure.connectivity import ConnectivityMonitor
from src.infrastructure.store import InMemoryDocumentStore
from src.models.dataset import Dataset, SyncStatus


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )


# =============================================================================
# Sync Fixtures
# =============================================================================


@pytest.fixture
def sync_settings() -> SyncSettings:
    """Provide sync settings with the default keys and document path."""
    return SyncSettings(
        store_backend="memory",
        document_path="data",
        storage_key="eduverse_data",
        last_sync_key="eduverse_last_sync",
    )


@pytest.fixture
def cache() -> MemoryCache:
    """Provide an empty in-memory durable cache."""
    return MemoryCache()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Provide an empty in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def connectivity() -> ConnectivityMonitor:
    """Provide a manually driven connectivity signal, initially online."""
    return ConnectivityMonitor(online=True)


@pytest.fixture
def engine(
    store: InMemoryDocumentStore,
    cache: MemoryCache,
    connectivity: ConnectivityMonitor,
    sync_settings: SyncSettings,
) -> Generator[SyncEngine, None, None]:
    """Provide a started sync engine over in-memory collaborators."""
    engine = SyncEngine(store, cache, connectivity, sync_settings)
    engine.start()
    yield engine
    engine.dispose()


class Recorder:
    """Subscriber that records every notification it receives."""

    def __init__(self) -> None:
        self.calls: list[tuple[Dataset, SyncStatus]] = []

    def __call__(self, dataset: Dataset, status: SyncStatus) -> None:
        self.calls.append((dataset, status))

    @property
    def count(self) -> int:
        return len(self.calls)

    @property
    def last_dataset(self) -> Dataset:
        return self.calls[-1][0]

    @property
    def last_status(self) -> SyncStatus:
        return self.calls[-1][1]


@pytest.fixture
def recorder() -> Recorder:
    """Provide a recording subscriber."""
    return Recorder()


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def sample_batch() -> dict[str, Any]:
    """Provide a sample batch record."""
    return {
        "id": "batch_1700000000000",
        "name": "JEE 2025",
        "description": "Two-year JEE preparation batch",
        "year": "2025",
        "studentCount": "40",
        "price": "4999",
        "color": "#3b82f6",
    }


@pytest.fixture
def sample_dataset(sample_batch: dict[str, Any]) -> Dataset:
    """Provide a dataset with one batch and one subject."""
    return Dataset(
        batches=[sample_batch],
        subjects=[
            {"id": "subject_1700000000001", "batchId": sample_batch["id"], "name": "Physics"},
        ],
    )
