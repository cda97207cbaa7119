# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for ContentService."""

from collections.abc import AsyncGenerator
from typing import Any

import pytest

from src.domains.content.service import (
    ContentService,
    RecordNotFoundError,
    UnknownCollectionError,
)
from src.domains.sync.engine import SyncEngine
from src.infrastructure.store import InMemoryDocumentStore
from src.models.dataset import Dataset


@pytest.fixture
async def service(engine: SyncEngine) -> AsyncGenerator[ContentService, None]:
    """Provide a started content service."""
    service = ContentService(engine)
    service.start()
    yield service
    service.stop()


class TestQueries:
    """Tests for listing and fetching records."""

    @pytest.mark.asyncio
    async def test_list_records(
        self, service: ContentService, sample_dataset: Dataset
    ) -> None:
        """Test listing a collection."""
        await service.replace(sample_dataset)

        assert service.list_records("batches") == sample_dataset.batches
        assert service.list_records("notes") == []

    @pytest.mark.asyncio
    async def test_get_record(
        self, service: ContentService, sample_dataset: Dataset, sample_batch: dict[str, Any]
    ) -> None:
        """Test fetching one record by id."""
        await service.replace(sample_dataset)

        assert service.get_record("batches", sample_batch["id"]) == sample_batch

    @pytest.mark.asyncio
    async def test_get_missing_record_raises(self, service: ContentService) -> None:
        """Test that an unknown id raises RecordNotFoundError."""
        with pytest.raises(RecordNotFoundError):
            service.get_record("batches", "batch_0")

    @pytest.mark.asyncio
    async def test_unknown_collection_raises(self, service: ContentService) -> None:
        """Test that unknown collections are rejected."""
        with pytest.raises(UnknownCollectionError):
            service.list_records("teachers")

    @pytest.mark.asyncio
    async def test_start_receives_snapshot(self, service: ContentService) -> None:
        """Test that the service holds the replayed snapshot after start."""
        assert service.data == Dataset()
        assert service.sync_status.online is True


class TestMutations:
    """Tests for add, update and delete."""

    @pytest.mark.asyncio
    async def test_add_record_generates_prefixed_id(
        self, service: ContentService, store: InMemoryDocumentStore
    ) -> None:
        """Test that new records get a collection-prefixed id."""
        result = await service.add_record("lectures", {"title": "Kinematics"})

        assert result.synced is True
        assert result.record["id"].startswith("lecture_")
        assert result.record["title"] == "Kinematics"
        assert service.list_records("lectures") == [result.record]
        assert store.peek("data")["lectures"] == [result.record]

    @pytest.mark.asyncio
    async def test_add_record_keeps_supplied_id(self, service: ContentService) -> None:
        """Test that a caller-supplied id is kept."""
        result = await service.add_record("students", {"id": "student_42", "name": "Asha"})

        assert result.record["id"] == "student_42"

    @pytest.mark.asyncio
    async def test_generated_ids_are_unique(self, service: ContentService) -> None:
        """Test that quick successive adds do not collide."""
        first = await service.add_record("notes", {"title": "A"})
        second = await service.add_record("notes", {"title": "B"})

        assert first.record["id"] != second.record["id"]
        assert len(service.list_records("notes")) == 2

    @pytest.mark.asyncio
    async def test_add_keeps_other_collections(
        self, service: ContentService, sample_dataset: Dataset
    ) -> None:
        """Test that a mutation writes the complete dataset."""
        await service.replace(sample_dataset)

        await service.add_record("dpps", {"title": "DPP 1"})

        assert service.data.batches == sample_dataset.batches
        assert service.data.subjects == sample_dataset.subjects
        assert len(service.data.dpps) == 1

    @pytest.mark.asyncio
    async def test_update_record_merges_fields(
        self, service: ContentService, sample_dataset: Dataset, sample_batch: dict[str, Any]
    ) -> None:
        """Test that updates are shallow-merged."""
        await service.replace(sample_dataset)

        result = await service.update_record("batches", sample_batch["id"], {"name": "NEET 2025"})

        assert result.record["name"] == "NEET 2025"
        assert result.record["year"] == sample_batch["year"]
        assert service.get_record("batches", sample_batch["id"])["name"] == "NEET 2025"

    @pytest.mark.asyncio
    async def test_update_missing_record_raises(self, service: ContentService) -> None:
        """Test that updating an unknown id raises."""
        with pytest.raises(RecordNotFoundError):
            await service.update_record("batches", "batch_0", {"name": "X"})

    @pytest.mark.asyncio
    async def test_delete_record(
        self, service: ContentService, sample_dataset: Dataset, sample_batch: dict[str, Any]
    ) -> None:
        """Test that deleting removes only the addressed record."""
        await service.replace(sample_dataset)

        result = await service.delete_record("batches", sample_batch["id"])

        assert result.record == sample_batch
        assert service.list_records("batches") == []
        assert service.list_records("subjects") == sample_dataset.subjects

    @pytest.mark.asyncio
    async def test_offline_mutation_is_cached_only(
        self, service: ContentService, connectivity, store: InMemoryDocumentStore
    ) -> None:
        """Test that offline edits apply locally and stay off the store."""
        await connectivity.set_online(False)

        result = await service.add_record("batches", {"name": "Offline batch"})

        assert result.synced is True
        assert service.list_records("batches") == [result.record]
        assert service.sync_status.online is False
        assert store.peek("data") is None

    @pytest.mark.asyncio
    async def test_remote_failure_reports_unsynced(
        self, service: ContentService, store: InMemoryDocumentStore
    ) -> None:
        """Test that a failed remote write is reported but kept locally."""
        store.set_available(False)

        result = await service.add_record("subjects", {"name": "Chemistry"})

        assert result.synced is False
        assert service.list_records("subjects") == [result.record]

    @pytest.mark.asyncio
    async def test_stop_unsubscribes(self, engine: SyncEngine) -> None:
        """Test that stop releases the engine subscription."""
        service = ContentService(engine)
        service.start()
        service.start()
        assert engine.subscriber_count == 1

        service.stop()

        assert engine.subscriber_count == 0
