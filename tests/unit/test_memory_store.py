# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the in-memory document store."""

import asyncio
from typing import Any

import pytest

from src.infrastructure.store import InMemoryDocumentStore, StoreAdapter, StoreError


class TestInMemoryDocumentStore:
    """Tests for InMemoryDocumentStore."""

    @pytest.mark.asyncio
    async def test_put_and_get(self, store: InMemoryDocumentStore) -> None:
        """Test storing and reading a document."""
        await store.put_document("data", {"batches": [{"id": "b1"}]})

        assert await store.get_document("data") == {"batches": [{"id": "b1"}]}

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store: InMemoryDocumentStore) -> None:
        """Test that an absent document reads as None."""
        assert await store.get_document("data") is None

    @pytest.mark.asyncio
    async def test_documents_are_copied(self, store: InMemoryDocumentStore) -> None:
        """Test that callers never share state with the store."""
        value: dict[str, Any] = {"batches": [{"id": "b1"}]}
        await store.put_document("data", value)

        value["batches"].append({"id": "b2"})
        fetched = await store.get_document("data")
        fetched["batches"].clear()

        assert store.peek("data") == {"batches": [{"id": "b1"}]}

    @pytest.mark.asyncio
    async def test_watch_receives_changes(self, store: InMemoryDocumentStore) -> None:
        """Test that watches see every replacement."""
        received: list[Any] = []
        store.watch_document("data", received.append)

        await store.put_document("data", {"v": 1})
        await store.put_document("data", {"v": 2})

        assert received == [{"v": 1}, {"v": 2}]

    @pytest.mark.asyncio
    async def test_watch_replays_existing_document(
        self, store: InMemoryDocumentStore
    ) -> None:
        """Test that a new watch receives the current document on the next loop tick."""
        await store.put_document("data", {"v": 1})
        received: list[Any] = []

        store.watch_document("data", received.append)
        assert received == []

        await asyncio.sleep(0)

        assert received == [{"v": 1}]

    @pytest.mark.asyncio
    async def test_watch_is_scoped_to_path(self, store: InMemoryDocumentStore) -> None:
        """Test that watches ignore other paths."""
        received: list[Any] = []
        store.watch_document("data", received.append)

        await store.put_document("other", {"v": 1})

        assert received == []

    @pytest.mark.asyncio
    async def test_stop_watching_single_handle(self, store: InMemoryDocumentStore) -> None:
        """Test that stopping one watch leaves the others."""
        first: list[Any] = []
        second: list[Any] = []
        handle = store.watch_document("data", first.append)
        store.watch_document("data", second.append)

        store.stop_watching("data", handle)
        await store.put_document("data", {"v": 1})

        assert handle.active is False
        assert first == []
        assert second == [{"v": 1}]
        assert store.watch_count("data") == 1

    @pytest.mark.asyncio
    async def test_stop_watching_all(self, store: InMemoryDocumentStore) -> None:
        """Test that stopping without a handle removes every watch."""
        store.watch_document("data", lambda payload: None)
        store.watch_document("data", lambda payload: None)

        store.stop_watching("data")

        assert store.watch_count("data") == 0

    @pytest.mark.asyncio
    async def test_unavailable_store_raises(self, store: InMemoryDocumentStore) -> None:
        """Test that an unavailable store rejects reads and writes."""
        store.set_available(False)

        with pytest.raises(StoreError):
            await store.put_document("data", {})
        with pytest.raises(StoreError):
            await store.get_document("data")
        assert await store.ping() is False

        store.set_available(True)
        assert await store.ping() is True

    @pytest.mark.asyncio
    async def test_failing_watch_does_not_block_others(
        self, store: InMemoryDocumentStore
    ) -> None:
        """Test that callback errors are isolated."""

        def broken(payload: Any) -> None:
            raise RuntimeError("boom")

        received: list[Any] = []
        store.watch_document("data", broken)
        store.watch_document("data", received.append)

        await store.put_document("data", {"v": 1})

        assert received == [{"v": 1}]

    @pytest.mark.asyncio
    async def test_clear_and_stats(self, store: InMemoryDocumentStore) -> None:
        """Test statistics and reset."""
        handle = store.watch_document("data", lambda payload: None)
        await store.put_document("data", {"v": 1})

        stats = store.get_stats()
        assert stats["documents"] == 1
        assert stats["total_watches"] == 1
        assert stats["writes"] == 1
        assert stats["available"] is True

        store.clear()

        assert store.peek("data") is None
        assert handle.active is False
        assert store.get_stats()["documents"] == 0

    def test_satisfies_protocol(self, store: InMemoryDocumentStore) -> None:
        """Test that the store is a StoreAdapter."""
        assert isinstance(store, StoreAdapter)

    @pytest.mark.asyncio
    async def test_replay_skipped_for_stopped_watch(
        self, store: InMemoryDocumentStore
    ) -> None:
        """Test that a watch stopped before the replay receives nothing."""
        await store.put_document("data", {"v": 1})
        received: list[Any] = []
        handle = store.watch_document("data", received.append)

        store.stop_watching("data", handle)
        await asyncio.sleep(0)

        assert received == []

    def test_watch_requires_running_loop(self, store: InMemoryDocumentStore) -> None:
        """Test that watches need an event loop to deliver on."""
        with pytest.raises(StoreError):
            store.watch_document("data", lambda payload: None)

    @pytest.mark.asyncio
    async def test_drop_watches_marks_them_lost(
        self, store: InMemoryDocumentStore
    ) -> None:
        """Test that dropped watches are lost and stop receiving changes."""
        received: list[Any] = []
        lost: list[str] = []
        handle = store.watch_document("data", received.append)
        handle.on_lost(lambda h: lost.append(h.watch_id))

        assert store.drop_watches("data") == 1
        await store.put_document("data", {"v": 1})

        assert handle.lost is True
        assert handle.active is False
        assert lost == [handle.watch_id]
        assert received == []
        assert store.watch_count("data") == 0

    @pytest.mark.asyncio
    async def test_stopped_watch_is_not_lost(self, store: InMemoryDocumentStore) -> None:
        """Test that stopping a watch does not fire loss callbacks."""
        lost: list[str] = []
        handle = store.watch_document("data", lambda payload: None)
        handle.on_lost(lambda h: lost.append(h.watch_id))

        store.stop_watching("data", handle)
        handle.mark_lost()

        assert handle.lost is False
        assert lost == []
