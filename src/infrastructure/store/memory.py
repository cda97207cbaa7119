# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-memory document store for EduVerse.

A process-local stand-in for the remote store. Several sync engines can
share one instance to behave like independent clients of the same
backend: a write by one engine is pushed to the watches of all of them.

Documents are stored as JSON round-tripped copies so that callers never
share mutable state with the store, mirroring a real network hop.

Example:
    store = InMemoryDocumentStore()

    def on_change(payload):
        print(f"Document changed: {payload}")

    handle = store.watch_document("data", on_change)
    await store.put_document("data", {"batches": []})
    store.stop_watching("data", handle)
"""

import asyncio
import json
import logging
from typing import Any, Optional

from src.infrastructure.store.base import ChangeCallback, StoreError, WatchHandle

logger = logging.getLogger(__name__)


class InMemoryDocumentStore:
    """Document store with synchronous change fan-out.

    Watches on a path receive the current document (if it exists) on the
    event loop iteration after they are registered, and every replacement
    synchronously afterwards, in registration order.

    Thread-safety: designed for single-threaded async use.

    Attributes:
        _documents: Stored documents keyed by path.
        _watches: Active watches keyed by path.
    """

    def __init__(self) -> None:
        """Initialize the store."""
        self._documents: dict[str, Any] = {}
        self._watches: dict[str, list[WatchHandle]] = {}
        self._available = True
        self._write_count = 0
        logger.debug("InMemoryDocumentStore initialized")

    @staticmethod
    def _copy(value: Any) -> Any:
        return json.loads(json.dumps(value, default=str))

    def set_available(self, available: bool) -> None:
        """Simulate the store going down or coming back.

        While unavailable, writes and reads raise StoreError and ping
        returns False. Existing watches are kept.
        """
        self._available = available
        logger.info("InMemoryDocumentStore availability set to %s", available)

    def _ensure_available(self, operation: str, path: str) -> None:
        if not self._available:
            raise StoreError(f"Store unavailable: cannot {operation} {path}")

    async def put_document(self, path: str, value: dict[str, Any]) -> None:
        """Replace a document and notify its watches.

        Args:
            path: Document path.
            value: New document.

        Raises:
            StoreError: If the store is unavailable.
        """
        self._ensure_available("write", path)
        self._documents[path] = self._copy(value)
        self._write_count += 1
        self._dispatch(path)

    async def get_document(self, path: str) -> Any:
        """Return a copy of the document at path or None."""
        self._ensure_available("read", path)
        if path not in self._documents:
            return None
        return self._copy(self._documents[path])

    def peek(self, path: str) -> Any:
        """Return a copy of the stored document, ignoring availability."""
        if path not in self._documents:
            return None
        return self._copy(self._documents[path])

    def watch_document(self, path: str, on_change: ChangeCallback) -> WatchHandle:
        """Register a watch and schedule a replay of the current document.

        The replay runs on the next event loop iteration, never inside this
        call, like the first snapshot of a real-time backend.

        Args:
            path: Document path.
            on_change: Callback receiving each new payload.

        Returns:
            The watch handle.

        Raises:
            StoreError: If no event loop is running.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise StoreError(f"Cannot watch {path} without a running event loop", e) from e

        handle = WatchHandle(path=path, on_change=on_change)
        self._watches.setdefault(path, []).append(handle)
        logger.debug("Watch %s registered on: %s", handle.watch_id, path)

        loop.call_soon(self._replay, handle)
        return handle

    def _replay(self, handle: WatchHandle) -> None:
        if not handle.active or handle.path not in self._documents:
            return
        self._safe_call(handle, self._copy(self._documents[handle.path]))

    def drop_watches(self, path: str) -> int:
        """Simulate losing the subscriptions on a path.

        Every active watch on path is marked lost, as a dropped backend
        connection would do, and stops receiving changes.

        Returns:
            Number of watches dropped.
        """
        handles = [h for h in self._watches.pop(path, []) if h.active]
        for handle in handles:
            handle.mark_lost()
        logger.info("Dropped %d watch(es) on: %s", len(handles), path)
        return len(handles)

    def stop_watching(self, path: str, handle: Optional[WatchHandle] = None) -> None:
        """Stop one watch, or every watch on path when handle is None."""
        handles = self._watches.get(path, [])
        if handle is None:
            removed, remaining = handles, []
        else:
            removed = [h for h in handles if h is handle]
            remaining = [h for h in handles if h is not handle]

        for h in removed:
            h.close()
        if remaining:
            self._watches[path] = remaining
        else:
            self._watches.pop(path, None)
        logger.debug("Stopped %d watch(es) on: %s", len(removed), path)

    async def ping(self) -> bool:
        return self._available

    def watch_count(self, path: str) -> int:
        """Number of active watches on a path."""
        return sum(1 for h in self._watches.get(path, []) if h.active)

    def _dispatch(self, path: str) -> None:
        handles = [h for h in self._watches.get(path, []) if h.active]
        if not handles:
            logger.debug("No watches for document: %s", path)
            return

        logger.debug("Dispatching change of %s to %d watches", path, len(handles))
        for handle in handles:
            # A callback may have stopped a later watch
            if handle.active:
                self._safe_call(handle, self._copy(self._documents.get(path)))

    def _safe_call(self, handle: WatchHandle, payload: Any) -> None:
        """Call a watch callback with error handling."""
        try:
            handle.on_change(payload)
        except Exception as e:
            logger.error(
                "Watch callback error for document %s: %s",
                handle.path,
                str(e),
                exc_info=True,
            )

    def clear(self) -> None:
        """Remove all documents and watches."""
        for handles in self._watches.values():
            for handle in handles:
                handle.close()
        self._watches.clear()
        self._documents.clear()
        logger.debug("InMemoryDocumentStore cleared")

    def get_stats(self) -> dict[str, Any]:
        """Get store statistics.

        Returns:
            Dictionary with document, watch and write counts.
        """
        return {
            "documents": len(self._documents),
            "watched_paths": list(self._watches.keys()),
            "total_watches": sum(len(h) for h in self._watches.values()),
            "writes": self._write_count,
            "available": self._available,
        }
