# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Remote document store contract.

Any key-document store with push notifications can back the sync engine.
A store must be able to replace a document, watch a document for changes
(from any writer, including the watcher itself) and stop watching.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, runtime_checkable
from uuid import uuid4

# Called with the new document payload (None when the document is gone)
ChangeCallback = Callable[[Any], None]


class StoreError(Exception):
    """Exception raised for remote store failures.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying client error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        """Initialize the store error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


@dataclass(eq=False)
class WatchHandle:
    """A live watch on one document path.

    Attributes:
        path: The watched document path.
        on_change: Callback receiving each new payload.
        watch_id: Unique identifier of this watch.
        task: Background listener task for stores that need one.
        closed: Set once the watch has been stopped by its owner.
        lost: Set when the store ended the watch on its own.
    """

    path: str
    on_change: ChangeCallback
    watch_id: str = field(default_factory=lambda: str(uuid4()))
    task: Optional[asyncio.Task[None]] = None
    closed: bool = False
    lost: bool = False
    _lost_callbacks: list[Callable[["WatchHandle"], None]] = field(
        default_factory=list, repr=False
    )

    @property
    def active(self) -> bool:
        """Whether the watch still delivers changes."""
        if self.closed or self.lost:
            return False
        return self.task is None or not self.task.done()

    def close(self) -> None:
        """Mark the watch stopped and cancel its listener task."""
        self.closed = True
        self._lost_callbacks.clear()
        if self.task is not None and not self.task.done():
            self.task.cancel()

    def on_lost(self, callback: Callable[["WatchHandle"], None]) -> None:
        """Register a callback run once if the store loses this watch."""
        if self.lost:
            callback(self)
        else:
            self._lost_callbacks.append(callback)

    def mark_lost(self) -> None:
        """Record that the watch ended without being stopped.

        Called by stores when the underlying subscription dies. Has no
        effect on a watch that was closed.
        """
        if self.closed or self.lost:
            return
        self.lost = True
        callbacks, self._lost_callbacks = self._lost_callbacks, []
        for callback in callbacks:
            callback(self)


@runtime_checkable
class StoreAdapter(Protocol):
    """Real-time key-document store."""

    async def put_document(self, path: str, value: dict[str, Any]) -> None:
        """Replace the document at path.

        Raises:
            StoreError: If the write fails.
        """
        ...

    async def get_document(self, path: str) -> Any:
        """Return the document at path, or None when absent.

        Raises:
            StoreError: If the read fails.
        """
        ...

    def watch_document(self, path: str, on_change: ChangeCallback) -> WatchHandle:
        """Start delivering changes of the document at path.

        Raises:
            StoreError: If the watch cannot be set up.
        """
        ...

    def stop_watching(self, path: str, handle: Optional[WatchHandle] = None) -> None:
        """Stop one watch, or every watch on path when handle is None."""
        ...

    async def ping(self) -> bool:
        """Return True when the store is reachable."""
        ...
