# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Host connectivity signal.

A connectivity signal exposes the current online flag and notifies async
listeners on every online/offline transition. Repeating the current state
is not a transition and notifies nobody.

Example:
    monitor = PingConnectivityMonitor(store, interval_seconds=15.0)
    remove = monitor.add_listener(engine.handle_connectivity_change)
    await monitor.start()
    ...
    await monitor.stop()
    remove()
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from src.infrastructure.store.base import StoreAdapter

logger = logging.getLogger(__name__)

ConnectivityListener = Callable[[bool], Awaitable[None]]


@runtime_checkable
class ConnectivitySignal(Protocol):
    """Online flag plus transition notifications."""

    @property
    def is_online(self) -> bool:
        ...

    def add_listener(self, listener: ConnectivityListener) -> Callable[[], None]:
        ...


class ConnectivityMonitor:
    """Connectivity signal driven by explicit set_online calls.

    Listeners are awaited one after another in registration order. A
    failing listener is logged and does not stop the others.
    """

    def __init__(self, online: bool = True) -> None:
        self._online = online
        self._listeners: list[ConnectivityListener] = []

    @property
    def is_online(self) -> bool:
        return self._online

    def add_listener(self, listener: ConnectivityListener) -> Callable[[], None]:
        """Register a transition listener.

        Returns:
            Function removing the listener again.
        """
        self._listeners.append(listener)

        def remove() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return remove

    async def set_online(self, online: bool) -> bool:
        """Record the current connectivity and notify on transitions.

        Returns:
            True if the state changed.
        """
        if online == self._online:
            return False

        self._online = online
        logger.info("Connectivity changed: %s", "online" if online else "offline")

        for listener in list(self._listeners):
            try:
                await listener(online)
            except Exception as e:
                logger.error("Connectivity listener error: %s", str(e), exc_info=True)
        return True


class PingConnectivityMonitor(ConnectivityMonitor):
    """Connectivity signal derived from periodic store pings.

    Attributes:
        interval_seconds: Delay between two pings.
    """

    def __init__(
        self,
        store: "StoreAdapter",
        interval_seconds: float = 15.0,
        online: bool = True,
    ) -> None:
        super().__init__(online=online)
        self._store = store
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check(self) -> bool:
        """Ping the store once and apply the result.

        Returns:
            The resulting online flag.
        """
        try:
            reachable = await self._store.ping()
        except Exception as e:
            logger.warning("Store ping failed: %s", str(e))
            reachable = False
        await self.set_online(reachable)
        return reachable

    async def start(self) -> None:
        """Start the background ping loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="connectivity-monitor")
        logger.debug("Connectivity monitor started (every %.1fs)", self.interval_seconds)

    async def stop(self) -> None:
        """Stop the background ping loop."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Connectivity monitor stopped")

    async def _run(self) -> None:
        while True:
            await self.check()
            await asyncio.sleep(self.interval_seconds)
