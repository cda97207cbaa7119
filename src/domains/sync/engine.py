# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Offline-first synchronization engine.

The SyncEngine mediates every access to the durable cache and the remote
document store. Consumers subscribe to receive live dataset snapshots and
write whole datasets back; they never touch the cache or the store.

Writes always land in the durable cache first and are forwarded to the
remote store only while online. On reconnection the cached dataset is
pushed wholesale (last write wins) and the remote watch is restored.

Example:
    engine = SyncEngine(store, cache, connectivity, settings.sync)
    engine.start()

    def on_change(dataset, status):
        print(len(dataset.batches), status.online)

    unsubscribe = engine.subscribe(on_change)
    await engine.write(dataset)
    unsubscribe()
    engine.dispose()
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable

from src.core.config.settings import SyncSettings
from src.infrastructure.cache.base import CacheError, DurableCache
from src.infrastructure.connectivity.monitor import ConnectivitySignal
from src.infrastructure.store.base import StoreAdapter, WatchHandle
from src.models.dataset import Dataset, Subscriber, SyncStatus, normalize_dataset
from src.utils.datetime import format_iso, parse_iso, utc_now

logger = logging.getLogger(__name__)


class SyncEngine:
    """Keeps the durable cache and the remote store consistent.

    All state changes happen on the event loop in reaction to a consumer
    call, a connectivity transition or a remote watch callback. Subscriber
    notification is synchronous and ordered by registration.

    Attributes:
        status: Shared sync status handed to every subscriber.
    """

    def __init__(
        self,
        store: StoreAdapter,
        cache: DurableCache,
        connectivity: ConnectivitySignal,
        settings: SyncSettings | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Remote real-time document store.
            cache: Durable local key-value cache.
            connectivity: Host connectivity signal.
            settings: Sync settings (document path and cache keys).
        """
        self._store = store
        self._cache = cache
        self._connectivity = connectivity
        self._settings = settings or SyncSettings()

        self._online = connectivity.is_online
        self.status = SyncStatus(online=self._online)
        self._subscribers: list[Subscriber] = []
        self._watch: WatchHandle | None = None
        self._restore_timer: asyncio.TimerHandle | None = None
        self._remove_connectivity_listener: Callable[[], None] | None = None

    @property
    def online(self) -> bool:
        return self._online

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def watching(self) -> bool:
        """Whether a remote watch is currently active."""
        return self._watch is not None and self._watch.active

    # ========== Lifecycle ==========

    def start(self) -> None:
        """Attach to the connectivity signal and restore the last sync time.

        The persisted last sync time survives restarts, so last_synced is
        only unset on a fresh cache. Disable restore_last_synced in the
        sync settings to always start with last_synced unset.
        """
        if self._remove_connectivity_listener is not None:
            return

        self._online = self._connectivity.is_online
        self.status.online = self._online
        if self._settings.restore_last_synced:
            self.status.last_synced = self._read_last_synced()
        self._remove_connectivity_listener = self._connectivity.add_listener(
            self.handle_connectivity_change
        )
        logger.info(
            "Sync engine started (online=%s, last_synced=%s)",
            self._online,
            format_iso(self.status.last_synced),
        )

    def dispose(self) -> None:
        """Detach from the connectivity signal, stop watching, drop subscribers."""
        if self._remove_connectivity_listener is not None:
            self._remove_connectivity_listener()
            self._remove_connectivity_listener = None
        if self._restore_timer is not None:
            self._restore_timer.cancel()
            self._restore_timer = None
        self._stop_watch()
        self._subscribers.clear()
        logger.info("Sync engine disposed")

    # ========== Consumer API ==========

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a subscriber and replay the current snapshot to it.

        The callback is invoked before this method returns with the cached
        dataset and the shared status, and never again before it returns.
        The first subscriber while online starts the remote watch; a remote
        snapshot that differs from the cache arrives through it later.

        Args:
            callback: Function receiving (dataset, status) on every change.

        Returns:
            Function removing this registration. Removing the last
            subscriber stops the remote watch.
        """
        self._subscribers.append(callback)
        self._deliver(callback, self.read())

        if self._online:
            self._ensure_watch()

        registered = True

        def unsubscribe() -> None:
            nonlocal registered
            if not registered:
                return
            registered = False
            try:
                self._subscribers.remove(callback)
            except ValueError:
                return
            if not self._subscribers:
                self._stop_watch()

        return unsubscribe

    def read(self) -> Dataset:
        """Return the cached dataset.

        Unreadable or corrupt cache contents yield an empty dataset.
        """
        try:
            raw = self._cache.get(self._settings.storage_key)
            if raw is None:
                return Dataset()
            return normalize_dataset(json.loads(raw))
        except (CacheError, ValueError) as e:
            logger.error("Error reading cached dataset: %s", str(e))
            return Dataset()

    async def write(self, dataset: Dataset | Mapping[str, Any]) -> bool:
        """Persist a dataset locally, forward it when online, notify.

        Args:
            dataset: The complete new dataset.

        Returns:
            True if every step succeeded. False means the edit is cached
            locally but not guaranteed to be stored remotely.
        """
        try:
            dataset = normalize_dataset(dataset)
            self._cache.set(self._settings.storage_key, dataset.to_json())
        except Exception as e:
            logger.error("Error caching dataset: %s", str(e), exc_info=True)
            return False

        success = True
        if self._online:
            try:
                await self._store.put_document(
                    self._settings.document_path, dataset.to_document()
                )
                self._mark_synced()
            except Exception as e:
                logger.error("Error writing dataset to remote store: %s", str(e))
                success = False

        self._notify(dataset)
        return success

    # ========== Connectivity ==========

    async def handle_connectivity_change(self, online: bool) -> None:
        """React to an online/offline transition of the host.

        Going online pushes the cached dataset before subscribers are
        told; going offline only notifies them.
        """
        self._online = online
        self.status.online = online

        if online:
            await self.resync()

        self._notify(self.read())

    async def resync(self) -> bool:
        """Push the cached dataset to the remote store and restore the watch.

        The local cache is authoritative at reconnection time.

        Returns:
            True if the push succeeded.
        """
        if not self._online:
            return False

        dataset = self.read()
        try:
            await self._store.put_document(
                self._settings.document_path, dataset.to_document()
            )
        except Exception as e:
            logger.error("Error syncing with remote store: %s", str(e))
            return False

        self._mark_synced()
        if self._subscribers:
            self._ensure_watch()
        logger.info("Resynchronized cached dataset with remote store")
        return True

    # ========== Remote watch ==========

    def _ensure_watch(self) -> None:
        if self.watching:
            return
        if self._watch is not None:
            # Stale handle from a watch that ended on its own
            self._stop_watch()

        try:
            self._watch = self._store.watch_document(
                self._settings.document_path, self._handle_remote_change
            )
        except Exception as e:
            self._watch = None
            logger.error("Error watching remote dataset: %s", str(e))
            return
        self._watch.on_lost(self._handle_watch_lost)
        logger.debug("Remote watch established on: %s", self._settings.document_path)

    def _handle_watch_lost(self, watch: WatchHandle) -> None:
        """Schedule restoring a watch the store ended on its own."""
        if watch is not self._watch:
            return
        logger.warning(
            "Remote watch on %s lost, restoring in %.1fs",
            watch.path,
            self._settings.watch_retry_delay,
        )
        self._schedule_watch_restore()

    def _schedule_watch_restore(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Picked up by the next subscribe or resync
            return
        if self._restore_timer is not None:
            self._restore_timer.cancel()
        self._restore_timer = loop.call_later(
            self._settings.watch_retry_delay, self._restore_watch
        )

    def _restore_watch(self) -> None:
        self._restore_timer = None
        if not (self._online and self._subscribers) or self.watching:
            return
        self._ensure_watch()
        if self._watch is None:
            self._schedule_watch_restore()

    def _stop_watch(self) -> None:
        if self._watch is None:
            return
        watch, self._watch = self._watch, None
        try:
            self._store.stop_watching(watch.path, watch)
        except Exception as e:
            logger.warning("Error stopping remote watch: %s", str(e))
        logger.debug("Remote watch removed from: %s", watch.path)

    def _handle_remote_change(self, payload: Any) -> None:
        """Apply a document pushed by the remote store.

        A payload equal to the cached dataset is the echo of this engine's
        own write or resync: it counts as a sync but is not re-broadcast.
        Payloads arriving while offline are ignored; the cache is pushed
        on reconnection.
        """
        if not self._online:
            logger.debug("Ignoring remote change while offline")
            return

        dataset = normalize_dataset(payload)
        unchanged = dataset == self.read()

        if not unchanged:
            try:
                self._cache.set(self._settings.storage_key, dataset.to_json())
            except CacheError as e:
                logger.error("Error caching remote dataset: %s", str(e))

        self._mark_synced()
        if not unchanged:
            self._notify(dataset)

    # ========== Helpers ==========

    def _mark_synced(self) -> None:
        now = utc_now()
        self.status.last_synced = now
        try:
            self._cache.set(self._settings.last_sync_key, format_iso(now))
        except CacheError as e:
            logger.warning("Error caching last sync time: %s", str(e))

    def _read_last_synced(self) -> datetime | None:
        try:
            return parse_iso(self._cache.get(self._settings.last_sync_key))
        except (CacheError, ValueError) as e:
            logger.warning("Ignoring unreadable last sync time: %s", str(e))
            return None

    def _notify(self, dataset: Dataset) -> None:
        for subscriber in list(self._subscribers):
            self._deliver(subscriber, dataset)

    def _deliver(self, subscriber: Subscriber, dataset: Dataset) -> None:
        try:
            subscriber(dataset, self.status)
        except Exception as e:
            logger.error("Subscriber error: %s", str(e), exc_info=True)
