# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Explicit construction of the sync runtime.

The runtime bundles the engine with the collaborators it was built from,
so whoever builds it (the API lifespan, a script, a test) owns their
lifecycle. There is no process-wide engine instance.

Example:
    runtime = await build_sync_runtime(get_settings())
    unsubscribe = runtime.engine.subscribe(on_change)
    ...
    await runtime.close()
"""

import logging
from dataclasses import dataclass

from src.core.config.settings import Settings
from src.domains.sync.engine import SyncEngine
from src.infrastructure.cache import DurableCache, FileCache, MemoryCache
from src.infrastructure.connectivity import PingConnectivityMonitor
from src.infrastructure.store import (
    InMemoryDocumentStore,
    RedisDocumentStore,
    StoreAdapter,
    StoreError,
)

logger = logging.getLogger(__name__)


@dataclass
class SyncRuntime:
    """A started sync engine and the resources it runs on.

    Attributes:
        engine: The sync engine.
        store: Remote document store.
        cache: Durable local cache.
        connectivity: Connectivity monitor feeding the engine.
    """

    engine: SyncEngine
    store: StoreAdapter
    cache: DurableCache
    connectivity: PingConnectivityMonitor

    async def close(self) -> None:
        """Stop monitoring, dispose the engine and close the store."""
        await self.connectivity.stop()
        self.engine.dispose()
        if isinstance(self.store, RedisDocumentStore):
            await self.store.close()
        logger.info("Sync runtime closed")


def create_cache(settings: Settings) -> DurableCache:
    """Build the durable cache selected by settings."""
    if settings.cache.backend == "memory":
        return MemoryCache()
    return FileCache(settings.cache.directory)


async def create_store(settings: Settings) -> StoreAdapter:
    """Build the remote store selected by settings.

    An unreachable Redis server is not fatal: the store is returned
    unconnected and the engine starts offline. The connectivity monitor
    reconnects on its next successful ping.
    """
    if settings.sync.store_backend == "memory":
        return InMemoryDocumentStore()

    store = RedisDocumentStore(settings)
    try:
        await store.connect()
    except StoreError as e:
        logger.warning("Remote store unavailable at startup, starting offline: %s", str(e))
    return store


async def build_sync_runtime(
    settings: Settings,
    store: StoreAdapter | None = None,
    cache: DurableCache | None = None,
) -> SyncRuntime:
    """Build and start a sync runtime.

    Args:
        settings: Application settings.
        store: Optional pre-built store (skips settings-based creation).
        cache: Optional pre-built cache (skips settings-based creation).

    Returns:
        The started runtime.
    """
    if store is None:
        store = await create_store(settings)
    if cache is None:
        cache = create_cache(settings)

    connectivity = PingConnectivityMonitor(
        store,
        interval_seconds=settings.sync.connectivity_check_interval,
        online=await store.ping(),
    )
    engine = SyncEngine(store, cache, connectivity, settings.sync)
    engine.start()
    await connectivity.start()

    logger.info(
        "Sync runtime ready (store=%s, cache=%s, online=%s)",
        type(store).__name__,
        type(cache).__name__,
        engine.online,
    )
    return SyncRuntime(engine=engine, store=store, cache=cache, connectivity=connectivity)
