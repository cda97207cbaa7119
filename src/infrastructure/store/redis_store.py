# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Redis-backed real-time document store.

Documents are JSON strings stored under {prefix}:doc:{path}. Every write
also publishes the new document on {prefix}:changes:{path}, so all clients
watching that path (this process included) receive it.

Example:
    store = RedisDocumentStore(settings)
    await store.connect()

    handle = store.watch_document("data", on_change)
    await store.put_document("data", dataset.to_document())

    store.stop_watching("data", handle)
    await store.close()
"""

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any, Optional

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError as BaseRedisError

from src.infrastructure.store.base import ChangeCallback, StoreError, WatchHandle

if TYPE_CHECKING:
    from src.core.config.settings import Settings

logger = logging.getLogger(__name__)


class RedisDocumentStore:
    """Async Redis document store with pub/sub change notifications.

    Watches run as tasks on the running event loop. A watch whose task
    ended (connection lost) reports itself inactive through its handle.

    Example:
        store = RedisDocumentStore(settings)
        await store.connect()
        await store.put_document("data", {"batches": []})
        await store.close()
    """

    def __init__(self, settings: "Settings") -> None:
        """Initialize the store.

        Args:
            settings: Application settings containing Redis configuration.
        """
        self._settings = settings
        self._prefix = settings.redis.key_prefix
        self._pool: Optional[ConnectionPool] = None
        self._redis: Optional[Redis] = None
        self._watches: dict[str, list[WatchHandle]] = {}

    async def connect(self) -> None:
        """Create the Redis connection pool.

        Raises:
            StoreError: If connection fails.
        """
        try:
            self._pool = ConnectionPool.from_url(
                self._settings.redis.url,
                max_connections=self._settings.redis.max_connections,
                decode_responses=True,
            )
            self._redis = Redis(connection_pool=self._pool)

            # Verify connection
            await self._redis.ping()
        except BaseRedisError as e:
            await self.close()
            raise StoreError("Failed to connect to Redis", e) from e

    async def close(self) -> None:
        """Stop all watches and close the connection pool."""
        tasks = [h.task for handles in self._watches.values() for h in handles if h.task]
        for path in list(self._watches):
            self.stop_watching(path)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None

    @property
    def is_connected(self) -> bool:
        return self._redis is not None

    def _ensure_connected(self) -> Redis:
        """Ensure the client is connected.

        Returns:
            The Redis client instance.

        Raises:
            StoreError: If not connected.
        """
        if self._redis is None:
            raise StoreError("Redis store not connected. Call connect() first.")
        return self._redis

    def _document_key(self, path: str) -> str:
        return f"{self._prefix}:doc:{path}"

    def _channel(self, path: str) -> str:
        return f"{self._prefix}:changes:{path}"

    def _serialize(self, value: Any) -> str:
        return json.dumps(value, ensure_ascii=False, default=str)

    def _deserialize(self, value: Optional[str]) -> Any:
        """Deserialize a stored document.

        Undecodable payloads are returned as-is; the consumer decides how
        to normalize them.
        """
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value

    # ========== Document operations ==========

    async def put_document(self, path: str, value: dict[str, Any]) -> None:
        """Replace a document and publish the change.

        SET and PUBLISH run in one MULTI/EXEC transaction so watchers never
        see a notification for a value that was not stored.

        Raises:
            StoreError: If the operation fails.
        """
        redis = self._ensure_connected()
        serialized = self._serialize(value)
        try:
            async with redis.pipeline(transaction=True) as pipe:
                pipe.set(self._document_key(path), serialized)
                pipe.publish(self._channel(path), serialized)
                await pipe.execute()
        except BaseRedisError as e:
            raise StoreError(f"Failed to write document: {path}", e) from e

    async def get_document(self, path: str) -> Any:
        """Get a document by path.

        Returns:
            The deserialized document or None if not found.

        Raises:
            StoreError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            value = await redis.get(self._document_key(path))
        except BaseRedisError as e:
            raise StoreError(f"Failed to read document: {path}", e) from e
        return self._deserialize(value)

    # ========== Watches ==========

    def watch_document(self, path: str, on_change: ChangeCallback) -> WatchHandle:
        """Subscribe to changes of a document.

        The current document (if any) is delivered once the subscription
        is live, followed by every published change.

        Raises:
            StoreError: If not connected or no event loop is running.
        """
        self._ensure_connected()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise StoreError(f"Cannot watch {path} without a running event loop", e) from e

        handle = WatchHandle(path=path, on_change=on_change)
        handle.task = loop.create_task(
            self._listen(handle), name=f"watch:{path}:{handle.watch_id}"
        )
        self._watches.setdefault(path, []).append(handle)
        logger.debug("Watch %s started on: %s", handle.watch_id, path)
        return handle

    def stop_watching(self, path: str, handle: Optional[WatchHandle] = None) -> None:
        """Stop one watch, or every watch on path when handle is None."""
        handles = self._watches.get(path, [])
        removed = handles if handle is None else [h for h in handles if h is handle]
        remaining = [] if handle is None else [h for h in handles if h is not handle]

        for h in removed:
            h.close()
        if remaining:
            self._watches[path] = remaining
        else:
            self._watches.pop(path, None)

    async def _listen(self, handle: WatchHandle) -> None:
        redis = self._ensure_connected()
        pubsub = redis.pubsub()
        channel = self._channel(handle.path)
        try:
            await pubsub.subscribe(channel)
            current = await self.get_document(handle.path)
            if current is not None:
                self._deliver(handle, current)

            async for message in pubsub.listen():
                if handle.closed:
                    break
                if message.get("type") != "message":
                    continue
                self._deliver(handle, self._deserialize(message.get("data")))
        except (BaseRedisError, StoreError) as e:
            logger.error("Watch on %s lost: %s", handle.path, str(e))
        finally:
            try:
                await pubsub.aclose()
            except BaseRedisError as e:
                logger.debug("Error closing pubsub for %s: %s", handle.path, str(e))
            # No-op when the watch was stopped on purpose
            handle.mark_lost()

    def _deliver(self, handle: WatchHandle, payload: Any) -> None:
        if handle.closed:
            return
        try:
            handle.on_change(payload)
        except Exception as e:
            logger.error(
                "Watch callback error for document %s: %s",
                handle.path,
                str(e),
                exc_info=True,
            )

    # ========== Health check ==========

    async def ping(self) -> bool:
        """Check if Redis is reachable, connecting first if needed.

        Returns:
            True if Redis responds to ping, False otherwise.
        """
        if self._redis is None:
            try:
                await self.connect()
            except StoreError:
                return False
            return True
        try:
            await self._redis.ping()
            return True
        except BaseRedisError:
            return False
