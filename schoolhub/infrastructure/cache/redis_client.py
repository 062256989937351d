# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Redis client for the session store.

This module provides an async Redis client wrapper. Values are JSON
serialized on the way in and deserialized on the way out. Besides plain
key operations the client supports "indexed" keys: a key written
together with its membership in an index set, in a single MULTI/EXEC
transaction, so a record never exists without its index entry.

Example:
    from schoolhub.infrastructure.cache import init_redis, get_redis

    # Initialize at startup
    await init_redis(settings)

    redis = get_redis()
    await redis.set_indexed("3f0c...", {"user_id": "42"}, 86400, "user:sessions:42")
"""

import builtins
import json
from typing import TYPE_CHECKING, Any, Optional

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError as BaseRedisError

if TYPE_CHECKING:
    from schoolhub.core.config.settings import Settings

# Module-level state
_redis_client: Optional["RedisClient"] = None


class RedisError(Exception):
    """Exception raised for Redis operation failures.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying Redis error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class RedisClient:
    """Async Redis client used by the session store.

    This client wraps the redis-py async client and provides:
    - Connection pooling
    - JSON serialization/deserialization
    - Key/TTL operations
    - Set operations for secondary indexes
    - Transactional writes of a key together with its index entry

    Example:
        client = RedisClient(settings)
        await client.connect()

        await client.set("key", {"a": 1}, expire_seconds=60)
        value = await client.get("key")

        await client.close()
    """

    def __init__(self, settings: "Settings") -> None:
        """Initialize the Redis client.

        Args:
            settings: Application settings containing Redis configuration.
        """
        self._settings = settings
        self._pool: Optional[ConnectionPool] = None
        self._redis: Optional[Redis] = None

    async def connect(self) -> None:
        """Create the Redis connection pool.

        Raises:
            RedisError: If connection fails.
        """
        try:
            self._pool = ConnectionPool.from_url(
                self._settings.redis.url,
                max_connections=self._settings.redis.max_connections,
                decode_responses=True,
            )
            self._redis = Redis(connection_pool=self._pool)

            await self._redis.ping()
        except BaseRedisError as e:
            raise RedisError("Failed to connect to Redis", e) from e

    async def close(self) -> None:
        """Close the Redis connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None

    def _ensure_connected(self) -> Redis:
        """Return the connected client.

        Raises:
            RedisError: If not connected.
        """
        if self._redis is None:
            raise RedisError("Redis client not connected. Call connect() first.")
        return self._redis

    def _serialize(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False, default=str)

    def _deserialize(self, value: Optional[str]) -> Any:
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value

    # ========== Key operations ==========

    async def set(
        self,
        key: str,
        value: Any,
        expire_seconds: Optional[int] = None,
    ) -> None:
        """Set a key-value pair.

        Args:
            key: The key.
            value: The value (will be JSON serialized if not a string).
            expire_seconds: Optional expiration time in seconds.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            await redis.set(key, self._serialize(value), ex=expire_seconds)
        except BaseRedisError as e:
            raise RedisError(f"Failed to set key: {key}", e) from e

    async def get(self, key: str) -> Any:
        """Get a value by key.

        Args:
            key: The key.

        Returns:
            The deserialized value or None if not found.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            value = await redis.get(key)
            return self._deserialize(value)
        except BaseRedisError as e:
            raise RedisError(f"Failed to get key: {key}", e) from e

    async def delete(self, *keys: str) -> int:
        """Delete one or more keys.

        Args:
            keys: The keys to delete.

        Returns:
            Number of keys that were removed.

        Raises:
            RedisError: If the operation fails.
        """
        if not keys:
            return 0
        redis = self._ensure_connected()
        try:
            return await redis.delete(*keys)
        except BaseRedisError as e:
            raise RedisError(f"Failed to delete keys: {', '.join(keys)}", e) from e

    async def exists(self, key: str) -> bool:
        """Check if a key exists.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            return await redis.exists(key) > 0
        except BaseRedisError as e:
            raise RedisError(f"Failed to check key existence: {key}", e) from e

    async def expire(self, key: str, seconds: int) -> bool:
        """Set expiration on a key.

        Returns:
            True if the timeout was set, False if key doesn't exist.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            return await redis.expire(key, seconds)
        except BaseRedisError as e:
            raise RedisError(f"Failed to set expiration on key: {key}", e) from e

    async def ttl(self, key: str) -> int:
        """Get the time-to-live for a key.

        Returns:
            TTL in seconds, -1 if no expiry, -2 if key doesn't exist.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            return await redis.ttl(key)
        except BaseRedisError as e:
            raise RedisError(f"Failed to get TTL for key: {key}", e) from e

    # ========== Set operations ==========

    async def members(self, key: str) -> builtins.set[str]:
        """Get all members of a set.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            return set(await redis.smembers(key))
        except BaseRedisError as e:
            raise RedisError(f"Failed to read set: {key}", e) from e

    async def remove_members(self, key: str, *members: str) -> int:
        """Remove members from a set.

        Returns:
            Number of members removed.

        Raises:
            RedisError: If the operation fails.
        """
        if not members:
            return 0
        redis = self._ensure_connected()
        try:
            return await redis.srem(key, *members)
        except BaseRedisError as e:
            raise RedisError(f"Failed to remove members from set: {key}", e) from e

    # ========== Indexed keys ==========

    async def set_indexed(
        self,
        key: str,
        value: Any,
        expire_seconds: int,
        index_key: str,
    ) -> None:
        """Write a key and register it in an index set, atomically.

        The index set expires no earlier than the key just written; a
        shorter-lived key never shortens the index expiry (Redis 7+).

        Args:
            key: The key.
            value: The value (JSON serialized if not a string).
            expire_seconds: Expiration for both the key and the index.
            index_key: Set that tracks the key.

        Raises:
            RedisError: If the transaction fails.
        """
        redis = self._ensure_connected()
        try:
            async with redis.pipeline(transaction=True) as pipe:
                pipe.set(key, self._serialize(value), ex=expire_seconds)
                pipe.sadd(index_key, key)
                pipe.expire(index_key, expire_seconds, nx=True)
                pipe.expire(index_key, expire_seconds, gt=True)
                await pipe.execute()
        except BaseRedisError as e:
            raise RedisError(f"Failed to write indexed key: {key}", e) from e

    async def delete_indexed(self, index_key: str, *keys: str) -> int:
        """Delete keys and drop them from their index set, atomically.

        Args:
            index_key: Set that tracks the keys.
            keys: Keys to delete.

        Returns:
            Number of keys that were removed.

        Raises:
            RedisError: If the transaction fails.
        """
        if not keys:
            return 0
        redis = self._ensure_connected()
        try:
            async with redis.pipeline(transaction=True) as pipe:
                pipe.srem(index_key, *keys)
                pipe.delete(*keys)
                results = await pipe.execute()
            return int(results[1])
        except BaseRedisError as e:
            raise RedisError(f"Failed to delete indexed keys from: {index_key}", e) from e

    # ========== Health check ==========

    async def ping(self) -> bool:
        """Check if Redis is reachable.

        Returns:
            True if Redis responds to ping, False otherwise.
        """
        try:
            redis = self._ensure_connected()
            await redis.ping()
            return True
        except (RedisError, BaseRedisError):
            return False


# ========== Module-level functions ==========


async def init_redis(settings: "Settings") -> None:
    """Initialize the global Redis client.

    This should be called once at application startup.

    Raises:
        RedisError: If connection fails.
    """
    global _redis_client

    _redis_client = RedisClient(settings)
    await _redis_client.connect()


async def close_redis() -> None:
    """Close the global Redis client at application shutdown."""
    global _redis_client

    if _redis_client is not None:
        await _redis_client.close()
        _redis_client = None


def get_redis() -> RedisClient:
    """Get the global Redis client.

    Raises:
        RedisError: If Redis has not been initialized.
    """
    if _redis_client is None:
        raise RedisError("Redis not initialized. Call init_redis() first.")
    return _redis_client
