"""Redis cache implementation for CourseHub.

Stores JSON snapshots of single documents under plain string keys with a
fixed expiry. The cache is advisory: a miss only means the entity store must
be consulted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import orjson
from redis.exceptions import RedisError

from coursehub.core.errors import CacheFailure

if TYPE_CHECKING:
    from redis.asyncio import Redis

# Default TTL (1 hour)
DEFAULT_TTL = 3600


class CacheBackend(Protocol):
    """Capability interface the entity services depend on."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None: ...

    async def delete(self, key: str) -> None: ...


class RedisCache:
    """Cache operations backed by a shared redis.asyncio client.

    Every Redis error is raised as CacheFailure; callers decide whether the
    failure is fatal to their request.
    """

    def __init__(self, client: Redis, ttl: int = DEFAULT_TTL):
        self.client = client
        self.ttl = ttl

    async def get(self, key: str) -> Any | None:
        """Get a cached value.

        Returns:
            The deserialized value, or None if the key is absent or expired.

        Raises:
            CacheFailure: If Redis fails or the stored payload is not valid JSON.
        """
        try:
            raw = await self.client.get(key)
        except RedisError as exc:
            raise CacheFailure("get", key) from exc

        if raw is None:
            return None

        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError as exc:
            raise CacheFailure("decode", key) from exc

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Serialize and store a value, overwriting any existing entry."""
        try:
            payload = orjson.dumps(value)
        except TypeError as exc:
            raise CacheFailure("encode", key) from exc

        try:
            await self.client.set(key, payload, ex=ttl if ttl is not None else self.ttl)
        except RedisError as exc:
            raise CacheFailure("set", key) from exc

    async def delete(self, key: str) -> None:
        """Remove a key. Deleting an absent key is a no-op."""
        try:
            await self.client.delete(key)
        except RedisError as exc:
            raise CacheFailure("delete", key) from exc

