"""Tests for the Redis cache adapter."""

from __future__ import annotations

from unittest.mock import AsyncMock

import orjson
import pytest
from bson import ObjectId
from redis.exceptions import ConnectionError as RedisConnectionError

from coursehub.cache.redis import DEFAULT_TTL, RedisCache
from coursehub.core.errors import CacheFailure


@pytest.fixture
def redis_client() -> AsyncMock:
    return AsyncMock()


class TestRedisCache:
    """Test RedisCache against a mocked client."""

    @pytest.mark.asyncio
    async def test_get_miss_returns_none(self, redis_client) -> None:
        redis_client.get.return_value = None

        assert await RedisCache(redis_client).get("course:1") is None

    @pytest.mark.asyncio
    async def test_get_decodes_json(self, redis_client) -> None:
        redis_client.get.return_value = b'{"_id":"1","title":"Algebra"}'

        value = await RedisCache(redis_client).get("course:1")

        assert value == {"_id": "1", "title": "Algebra"}

    @pytest.mark.asyncio
    async def test_corrupt_payload_is_failure_not_miss(self, redis_client) -> None:
        """A payload that is not JSON surfaces as CacheFailure."""
        redis_client.get.return_value = b"{not json"

        with pytest.raises(CacheFailure) as exc_info:
            await RedisCache(redis_client).get("course:1")

        assert exc_info.value.operation == "decode"

    @pytest.mark.asyncio
    async def test_get_wraps_redis_errors(self, redis_client) -> None:
        redis_client.get.side_effect = RedisConnectionError("down")

        with pytest.raises(CacheFailure) as exc_info:
            await RedisCache(redis_client).get("course:1")

        assert exc_info.value.operation == "get"
        assert isinstance(exc_info.value.__cause__, RedisConnectionError)

    @pytest.mark.asyncio
    async def test_set_uses_default_ttl(self, redis_client) -> None:
        await RedisCache(redis_client).set("course:1", {"title": "Algebra"})

        redis_client.set.assert_awaited_once_with(
            "course:1", orjson.dumps({"title": "Algebra"}), ex=DEFAULT_TTL
        )

    @pytest.mark.asyncio
    async def test_set_with_explicit_ttl(self, redis_client) -> None:
        await RedisCache(redis_client, ttl=60).set("student:1", {"a": 1}, ttl=10)

        assert redis_client.set.await_args.kwargs["ex"] == 10

    @pytest.mark.asyncio
    async def test_set_with_zero_ttl(self, redis_client) -> None:
        """A zero TTL is passed through rather than replaced by the default."""
        await RedisCache(redis_client, ttl=60).set("student:1", {"a": 1}, ttl=0)

        assert redis_client.set.await_args.kwargs["ex"] == 0


    @pytest.mark.asyncio
    async def test_set_rejects_unserializable(self, redis_client) -> None:
        """Snapshots must be rendered for JSON before caching."""
        with pytest.raises(CacheFailure) as exc_info:
            await RedisCache(redis_client).set("course:1", {"_id": ObjectId()})

        assert exc_info.value.operation == "encode"
        redis_client.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete(self, redis_client) -> None:
        await RedisCache(redis_client).delete("course:1")

        redis_client.delete.assert_awaited_once_with("course:1")

    @pytest.mark.asyncio
    async def test_delete_wraps_redis_errors(self, redis_client) -> None:
        redis_client.delete.side_effect = RedisConnectionError("down")

        with pytest.raises(CacheFailure):
            await RedisCache(redis_client).delete("course:1")
