"""Connection manager for the document store and the cache store.

Owns the two shared client handles for the lifetime of the process:
- Bounded-retry connect with a fixed delay, configured per dependency
- Fatal DependencyUnavailable once the retry budget is exhausted
- Best-effort close that logs failures and never raises

The manager is constructed once in the application lifespan and passed to
whatever needs a handle; there is no module-level client.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import redis.asyncio as redis
from motor.motor_asyncio import AsyncIOMotorClient

from coursehub.core.errors import DependencyKind, DependencyUnavailable

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorDatabase
    from redis.asyncio import Redis

    from coursehub.config import Settings

logger = logging.getLogger(__name__)

MongoClientFactory = Callable[["Settings"], AsyncIOMotorClient]
RedisClientFactory = Callable[["Settings"], "Redis"]
SleepFunc = Callable[[float], Awaitable[Any]]


def create_mongo_client(settings: Settings) -> AsyncIOMotorClient:
    """Create a Motor client; the driver pools connections internally."""
    return AsyncIOMotorClient(
        settings.mongodb_uri,
        serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
    )


def create_redis_client(settings: Settings) -> Redis:
    """Create a redis.asyncio client with its own connection pool."""
    return redis.from_url(  # type: ignore[no-untyped-call]
        settings.redis_uri,
        encoding="utf-8",
        decode_responses=False,
    )


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-delay retry budget for one dependency."""

    max_retries: int
    retry_delay: float


async def connect_with_retry(
    kind: DependencyKind,
    attempt: Callable[[], Awaitable[None]],
    policy: RetryPolicy,
    sleep: SleepFunc = asyncio.sleep,
) -> None:
    """Run attempt until it succeeds or max_retries attempts have failed.

    The delay is applied between attempts only, never after the last one.

    Raises:
        DependencyUnavailable: Carrying the kind and the last underlying cause.
    """
    last_error: BaseException | None = None

    for attempt_no in range(1, policy.max_retries + 1):
        try:
            await attempt()
            logger.info(f"Connected to {kind.value} (attempt {attempt_no}/{policy.max_retries})")
            return
        except Exception as exc:
            last_error = exc
            logger.warning(
                f"Connection to {kind.value} failed "
                f"(attempt {attempt_no}/{policy.max_retries}): {exc}"
            )
            if attempt_no < policy.max_retries:
                logger.info(f"Retrying {kind.value} in {policy.retry_delay}s")
                await sleep(policy.retry_delay)

    logger.error(f"Giving up on {kind.value} after {policy.max_retries} attempt(s)")
    raise DependencyUnavailable(kind, policy.max_retries, last_error) from last_error


class ConnectionManager:
    """Lifecycle owner of the MongoDB and Redis client handles."""

    def __init__(
        self,
        settings: Settings,
        *,
        mongo_factory: MongoClientFactory = create_mongo_client,
        redis_factory: RedisClientFactory = create_redis_client,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.settings = settings
        self._mongo_factory = mongo_factory
        self._redis_factory = redis_factory
        self._sleep = sleep

        self._mongo_client: AsyncIOMotorClient | None = None
        self._database: AsyncIOMotorDatabase | None = None
        self._redis: Redis | None = None

        self.attempts: dict[DependencyKind, int] = {kind: 0 for kind in DependencyKind}

    # -------------------------------------------------------------------------
    # Handles
    # -------------------------------------------------------------------------

    @property
    def database(self) -> AsyncIOMotorDatabase:
        """The connected MongoDB database handle."""
        if self._database is None:
            raise RuntimeError("Document store is not connected")
        return self._database

    @property
    def redis(self) -> Redis:
        """The connected Redis client."""
        if self._redis is None:
            raise RuntimeError("Cache store is not connected")
        return self._redis

    def is_connected(self, kind: DependencyKind) -> bool:
        if kind == DependencyKind.DOCUMENT_STORE:
            return self._database is not None
        return self._redis is not None

    def retry_policy(self, kind: DependencyKind) -> RetryPolicy:
        if kind == DependencyKind.DOCUMENT_STORE:
            return RetryPolicy(self.settings.mongodb_max_retries, self.settings.mongodb_retry_delay)
        return RetryPolicy(self.settings.redis_max_retries, self.settings.redis_retry_delay)

    # -------------------------------------------------------------------------
    # Connect
    # -------------------------------------------------------------------------

    async def connect(self, kind: DependencyKind) -> None:
        """Connect one dependency with bounded retry.

        Raises:
            DependencyUnavailable: If every attempt failed.
        """
        if self.is_connected(kind):
            return

        if kind == DependencyKind.DOCUMENT_STORE:
            attempt = self._connect_mongo
        else:
            attempt = self._connect_redis

        await connect_with_retry(kind, attempt, self.retry_policy(kind), self._sleep)

    async def _connect_mongo(self) -> None:
        self.attempts[DependencyKind.DOCUMENT_STORE] += 1
        client = self._mongo_factory(self.settings)
        try:
            await client.admin.command("ping")
        except Exception:
            client.close()
            raise
        self._mongo_client = client
        self._database = client[self.settings.mongodb_db_name]

    async def _connect_redis(self) -> None:
        self.attempts[DependencyKind.CACHE_STORE] += 1
        client = self._redis_factory(self.settings)
        try:
            await client.ping()
        except Exception:
            try:
                await client.aclose()
            except Exception as close_exc:
                logger.debug(f"Discarding failed Redis client raised: {close_exc}")
            raise
        self._redis = client

    async def connect_all(self) -> None:
        """Connect the document store, then the cache store.

        Either both dependencies are reachable or neither handle is kept.
        """
        await self.connect(DependencyKind.DOCUMENT_STORE)
        try:
            await self.connect(DependencyKind.CACHE_STORE)
        except DependencyUnavailable:
            await self.close(DependencyKind.DOCUMENT_STORE)
            raise

    # -------------------------------------------------------------------------
    # Close
    # -------------------------------------------------------------------------

    async def close(self, kind: DependencyKind) -> None:
        """Best-effort disconnect. Never raises; a never-connected kind is a no-op."""
        if kind == DependencyKind.DOCUMENT_STORE:
            client = self._mongo_client
            self._mongo_client = None
            self._database = None
            if client is None:
                return
            try:
                client.close()
                logger.info("Closed MongoDB connection")
            except Exception as exc:
                logger.warning(f"Failed to close MongoDB connection: {exc}")
        else:
            redis_client = self._redis
            self._redis = None
            if redis_client is None:
                return
            try:
                await redis_client.aclose()
                logger.info("Closed Redis connection")
            except Exception as exc:
                logger.warning(f"Failed to close Redis connection: {exc}")

    async def close_all(self) -> None:
        """Close both dependencies independently."""
        for kind in DependencyKind:
            await self.close(kind)

    async def ping(self, kind: DependencyKind) -> bool:
        """Check connectivity of one dependency."""
        if not self.is_connected(kind):
            return False
        if kind == DependencyKind.DOCUMENT_STORE:
            await self.database.client.admin.command("ping")
        else:
            await self.redis.ping()
        return True
