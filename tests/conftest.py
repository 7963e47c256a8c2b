"""Global pytest configuration and fixtures.

Provides in-memory stand-ins for the entity store and the cache, services
wired over them, and an httpx client bound to the application through
ASGITransport. The lifespan is not run; fixtures install the context on
``app.state`` directly.
"""

from __future__ import annotations

import asyncio
import copy
from collections import defaultdict
from collections.abc import AsyncIterator, Mapping
from typing import Any

import orjson
import pytest
import pytest_asyncio
from bson import ObjectId
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from coursehub.api.app import create_app
from coursehub.cache.redis import DEFAULT_TTL
from coursehub.config import Settings
from coursehub.context import AppContext
from coursehub.core.errors import CacheFailure, EntityStoreFailure
from coursehub.core.ids import parse_identity
from coursehub.services.courses import CourseService
from coursehub.services.students import StudentService

Document = dict[str, Any]


def _field_matches(value: Any, condition: Any) -> bool:
    if isinstance(condition, dict) and "$ne" in condition:
        return not _field_matches(value, condition["$ne"])
    if isinstance(value, list):
        return condition in value
    return value == condition


def matches(document: Document, filter: Mapping[str, Any]) -> bool:
    """Equality matching with array membership and $ne, as the store applies it."""
    return all(_field_matches(document.get(key), cond) for key, cond in filter.items())


def apply_update(document: Document, update: Mapping[str, Any]) -> None:
    for operator, fields in update.items():
        for name, value in fields.items():
            if operator == "$set":
                document[name] = copy.deepcopy(value)
            elif operator == "$push":
                document.setdefault(name, []).append(value)
            elif operator == "$pull":
                document[name] = [item for item in document.get(name, []) if item != value]
            else:
                raise AssertionError(f"Unsupported update operator {operator}")


class FakeEntityStore:
    """In-memory DocumentStore.

    Operations named in ``fail`` raise EntityStoreFailure; ``calls`` records
    every (operation, collection) pair that reached the store.
    With ``yield_on_read`` set, reads give up the event loop the way a driver
    round trip does, so concurrent callers interleave between read and write.
    """

    def __init__(self) -> None:
        self.collections: dict[str, dict[ObjectId, Document]] = defaultdict(dict)
        self.calls: list[tuple[str, str]] = []
        self.fail: set[str] = set()
        self.yield_on_read = False

    def _record(self, operation: str, collection: str) -> None:
        self.calls.append((operation, collection))
        if operation in self.fail:
            raise EntityStoreFailure(operation, collection)

    def count_calls(self, operation: str, collection: str | None = None) -> int:
        return sum(
            1
            for op, coll in self.calls
            if op == operation and (collection is None or coll == collection)
        )

    def seed(self, collection: str, document: Document) -> str:
        """Insert a document directly, bypassing call recording."""
        stored = copy.deepcopy(document)
        stored.setdefault("_id", ObjectId())
        self.collections[collection][stored["_id"]] = stored
        return str(stored["_id"])

    async def get_by_id(self, collection: str, identity: str) -> Document | None:
        object_id = parse_identity(identity)
        self._record("get", collection)
        if self.yield_on_read:
            await asyncio.sleep(0)
        document = self.collections[collection].get(object_id)
        return copy.deepcopy(document) if document is not None else None

    async def insert(self, collection: str, data: Mapping[str, Any]) -> str:
        self._record("insert", collection)
        document = copy.deepcopy(dict(data))
        document["_id"] = ObjectId()
        self.collections[collection][document["_id"]] = document
        return str(document["_id"])

    async def update_by_id(self, collection: str, identity: str, fields: Mapping[str, Any]) -> int:
        return await self.modify_by_id(collection, identity, {"$set": dict(fields)})

    async def modify_by_id(
        self,
        collection: str,
        identity: str,
        update: Mapping[str, Any],
        condition: Mapping[str, Any] | None = None,
    ) -> int:
        object_id = parse_identity(identity)
        self._record("update", collection)
        document = self.collections[collection].get(object_id)
        if document is None or not matches(document, condition or {}):
            return 0
        apply_update(document, update)
        return 1

    async def delete_by_id(self, collection: str, identity: str) -> int:
        object_id = parse_identity(identity)
        self._record("delete", collection)
        return 1 if self.collections[collection].pop(object_id, None) is not None else 0

    async def list_all(self, collection: str, filter: Mapping[str, Any] | None = None) -> list[Document]:
        self._record("list", collection)
        return [
            copy.deepcopy(document)
            for document in self.collections[collection].values()
            if matches(document, filter or {})
        ]

    async def count(self, collection: str, filter: Mapping[str, Any] | None = None) -> int:
        self._record("count", collection)
        return sum(1 for document in self.collections[collection].values() if matches(document, filter or {}))


class FakeCache:
    """In-memory CacheBackend with a logical clock for expiry.

    Values are stored as orjson payloads so a snapshot that is not JSON
    serializable fails the same way it would against Redis.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.entries: dict[str, tuple[bytes, float]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail: set[str] = set()

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def _record(self, operation: str, key: str) -> None:
        self.calls.append((operation, key))
        if operation in self.fail:
            raise CacheFailure(operation, key)

    def __contains__(self, key: str) -> bool:
        entry = self.entries.get(key)
        return entry is not None and self.now < entry[1]

    def peek(self, key: str) -> Any | None:
        return orjson.loads(self.entries[key][0]) if key in self else None

    async def get(self, key: str) -> Any | None:
        self._record("get", key)
        if key not in self:
            self.entries.pop(key, None)
            return None
        try:
            return orjson.loads(self.entries[key][0])
        except orjson.JSONDecodeError as exc:
            raise CacheFailure("decode", key) from exc

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        self._record("set", key)
        try:
            payload = orjson.dumps(value)
        except TypeError as exc:
            raise CacheFailure("encode", key) from exc
        self.entries[key] = (payload, self.now + (ttl if ttl is not None else DEFAULT_TTL))

    async def delete(self, key: str) -> None:
        self._record("delete", key)
        self.entries.pop(key, None)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        MONGODB_URI="mongodb://localhost:27017",
        MONGODB_DB_NAME="coursehub_test",
        REDIS_URI="redis://localhost:6379/0",
        enable_metrics=False,
    )


@pytest.fixture
def store() -> FakeEntityStore:
    return FakeEntityStore()


@pytest.fixture
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def context(store: FakeEntityStore, cache: FakeCache) -> AppContext:
    return AppContext.build(store, cache)


@pytest.fixture
def courses(context: AppContext) -> CourseService:
    return context.courses


@pytest.fixture
def students(context: AppContext) -> StudentService:
    return context.students


@pytest.fixture
def app(settings: Settings, context: AppContext) -> FastAPI:
    application = create_app(settings)
    application.state.context = context
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """API client bound to the application without a network."""
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        yield client
