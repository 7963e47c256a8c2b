"""Entity store gateway over MongoDB collections.

Generic keyed-document operations, independent of entity shape. Documents are
returned as stored (``_id`` and references remain ObjectIds); services render
them for JSON.

Identities are validated before any network call. Every driver or BSON
encoding error is re-raised as EntityStoreFailure tagged with the attempted
operation.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Protocol

from bson.errors import BSONError
from pymongo.errors import PyMongoError

from coursehub.core.errors import EntityStoreFailure
from coursehub.core.ids import parse_identity
from coursehub.observability.metrics import record_store_failure

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase

logger = logging.getLogger(__name__)

Document = dict[str, Any]


class DocumentStore(Protocol):
    """Operations the entity services need from the document store."""

    async def get_by_id(self, collection: str, identity: str) -> Document | None: ...

    async def insert(self, collection: str, data: Mapping[str, Any]) -> str: ...

    async def update_by_id(
        self, collection: str, identity: str, fields: Mapping[str, Any]
    ) -> int: ...

    async def modify_by_id(
        self,
        collection: str,
        identity: str,
        update: Mapping[str, Any],
        condition: Mapping[str, Any] | None = None,
    ) -> int: ...

    async def delete_by_id(self, collection: str, identity: str) -> int: ...

    async def list_all(
        self, collection: str, filter: Mapping[str, Any] | None = None
    ) -> list[Document]: ...

    async def count(self, collection: str, filter: Mapping[str, Any] | None = None) -> int: ...


class EntityStore:
    """DocumentStore implementation over a Motor database handle."""

    def __init__(self, database: AsyncIOMotorDatabase):
        self.database = database

    def _collection(self, name: str) -> AsyncIOMotorCollection:
        return self.database[name]

    @asynccontextmanager
    async def _operation(self, operation: str, collection: str) -> AsyncIterator[None]:
        # BSON encoding errors are raised by the driver call before any round trip
        try:
            yield
        except (PyMongoError, BSONError, OverflowError) as exc:
            logger.error(f"Entity store {operation} on '{collection}' failed: {exc}")
            record_store_failure(operation, collection)
            raise EntityStoreFailure(operation, collection) from exc

    async def get_by_id(self, collection: str, identity: str) -> Document | None:
        """Find a document by identity.

        Returns:
            The document, or None if no document has this identity.

        Raises:
            InvalidIdentity: If identity is not a valid ObjectId string.
        """
        object_id = parse_identity(identity)
        async with self._operation("get", collection):
            return await self._collection(collection).find_one({"_id": object_id})

    async def insert(self, collection: str, data: Mapping[str, Any]) -> str:
        """Insert a document and return its assigned identity."""
        document = dict(data)
        async with self._operation("insert", collection):
            result = await self._collection(collection).insert_one(document)
        return str(result.inserted_id)

    async def update_by_id(
        self, collection: str, identity: str, fields: Mapping[str, Any]
    ) -> int:
        """Merge fields into a document (field-level $set).

        Returns the number of matched documents.
        """
        return await self.modify_by_id(collection, identity, {"$set": dict(fields)})

    async def modify_by_id(
        self,
        collection: str,
        identity: str,
        update: Mapping[str, Any],
        condition: Mapping[str, Any] | None = None,
    ) -> int:
        """Apply an update-operator document ($push, $pull, ...) to one document.

        Args:
            update: MongoDB update operators
            condition: Extra filter terms that must also hold for the match

        Returns the number of matched documents.
        """
        object_id = parse_identity(identity)
        query: dict[str, Any] = {**(condition or {}), "_id": object_id}
        async with self._operation("update", collection):
            result = await self._collection(collection).update_one(query, dict(update))
        return result.matched_count

    async def delete_by_id(self, collection: str, identity: str) -> int:
        """Delete a document by identity and return the deleted count."""
        object_id = parse_identity(identity)
        async with self._operation("delete", collection):
            result = await self._collection(collection).delete_one({"_id": object_id})
        return result.deleted_count

    async def list_all(
        self, collection: str, filter: Mapping[str, Any] | None = None
    ) -> list[Document]:
        """Return every document matching filter, fully materialized."""
        async with self._operation("list", collection):
            cursor = self._collection(collection).find(dict(filter or {}))
            return await cursor.to_list(length=None)

    async def count(self, collection: str, filter: Mapping[str, Any] | None = None) -> int:
        """Count documents matching filter."""
        async with self._operation("count", collection):
            return await self._collection(collection).count_documents(dict(filter or {}))
