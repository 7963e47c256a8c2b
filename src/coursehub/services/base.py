"""Read-through / write-invalidate protocol shared by the entity services.

Reads consult the cache first and populate it on a store hit. Writes go to
the store and then delete the cache key; they never write the new value to
the cache. The cache is advisory, so its failures degrade a request to the
store path and are logged, while store failures always propagate.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, ClassVar

from coursehub.cache.keys import CacheKeys, EntityType
from coursehub.cache.redis import DEFAULT_TTL, CacheBackend
from coursehub.core.errors import CacheFailure, NotFound, ValidationFailure
from coursehub.core.ids import parse_identity, to_json_document
from coursehub.observability.metrics import (
    record_cache_failure,
    record_cache_hit,
    record_cache_miss,
)
from coursehub.persistence.gateway import Document, DocumentStore

logger = logging.getLogger(__name__)


def is_present(value: Any) -> bool:
    """A required field counts as present when it is not None or blank text."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


class EntityService:
    """Cache-aware CRUD over one collection.

    Subclasses set the entity naming, the required field set and the fields
    that only the service itself may write.
    """

    entity: ClassVar[EntityType]
    label: ClassVar[str]
    collection: ClassVar[str]
    required_fields: ClassVar[tuple[str, ...]] = ()
    managed_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self, store: DocumentStore, cache: CacheBackend, ttl: int = DEFAULT_TTL):
        self.store = store
        self.cache = cache
        self.ttl = ttl

    def cache_key(self, identity: str) -> str:
        return CacheKeys.for_entity(self.entity, identity)

    def not_found(self) -> NotFound:
        return NotFound(f"{self.label} not found")

    # -------------------------------------------------------------------------
    # Cache helpers (failures degrade, never propagate)
    # -------------------------------------------------------------------------

    async def _cache_get(self, key: str) -> Any | None:
        try:
            return await self.cache.get(key)
        except CacheFailure as exc:
            logger.warning(f"Cache read for {key} failed, falling back to store: {exc.__cause__}")
            record_cache_failure("get")
            return None

    async def _cache_set(self, key: str, snapshot: Document) -> None:
        try:
            await self.cache.set(key, snapshot, self.ttl)
        except CacheFailure as exc:
            logger.warning(f"Cache population for {key} failed: {exc.__cause__}")
            record_cache_failure("set")

    async def invalidate(self, identity: str) -> None:
        """Delete the cache entry of a mutated document."""
        key = self.cache_key(identity)
        try:
            await self.cache.delete(key)
        except CacheFailure as exc:
            logger.error(f"Cache invalidation for {key} failed: {exc.__cause__}")
            record_cache_failure("delete")

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def check_identity(self, identity: str) -> None:
        parse_identity(identity, self.label)

    def reject_managed(self, data: Mapping[str, Any]) -> None:
        managed = [name for name in self.managed_fields if name in data]
        if managed:
            raise ValidationFailure(f"Fields cannot be written directly: {', '.join(managed)}", managed)

    def validate_new(self, data: Mapping[str, Any]) -> None:
        """Check that every required field is present and non-empty."""
        if "_id" in data:
            raise ValidationFailure("Field '_id' is assigned by the store", ["_id"])
        self.reject_managed(data)
        missing = [name for name in self.required_fields if not is_present(data.get(name))]
        if missing:
            raise ValidationFailure(
                f"{self.label} requires non-empty: {', '.join(self.required_fields)}",
                missing,
            )

    def validate_changes(self, fields: Mapping[str, Any]) -> None:
        """Check a partial update; required fields may be omitted but not blanked."""
        if not fields:
            raise ValidationFailure("Update body must contain at least one field")
        if "_id" in fields:
            raise ValidationFailure("Field '_id' cannot be modified", ["_id"])
        self.reject_managed(fields)
        blanked = [name for name in self.required_fields if name in fields and not is_present(fields[name])]
        if blanked:
            raise ValidationFailure(f"Fields must not be empty: {', '.join(blanked)}", blanked)

    @staticmethod
    def validate_filter(filter: Mapping[str, Any] | None) -> dict[str, Any]:
        filter = dict(filter or {})
        operators = [key for key in filter if key.startswith("$")]
        if operators:
            raise ValidationFailure("Top-level query operators are not allowed", operators)
        return filter

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def get(self, identity: str) -> Document:
        """Read one document through the cache.

        Raises:
            InvalidIdentity: Before any cache or store access.
            NotFound: If the store has no such document; absence is not cached.
        """
        self.check_identity(identity)
        key = self.cache_key(identity)

        cached = await self._cache_get(key)
        if cached is not None:
            record_cache_hit(self.entity)
            return cached

        record_cache_miss(self.entity)
        document = await self.store.get_by_id(self.collection, identity)
        if document is None:
            raise self.not_found()

        snapshot = to_json_document(document)
        await self._cache_set(key, snapshot)
        return snapshot

    async def create(self, data: Mapping[str, Any]) -> str:
        """Insert a new document and return its identity. The cache is not touched."""
        self.validate_new(data)
        identity = await self.store.insert(self.collection, dict(data))
        logger.info(f"{self.label} {identity} created")
        return identity

    async def update(self, identity: str, fields: Mapping[str, Any]) -> None:
        """Merge fields into a document, then invalidate its cache entry."""
        self.check_identity(identity)
        self.validate_changes(fields)

        matched = await self.store.update_by_id(self.collection, identity, dict(fields))
        if matched == 0:
            raise self.not_found()

        await self.invalidate(identity)
        logger.info(f"{self.label} {identity} updated")

    async def delete(self, identity: str) -> None:
        """Delete a document, then invalidate its cache entry."""
        self.check_identity(identity)

        deleted = await self.store.delete_by_id(self.collection, identity)
        if deleted == 0:
            raise self.not_found()

        await self.invalidate(identity)
        logger.info(f"{self.label} {identity} deleted")

    async def list(self, filter: Mapping[str, Any] | None = None) -> list[Document]:
        """Return every document matching filter. Lists bypass the cache."""
        query = self.validate_filter(filter)
        documents = await self.store.list_all(self.collection, query)
        return [to_json_document(document) for document in documents]

    async def count(self) -> int:
        return await self.store.count(self.collection)
