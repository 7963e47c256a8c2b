"""Persistence layer: dependency connections and the entity store gateway."""

from coursehub.persistence.connections import (
    ConnectionManager,
    RetryPolicy,
    connect_with_retry,
    create_mongo_client,
    create_redis_client,
)
from coursehub.persistence.gateway import Document, DocumentStore, EntityStore

__all__ = [
    "ConnectionManager",
    "Document",
    "DocumentStore",
    "EntityStore",
    "RetryPolicy",
    "connect_with_retry",
    "create_mongo_client",
    "create_redis_client",
]
