"""Process-wide application context.

Built once in the lifespan from the connected handles and stored on
``app.state.context``; routers reach the services through it.
"""

from __future__ import annotations

from dataclasses import dataclass

from coursehub.cache.redis import DEFAULT_TTL, CacheBackend, RedisCache
from coursehub.persistence.connections import ConnectionManager
from coursehub.persistence.gateway import DocumentStore, EntityStore
from coursehub.services.courses import CourseService
from coursehub.services.students import StudentService


@dataclass
class AppContext:
    store: DocumentStore
    cache: CacheBackend
    courses: CourseService
    students: StudentService
    connections: ConnectionManager | None = None

    @classmethod
    def build(
        cls,
        store: DocumentStore,
        cache: CacheBackend,
        ttl: int = DEFAULT_TTL,
        connections: ConnectionManager | None = None,
    ) -> AppContext:
        courses = CourseService(store, cache, ttl)
        students = StudentService(store, cache, courses, ttl)
        return cls(
            store=store,
            cache=cache,
            courses=courses,
            students=students,
            connections=connections,
        )

    @classmethod
    def from_connections(cls, connections: ConnectionManager, ttl: int = DEFAULT_TTL) -> AppContext:
        """Wire the services over the manager's connected handles."""
        return cls.build(
            EntityStore(connections.database),
            RedisCache(connections.redis, ttl),
            ttl=ttl,
            connections=connections,
        )
