"""Cache layer for CourseHub.

Provides Redis caching with the read-through / write-invalidate pattern:
- Single-document snapshots are cached lazily on read misses
- Mutations delete the affected key, they never write the new value
- TTL-based expiration bounds staleness and memory use
"""

from coursehub.cache.keys import CacheKeys
from coursehub.cache.redis import DEFAULT_TTL, CacheBackend, RedisCache

__all__ = [
    "CacheBackend",
    "CacheKeys",
    "DEFAULT_TTL",
    "RedisCache",
]
