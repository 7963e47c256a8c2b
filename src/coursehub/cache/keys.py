"""Cache key schema for CourseHub.

Key format: {entity_type}:{identity}

Where:
- entity_type: "course" or "student"
- identity: 24-character hex ObjectId of the cached document
"""

from __future__ import annotations

from typing import Literal

EntityType = Literal["course", "student"]


class CacheKeys:
    """Cache key generator following consistent naming convention."""

    COURSE = "course"
    STUDENT = "student"

    @classmethod
    def for_entity(cls, entity_type: EntityType, identity: str) -> str:
        return f"{entity_type}:{identity}"

    @classmethod
    def course(cls, identity: str) -> str:
        """Key for a course document snapshot."""
        return cls.for_entity("course", identity)

    @classmethod
    def student(cls, identity: str) -> str:
        """Key for a student document snapshot."""
        return cls.for_entity("student", identity)

    @classmethod
    def parse_key(cls, key: str) -> dict[str, str] | None:
        """Parse a cache key into its components.

        Returns None if the key doesn't match the expected format.
        """
        parts = key.split(":")
        if len(parts) != 2 or parts[0] not in (cls.COURSE, cls.STUDENT) or not parts[1]:
            return None
        return {"entity_type": parts[0], "identity": parts[1]}
