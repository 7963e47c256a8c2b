"""Domain error taxonomy for CourseHub.

Services raise these exceptions; the API layer maps them to HTTP responses
through ``status_code`` and ``code``. The ``text`` of an error is safe to show
to clients. Backend failures keep their cause on ``__cause__`` only.
"""

from __future__ import annotations

from enum import Enum


class DependencyKind(str, Enum):
    """External dependencies owned by the connection manager."""

    DOCUMENT_STORE = "mongodb"
    CACHE_STORE = "redis"


class CourseHubError(Exception):
    """Base class for all CourseHub errors."""

    status_code: int = 500
    code: str = "InternalServerError"

    def __init__(self, text: str):
        self.text = text
        super().__init__(text)


class InvalidIdentity(CourseHubError):
    """Identifier is not a valid document identity (400)."""

    status_code = 400
    code = "InvalidIdentity"

    def __init__(self, identifier: str, entity: str | None = None):
        self.identifier = identifier
        self.entity = entity
        label = f"{entity} identifier" if entity else "identifier"
        super().__init__(f"Invalid {label}: '{identifier}'")


class ValidationFailure(CourseHubError):
    """Required field missing or empty (400)."""

    status_code = 400
    code = "ValidationFailure"

    def __init__(self, text: str, fields: list[str] | None = None):
        self.fields = fields or []
        super().__init__(text)


class NotFound(CourseHubError):
    """No matching document (404)."""

    status_code = 404
    code = "NotFound"


class Conflict(CourseHubError):
    """Request conflicts with current state, e.g. duplicate enrollment (409)."""

    status_code = 409
    code = "Conflict"


class EntityStoreFailure(CourseHubError):
    """Document store operation failed."""

    code = "EntityStoreFailure"

    def __init__(self, operation: str, collection: str):
        self.operation = operation
        self.collection = collection
        super().__init__(f"Entity store {operation} on '{collection}' failed")


class CacheFailure(CourseHubError):
    """Cache store operation failed."""

    code = "CacheFailure"

    def __init__(self, operation: str, key: str):
        self.operation = operation
        self.key = key
        super().__init__(f"Cache {operation} for '{key}' failed")


class DependencyUnavailable(CourseHubError):
    """A dependency could not be reached within its retry budget.

    Raised only during startup; it aborts the process.
    """

    status_code = 503
    code = "DependencyUnavailable"

    def __init__(self, kind: DependencyKind, attempts: int, cause: BaseException | None = None):
        self.kind = kind
        self.attempts = attempts
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{kind.value} unavailable after {attempts} attempt(s){detail}")
