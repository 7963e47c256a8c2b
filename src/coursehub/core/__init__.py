"""Core domain types: error taxonomy and document identities."""

from coursehub.core.errors import (
    CacheFailure,
    Conflict,
    CourseHubError,
    DependencyKind,
    DependencyUnavailable,
    EntityStoreFailure,
    InvalidIdentity,
    NotFound,
    ValidationFailure,
)
from coursehub.core.ids import is_valid_identity, parse_identity, to_json_document

__all__ = [
    "CacheFailure",
    "Conflict",
    "CourseHubError",
    "DependencyKind",
    "DependencyUnavailable",
    "EntityStoreFailure",
    "InvalidIdentity",
    "NotFound",
    "ValidationFailure",
    "is_valid_identity",
    "parse_identity",
    "to_json_document",
]
