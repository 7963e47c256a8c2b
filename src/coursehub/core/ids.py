from __future__ import annotations

from typing import Any

from bson import ObjectId

from coursehub.core.errors import InvalidIdentity


def is_valid_identity(value: Any) -> bool:
    """Return True if value is a 24-character hex ObjectId string or an ObjectId."""
    if isinstance(value, ObjectId):
        return True
    return isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value)


def parse_identity(value: Any, entity: str | None = None) -> ObjectId:
    """Convert an identity string to an ObjectId.

    Only 24-character hex strings are accepted; the 12-byte form that
    ObjectId() tolerates is rejected so path segments stay unambiguous.
    """
    if not is_valid_identity(value):
        raise InvalidIdentity(str(value), entity)
    return value if isinstance(value, ObjectId) else ObjectId(value)


def to_json_document(value: Any) -> Any:
    """Render ObjectIds as hex strings throughout a document."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: to_json_document(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_document(item) for item in value]
    return value
