"""Tests for document identity parsing."""

from __future__ import annotations

import pytest
from bson import ObjectId

from coursehub.core.errors import InvalidIdentity
from coursehub.core.ids import is_valid_identity, parse_identity, to_json_document


class TestIdentity:
    """Test identity validation."""

    def test_hex_string_is_valid(self) -> None:
        assert is_valid_identity("65f0c0ffee0000000000abcd") is True

    def test_object_id_is_valid(self) -> None:
        assert is_valid_identity(ObjectId()) is True

    @pytest.mark.parametrize(
        "value",
        ["", "abc", "65f0c0ffee0000000000abcz", "65f0c0ffee0000000000abcd0", "twelve bytes", None, 42],
    )
    def test_invalid_values(self, value) -> None:
        assert is_valid_identity(value) is False

    def test_parse_returns_object_id(self) -> None:
        assert parse_identity("65f0c0ffee0000000000abcd") == ObjectId("65f0c0ffee0000000000abcd")

    def test_parse_error_names_entity(self) -> None:
        with pytest.raises(InvalidIdentity, match="Invalid Course identifier: 'bad'") as exc_info:
            parse_identity("bad", "Course")

        assert exc_info.value.identifier == "bad"
        assert exc_info.value.status_code == 400


class TestJsonDocument:
    """Test ObjectId rendering."""

    def test_nested_ids_become_strings(self) -> None:
        course = ObjectId()
        student = ObjectId()

        rendered = to_json_document(
            {"_id": student, "courses": [course], "profile": {"mentor": course}, "age": 20}
        )

        assert rendered == {
            "_id": str(student),
            "courses": [str(course)],
            "profile": {"mentor": str(course)},
            "age": 20,
        }
