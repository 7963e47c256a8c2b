"""Tests for Result/Message error responses."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from coursehub.api.errors import (
    Message,
    MessageType,
    Result,
    coursehub_exception_handler,
    generic_exception_handler,
)
from coursehub.core.errors import CacheFailure, NotFound


def fake_request() -> MagicMock:
    request = MagicMock()
    request.method = "GET"
    request.url.path = "/api/courses/x"
    return request


class TestMessage:
    """Test Message model."""

    def test_serializes_by_alias(self) -> None:
        message = Message(code="NotFound", message_type=MessageType.ERROR, text="Course not found")

        assert message.model_dump(by_alias=True) == {
            "code": "NotFound",
            "messageType": MessageType.ERROR,
            "text": "Course not found",
            "timestamp": None,
        }

    def test_result_wraps_messages(self) -> None:
        result = Result(messages=[Message(code="E1", message_type=MessageType.ERROR, text="First")])
        assert len(result.messages) == 1


class TestHandlers:
    @pytest.mark.asyncio
    async def test_client_error_keeps_text(self) -> None:
        response = await coursehub_exception_handler(fake_request(), NotFound("Course not found"))

        body = json.loads(response.body)
        assert response.status_code == 404
        assert body["messages"][0]["text"] == "Course not found"
        assert body["messages"][0]["messageType"] == "Error"

    @pytest.mark.asyncio
    async def test_server_error_hides_text(self) -> None:
        response = await coursehub_exception_handler(fake_request(), CacheFailure("get", "course:1"))

        body = json.loads(response.body)
        assert response.status_code == 500
        assert body["messages"][0]["code"] == "CacheFailure"
        assert "course:1" not in body["messages"][0]["text"]

    @pytest.mark.asyncio
    async def test_unexpected_error(self) -> None:
        response = await generic_exception_handler(fake_request(), KeyError("boom"))

        body = json.loads(response.body)
        assert response.status_code == 500
        assert body["messages"][0]["code"] == "InternalServerError"
        assert body["messages"][0]["messageType"] == "Exception"
