"""Error responses for CourseHub.

Every error body uses the Result/Message structure:
``{"messages": [{"code", "messageType", "text", "timestamp"}]}``.
Server-side failures are reported with a generic text; their details go to
the log only.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import Enum

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from coursehub.core.errors import CourseHubError

logger = logging.getLogger(__name__)

GENERIC_ERROR_TEXT = "An unexpected error occurred"


class MessageType(str, Enum):
    """Type of message in error response."""

    ERROR = "Error"
    WARNING = "Warning"
    INFO = "Info"
    EXCEPTION = "Exception"


class Message(BaseModel):
    model_config = {"extra": "forbid", "populate_by_name": True}

    code: str
    message_type: MessageType = Field(alias="messageType")
    text: str
    timestamp: str | None = None


class Result(BaseModel):
    model_config = {"extra": "forbid"}

    messages: list[Message]


def error_response(
    status_code: int,
    code: str,
    text: str,
    message_type: MessageType = MessageType.ERROR,
) -> JSONResponse:
    result = Result(
        messages=[
            Message(
                code=code,
                messageType=message_type,
                text=text,
                timestamp=datetime.now(UTC).isoformat(),
            )
        ]
    )
    return JSONResponse(status_code=status_code, content=result.model_dump(by_alias=True))


async def coursehub_exception_handler(request: Request, exc: CourseHubError) -> JSONResponse:
    """Exception handler for domain errors."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.text}", exc_info=exc)
        return error_response(exc.status_code, exc.code, GENERIC_ERROR_TEXT, MessageType.EXCEPTION)
    return error_response(exc.status_code, exc.code, exc.text)


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies are client errors (400)."""
    fields = sorted({".".join(str(part) for part in error["loc"][1:]) for error in exc.errors()})
    text = "Malformed request body"
    if any(fields):
        text = f"{text}: {', '.join(field for field in fields if field)}"
    return error_response(400, "ValidationFailure", text)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Exception handler for unexpected errors."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return error_response(500, "InternalServerError", GENERIC_ERROR_TEXT, MessageType.EXCEPTION)
