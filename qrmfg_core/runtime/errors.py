"""
Error model shared by every qrmfg failure.

A ServiceError pairs a machine-readable code with a message that is safe to
show callers, and knows the HTTP status it is rendered with.
"""

from __future__ import annotations

import uuid
from typing import Any


class ServiceError(Exception):
    """Base error carrying a code, a safe message and a correlation id.

    Attributes:
        code: Machine-readable error code, one of ErrorCode.
        message_safe: Message safe to return to callers and to log.
        message_debug: Internal detail, never put in responses.
        cause: The underlying exception, if any.
        debug_id: Short id tying a response to its log lines.
    """

    status_code = 500

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        cause: Exception | None = None,
        debug_id: str | None = None,
    ):
        super().__init__(message_safe)
        self.code = code
        self.message_safe = message_safe
        self.message_debug = message_debug
        self.cause = cause
        self.debug_id = debug_id or uuid.uuid4().hex[:8]

    def __str__(self) -> str:
        return f"[{self.code}] {self.message_safe}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, debug_id={self.debug_id!r})"

    def to_dict(self) -> dict[str, Any]:
        """Response body; message_debug is left out."""
        return {
            "code": self.code,
            "message": self.message_safe,
            "debug_id": self.debug_id,
        }


class ErrorCode:
    """Standard error codes."""

    # Authentication/Authorization
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    INSUFFICIENT_ROLE = "INSUFFICIENT_ROLE"

    # Plant scoping
    PLANT_ACCESS_DENIED = "PLANT_ACCESS_DENIED"
    PLANT_FILTERING_FAILED = "PLANT_FILTERING_FAILED"

    # Validation
    INVALID_INPUT = "INVALID_INPUT"

    # Internal
    INTERNAL_ERROR = "INTERNAL_ERROR"
