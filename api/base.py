"""Unified API response format and error handling."""

from typing import Any
from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field

from utils.request_context import get_request_id
from utils.timezone import now_utc


class APIError(BaseModel):
    """Error details in API response."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[dict[str, Any]] | None = Field(
        default=None,
        description="Per-field problems for VALIDATION_ERROR",
    )


class APIMeta(BaseModel):
    """Metadata included in every API response."""

    timestamp: datetime = Field(..., description="Response timestamp (UTC)")
    request_id: str = Field(..., description="Unique request identifier for tracing")


def _request_id() -> str:
    """ID of the current request, or a fresh one outside a request."""
    return get_request_id() or str(uuid4())


class APIResponse(BaseModel):
    """
    Unified response format for all API endpoints.

    Every endpoint returns this structure, making client parsing predictable.
    """

    success: bool
    data: Any | None = None
    error: APIError | None = None
    meta: APIMeta


def success_response(data: Any) -> APIResponse:
    """Create a success response."""
    return APIResponse(
        success=True,
        data=data,
        error=None,
        meta=APIMeta(
            timestamp=now_utc(),
            request_id=_request_id(),
        ),
    )


def error_response(
    code: str,
    message: str,
    details: list[dict[str, Any]] | None = None,
) -> APIResponse:
    """Create an error response."""
    return APIResponse(
        success=False,
        data=None,
        error=APIError(code=code, message=message, details=details),
        meta=APIMeta(
            timestamp=now_utc(),
            request_id=_request_id(),
        ),
    )


class ErrorCodes:
    """Standard error codes for consistent error handling."""

    # Authentication
    INVALID_TELEGRAM_AUTH = "INVALID_TELEGRAM_AUTH"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    SESSION_EXPIRED = "SESSION_EXPIRED"

    # Authorization
    AUTHORIZATION_DENIED = "AUTHORIZATION_DENIED"
    CSRF_INVALID = "CSRF_INVALID"

    # Resource Errors
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Infrastructure
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
