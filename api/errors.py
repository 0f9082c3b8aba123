"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from auth.exceptions import (
    AuthError,
    AuthorizationDeniedError,
    InvalidTelegramAuthError,
    NotAuthenticatedError,
    SessionExpiredError,
    SessionNotFoundError,
    UserInactiveError,
    UserNotFoundError,
)
from core.exceptions import (
    ContactConflictError,
    ContactNotFoundError,
    DirectoryError,
    GroupNameExistsError,
    GroupNotFoundError,
    MembershipNotFoundError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

# exception type -> (status, code, client message); None keeps str(exc)
_AUTH_ERRORS: dict[type[AuthError], tuple[int, str, str | None]] = {
    InvalidTelegramAuthError: (401, ErrorCodes.INVALID_TELEGRAM_AUTH, "Invalid Telegram authentication"),
    UserInactiveError: (401, ErrorCodes.INVALID_TELEGRAM_AUTH, "Invalid Telegram authentication"),
    NotAuthenticatedError: (401, ErrorCodes.NOT_AUTHENTICATED, "Authentication required"),
    SessionNotFoundError: (401, ErrorCodes.SESSION_EXPIRED, "Invalid or expired session"),
    SessionExpiredError: (401, ErrorCodes.SESSION_EXPIRED, "Invalid or expired session"),
    AuthorizationDeniedError: (403, ErrorCodes.AUTHORIZATION_DENIED, "Admin rights required"),
    UserNotFoundError: (404, ErrorCodes.NOT_FOUND, None),
}

_DIRECTORY_ERRORS: dict[type[DirectoryError], tuple[int, str]] = {
    ContactNotFoundError: (404, ErrorCodes.NOT_FOUND),
    GroupNotFoundError: (404, ErrorCodes.NOT_FOUND),
    MembershipNotFoundError: (404, ErrorCodes.NOT_FOUND),
    ContactConflictError: (409, ErrorCodes.ALREADY_EXISTS),
    GroupNameExistsError: (409, ErrorCodes.ALREADY_EXISTS),
}


def _json_error(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message, details).model_dump(mode="json"),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        status_code, code, message = _AUTH_ERRORS.get(
            type(exc), (401, ErrorCodes.NOT_AUTHENTICATED, "Authentication required")
        )
        return _json_error(status_code, code, message or str(exc))

    @app.exception_handler(ValidationFailedError)
    async def validation_failed_handler(request: Request, exc: ValidationFailedError):
        return _json_error(
            422,
            ErrorCodes.VALIDATION_ERROR,
            "Request validation failed",
            [e.model_dump() for e in exc.errors],
        )

    @app.exception_handler(DirectoryError)
    async def directory_error_handler(request: Request, exc: DirectoryError):
        status_code, code = _DIRECTORY_ERRORS.get(type(exc), (400, ErrorCodes.VALIDATION_ERROR))
        return _json_error(status_code, code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", "invalid value"),
            }
            for err in exc.errors()
        ]
        return _json_error(422, ErrorCodes.VALIDATION_ERROR, "Request validation failed", details)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return _json_error(500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
