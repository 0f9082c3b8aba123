"""Security middleware for FastAPI - session resolution."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from auth.csrf import extract_session_token
from auth.session import SessionManager, token_prefix
from auth.exceptions import SessionExpiredError, SessionNotFoundError
from api.base import error_response, ErrorCodes

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session_token"


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that resolves the session and attaches the user.

    Never rejects a request on its own; routes decide what they need:
    1. Extracts the token from the 'session_token' cookie or Bearer header
    2. Resolves it via SessionManager
    3. Sets request.state.user (None when anonymous) and session_token
    4. Records why resolution failed in request.state.auth_error and
       clears a stale cookie on the way out

    A store outage answers 500 rather than silently treating the caller
    as anonymous.
    """

    def __init__(self, app, session_manager: SessionManager):
        super().__init__(app)
        self._session_manager = session_manager

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        request.state.user = None
        request.state.session_token = None
        request.state.auth_error = None

        session_token = extract_session_token(request)
        if not session_token:
            return await call_next(request)

        stale = False
        try:
            request.state.user = self._session_manager.resolve(session_token)
            request.state.session_token = session_token
        except (SessionNotFoundError, SessionExpiredError) as e:
            logger.info("Session %s... rejected: %s", token_prefix(session_token), e)
            request.state.auth_error = ErrorCodes.SESSION_EXPIRED
            stale = True
        except Exception:
            logger.exception("Session lookup failed")
            return JSONResponse(
                status_code=500,
                content=error_response(
                    ErrorCodes.INTERNAL_ERROR,
                    "An internal error occurred",
                ).model_dump(mode="json"),
            )

        response = await call_next(request)
        if stale and SESSION_COOKIE in request.cookies and not _sets_session_cookie(response):
            response.delete_cookie(SESSION_COOKIE, path="/")
        return response


def _sets_session_cookie(response) -> bool:
    """True if the route already issued a new session cookie."""
    prefix = f"{SESSION_COOKIE}="
    return any(
        value.startswith(prefix)
        for value in response.headers.getlist("set-cookie")
    )
