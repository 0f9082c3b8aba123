"""
CSRF protection bound to the session token.

A token is 32 random hex characters followed by the first 8 characters of
the session token. Only the binding suffix is checked; nothing is stored
server-side.
"""

import hmac
import logging
import secrets

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from auth.security_logger import SecurityEvent, SecurityLogger

logger = logging.getLogger(__name__)

CSRF_HEADER = "X-CSRF-Token"
BINDING_LENGTH = 8
TOKEN_LENGTH = 32 + BINDING_LENGTH
SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def issue_csrf_token(session_token: str) -> str:
    return secrets.token_hex(16) + session_token[:BINDING_LENGTH]


def validate_csrf_token(session_token: str | None, presented: str | None) -> bool:
    """True iff `presented` is long enough and ends with the session binding."""
    if not presented or len(presented) < TOKEN_LENGTH:
        return False
    if not session_token or len(session_token) < BINDING_LENGTH:
        return False
    return hmac.compare_digest(
        presented[-BINDING_LENGTH:].encode("utf-8"),
        session_token[:BINDING_LENGTH].encode("utf-8"),
    )


def extract_session_token(request: Request) -> str | None:
    """Session token from the cookie, else from `Authorization: Bearer`."""
    token = request.cookies.get("session_token")
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


class CSRFMiddleware(BaseHTTPMiddleware):
    """Rejects state-changing requests without a matching X-CSRF-Token.

    Skipped for:
    1. Safe methods (GET, HEAD, OPTIONS)
    2. Exempt paths (the login endpoint)
    3. Requests that carry no session token; those fail auth later
    """

    def __init__(
        self,
        app,
        exempt_paths: tuple[str, ...] = (),
        security_logger: SecurityLogger | None = None,
    ):
        super().__init__(app)
        self._exempt_paths = exempt_paths
        self._security_logger = security_logger

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        if request.method in SAFE_METHODS or request.url.path in self._exempt_paths:
            return await call_next(request)

        session_token = extract_session_token(request)
        if not session_token:
            return await call_next(request)

        if validate_csrf_token(session_token, request.headers.get(CSRF_HEADER)):
            return await call_next(request)

        ip_address = request.client.host if request.client else None
        user_agent = request.headers.get("User-Agent")
        logger.warning(
            "CSRF token rejected: %s %s from %s (%s)",
            request.method, request.url.path, ip_address, user_agent,
        )
        if self._security_logger is not None:
            try:
                self._security_logger.log(
                    SecurityEvent.CSRF_REJECTED,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    details={"method": request.method, "path": request.url.path},
                )
            except Exception:
                logger.error("Failed to record CSRF rejection", exc_info=True)

        return JSONResponse(
            status_code=403,
            content=error_response(
                ErrorCodes.CSRF_INVALID,
                "Invalid or missing CSRF token",
            ).model_dump(mode="json"),
        )
