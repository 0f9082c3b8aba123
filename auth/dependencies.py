"""
FastAPI Depends() helpers for authentication.

AuthMiddleware has already resolved the session into request.state.user.

optional_user() is the soft variant (returns None when anonymous).
require_user() raises NotAuthenticatedError or SessionExpiredError.
AdminRequired wraps require_user() and raises AuthorizationDeniedError
when the caller has no admin rights and debug mode is off.
"""

import logging

from fastapi import Request

from auth.authorization import AccessPolicy
from auth.exceptions import AuthorizationDeniedError, NotAuthenticatedError, SessionExpiredError
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.types import User

logger = logging.getLogger(__name__)


def optional_user(request: Request) -> User | None:
    return getattr(request.state, "user", None)


def require_user(request: Request) -> User:
    """Require authentication.

    Use as a FastAPI dependency:
        @router.get("/me")
        async def route(user: User = Depends(require_user)): ...
    """
    user = optional_user(request)
    if user is not None:
        return user
    if getattr(request.state, "auth_error", None):
        raise SessionExpiredError("Invalid or expired session")
    raise NotAuthenticatedError("Authentication required")


class AdminRequired:
    """Require admin rights (or debug mode).

    Use as a FastAPI dependency:
        admin = AdminRequired(policy)
        @router.post("/contacts")
        async def route(user: User = Depends(admin)): ...
    """

    def __init__(self, policy: AccessPolicy, security_logger: SecurityLogger | None = None):
        self._policy = policy
        self._security_logger = security_logger

    def __call__(self, request: Request) -> User:
        user = require_user(request)
        if self._policy.has_admin_rights(user):
            return user

        logger.warning("Admin access denied for user %s on %s", user.id, request.url.path)
        if self._security_logger is not None:
            try:
                self._security_logger.log(
                    SecurityEvent.ADMIN_DENIED,
                    telegram_id=user.telegram_id,
                    user_id=user.id,
                    ip_address=request.client.host if request.client else None,
                    user_agent=request.headers.get("User-Agent"),
                    details={"method": request.method, "path": request.url.path},
                )
            except Exception:
                logger.error("Failed to record admin denial", exc_info=True)
        raise AuthorizationDeniedError("Admin rights required")
