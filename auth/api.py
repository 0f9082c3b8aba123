"""HTTP routes for authentication."""

import ipaddress

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from auth.csrf import issue_csrf_token
from auth.dependencies import AdminRequired, require_user
from auth.security_middleware import SESSION_COOKIE
from auth.service import AuthService
from auth.telegram import validate_telegram_claim
from auth.types import TelegramLoginClaim, User
from core.exceptions import ValidationFailedError
from core.models import OwnContactUpdate
from api.base import success_response
from utils.timezone import seconds_until


def _get_client_ip(request: Request) -> str | None:
    """Extract valid IP address from request, or None if invalid."""
    if not request.client:
        return None
    host = request.client.host
    try:
        ipaddress.ip_address(host)
        return host
    except ValueError:
        return None


def create_auth_router(
    auth_service: AuthService,
    admin: AdminRequired,
    cookie_secure: bool = True,
) -> APIRouter:
    """Create auth router with injected service."""
    router = APIRouter(tags=["auth"])

    @router.post("/telegram")
    async def telegram_login(request: Request, response: Response, claim: TelegramLoginClaim):
        """Log in with a Telegram Login Widget payload.

        Sets the session_token cookie on success.
        """
        errors = validate_telegram_claim(claim)
        if errors:
            raise ValidationFailedError(errors)

        result = auth_service.authenticate_with_telegram(
            claim,
            ip_address=_get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
        )
        session = result.session

        response.set_cookie(
            key=SESSION_COOKIE,
            value=session.token,
            httponly=True,
            secure=cookie_secure,
            samesite="strict",
            path="/",
            max_age=seconds_until(session.expired_at),
            expires=session.expired_at,
        )

        return success_response({
            "session_token": session.token,
            "expires_at": session.expired_at.isoformat(),
        })

    @router.get("/me")
    async def get_current_user(user: User = Depends(require_user)):
        """Profile of the caller, with admin flag and linked contact."""
        return success_response(auth_service.get_profile(user).model_dump(mode="json"))

    @router.post("/logout")
    async def logout(request: Request):
        """Logout - revoke session and clear cookie."""
        session_token = getattr(request.state, "session_token", None) or request.cookies.get(SESSION_COOKIE)

        if session_token:
            auth_service.logout(
                session_token=session_token,
                ip_address=_get_client_ip(request),
            )

        response = JSONResponse(
            content=success_response({"message": "Logged out successfully"}).model_dump(mode="json"),
        )
        response.delete_cookie(
            key=SESSION_COOKIE,
            path="/",
            secure=cookie_secure,
            httponly=True,
            samesite="strict",
        )
        return response

    @router.get("/csrf-token")
    async def csrf_token(request: Request, user: User = Depends(require_user)):
        """Issue a CSRF token bound to the caller's session."""
        return success_response({"csrf_token": issue_csrf_token(request.state.session_token)})

    @router.put("/contact")
    async def update_own_contact(body: OwnContactUpdate, user: User = Depends(require_user)):
        """Edit the caller's own directory entry."""
        contact = auth_service.update_own_contact(user, body)
        return success_response(contact.model_dump(mode="json"))

    @router.post("/users/{user_id}/deactivate")
    async def deactivate_user(user_id: int, request: Request, actor: User = Depends(admin)):
        auth_service.deactivate_user(user_id, actor, ip_address=_get_client_ip(request))
        return success_response({"user_id": user_id, "is_active": False})

    @router.post("/users/{user_id}/activate")
    async def activate_user(user_id: int, request: Request, actor: User = Depends(admin)):
        auth_service.activate_user(user_id, actor, ip_address=_get_client_ip(request))
        return success_response({"user_id": user_id, "is_active": True})

    return router
