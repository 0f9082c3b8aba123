"""HTTP routes for system settings."""

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from auth.authorization import AccessPolicy
from auth.dependencies import AdminRequired
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.types import User
from api.base import success_response
from system.service import SystemService

logger = logging.getLogger(__name__)


class DebugModeRequest(BaseModel):
    """Body of PUT /system/debug-mode."""

    enabled: bool


def create_system_router(
    system_service: SystemService,
    policy: AccessPolicy,
    admin: AdminRequired,
    security_logger: SecurityLogger,
    force_debug_mode: bool = False,
) -> APIRouter:
    """Create system router with injected service."""
    router = APIRouter(tags=["system"])

    @router.get("/debug-mode")
    async def get_debug_mode():
        """Effective debug mode. Public, so the login page can show a banner."""
        return success_response({
            "enabled": policy.debug_mode_enabled(),
            "forced": force_debug_mode,
        })

    @router.put("/debug-mode")
    async def set_debug_mode(body: DebugModeRequest, request: Request, user: User = Depends(admin)):
        """Persist the debug-mode flag. The environment override still wins."""
        system_service.set_debug_mode(body.enabled)
        logger.warning("Debug mode set to %s by user %s", body.enabled, user.id)
        security_logger.log(
            SecurityEvent.DEBUG_MODE_CHANGED,
            telegram_id=user.telegram_id,
            user_id=user.id,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("User-Agent"),
            details={"enabled": body.enabled},
        )
        return success_response({"enabled": body.enabled or force_debug_mode})

    return router
