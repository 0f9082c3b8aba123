"""Authentication configuration."""

import os

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUTHY


class AuthConfig(BaseModel):
    """
    Authentication configuration.

    Durations are in their natural units (seconds for the Telegram
    freshness window, hours for sessions).
    """

    # Session settings
    session_expiry_hours: int = Field(
        default=168,  # 7 days
        description="Session lifetime in hours",
        ge=1,
        le=2160,
    )
    max_sessions_per_user: int = Field(
        default=0,
        description="Live sessions kept per user; the oldest is revoked past this. 0 = unlimited",
        ge=0,
    )

    # Telegram login
    telegram_auth_max_age_seconds: int = Field(
        default=86400,
        description="Reject login claims whose auth_date is older than this",
        ge=60,
        le=86400 * 7,
    )

    # Authorization
    admin_group_name: str = Field(
        default="Администраторы",
        description="Members of this group (exact name) get admin rights",
        min_length=1,
    )
    force_debug_mode: bool = Field(
        default=False,
        description="Grant admin rights to every authenticated user. Never in production.",
    )
    reactivate_inactive_users: bool = Field(
        default=False,
        description="Reactivate a deactivated user on successful login instead of refusing",
    )

    # Cookies and CSRF
    cookie_secure: bool = Field(
        default=True,
        description="Set the Secure attribute on the session cookie",
    )
    csrf_exempt_paths: tuple[str, ...] = Field(
        default=("/api/v1/auth/telegram",),
        description="Paths that never require a CSRF token",
    )

    @classmethod
    def from_env(cls) -> "AuthConfig":
        """Build config from environment variables, falling back to defaults."""
        kwargs: dict = {
            "force_debug_mode": _env_flag("DEBUG_MODE", False),
            "reactivate_inactive_users": _env_flag("REACTIVATE_INACTIVE_USERS", False),
            "cookie_secure": _env_flag("COOKIE_SECURE", True),
        }
        if os.getenv("SESSION_EXPIRY_HOURS"):
            kwargs["session_expiry_hours"] = int(os.environ["SESSION_EXPIRY_HOURS"])
        if os.getenv("MAX_SESSIONS_PER_USER"):
            kwargs["max_sessions_per_user"] = int(os.environ["MAX_SESSIONS_PER_USER"])
        if os.getenv("ADMIN_GROUP_NAME"):
            kwargs["admin_group_name"] = os.environ["ADMIN_GROUP_NAME"]
        return cls(**kwargs)
