"""Pydantic models for auth domain."""

from datetime import datetime

from pydantic import BaseModel, Field

from core.models import ContactSummary


class TelegramLoginClaim(BaseModel):
    """
    Payload the Telegram Login Widget hands to the browser.

    Consumed once by the signature verifier. Unknown keys are ignored.
    """

    id: int
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None
    photo_url: str | None = None
    auth_date: int = Field(..., description="Unix seconds when Telegram signed the claim")
    hash: str = Field(..., description="Hex HMAC-SHA256 over the data-check string")


class User(BaseModel):
    """A person who has logged in at least once."""

    id: int
    telegram_id: int
    is_active: bool = True
    contact_id: int | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class Session(BaseModel):
    """An active user session."""

    token: str = Field(..., description="Session token (opaque string)")
    user_id: int
    created_at: datetime
    expired_at: datetime


class AuthenticatedUser(BaseModel):
    """User info returned after successful authentication."""

    user: User
    session: Session


class UserProfile(BaseModel):
    """What GET /auth/me returns about the caller."""

    id: int
    telegram_id: int
    is_active: bool
    is_admin: bool
    created_at: datetime
    contact: ContactSummary | None = None
