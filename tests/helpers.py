"""Builders and constants shared by the test modules."""

import hashlib
import hmac
import time

from auth.types import TelegramLoginClaim, User
from core.models import Contact, Group
from utils.timezone import now_utc

BOT_TOKEN = "S"
ADMIN_GROUP = "Администраторы"

TEST_TELEGRAM_ID = 42
TEST_TELEGRAM_ID_B = 43


def sign_claim(bot_token: str = BOT_TOKEN, **fields) -> TelegramLoginClaim:
    """Build a claim and sign it the way Telegram does."""
    fields.setdefault("id", TEST_TELEGRAM_ID)
    fields.setdefault("auth_date", int(time.time()))
    data_check = "\n".join(
        sorted(f"{k}={v}" for k, v in fields.items() if v is not None and v != "")
    )
    secret = hashlib.sha256(bot_token.encode()).digest()
    digest = hmac.new(secret, data_check.encode(), hashlib.sha256).hexdigest()
    return TelegramLoginClaim(hash=digest, **fields)


def make_group(group_id: int = 1, name: str = ADMIN_GROUP) -> Group:
    now = now_utc()
    return Group(id=group_id, name=name, created_at=now, updated_at=now)


def make_contact(
    contact_id: int = 1,
    telegram_id: int | None = TEST_TELEGRAM_ID,
    groups: list[Group] | None = None,
    name: str = "Иван Петров",
) -> Contact:
    now = now_utc()
    return Contact(
        id=contact_id,
        name=name,
        phone="+79991234567",
        email="ivan@example.com",
        telegram_id=telegram_id,
        groups=groups or [],
        created_at=now,
        updated_at=now,
    )


def make_user(user_id: int = 1, telegram_id: int = TEST_TELEGRAM_ID, is_active: bool = True) -> User:
    return User(id=user_id, telegram_id=telegram_id, is_active=is_active, created_at=now_utc())
