"""
Telegram Login Widget signature verification.

Telegram signs the widget payload with HMAC-SHA256. The key is the SHA-256
digest of the bot token; the message is the data-check string built from
every present field except `hash`, as sorted `key=value` lines.

See https://core.telegram.org/widgets/login#checking-authorization
"""

import hashlib
import hmac
import logging
import time

from auth.types import TelegramLoginClaim
from core.validation import FieldError

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_SECONDS = 86400


def build_data_check_string(claim: TelegramLoginClaim) -> str:
    """
    Sorted `key=value` lines joined with newlines.

    Values are used raw (no URL encoding). Absent or empty optional fields
    are left out entirely, not sent as `key=`.
    """
    fields = claim.model_dump(exclude={"hash"})
    pairs = [
        f"{key}={value}"
        for key, value in fields.items()
        if value is not None and value != ""
    ]
    return "\n".join(sorted(pairs))


def compute_telegram_hash(claim: TelegramLoginClaim, bot_token: str) -> str:
    secret_key = hashlib.sha256(bot_token.encode("utf-8")).digest()
    data_check_string = build_data_check_string(claim)
    return hmac.new(
        secret_key,
        data_check_string.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify_telegram_login(
    claim: TelegramLoginClaim,
    bot_token: str,
    now: int | None = None,
    max_age: int = DEFAULT_MAX_AGE_SECONDS,
) -> bool:
    """
    Check a login claim's signature and freshness.

    Args:
        claim: Payload from the login widget
        bot_token: Bot token shared with Telegram
        now: Current unix time; defaults to the wall clock
        max_age: Oldest acceptable auth_date, in seconds

    Returns:
        True only if the digest matches and the claim is at most
        `max_age` seconds old. Never raises.
    """
    if not bot_token or not claim.hash:
        return False

    expected = compute_telegram_hash(claim, bot_token)
    if not hmac.compare_digest(expected.encode("utf-8"), claim.hash.encode("utf-8")):
        logger.debug("Telegram hash mismatch for telegram_id=%s", claim.id)
        return False

    current = int(time.time()) if now is None else now
    if current - claim.auth_date > max_age:
        logger.debug(
            "Telegram claim for telegram_id=%s is %ss old",
            claim.id, current - claim.auth_date,
        )
        return False

    return True


def validate_telegram_claim(claim: TelegramLoginClaim) -> list[FieldError]:
    """Shape checks done before any cryptography."""
    errors: list[FieldError] = []
    if claim.id <= 0:
        errors.append(FieldError(field="id", message="must be a positive integer"))
    if claim.auth_date <= 0:
        errors.append(FieldError(field="auth_date", message="must be a positive unix timestamp"))
    if not claim.hash.strip():
        errors.append(FieldError(field="hash", message="must not be empty"))
    return errors
