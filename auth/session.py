"""Session token lifecycle management.

Sessions are stored in Valkey with TTL matching the remaining lifetime.
Token format is cryptographically random (secrets.token_urlsafe).
Nothing is cached in process memory; every check reads the store.
"""

import logging
import secrets
from datetime import timedelta

from clients.valkey_client import ValkeyClient
from auth.config import AuthConfig
from auth.database import AuthDatabase
from auth.types import Session, User
from auth.exceptions import SessionExpiredError, SessionNotFoundError
from utils.timezone import now_utc, parse_iso, seconds_until

logger = logging.getLogger(__name__)


def token_prefix(token: str) -> str:
    """First 8 characters of a token, the only part ever written to logs."""
    return token[:8]


class SessionManager:
    """Session token lifecycle management.

    Each login mints a fresh session; earlier sessions stay valid until
    they expire or are revoked. A per-user index set lets all of a user's
    sessions be revoked at once.
    """

    KEY_PREFIX = "session:"
    USER_INDEX_PREFIX = "user_sessions:"

    def __init__(self, valkey: ValkeyClient, config: AuthConfig, users: AuthDatabase):
        self._valkey = valkey
        self._config = config
        self._users = users

    def _key(self, token: str) -> str:
        """Generate Valkey key for session token."""
        return f"{self.KEY_PREFIX}{token}"

    def _user_key(self, user_id: int) -> str:
        return f"{self.USER_INDEX_PREFIX}{user_id}"

    def create_session(self, user_id: int) -> Session:
        """Create new session for user.

        One store write for the session record, with TTL equal to the
        session lifetime.
        """
        token = secrets.token_urlsafe(32)
        now = now_utc()
        expired_at = now + timedelta(hours=self._config.session_expiry_hours)

        session = Session(
            token=token,
            user_id=user_id,
            created_at=now,
            expired_at=expired_at,
        )

        ttl = seconds_until(expired_at) or 1
        self._valkey.set_json(
            self._key(token),
            {
                "token": token,
                "user_id": user_id,
                "created_at": session.created_at.isoformat(),
                "expired_at": session.expired_at.isoformat(),
            },
            expire_seconds=ttl,
        )
        self._valkey.add_to_set(self._user_key(user_id), token)
        self._valkey.expire(self._user_key(user_id), self._config.session_expiry_hours * 3600)

        logger.info("Session %s... created for user %s", token_prefix(token), user_id)
        if self._config.max_sessions_per_user:
            self._enforce_session_cap(user_id)
        return session

    def _enforce_session_cap(self, user_id: int) -> None:
        """Revoke the oldest sessions beyond max_sessions_per_user."""
        live = []
        for token in self._valkey.set_members(self._user_key(user_id)):
            data = self._valkey.get_json(self._key(token))
            if data is None:
                self._valkey.remove_from_set(self._user_key(user_id), token)
                continue
            live.append((parse_iso(data["created_at"]), token))

        excess = len(live) - self._config.max_sessions_per_user
        for _, token in sorted(live)[:max(excess, 0)]:
            self.revoke_session(token)
            logger.info("Session %s... revoked: over per-user limit", token_prefix(token))

    def get_session(self, token: str) -> Session:
        """Look up a session by token.

        Raises:
            SessionNotFoundError: No record under this token
            SessionExpiredError: Record present but past expired_at (it is deleted)
        """
        data = self._valkey.get_json(self._key(token))

        if data is None:
            raise SessionNotFoundError("Session not found")

        session = Session(
            token=token,
            user_id=int(data["user_id"]),
            created_at=parse_iso(data["created_at"]),
            expired_at=parse_iso(data["expired_at"]),
        )

        # The store TTL normally removes expired records first
        if now_utc() >= session.expired_at:
            self._valkey.delete(self._key(token))
            self._valkey.remove_from_set(self._user_key(session.user_id), token)
            logger.info("Session %s... expired", token_prefix(token))
            raise SessionExpiredError("Session expired")

        return session

    def resolve(self, token: str) -> User:
        """Session token to its active user.

        Raises:
            SessionNotFoundError: Unknown token, or user missing or inactive
            SessionExpiredError: Session past its expiry
        """
        session = self.get_session(token)
        user = self._users.get_user_by_id(session.user_id)
        if user is None or not user.is_active:
            logger.warning(
                "Session %s... belongs to missing or inactive user %s",
                token_prefix(token), session.user_id,
            )
            raise SessionNotFoundError("Session not found")
        return user

    def revoke_session(self, token: str) -> None:
        """Revoke session (logout).

        Safe to call with nonexistent token.
        """
        data = self._valkey.get_json(self._key(token))
        self._valkey.delete(self._key(token))
        if isinstance(data, dict) and "user_id" in data:
            self._valkey.remove_from_set(self._user_key(int(data["user_id"])), token)

    def revoke_user_sessions(self, user_id: int) -> int:
        """Revoke every session of a user. Returns how many were still live."""
        index_key = self._user_key(user_id)
        tokens = self._valkey.set_members(index_key)
        removed = self._valkey.delete(*(self._key(t) for t in tokens)) if tokens else 0
        self._valkey.delete(index_key)
        logger.info("Revoked %s sessions for user %s", removed, user_id)
        return removed
