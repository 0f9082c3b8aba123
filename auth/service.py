"""Authentication service - orchestrates the Telegram login flow."""

import logging

from auth.authorization import AccessPolicy
from auth.config import AuthConfig
from auth.database import AuthDatabase
from auth.session import SessionManager, token_prefix
from auth.security_logger import SecurityLogger, SecurityEvent
from auth.telegram import verify_telegram_login
from auth.types import AuthenticatedUser, TelegramLoginClaim, User, UserProfile
from auth.exceptions import (
    InvalidTelegramAuthError,
    SessionExpiredError,
    SessionNotFoundError,
    UserInactiveError,
    UserNotFoundError,
)
from core.exceptions import ContactNotFoundError
from core.models import Contact, ContactSummary, OwnContactUpdate
from core.services.contact_service import ContactService

logger = logging.getLogger(__name__)


class AuthService:
    """Orchestrates Telegram authentication.

    Handles:
    - Login (claim verification, lazy user creation, one-time contact join)
    - Session lookup and logout
    - The caller's profile and own contact
    - Admin user (de)activation
    """

    def __init__(
        self,
        config: AuthConfig,
        bot_token: str,
        auth_db: AuthDatabase,
        session_manager: SessionManager,
        contacts: ContactService,
        policy: AccessPolicy,
        security_logger: SecurityLogger,
    ):
        self._config = config
        self._bot_token = bot_token
        self._auth_db = auth_db
        self._session_manager = session_manager
        self._contacts = contacts
        self._policy = policy
        self._security_logger = security_logger

    def _find_or_create_user(self, telegram_id: int, ip_address: str | None) -> User:
        """Existing user for this Telegram account, or a new one.

        A new user is linked to the contact carrying the same telegram_id,
        when there is one. The join happens only at creation; existing
        users are never re-linked.
        """
        user = self._auth_db.get_user_by_telegram_id(telegram_id)
        if user is not None:
            return user

        try:
            contact = self._contacts.get_by_telegram_id(telegram_id)
        except Exception:
            logger.warning(
                "Contact lookup failed for telegram_id=%s; creating user unlinked",
                telegram_id, exc_info=True,
            )
            contact = None

        user = self._auth_db.create_user(
            telegram_id,
            contact_id=contact.id if contact else None,
        )
        logger.info(
            "User %s created for telegram_id=%s (contact %s)",
            user.id, telegram_id, contact.id if contact else "none",
        )
        self._security_logger.log(
            SecurityEvent.USER_CREATED,
            telegram_id=telegram_id,
            user_id=user.id,
            ip_address=ip_address,
            details={"contact_id": user.contact_id},
        )
        return user

    def authenticate_with_telegram(
        self,
        claim: TelegramLoginClaim,
        ip_address: str | None,
        user_agent: str | None,
    ) -> AuthenticatedUser:
        """Verify a login claim and open a session.

        Flow:
        1. Verify signature and freshness
        2. Find the user by telegram_id, creating it on first login
        3. Refuse (or reactivate, per config) a deactivated user
        4. Create a new session; earlier sessions stay valid
        5. Log security events

        Raises:
            InvalidTelegramAuthError: Bad signature or stale claim.
            UserInactiveError: User account is deactivated.
        """
        if not verify_telegram_login(
            claim,
            self._bot_token,
            max_age=self._config.telegram_auth_max_age_seconds,
        ):
            logger.warning("Telegram auth failed for telegram_id=%s", claim.id)
            self._security_logger.log(
                SecurityEvent.TELEGRAM_AUTH_FAILED,
                telegram_id=claim.id,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            raise InvalidTelegramAuthError("Invalid Telegram authentication")

        user = self._find_or_create_user(claim.id, ip_address)

        if not user.is_active:
            if not self._config.reactivate_inactive_users:
                logger.warning("Login refused for inactive user %s", user.id)
                self._security_logger.log(
                    SecurityEvent.TELEGRAM_AUTH_FAILED,
                    telegram_id=claim.id,
                    user_id=user.id,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    details={"reason": "user_inactive"},
                )
                raise UserInactiveError("User account is deactivated")
            self._auth_db.activate_user(user.id)
            user = user.model_copy(update={"is_active": True})
            logger.info("User %s reactivated on login", user.id)
            self._security_logger.log(
                SecurityEvent.USER_ACTIVATED,
                telegram_id=claim.id,
                user_id=user.id,
                ip_address=ip_address,
                details={"reason": "login"},
            )

        session = self._session_manager.create_session(user.id)

        self._security_logger.log(
            SecurityEvent.TELEGRAM_AUTH_SUCCEEDED,
            telegram_id=claim.id,
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self._security_logger.log(
            SecurityEvent.SESSION_CREATED,
            telegram_id=claim.id,
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
            details={"token_prefix": token_prefix(session.token)},
        )

        return AuthenticatedUser(user=user, session=session)

    def get_user_by_session(self, token: str) -> User:
        """Resolve session token to its user.

        Raises:
            SessionNotFoundError: Unknown token, or user missing or inactive.
            SessionExpiredError: Session expired.
        """
        return self._session_manager.resolve(token)

    def logout(self, session_token: str, ip_address: str | None) -> None:
        """Revoke session (logout).

        Safe to call with invalid token.
        """
        try:
            user_id = self._session_manager.get_session(session_token).user_id
        except (SessionNotFoundError, SessionExpiredError):
            user_id = None

        self._session_manager.revoke_session(session_token)

        self._security_logger.log(
            SecurityEvent.SESSION_REVOKED,
            user_id=user_id,
            ip_address=ip_address,
            details={"token_prefix": token_prefix(session_token)},
        )

    def get_profile(self, user: User) -> UserProfile:
        """Profile for GET /auth/me.

        A failing contact lookup drops the contact from the profile rather
        than failing the request.
        """
        contact_summary = None
        try:
            contact = self._contacts.get_by_telegram_id(user.telegram_id)
        except Exception:
            logger.warning("Contact lookup failed for user %s", user.id, exc_info=True)
            contact = None
        if contact is not None:
            contact_summary = ContactSummary(id=contact.id, name=contact.name)

        return UserProfile(
            id=user.id,
            telegram_id=user.telegram_id,
            is_active=user.is_active,
            is_admin=self._policy.has_admin_rights(user),
            created_at=user.created_at,
            contact=contact_summary,
        )

    def update_own_contact(self, user: User, data: OwnContactUpdate) -> Contact:
        """Let a user edit their own directory entry.

        Raises:
            ContactNotFoundError: No contact carries the user's telegram_id.
        """
        contact = self._contacts.get_by_telegram_id(user.telegram_id)
        if contact is None:
            raise ContactNotFoundError("No contact linked to this account")
        return self._contacts.update(contact.id, data.to_contact_update())

    def deactivate_user(self, user_id: int, actor: User, ip_address: str | None = None) -> None:
        """Freeze a user's login and revoke all of their sessions.

        Raises:
            UserNotFoundError: No such user.
        """
        if not self._auth_db.deactivate_user(user_id):
            raise UserNotFoundError(f"User {user_id} not found")
        revoked = self._session_manager.revoke_user_sessions(user_id)
        logger.info("User %s deactivated by %s (%s sessions revoked)", user_id, actor.id, revoked)
        self._security_logger.log(
            SecurityEvent.USER_DEACTIVATED,
            user_id=user_id,
            ip_address=ip_address,
            details={"by_user_id": actor.id, "sessions_revoked": revoked},
        )

    def activate_user(self, user_id: int, actor: User, ip_address: str | None = None) -> None:
        """
        Raises:
            UserNotFoundError: No such user.
        """
        if not self._auth_db.activate_user(user_id):
            raise UserNotFoundError(f"User {user_id} not found")
        logger.info("User %s activated by %s", user_id, actor.id)
        self._security_logger.log(
            SecurityEvent.USER_ACTIVATED,
            user_id=user_id,
            ip_address=ip_address,
            details={"by_user_id": actor.id},
        )
