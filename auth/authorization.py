"""
Admin rights for authenticated users.

A user is privileged when the contact currently carrying their Telegram id
belongs to the administrators group. The contact is looked up on every
check, so directory edits take effect immediately.

Debug mode grants admin-equivalent rights to EVERY authenticated user. It
exists for bootstrapping an empty directory and must stay off in production.
"""

import logging
from typing import Protocol

from auth.config import AuthConfig
from auth.database import AuthDatabase
from auth.types import User
from core.models import Contact

logger = logging.getLogger(__name__)


class DebugModeProvider(Protocol):
    """Source of the persisted debug-mode flag."""

    def get_debug_mode(self) -> bool: ...


class ContactDirectory(Protocol):
    """Live contact lookup by Telegram account."""

    def get_by_telegram_id(self, telegram_id: int) -> Contact | None: ...


class AuthorizationGate:
    """Group-membership check, without any override."""

    def __init__(self, users: AuthDatabase, contacts: ContactDirectory, admin_group_name: str):
        self._users = users
        self._contacts = contacts
        self._admin_group_name = admin_group_name

    def is_privileged(self, user_id: int) -> bool:
        """
        True iff the user's contact is in the admin group.

        Missing user, missing contact and lookup errors all mean False.
        """
        try:
            user = self._users.get_user_by_id(user_id)
        except Exception:
            logger.error("User lookup failed for user %s; denying", user_id, exc_info=True)
            return False
        if user is None:
            return False
        return self.is_privileged_user(user)

    def is_privileged_user(self, user: User) -> bool:
        try:
            contact = self._contacts.get_by_telegram_id(user.telegram_id)
        except Exception:
            logger.error("Admin check failed for user %s; denying", user.id, exc_info=True)
            return False
        if contact is None:
            return False
        return contact.in_group(self._admin_group_name)


class AccessPolicy:
    """
    Admin check as callers see it.

    Order: forced debug flag, then persisted debug mode, then group
    membership. Store failures never grant rights.
    """

    def __init__(self, gate: AuthorizationGate, debug_mode: DebugModeProvider, config: AuthConfig):
        self._gate = gate
        self._debug_mode = debug_mode
        self._config = config

    def debug_mode_enabled(self) -> bool:
        if self._config.force_debug_mode:
            return True
        try:
            return self._debug_mode.get_debug_mode()
        except Exception:
            logger.warning("Could not read debug mode setting; treating as off", exc_info=True)
            return False

    def has_admin_rights(self, user: User) -> bool:
        if self.debug_mode_enabled():
            return True
        return self._gate.is_privileged_user(user)
