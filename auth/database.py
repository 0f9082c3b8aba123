"""Database operations for authentication.

Uses the users table. Users are never hard-deleted; they are frozen
through is_active.
"""

from clients.postgres_client import PostgresClient
from auth.types import User

_USER_COLUMNS = "id, telegram_id, is_active, contact_id, created_at"


class AuthDatabase:
    """Database operations for authentication."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def get_user_by_telegram_id(self, telegram_id: int) -> User | None:
        row = self._db.execute_single(
            f"SELECT {_USER_COLUMNS} FROM users WHERE telegram_id = %s",
            (telegram_id,),
        )
        return User.model_validate(row) if row else None

    def get_user_by_id(self, user_id: int) -> User | None:
        """Find user by ID."""
        row = self._db.execute_single(
            f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s",
            (user_id,),
        )
        return User.model_validate(row) if row else None

    def create_user(self, telegram_id: int, contact_id: int | None = None) -> User:
        """Create a user for a Telegram account, optionally linked to a contact."""
        rows = self._db.execute_returning(
            f"""INSERT INTO users (telegram_id, contact_id)
               VALUES (%s, %s)
               RETURNING {_USER_COLUMNS}""",
            (telegram_id, contact_id),
        )
        return User.model_validate(rows[0])

    def deactivate_user(self, user_id: int) -> bool:
        """Set user as inactive (login frozen).

        Returns:
            True if user was found and deactivated, False if not found.
        """
        rows = self._db.execute_returning(
            "UPDATE users SET is_active = false WHERE id = %s RETURNING id",
            (user_id,),
        )
        return len(rows) > 0

    def activate_user(self, user_id: int) -> bool:
        """Set user as active (login enabled).

        Returns:
            True if user was found and activated, False if not found.
        """
        rows = self._db.execute_returning(
            "UPDATE users SET is_active = true WHERE id = %s RETURNING id",
            (user_id,),
        )
        return len(rows) > 0
