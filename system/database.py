"""Database operations for the system_settings key/value table."""

from clients.postgres_client import PostgresClient
from utils.timezone import now_utc


class SettingsDatabase:
    """Database operations for system settings."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def get_setting(self, key: str) -> str | None:
        """Stored value for key, or None if the setting was never written."""
        return self._db.execute_scalar(
            "SELECT value FROM system_settings WHERE key = %s",
            (key,),
        )

    def set_setting(self, key: str, value: str) -> None:
        """Insert or overwrite a setting."""
        self._db.execute_returning(
            """INSERT INTO system_settings (key, value, updated_at)
               VALUES (%s, %s, %s)
               ON CONFLICT (key) DO UPDATE
               SET value = EXCLUDED.value, updated_at = EXCLUDED.updated_at
               RETURNING key""",
            (key, value, now_utc()),
        )

    def ensure_setting(self, key: str, value: str) -> bool:
        """Write the setting only if absent. Returns True if it was created."""
        rows = self._db.execute_returning(
            """INSERT INTO system_settings (key, value, updated_at)
               VALUES (%s, %s, %s)
               ON CONFLICT (key) DO NOTHING
               RETURNING key""",
            (key, value, now_utc()),
        )
        return len(rows) > 0
