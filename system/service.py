"""Debug-mode setting, persisted in system_settings."""

import logging

from system.database import SettingsDatabase

logger = logging.getLogger(__name__)

DEBUG_MODE_KEY = "debug_mode"

_TRUE_VALUES = {"true", "1", "t", "yes"}
_FALSE_VALUES = {"false", "0", "f", "no"}


class SystemService:
    """
    System-wide settings.

    Implements the DebugModeProvider protocol used by AccessPolicy.
    """

    def __init__(self, settings: SettingsDatabase):
        self._settings = settings

    def get_debug_mode(self) -> bool:
        """
        Persisted debug-mode flag.

        A missing setting reads as False. An unparseable value raises
        ValueError; callers that must fail closed catch it.
        """
        value = self._settings.get_setting(DEBUG_MODE_KEY)
        if value is None:
            return False
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        logger.error("Unparseable debug_mode setting %r", value)
        raise ValueError(f"Invalid debug_mode value: {value!r}")

    def set_debug_mode(self, enabled: bool) -> None:
        self._settings.set_setting(DEBUG_MODE_KEY, "true" if enabled else "false")
        logger.info("Debug mode setting updated: enabled=%s", enabled)

    def ensure_defaults(self) -> None:
        """Create the debug_mode setting as false on first start."""
        if self._settings.ensure_setting(DEBUG_MODE_KEY, "false"):
            logger.info("Initialized debug_mode setting to false")
