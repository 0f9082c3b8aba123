"""System settings (debug mode)."""

from system.database import SettingsDatabase
from system.service import SystemService, DEBUG_MODE_KEY
from system.api import create_system_router
