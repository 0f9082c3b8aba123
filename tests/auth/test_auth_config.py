"""Tests for AuthConfig."""

import pytest
from pydantic import ValidationError

from auth.config import AuthConfig


class TestDefaults:
    """Default values."""

    def test_defaults(self):
        config = AuthConfig()

        assert config.session_expiry_hours == 168
        assert config.telegram_auth_max_age_seconds == 86400
        assert config.admin_group_name == "Администраторы"
        assert config.force_debug_mode is False
        assert config.reactivate_inactive_users is False
        assert config.max_sessions_per_user == 0
        assert config.cookie_secure is True
        assert "/api/v1/auth/telegram" in config.csrf_exempt_paths


class TestBounds:
    """Field validation."""

    @pytest.mark.parametrize("hours", [0, 2161])
    def test_session_expiry_out_of_range(self, hours):
        with pytest.raises(ValidationError):
            AuthConfig(session_expiry_hours=hours)

    def test_empty_admin_group_rejected(self):
        with pytest.raises(ValidationError):
            AuthConfig(admin_group_name="")


class TestFromEnv:
    """Environment loading."""

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DEBUG_MODE", "true")
        monkeypatch.setenv("SESSION_EXPIRY_HOURS", "24")
        monkeypatch.setenv("ADMIN_GROUP_NAME", "Admins")
        monkeypatch.setenv("REACTIVATE_INACTIVE_USERS", "1")
        monkeypatch.setenv("COOKIE_SECURE", "false")
        monkeypatch.setenv("MAX_SESSIONS_PER_USER", "3")

        config = AuthConfig.from_env()

        assert config.force_debug_mode is True
        assert config.session_expiry_hours == 24
        assert config.admin_group_name == "Admins"
        assert config.reactivate_inactive_users is True
        assert config.cookie_secure is False
        assert config.max_sessions_per_user == 3

    def test_unset_environment_gives_defaults(self, monkeypatch):
        for name in ("DEBUG_MODE", "SESSION_EXPIRY_HOURS", "ADMIN_GROUP_NAME",
                     "REACTIVATE_INACTIVE_USERS", "COOKIE_SECURE", "MAX_SESSIONS_PER_USER"):
            monkeypatch.delenv(name, raising=False)

        assert AuthConfig.from_env() == AuthConfig()

    @pytest.mark.parametrize("value", ["false", "0", "no", ""])
    def test_debug_mode_falsy_values(self, monkeypatch, value):
        monkeypatch.setenv("DEBUG_MODE", value)

        assert AuthConfig.from_env().force_debug_mode is False
