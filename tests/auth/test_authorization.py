"""Tests for AuthorizationGate and AccessPolicy."""

from unittest.mock import Mock

import pytest

from auth.authorization import AccessPolicy, AuthorizationGate
from auth.config import AuthConfig
from tests.helpers import ADMIN_GROUP, make_contact, make_group


class StaticDebugMode:
    """DebugModeProvider with a fixed answer."""

    def __init__(self, enabled: bool):
        self.enabled = enabled

    def get_debug_mode(self) -> bool:
        return self.enabled


@pytest.fixture
def user(users):
    return users.create_user(42)


@pytest.fixture
def gate(users, contacts):
    return AuthorizationGate(users, contacts, ADMIN_GROUP)


class TestIsPrivileged:
    """Group membership check."""

    def test_admin_group_member_is_privileged(self, gate, contacts, user):
        contacts.by_telegram_id[42] = make_contact(groups=[make_group(1, ADMIN_GROUP)])

        assert gate.is_privileged(user.id) is True

    def test_other_groups_not_privileged(self, gate, contacts, user):
        contacts.by_telegram_id[42] = make_contact(groups=[make_group(2, "Бухгалтерия")])

        assert gate.is_privileged(user.id) is False

    def test_no_contact_not_privileged(self, gate, user):
        assert gate.is_privileged(user.id) is False

    def test_unknown_user_not_privileged(self, gate):
        assert gate.is_privileged(999) is False

    def test_name_match_is_exact(self, gate, contacts, user):
        """Case and whitespace differences do not count."""
        contacts.by_telegram_id[42] = make_contact(groups=[
            make_group(1, "администраторы"),
            make_group(2, ADMIN_GROUP + " "),
        ])

        assert gate.is_privileged(user.id) is False

    def test_looked_up_live_every_time(self, gate, contacts, user):
        """Removing the contact from the group takes effect on the next check."""
        contacts.by_telegram_id[42] = make_contact(groups=[make_group(1, ADMIN_GROUP)])
        assert gate.is_privileged(user.id) is True

        contacts.by_telegram_id[42] = make_contact(groups=[])
        assert gate.is_privileged(user.id) is False
        assert contacts.get_by_telegram_id.call_count == 2

    def test_group_name_is_configurable(self, users, contacts, user):
        gate = AuthorizationGate(users, contacts, "Admins")
        contacts.by_telegram_id[42] = make_contact(groups=[make_group(1, "Admins")])

        assert gate.is_privileged(user.id) is True

    def test_contact_lookup_failure_not_privileged(self, gate, contacts, user):
        contacts.get_by_telegram_id.side_effect = RuntimeError("db down")

        assert gate.is_privileged(user.id) is False
        assert gate.is_privileged_user(user) is False

    def test_user_lookup_failure_not_privileged(self, gate, users, contacts, user):
        contacts.by_telegram_id[42] = make_contact(groups=[make_group(1, ADMIN_GROUP)])
        users.get_user_by_id.side_effect = RuntimeError("db down")

        assert gate.is_privileged(user.id) is False


class TestAccessPolicy:
    """Debug override and failure handling."""

    def test_debug_mode_grants_everyone(self, gate, user):
        policy = AccessPolicy(gate, StaticDebugMode(True), AuthConfig())

        assert policy.has_admin_rights(user) is True

    def test_forced_debug_skips_setting_lookup(self, gate, user):
        provider = Mock()
        policy = AccessPolicy(gate, provider, AuthConfig(force_debug_mode=True))

        assert policy.has_admin_rights(user) is True
        provider.get_debug_mode.assert_not_called()

    def test_debug_off_falls_back_to_group(self, gate, contacts, user):
        policy = AccessPolicy(gate, StaticDebugMode(False), AuthConfig())
        assert policy.has_admin_rights(user) is False

        contacts.by_telegram_id[42] = make_contact(groups=[make_group(1, ADMIN_GROUP)])
        assert policy.has_admin_rights(user) is True

    def test_setting_lookup_failure_treated_as_off(self, gate, user):
        provider = Mock()
        provider.get_debug_mode.side_effect = RuntimeError("db down")
        policy = AccessPolicy(gate, provider, AuthConfig())

        assert policy.debug_mode_enabled() is False
        assert policy.has_admin_rights(user) is False

    def test_group_lookup_failure_denies(self, gate, contacts, user):
        contacts.get_by_telegram_id.side_effect = RuntimeError("db down")
        policy = AccessPolicy(gate, StaticDebugMode(False), AuthConfig())

        assert policy.has_admin_rights(user) is False
