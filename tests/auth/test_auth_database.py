"""Tests for AuthDatabase - users table access."""

from unittest.mock import Mock

import pytest

from auth.database import AuthDatabase
from clients.postgres_client import PostgresClient
from utils.timezone import now_utc


@pytest.fixture
def db():
    return Mock(spec=PostgresClient)


@pytest.fixture
def auth_db(db):
    return AuthDatabase(db)


def user_row(**overrides):
    row = {"id": 1, "telegram_id": 42, "is_active": True, "contact_id": None, "created_at": now_utc()}
    row.update(overrides)
    return row


class TestLookups:
    """Reads."""

    def test_get_by_telegram_id(self, auth_db, db):
        db.execute_single.return_value = user_row(contact_id=5)

        user = auth_db.get_user_by_telegram_id(42)

        assert user.telegram_id == 42
        assert user.contact_id == 5
        assert db.execute_single.call_args.args[1] == (42,)

    def test_missing_user_is_none(self, auth_db, db):
        db.execute_single.return_value = None

        assert auth_db.get_user_by_id(1) is None


class TestWrites:
    """Inserts and updates."""

    def test_create_user(self, auth_db, db):
        db.execute_returning.return_value = [user_row(id=9, contact_id=3)]

        user = auth_db.create_user(42, contact_id=3)

        assert user.id == 9
        assert db.execute_returning.call_args.args[1] == (42, 3)

    def test_deactivate_reports_found(self, auth_db, db):
        db.execute_returning.return_value = [{"id": 1}]
        assert auth_db.deactivate_user(1) is True

        db.execute_returning.return_value = []
        assert auth_db.deactivate_user(2) is False

    def test_activate_sets_true(self, auth_db, db):
        db.execute_returning.return_value = [{"id": 1}]

        assert auth_db.activate_user(1) is True
        assert "is_active = true" in db.execute_returning.call_args.args[0]
