"""Fixtures for service tests: a PostgresClient mock with a working transaction()."""

from unittest.mock import MagicMock, Mock

import pytest

from clients.postgres_client import PostgresClient, Transaction
from utils.timezone import now_utc


@pytest.fixture
def tx():
    """The Transaction handed out by db.transaction()."""
    return Mock(spec=Transaction)


@pytest.fixture
def db(tx):
    mock = Mock(spec=PostgresClient)
    context = MagicMock()
    context.__enter__.return_value = tx
    context.__exit__.return_value = False
    mock.transaction.return_value = context
    return mock


@pytest.fixture
def group_row():
    def _row(group_id=1, name="Администраторы"):
        now = now_utc()
        return {"id": group_id, "name": name, "created_at": now, "updated_at": now}
    return _row


@pytest.fixture
def contact_row():
    def _row(contact_id=1, **overrides):
        now = now_utc()
        row = {
            "id": contact_id,
            "name": "Иван Петров",
            "phone": "+79991234567",
            "email": "ivan@example.com",
            "transport": None,
            "printer": None,
            "allergies": None,
            "vk": None,
            "telegram": None,
            "telegram_id": 42,
            "created_at": now,
            "updated_at": now,
            "deleted_at": None,
        }
        row.update(overrides)
        return row
    return _row
