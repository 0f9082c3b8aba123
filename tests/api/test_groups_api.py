"""Tests for /api/v1/groups routes."""

import pytest

from core.exceptions import GroupNameExistsError, GroupNotFoundError
from tests.helpers import ADMIN_GROUP, make_contact, make_group


@pytest.fixture
def admin_csrf(login, contacts):
    contacts.by_telegram_id[42] = make_contact(contact_id=1, groups=[make_group(1, ADMIN_GROUP)])
    _, csrf = login(id=42)
    return csrf


class TestReads:
    """Group reads are public."""

    def test_list(self, client, groups):
        groups.list_all.return_value = [make_group(1, ADMIN_GROUP), make_group(2, "Волонтёры")]

        data = client.get("/api/v1/groups").json()["data"]

        assert [g["name"] for g in data] == [ADMIN_GROUP, "Волонтёры"]

    def test_get_missing_404(self, client, groups):
        groups.get_by_id.return_value = None

        assert client.get("/api/v1/groups/9").status_code == 404


class TestWrites:
    """Group writes need admin rights."""

    def test_anonymous_create_401(self, client, groups):
        response = client.post("/api/v1/groups", json={"name": "Волонтёры"})

        assert response.status_code == 401
        groups.create.assert_not_called()

    def test_non_admin_create_403(self, client, login, groups):
        _, csrf = login(id=42)

        response = client.post("/api/v1/groups", json={"name": "Волонтёры"}, headers={"X-CSRF-Token": csrf})

        assert response.status_code == 403

    def test_admin_creates(self, client, admin_csrf, groups):
        groups.create.return_value = make_group(2, "Волонтёры")

        response = client.post("/api/v1/groups", json={"name": "Волонтёры"}, headers={"X-CSRF-Token": admin_csrf})

        assert response.status_code == 201
        groups.create.assert_called_once_with("Волонтёры")

    def test_duplicate_name_409(self, client, admin_csrf, groups):
        groups.create.side_effect = GroupNameExistsError("Group 'Волонтёры' already exists")

        response = client.post("/api/v1/groups", json={"name": "Волонтёры"}, headers={"X-CSRF-Token": admin_csrf})

        assert response.status_code == 409

    def test_rename(self, client, admin_csrf, groups):
        groups.rename.return_value = make_group(2, "Помощники")

        response = client.put("/api/v1/groups/2", json={"name": "Помощники"}, headers={"X-CSRF-Token": admin_csrf})

        assert response.json()["data"]["name"] == "Помощники"
        groups.rename.assert_called_once_with(2, "Помощники")

    def test_delete_missing_404(self, client, admin_csrf, groups):
        groups.delete.side_effect = GroupNotFoundError("Group 9 not found")

        response = client.delete("/api/v1/groups/9", headers={"X-CSRF-Token": admin_csrf})

        assert response.status_code == 404


class TestRenamingAdminGroup:
    """Renaming the administrators group revokes admin rights on the next request."""

    def test_rights_follow_group_name(self, client, admin_csrf, contacts):
        assert client.get("/api/v1/auth/me").json()["data"]["is_admin"] is True

        contacts.by_telegram_id[42] = make_contact(contact_id=1, groups=[make_group(1, "Бывшие админы")])

        assert client.get("/api/v1/auth/me").json()["data"]["is_admin"] is False
