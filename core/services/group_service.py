"""
Group service for CRUD operations.

Group names are unique among live (not soft-deleted) groups. Renaming the
administrators group takes effect on the very next privilege check, since
nothing caches group names.
"""

import logging

from clients.postgres_client import PostgresClient
from core.exceptions import GroupNameExistsError, GroupNotFoundError, ValidationFailedError
from core.models import Group
from core.validation import validate_group_name
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class GroupService:
    """Service for group operations."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def create(self, name: str) -> Group:
        """
        Create a new group.

        Raises:
            ValidationFailedError: Empty or overlong name
            GroupNameExistsError: Name already taken
        """
        errors = validate_group_name(name)
        if errors:
            raise ValidationFailedError(errors)
        name = name.strip()

        if self.get_by_name(name) is not None:
            logger.warning("Attempt to create group with existing name %r", name)
            raise GroupNameExistsError(f"Group '{name}' already exists")

        now = now_utc()
        row = self.postgres.execute_returning(
            """
            INSERT INTO groups (name, created_at, updated_at)
            VALUES (%s, %s, %s)
            RETURNING *
            """,
            (name, now, now),
        )[0]

        group = Group.model_validate(row)
        logger.info("Group %s created: %r", group.id, group.name)
        return group

    def get_by_id(self, group_id: int) -> Group | None:
        row = self.postgres.execute_single(
            "SELECT * FROM groups WHERE id = %s AND deleted_at IS NULL",
            (group_id,),
        )
        return Group.model_validate(row) if row else None

    def get_by_name(self, name: str) -> Group | None:
        row = self.postgres.execute_single(
            "SELECT * FROM groups WHERE name = %s AND deleted_at IS NULL",
            (name,),
        )
        return Group.model_validate(row) if row else None

    def require(self, group_id: int) -> Group:
        """Like get_by_id, but raises GroupNotFoundError when missing."""
        group = self.get_by_id(group_id)
        if group is None:
            raise GroupNotFoundError(f"Group {group_id} not found")
        return group

    def list_all(self) -> list[Group]:
        rows = self.postgres.execute(
            "SELECT * FROM groups WHERE deleted_at IS NULL ORDER BY name"
        )
        return [Group.model_validate(row) for row in rows]

    def rename(self, group_id: int, new_name: str) -> Group:
        """
        Rename a group.

        Raises:
            ValidationFailedError: Empty or overlong name
            GroupNotFoundError: No such group
            GroupNameExistsError: Another group has the new name
        """
        errors = validate_group_name(new_name)
        if errors:
            raise ValidationFailedError(errors)
        new_name = new_name.strip()

        current = self.require(group_id)
        if current.name == new_name:
            return current

        clash = self.get_by_name(new_name)
        if clash is not None and clash.id != group_id:
            raise GroupNameExistsError(f"Group '{new_name}' already exists")

        row = self.postgres.execute_returning(
            """
            UPDATE groups SET name = %s, updated_at = %s
            WHERE id = %s
            RETURNING *
            """,
            (new_name, now_utc(), group_id),
        )[0]

        logger.info("Group %s renamed %r -> %r", group_id, current.name, new_name)
        return Group.model_validate(row)

    def delete(self, group_id: int) -> None:
        """
        Soft delete a group and drop its memberships in one transaction.

        Raises:
            GroupNotFoundError: No such group
        """
        self.require(group_id)
        now = now_utc()
        with self.postgres.transaction() as tx:
            tx.execute("DELETE FROM contact_groups WHERE group_id = %s", (group_id,))
            tx.execute(
                "UPDATE groups SET deleted_at = %s, updated_at = %s WHERE id = %s",
                (now, now, group_id),
            )
        logger.info("Group %s deleted", group_id)
