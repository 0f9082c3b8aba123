"""
Contact service for CRUD operations.

Handles the contact lifecycle: create, read, update, soft delete, plus group
membership. Phone, email and telegram_id are unique among live contacts.
Group memberships are always read fresh from the join table.
"""

import logging

from clients.postgres_client import PostgresClient, Transaction
from core.exceptions import (
    ContactConflictError,
    ContactNotFoundError,
    MembershipNotFoundError,
    ValidationFailedError,
)
from core.models import Contact, ContactCreate, ContactSummary, ContactUpdate, Group
from core.services.group_service import GroupService
from core.validation import validate_contact_create, validate_contact_update
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

# Valid columns that can be updated
_UPDATABLE_COLUMNS = {
    "name", "phone", "email", "transport", "printer",
    "allergies", "vk", "telegram", "telegram_id",
}

# Columns that must stay unique among live contacts
_UNIQUE_COLUMNS = ("phone", "email", "telegram_id")


class ContactService:
    """Service for contact operations."""

    def __init__(self, postgres: PostgresClient, groups: GroupService):
        self.postgres = postgres
        self.groups = groups

    def _load_groups(self, contact_ids: list[int]) -> dict[int, list[Group]]:
        """Live groups for each contact id, ordered by group name."""
        if not contact_ids:
            return {}
        rows = self.postgres.execute(
            """
            SELECT cg.contact_id, g.id, g.name, g.created_at, g.updated_at
            FROM contact_groups cg
            JOIN groups g ON g.id = cg.group_id
            WHERE cg.contact_id = ANY(%s) AND g.deleted_at IS NULL
            ORDER BY g.name
            """,
            (list(contact_ids),),
        )
        result: dict[int, list[Group]] = {cid: [] for cid in contact_ids}
        for row in rows:
            contact_id = row.pop("contact_id")
            result.setdefault(contact_id, []).append(Group.model_validate(row))
        return result

    def _hydrate(self, rows: list[dict]) -> list[Contact]:
        groups = self._load_groups([row["id"] for row in rows])
        return [
            Contact.model_validate({**row, "groups": groups.get(row["id"], [])})
            for row in rows
        ]

    def _check_unique(self, values: dict, exclude_id: int | None = None) -> None:
        """Raise ContactConflictError if a live contact already uses any unique value."""
        for column in _UNIQUE_COLUMNS:
            value = values.get(column)
            if value is None:
                continue
            row = self.postgres.execute_single(
                f"SELECT id FROM contacts WHERE {column} = %s AND deleted_at IS NULL",
                (value,),
            )
            if row is not None and row["id"] != exclude_id:
                logger.warning("Contact %s conflict on %s", exclude_id or "(new)", column)
                raise ContactConflictError(f"Another contact already uses this {column}")

    def _require_groups(self, group_ids: list[int]) -> None:
        for group_id in set(group_ids):
            self.groups.require(group_id)

    def _replace_groups(self, tx: Transaction, contact_id: int, group_ids: list[int]) -> None:
        """Make the contact's memberships exactly `group_ids`."""
        current = {
            row["group_id"]
            for row in tx.execute(
                "SELECT group_id FROM contact_groups WHERE contact_id = %s",
                (contact_id,),
            )
        }
        wanted = set(group_ids)
        for group_id in current - wanted:
            tx.execute(
                "DELETE FROM contact_groups WHERE contact_id = %s AND group_id = %s",
                (contact_id, group_id),
            )
        for group_id in wanted - current:
            tx.execute(
                "INSERT INTO contact_groups (contact_id, group_id) VALUES (%s, %s)",
                (contact_id, group_id),
            )

    def create(self, data: ContactCreate) -> Contact:
        """
        Create a new contact, optionally placing it into groups.

        Raises:
            ValidationFailedError: Invalid field values
            ContactConflictError: Phone, email or telegram_id already used
            GroupNotFoundError: Unknown id in group_ids
        """
        errors = validate_contact_create(data)
        if errors:
            raise ValidationFailedError(errors)

        values = data.model_dump(exclude={"group_ids"})
        values["name"] = values["name"].strip()
        values["phone"] = values["phone"].strip()
        values["email"] = values["email"].strip()
        self._check_unique(values)
        self._require_groups(data.group_ids)

        now = now_utc()
        with self.postgres.transaction() as tx:
            row = tx.execute_single(
                """
                INSERT INTO contacts (
                    name, phone, email, transport, printer,
                    allergies, vk, telegram, telegram_id,
                    created_at, updated_at
                ) VALUES (
                    %s, %s, %s, %s, %s,
                    %s, %s, %s, %s,
                    %s, %s
                )
                RETURNING *
                """,
                (
                    values["name"], values["phone"], values["email"],
                    values["transport"], values["printer"],
                    values["allergies"], values["vk"], values["telegram"],
                    values["telegram_id"], now, now,
                ),
            )
            if data.group_ids:
                self._replace_groups(tx, row["id"], data.group_ids)

        contact = self._hydrate([row])[0]
        logger.info("Contact %s created", contact.id)
        return contact

    def get_by_id(self, contact_id: int) -> Contact | None:
        row = self.postgres.execute_single(
            "SELECT * FROM contacts WHERE id = %s AND deleted_at IS NULL",
            (contact_id,),
        )
        if row is None:
            return None
        return self._hydrate([row])[0]

    def require(self, contact_id: int) -> Contact:
        contact = self.get_by_id(contact_id)
        if contact is None:
            raise ContactNotFoundError(f"Contact {contact_id} not found")
        return contact

    def get_by_telegram_id(self, telegram_id: int) -> Contact | None:
        """
        Find the live contact linked to a Telegram account.

        This is the lookup the authorization gate relies on, so it always
        hits the database and always carries current group memberships.
        """
        row = self.postgres.execute_single(
            "SELECT * FROM contacts WHERE telegram_id = %s AND deleted_at IS NULL",
            (telegram_id,),
        )
        if row is None:
            return None
        return self._hydrate([row])[0]

    def list_all(self) -> list[Contact]:
        rows = self.postgres.execute(
            "SELECT * FROM contacts WHERE deleted_at IS NULL ORDER BY name, id"
        )
        return self._hydrate(rows)

    def list_summaries(self) -> list[ContactSummary]:
        """Id and name only, for unauthenticated callers."""
        rows = self.postgres.execute(
            "SELECT id, name FROM contacts WHERE deleted_at IS NULL ORDER BY name, id"
        )
        return [ContactSummary.model_validate(row) for row in rows]

    def update(self, contact_id: int, data: ContactUpdate) -> Contact:
        """
        Update contact fields.

        Only non-None fields change. When group_ids is given, memberships
        are replaced in the same transaction as the field update.

        Raises:
            ContactNotFoundError: No such contact
            ValidationFailedError: Invalid field values
            ContactConflictError: Phone, email or telegram_id already used
            GroupNotFoundError: Unknown id in group_ids
        """
        current = self.require(contact_id)

        errors = validate_contact_update(data)
        if errors:
            raise ValidationFailedError(errors)

        updates = {
            k: (v.strip() if isinstance(v, str) else v)
            for k, v in data.model_dump(exclude_none=True, exclude={"group_ids"}).items()
            if k in _UPDATABLE_COLUMNS
        }
        if not updates and data.group_ids is None:
            return current

        self._check_unique(updates, exclude_id=contact_id)
        if data.group_ids is not None:
            self._require_groups(data.group_ids)

        set_parts = [f"{field} = %s" for field in updates]
        params = list(updates.values())
        set_parts.append("updated_at = %s")
        params.append(now_utc())
        params.append(contact_id)

        with self.postgres.transaction() as tx:
            row = tx.execute_single(
                f"""
                UPDATE contacts
                SET {', '.join(set_parts)}
                WHERE id = %s AND deleted_at IS NULL
                RETURNING *
                """,
                tuple(params),
            )
            if row is None:
                raise ContactNotFoundError(f"Contact {contact_id} not found")
            if data.group_ids is not None:
                self._replace_groups(tx, contact_id, data.group_ids)

        logger.info("Contact %s updated: %s", contact_id, sorted(updates))
        return self._hydrate([row])[0]

    def delete(self, contact_id: int) -> None:
        """
        Soft delete a contact and drop its memberships.

        Raises:
            ContactNotFoundError: No such contact
        """
        self.require(contact_id)
        now = now_utc()
        with self.postgres.transaction() as tx:
            tx.execute("DELETE FROM contact_groups WHERE contact_id = %s", (contact_id,))
            tx.execute(
                "UPDATE contacts SET deleted_at = %s, updated_at = %s WHERE id = %s",
                (now, now, contact_id),
            )
        logger.info("Contact %s deleted", contact_id)

    def add_to_group(self, contact_id: int, group_id: int) -> Contact:
        """Add membership. Adding an existing membership is a no-op."""
        self.require(contact_id)
        self.groups.require(group_id)
        self.postgres.execute(
            """
            INSERT INTO contact_groups (contact_id, group_id)
            VALUES (%s, %s)
            ON CONFLICT DO NOTHING
            """,
            (contact_id, group_id),
        )
        logger.info("Contact %s added to group %s", contact_id, group_id)
        return self.require(contact_id)

    def remove_from_group(self, contact_id: int, group_id: int) -> Contact:
        """
        Raises:
            ContactNotFoundError: No such contact
            MembershipNotFoundError: Contact is not in the group
        """
        self.require(contact_id)
        removed = self.postgres.execute_returning(
            """
            DELETE FROM contact_groups
            WHERE contact_id = %s AND group_id = %s
            RETURNING group_id
            """,
            (contact_id, group_id),
        )
        if not removed:
            raise MembershipNotFoundError(
                f"Contact {contact_id} is not in group {group_id}"
            )
        logger.info("Contact %s removed from group %s", contact_id, group_id)
        return self.require(contact_id)
