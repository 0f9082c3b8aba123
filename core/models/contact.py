"""Contact (directory entry) domain models."""

from datetime import datetime

from pydantic import BaseModel, Field

from core.models.group import Group


class ContactCreate(BaseModel):
    """Data required to create a contact. Checked by validate_contact_create()."""

    name: str
    phone: str
    email: str
    transport: str | None = None
    printer: str | None = None
    allergies: str | None = None
    vk: str | None = None
    telegram: str | None = None
    telegram_id: int | None = None
    group_ids: list[int] = Field(default_factory=list)


class ContactUpdate(BaseModel):
    """
    Partial update. None means "leave unchanged".

    group_ids, when given, replaces the whole membership set.
    """

    name: str | None = None
    phone: str | None = None
    email: str | None = None
    transport: str | None = None
    printer: str | None = None
    allergies: str | None = None
    vk: str | None = None
    telegram: str | None = None
    telegram_id: int | None = None
    group_ids: list[int] | None = None


class OwnContactUpdate(BaseModel):
    """What a user may change on their own linked contact."""

    name: str | None = None
    phone: str | None = None
    email: str | None = None
    transport: str | None = None
    printer: str | None = None
    allergies: str | None = None
    vk: str | None = None
    telegram: str | None = None

    def to_contact_update(self) -> ContactUpdate:
        return ContactUpdate(**self.model_dump(exclude_none=True))


class Contact(BaseModel):
    """Full contact entity as stored, with its live group memberships."""

    id: int
    name: str
    phone: str
    email: str
    transport: str | None = None
    printer: str | None = None
    allergies: str | None = None
    vk: str | None = None
    telegram: str | None = None
    telegram_id: int | None = None
    groups: list[Group] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    def in_group(self, group_name: str) -> bool:
        """Exact, case-sensitive membership test by group name."""
        return any(group.name == group_name for group in self.groups)


class ContactSummary(BaseModel):
    """Public view of a contact for unauthenticated callers."""

    id: int
    name: str
