"""Typed exceptions for directory (contact/group) operations."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.validation import FieldError


class DirectoryError(Exception):
    """Base class for contact and group errors."""


class ValidationFailedError(DirectoryError):
    """Request data failed validation. Carries one entry per offending field."""

    def __init__(self, errors: list["FieldError"]):
        self.errors = errors
        fields = ", ".join(e.field for e in errors)
        super().__init__(f"Validation failed for: {fields}")


class ContactNotFoundError(DirectoryError):
    """No live contact with the requested id (or linked to the caller)."""


class GroupNotFoundError(DirectoryError):
    """No live group with the requested id."""


class ContactConflictError(DirectoryError):
    """Another contact already uses this phone, email or Telegram id."""


class GroupNameExistsError(DirectoryError):
    """Another group already has this name."""


class MembershipNotFoundError(DirectoryError):
    """Contact is not a member of the group it is being removed from."""
