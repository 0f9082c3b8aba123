"""Core domain models."""

from core.models.group import Group, GroupCreate, GroupUpdate
from core.models.contact import (
    Contact,
    ContactCreate,
    ContactSummary,
    ContactUpdate,
    OwnContactUpdate,
)

__all__ = [
    # Group
    "Group", "GroupCreate", "GroupUpdate",
    # Contact
    "Contact", "ContactCreate", "ContactSummary", "ContactUpdate", "OwnContactUpdate",
]
