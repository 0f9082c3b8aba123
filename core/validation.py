"""
Explicit validation for directory request payloads.

Each request type has one function that returns every problem it finds as a
list of FieldError. An empty list means the payload is acceptable. Services
raise ValidationFailedError with the list; the HTTP layer renders it as 422.
"""

import re
from urllib.parse import urlparse

from pydantic import BaseModel, EmailStr, TypeAdapter, ValidationError

from core.models import ContactCreate, ContactUpdate, OwnContactUpdate

TRANSPORT_OPTIONS = ("есть машина", "есть права", "нет ничего")
PRINTER_OPTIONS = ("цветной", "обычный", "нет")

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
GROUP_NAME_MAX_LENGTH = 100
ALLERGIES_MAX_LENGTH = 255

_E164 = re.compile(r"^\+[1-9]\d{1,14}$")
_email_adapter = TypeAdapter(EmailStr)


class FieldError(BaseModel):
    """One validation problem, addressed to a request field."""

    field: str
    message: str


def _check_name(value: str, errors: list[FieldError]) -> None:
    name = value.strip()
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        errors.append(FieldError(
            field="name",
            message=f"must be {NAME_MIN_LENGTH}-{NAME_MAX_LENGTH} characters",
        ))


def _check_phone(value: str, errors: list[FieldError]) -> None:
    if not _E164.match(value.strip()):
        errors.append(FieldError(field="phone", message="must be in E.164 format, e.g. +79991234567"))


def _check_email(value: str, errors: list[FieldError]) -> None:
    try:
        _email_adapter.validate_python(value.strip())
    except ValidationError:
        errors.append(FieldError(field="email", message="must be a valid email address"))


def _check_optional_fields(data: ContactCreate | ContactUpdate | OwnContactUpdate, errors: list[FieldError]) -> None:
    """Fields shared by every contact payload; None means absent."""
    if data.transport and data.transport not in TRANSPORT_OPTIONS:
        errors.append(FieldError(
            field="transport",
            message=f"must be one of: {', '.join(TRANSPORT_OPTIONS)}",
        ))
    if data.printer and data.printer not in PRINTER_OPTIONS:
        errors.append(FieldError(
            field="printer",
            message=f"must be one of: {', '.join(PRINTER_OPTIONS)}",
        ))
    if data.allergies and len(data.allergies) > ALLERGIES_MAX_LENGTH:
        errors.append(FieldError(
            field="allergies",
            message=f"must be at most {ALLERGIES_MAX_LENGTH} characters",
        ))
    if data.vk:
        parsed = urlparse(data.vk)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(FieldError(field="vk", message="must be an http(s) URL"))
    if data.telegram and not data.telegram.isalnum():
        errors.append(FieldError(field="telegram", message="must contain only letters and digits"))


def validate_contact_create(data: ContactCreate) -> list[FieldError]:
    errors: list[FieldError] = []
    _check_name(data.name, errors)
    _check_phone(data.phone, errors)
    _check_email(data.email, errors)
    _check_optional_fields(data, errors)
    if data.telegram_id is not None and data.telegram_id <= 0:
        errors.append(FieldError(field="telegram_id", message="must be a positive integer"))
    return errors


def validate_contact_update(data: ContactUpdate | OwnContactUpdate) -> list[FieldError]:
    """Only the fields that are present are checked."""
    errors: list[FieldError] = []
    if data.name is not None:
        _check_name(data.name, errors)
    if data.phone is not None:
        _check_phone(data.phone, errors)
    if data.email is not None:
        _check_email(data.email, errors)
    _check_optional_fields(data, errors)
    if isinstance(data, ContactUpdate) and data.telegram_id is not None and data.telegram_id <= 0:
        errors.append(FieldError(field="telegram_id", message="must be a positive integer"))
    return errors


def validate_group_name(name: str) -> list[FieldError]:
    stripped = name.strip()
    if not stripped:
        return [FieldError(field="name", message="must not be empty")]
    if len(stripped) > GROUP_NAME_MAX_LENGTH:
        return [FieldError(field="name", message=f"must be at most {GROUP_NAME_MAX_LENGTH} characters")]
    return []
