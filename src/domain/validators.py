"""
Field validators - Pure format rules for user and pet fields.

Every validator takes the raw value and returns a ValidationResult,
which is truthy when the value passes. The schema layer turns a
failing result into a field-scoped ValidationError.
"""

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

EMAIL_PATTERN = re.compile(r"^[\w-]+(\.[\w-]+)*@([\w-]+\.)+[a-zA-Z]{2,7}$")

# "+" then 2-15 digits, first digit non-zero
INTERNATIONAL_PHONE_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")

# 011/11 prefix, then 4 + 4 digits; separator is one space or hyphen, used consistently
LOCAL_PHONE_PATTERN = re.compile(r"^(?:011|11)([ -]?)\d{4}\1\d{4}$")

PASSWORD_SPECIAL_CHARACTERS = "@$!%*?&"
PASSWORD_MIN_LENGTH = 8

MAX_PET_AGE = 30


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a single field check."""

    valid: bool
    message: str = ""

    def __bool__(self) -> bool:
        return self.valid


_OK = ValidationResult(True)


def _fail(message: str) -> ValidationResult:
    return ValidationResult(False, message)


def validate_email(value: Any) -> ValidationResult:
    """Check a `local@domain.tld` address (case-insensitive)."""
    if not isinstance(value, str) or not EMAIL_PATTERN.match(value.strip()):
        return _fail("please provide a valid email address")
    return _OK


def validate_international_phone(value: Any) -> ValidationResult:
    if not isinstance(value, str) or not INTERNATIONAL_PHONE_PATTERN.match(value):
        return _fail("please provide a valid phone number (e.g. +5491112345678)")
    return _OK


def validate_local_phone(value: Any) -> ValidationResult:
    if not isinstance(value, str) or not LOCAL_PHONE_PATTERN.match(value):
        return _fail("please provide a valid phone number (e.g. 011 1234 5678)")
    return _OK


def validate_password(value: Any) -> ValidationResult:
    """
    Check password length and complexity.

    Length is reported separately so the caller gets the more useful message.
    Characters outside the special set are allowed; at least one from it is required.
    """
    if not isinstance(value, str) or len(value) < PASSWORD_MIN_LENGTH:
        return _fail(f"password must be at least {PASSWORD_MIN_LENGTH} characters")
    if not (
        any(c.islower() for c in value)
        and any(c.isupper() for c in value)
        and any(c.isdigit() for c in value)
        and any(c in PASSWORD_SPECIAL_CHARACTERS for c in value)
    ):
        return _fail(
            "password must contain at least one uppercase letter, one lowercase letter, "
            f"one digit and one special character ({PASSWORD_SPECIAL_CHARACTERS})"
        )
    return _OK


def validate_length(
    value: Any, *, label: str, minimum: int = 0, maximum: int | None = None
) -> ValidationResult:
    """Check a string length against inclusive bounds."""
    if not isinstance(value, str):
        return _fail(f"{label} must be a string")
    if len(value) < minimum:
        return _fail(f"{label} must be at least {minimum} characters")
    if maximum is not None and len(value) > maximum:
        return _fail(f"{label} cannot exceed {maximum} characters")
    return _OK


def validate_age(value: Any) -> ValidationResult:
    if isinstance(value, bool) or not isinstance(value, int):
        return _fail("age must be a whole number")
    if value < 0:
        return _fail("age cannot be negative")
    if value > MAX_PET_AGE:
        return _fail(f"age cannot exceed {MAX_PET_AGE}")
    return _OK


def validate_not_future(value: Any, *, label: str = "date") -> ValidationResult:
    if not isinstance(value, datetime):
        return _fail(f"{label} must be a valid date")
    # naive datetimes are treated as UTC
    moment = value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if moment > datetime.now(UTC):
        return _fail(f"{label} cannot be in the future")
    return _OK
