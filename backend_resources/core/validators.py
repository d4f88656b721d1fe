"""Input validation for user-creation payloads."""
from __future__ import annotations
import re
from typing import Any, Mapping

USERNAME_MIN_LENGTH = 2
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 4

EMAIL_PATTERN = re.compile(r".+@.+\..+")

MUST_NOT_BE_BLANK = "must not be blank"

USERNAME_BLANK = "Username should not be blank"
USERNAME_LENGTH = "Username should be between 2 and 30 characters long"
EMAIL_BLANK = "Email should not be blank"
EMAIL_INVALID = "Email should be valid"
PASSWORD_BLANK = "Password should not be blank"
PASSWORD_LENGTH = "Password should be greater than 4 characters long"


def _is_blank(value: Any) -> bool:
    """Missing, null, non-string or whitespace-only values are blank."""
    return not isinstance(value, str) or not value.strip()


def validate_username(value: Any) -> str | None:
    if _is_blank(value):
        return USERNAME_BLANK
    if not USERNAME_MIN_LENGTH <= len(value) <= USERNAME_MAX_LENGTH:
        return USERNAME_LENGTH
    return None


def validate_email(value: Any) -> str | None:
    if _is_blank(value):
        return EMAIL_BLANK
    if not EMAIL_PATTERN.fullmatch(value):
        return EMAIL_INVALID
    return None


def validate_password(value: Any) -> str | None:
    if _is_blank(value):
        return PASSWORD_BLANK
    if len(value) < PASSWORD_MIN_LENGTH:
        return PASSWORD_LENGTH
    return None


def validate_required(value: Any) -> str | None:
    return MUST_NOT_BE_BLANK if _is_blank(value) else None


FIELD_VALIDATORS = (
    ("username", validate_username),
    ("email", validate_email),
    ("password", validate_password),
    ("firstName", validate_required),
    ("lastName", validate_required),
)


def validate_user_request(payload: Mapping[str, Any]) -> dict[str, str]:
    """Check every field of a user-creation payload.

    Args:
        payload: Decoded JSON object

    Returns:
        Mapping of field name to violation message; empty when valid.
        All violated fields are reported, not just the first.
    """
    violations: dict[str, str] = {}
    for field_name, check in FIELD_VALIDATORS:
        message = check(payload.get(field_name))
        if message:
            violations[field_name] = message
    return violations
