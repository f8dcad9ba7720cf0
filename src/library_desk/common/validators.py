from __future__ import annotations

import re

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_MOBILE_RE = re.compile(r"^\+?[0-9]{10,13}$")
_SEAT_RE = re.compile(r"^[A-Z][0-9]{1,2}$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters long")
    return value


def require_email(value: str, field_name: str = "Email") -> str:
    value = require_non_empty(value, field_name).lower()
    if not _EMAIL_RE.match(value):
        raise ValidationError("Please enter a valid email address")
    return value


def require_mobile(value: str, field_name: str = "Mobile number") -> str:
    value = require_non_empty(value, field_name).replace(" ", "")
    if not _MOBILE_RE.match(value):
        raise ValidationError(f"{field_name} is not valid")
    return value


def require_int_in_range(value, field_name: str, *, low: int, high: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number < low or number > high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return number


def require_seat_number(value: str, field_name: str = "Seat number") -> str:
    """Row letter plus seat digits, e.g. A12."""
    value = require_non_empty(value, field_name).upper()
    if not _SEAT_RE.match(value):
        raise ValidationError(f"{field_name} must look like A12")
    return value
