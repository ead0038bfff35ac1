"""Input checks shared by services (ids, emails, names, URLs, passwords)."""

import re
from typing import Any
from urllib.parse import urlparse

from email_validator import EmailNotValidError, validate_email

from app.core.errors import ValidationError
from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN

# Letters (including Spanish accents), spaces, hyphen, apostrophe and dot.
NAME_PATTERN = re.compile(r"^[a-zA-ZáéíóúÁÉÍÓÚñÑüÜ\s\-'.]{2,50}$")
NAME_MAX_LEN = 50

INVALID_ID_MESSAGE = "The ID must be a positive integer."


def parse_positive_id(raw: Any) -> int:
    """Parse a path id; only strings of digits (or ints) greater than zero pass."""
    if isinstance(raw, bool):
        raise ValidationError(INVALID_ID_MESSAGE)
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and raw.strip().isdigit():
        value = int(raw.strip())
    else:
        raise ValidationError(INVALID_ID_MESSAGE)
    if value <= 0:
        raise ValidationError(INVALID_ID_MESSAGE)
    return value


def clean_text(value: Any) -> str:
    """Return value as a stripped string ('' for None)."""
    if value is None:
        return ""
    return str(value).strip()


def is_valid_email(email: str) -> bool:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def check_email(email: Any) -> str:
    value = clean_text(email)
    if not value or not is_valid_email(value):
        raise ValidationError("Invalid email format.")
    return value.lower()


def check_password(password: Any) -> str:
    if not isinstance(password, str) or len(password) < PASSWORD_MIN_LEN:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LEN} characters.")
    if len(password) > PASSWORD_MAX_LEN:
        raise ValidationError(f"Password must be at most {PASSWORD_MAX_LEN} characters.")
    return password


def check_name(value: Any, field: str) -> str:
    name = clean_text(value)
    if not name:
        raise ValidationError(f"{field} must not be empty.")
    if len(name) > NAME_MAX_LEN:
        raise ValidationError(f"{field} must be at most {NAME_MAX_LEN} characters.")
    if not NAME_PATTERN.match(name):
        raise ValidationError(f"{field} contains invalid characters.")
    return name


def is_http_url(value: Any) -> bool:
    if not isinstance(value, str) or not value.strip():
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
