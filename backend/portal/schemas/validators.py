"""Reusable input validators for portal payloads.

Provides:
- Required-field checks that collect every missing field at once
- Email normalisation
- RT/RW area code validation
- NIK/KK identity number validation
- XSS screening for free-text fields
"""

import re
from typing import Any, Iterable

# Regex patterns
EMAIL_REGEX = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
AREA_CODE_REGEX = re.compile(r"^\d{1,3}$")
IDENTITY_NUMBER_REGEX = re.compile(r"^\d{16}$")

# XSS patterns
XSS_PATTERNS = [
    r"<script[^>]*>.*?</script>",
    r"javascript:",
    r"on\w+\s*=",
    r"<iframe",
]


def missing_fields(data: Any, required: Iterable[str]) -> list[str]:
    """Return one "Field X is required" message per blank required field.

    A value counts as blank when it is absent, not a string, or only
    whitespace.

    Args:
        data: Decoded JSON body
        required: Field names that must be present

    Returns:
        Error messages, empty when everything is present
    """
    if not isinstance(data, dict):
        return ["Invalid data format"]

    errors = []
    for field in required:
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            errors.append(f"Field {field} is required")
    return errors


def sanitize_string(value: str, max_length: int = 1000) -> str:
    """Trim and screen free text.

    Raises:
        ValueError: If too long or if it looks like markup injection
    """
    if not isinstance(value, str):
        raise ValueError("Must be a string")

    value = value.strip()

    if len(value) > max_length:
        raise ValueError(f"String too long (max {max_length} characters)")

    for pattern in XSS_PATTERNS:
        if re.search(pattern, value, re.IGNORECASE):
            raise ValueError("Invalid characters detected")

    return value


def validate_email(value: str) -> str:
    """Validate and lower-case an email address.

    Raises:
        ValueError: If email is invalid
    """
    if not value:
        raise ValueError("Email is required")

    value = value.strip().lower()

    if len(value) > 254:  # RFC 5321
        raise ValueError("Email address too long")

    if not EMAIL_REGEX.match(value):
        raise ValueError("Invalid email address format")

    return value


def validate_area_code(value: str) -> str:
    """RT/RW codes are short digit strings such as "01" or "16".

    Leading zeros are significant and kept.
    """
    value = str(value).strip()
    if not AREA_CODE_REGEX.match(value):
        raise ValueError("Kode RT/RW harus berupa 1-3 digit angka")
    return value


def validate_identity_number(value: str) -> str:
    """NIK and KK numbers are exactly 16 digits."""
    value = str(value).strip()
    if not IDENTITY_NUMBER_REGEX.match(value):
        raise ValueError("Nomor harus 16 digit angka")
    return value
