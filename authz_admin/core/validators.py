"""Input validation helpers for operator-supplied data."""
from __future__ import annotations

import re
from typing import Optional


class ValidationError(ValueError):
    """Malformed or contradictory input, rejected before any backend call."""


def require(value: Optional[str], field: str) -> str:
    """Return the trimmed value or raise when it is missing or blank."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    return str(value).strip()


def validate_email(email: str) -> str:
    """Validate email address.

    Args:
        email: Email address to validate

    Returns:
        Trimmed email address (case preserved, it doubles as login id)

    Raises:
        ValidationError: If email is invalid
    """
    email = (email or "").strip()
    if not email or "@" not in email:
        raise ValidationError("Invalid email format")

    local, domain = email.rsplit("@", 1)
    if not local or not domain or "." not in domain:
        raise ValidationError("Invalid email format")
    if len(email) > 254:
        raise ValidationError("Email exceeds maximum length")

    return email


def validate_name(name: str, field: str) -> str:
    """Validate first/last name fields.

    Args:
        name: Name to validate
        field: Field name for error messages (e.g., "First name")

    Returns:
        Trimmed name

    Raises:
        ValidationError: If name is invalid
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError(f"{field} is required")
    if len(name) > 128:
        raise ValidationError(f"{field} exceeds maximum length")

    if any(char in name for char in "<>\"'`;&|$"):
        raise ValidationError(f"{field} contains invalid characters")

    return name


def validate_bcrypt_hash(value: str) -> str:
    """Check that a legacy credential looks like a bcrypt hash.

    Only the shape is checked; the hash is returned untouched.
    """
    if not value or not value.strip():
        raise ValidationError("bcrypt hash is required")
    if not value.startswith("$2"):
        raise ValidationError("bcrypt hash must start with '$2' (e.g. $2a$, $2b$, $2y$)")
    return value


_URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)


def validate_url(value: str, field: str) -> str:
    """Validate an absolute http(s) URL."""
    value = (value or "").strip()
    if not _URL_PATTERN.match(value):
        raise ValidationError(f"{field} must be an absolute http(s) URL")
    return value
