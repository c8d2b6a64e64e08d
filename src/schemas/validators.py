"""
Shared validation functions for Pydantic schemas and the credential service.

The service layer calls these directly as well, so requests that bypass the
HTTP schemas are held to the same rules.
"""
import re

# Deliberately loose: one "@", no whitespace, a dot in the domain. Deliverability
# is proven by the reset email, not by this pattern.
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 100
# argon2 has no input limit, but unbounded input is a cheap way to burn CPU.
MAX_PASSWORD_LENGTH = 1024


def normalize_email(email: str) -> str:
    """
    Normalize and validate an email address.

    Returns:
        The trimmed, lower-cased email.

    Raises:
        ValueError: If the email is empty, too long or malformed.
    """
    normalized = email.strip().lower()
    if not normalized:
        raise ValueError("Email cannot be empty")
    if len(normalized) > MAX_EMAIL_LENGTH:
        raise ValueError(f"Email exceeds {MAX_EMAIL_LENGTH} characters")
    if not EMAIL_PATTERN.match(normalized):
        raise ValueError(f"Invalid email format: '{normalized}'")
    return normalized


def validate_name(value: str, field: str) -> str:
    """
    Trim and validate a first or last name.

    Raises:
        ValueError: If the name is blank or too long.
    """
    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field} cannot be empty")
    if len(stripped) > MAX_NAME_LENGTH:
        raise ValueError(f"{field} exceeds {MAX_NAME_LENGTH} characters")
    return stripped


def validate_password(password: str) -> str:
    """
    Check a new password is non-empty and bounded. It is returned untouched.

    Raises:
        ValueError: If the password is empty or too long.
    """
    if not password:
        raise ValueError("Password cannot be empty")
    if len(password) > MAX_PASSWORD_LENGTH:
        raise ValueError(f"Password exceeds {MAX_PASSWORD_LENGTH} characters")
    return password
