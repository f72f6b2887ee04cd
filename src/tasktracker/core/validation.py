"""Account input rules shared by registration and profile updates.

Each check returns a list of ``{"field", "message"}`` issues instead of
raising, so callers can report every problem in a single response.
"""

from __future__ import annotations

import re

from email_validator import EmailNotValidError, validate_email

from ..errors import ValidationError

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")

Issue = dict[str, str]


def name_issues(name: str | None, *, field: str = "name") -> list[Issue]:
    cleaned = (name or "").strip()
    if not NAME_MIN_LENGTH <= len(cleaned) <= NAME_MAX_LENGTH:
        return [
            {
                "field": field,
                "message": f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters.",
            }
        ]
    return []


def password_issues(password: str | None, *, field: str = "password") -> list[Issue]:
    value = password or ""
    issues: list[Issue] = []
    if len(value) < PASSWORD_MIN_LENGTH:
        issues.append(
            {"field": field, "message": f"Password must be at least {PASSWORD_MIN_LENGTH} characters long."}
        )
    if not PASSWORD_PATTERN.match(value):
        issues.append(
            {
                "field": field,
                "message": "Password must contain at least one lowercase letter, one uppercase letter and one digit.",
            }
        )
    return issues


def normalize_email(email: str) -> str:
    """Return the canonical (trimmed, lower-cased) form of a valid address.

    Raises ``EmailNotValidError`` when the address is malformed.
    """

    result = validate_email(email.strip(), check_deliverability=False)
    return result.normalized.lower()


def email_issues(email: str | None, *, field: str = "email") -> tuple[str | None, list[Issue]]:
    if not email or not email.strip():
        return None, [{"field": field, "message": "Email is required."}]
    try:
        return normalize_email(email), []
    except EmailNotValidError:
        return None, [{"field": field, "message": "Email address is invalid."}]


def validate_registration(name: str, email: str, password: str) -> tuple[str, str]:
    """Check a sign-up payload, returning the cleaned name and email."""

    issues = name_issues(name)
    normalized_email, problems = email_issues(email)
    issues.extend(problems)
    issues.extend(password_issues(password))
    if issues or normalized_email is None:
        raise ValidationError("Invalid registration data.", errors=issues)
    return name.strip(), normalized_email


def validate_new_password(password: str, *, field: str = "newPassword") -> None:
    issues = password_issues(password, field=field)
    if issues:
        raise ValidationError("New password does not meet the requirements.", errors=issues)


__all__ = [
    "NAME_MAX_LENGTH",
    "NAME_MIN_LENGTH",
    "PASSWORD_MIN_LENGTH",
    "PASSWORD_PATTERN",
    "email_issues",
    "name_issues",
    "normalize_email",
    "password_issues",
    "validate_new_password",
    "validate_registration",
]
