from __future__ import annotations

import pytest

from tasktracker.core.validation import (
    name_issues,
    normalize_email,
    password_issues,
    validate_new_password,
    validate_registration,
)
from tasktracker.errors import ValidationError


@pytest.mark.parametrize("password", ["abcdef", "ABCDEF1", "Abc1", "abcdef1", "ABCdefg"])
def test_weak_passwords_are_rejected(password: str) -> None:
    assert password_issues(password)


def test_password_with_mixed_case_and_digit_is_accepted() -> None:
    assert password_issues("Abcdef1") == []


def test_name_length_bounds() -> None:
    assert name_issues("A")
    assert name_issues("x" * 51)
    assert name_issues("  Al  ") == []
    assert name_issues("x" * 50) == []


def test_email_is_trimmed_and_lowercased() -> None:
    assert normalize_email("  Ana.Souza@Example.COM ") == "ana.souza@example.com"


def test_registration_reports_every_violation() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_registration("A", "not-an-email", "abc")

    fields = {issue["field"] for issue in excinfo.value.errors}
    assert fields == {"name", "email", "password"}
    assert excinfo.value.status_code == 400
    assert excinfo.value.details["errors"] == excinfo.value.errors


def test_registration_returns_cleaned_values() -> None:
    name, email = validate_registration("  Ana Souza ", "ANA@example.com", "Secret123")
    assert name == "Ana Souza"
    assert email == "ana@example.com"


def test_new_password_issues_use_new_password_field() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_new_password("short")
    assert {issue["field"] for issue in excinfo.value.errors} == {"newPassword"}
