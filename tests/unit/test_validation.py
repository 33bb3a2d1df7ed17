from __future__ import annotations

import pytest

from bumptrack.validation import ValidationError, validate_login, validate_period, validate_signup


def test_valid_login_passes() -> None:
    validate_login("mother@bumptrack.app", "secret1")


def test_login_reports_each_invalid_field() -> None:
    with pytest.raises(ValidationError) as exc:
        validate_login("not-an-email", "123")
    assert exc.value.errors == {
        "email": "Enter a valid email",
        "password": "Password should be of minimum 6 characters length",
    }


def test_login_requires_both_fields() -> None:
    with pytest.raises(ValidationError) as exc:
        validate_login("", "")
    assert exc.value.errors == {"email": "Email is required", "password": "Password is required"}


def test_signup_requires_matching_passwords() -> None:
    with pytest.raises(ValidationError) as exc:
        validate_signup("Ana", "ana@bumptrack.app", "secret1", "secret2")
    assert exc.value.errors == {"confirm_password": "Passwords must match"}


def test_signup_missing_fields() -> None:
    with pytest.raises(ValidationError) as exc:
        validate_signup("  ", "ana@bumptrack.app", "secret1", "")
    assert exc.value.errors["name"] == "Name is required"
    assert exc.value.errors["confirm_password"] == "Confirm Password is required"


def test_valid_signup_passes() -> None:
    validate_signup("Ana", "ana@bumptrack.app", "secret1", "secret1")


@pytest.mark.parametrize("period", [1, 2, 24])
def test_period_in_range_accepted(period: int) -> None:
    assert validate_period(period) == period


@pytest.mark.parametrize(
    ("period", "message"),
    [
        (None, "Please select a time period"),
        ("", "Please select a time period"),
        (0, "Period must be between 1 and 24 hours"),
        (25, "Period must be between 1 and 24 hours"),
        (1.5, "Period must be a whole number of hours"),
        (True, "Period must be a whole number of hours"),
    ],
)
def test_period_rejected(period: object, message: str) -> None:
    with pytest.raises(ValidationError) as exc:
        validate_period(period)
    assert exc.value.errors == {"period": message}
