"""Client-side form validation for sign-in, sign-up and new kick sessions."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from email_validator import EmailNotValidError, validate_email

from bumptrack.config.loader import MAX_PERIOD_HOURS, MIN_PERIOD_HOURS

MIN_PASSWORD_LENGTH = 6


class ValidationError(ValueError):
    """Raised before submission when one or more fields are invalid."""

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors: Dict[str, str] = dict(errors)
        summary = "; ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(summary)


def validate_login(email: Any, password: Any) -> None:
    errors: Dict[str, str] = {}
    _check_email(email, errors)
    _check_password(password, errors)
    if errors:
        raise ValidationError(errors)


def validate_signup(name: Any, email: Any, password: Any, confirm_password: Any) -> None:
    errors: Dict[str, str] = {}
    if not isinstance(name, str) or not name.strip():
        errors["name"] = "Name is required"
    _check_email(email, errors)
    _check_password(password, errors)
    if not confirm_password:
        errors["confirm_password"] = "Confirm Password is required"
    elif confirm_password != password:
        errors["confirm_password"] = "Passwords must match"
    if errors:
        raise ValidationError(errors)


def validate_period(period: Any) -> int:
    """Return the period in whole hours or raise ``ValidationError``."""
    if period is None or period == "":
        raise ValidationError({"period": "Please select a time period"})
    if isinstance(period, bool) or not isinstance(period, int):
        raise ValidationError({"period": "Period must be a whole number of hours"})
    if not MIN_PERIOD_HOURS <= period <= MAX_PERIOD_HOURS:
        raise ValidationError(
            {"period": f"Period must be between {MIN_PERIOD_HOURS} and {MAX_PERIOD_HOURS} hours"}
        )
    return period


def _check_email(email: Any, errors: Dict[str, str]) -> None:
    if not isinstance(email, str) or not email.strip():
        errors["email"] = "Email is required"
        return
    try:
        validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError:
        errors["email"] = "Enter a valid email"


def _check_password(password: Any, errors: Dict[str, str]) -> None:
    if not isinstance(password, str) or not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password should be of minimum {MIN_PASSWORD_LENGTH} characters length"


__all__ = [
    "MIN_PASSWORD_LENGTH",
    "ValidationError",
    "validate_login",
    "validate_period",
    "validate_signup",
]
