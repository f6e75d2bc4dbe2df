from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from contourz.errors import ValidationError

_LOGIN_EMAIL_RE = re.compile(r"\S+@\S+\.\S+")
_USERNAME_RE = re.compile(r"[a-zA-Z0-9_]+")

MIN_PASSWORD_LENGTH = 6
MIN_USERNAME_LENGTH = 3


def is_valid_email(value: str) -> bool:
    return "@" in value


def validate_login(email: str, password: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not email.strip():
        errors["email"] = "Email is required"
    elif not _LOGIN_EMAIL_RE.search(email):
        errors["email"] = "Please enter a valid email"

    if not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return errors


def validate_signup(email: str, password: str, confirm_password: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not is_valid_email(email):
        errors["email"] = "Invalid email address"
    if len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if password != confirm_password:
        errors["confirm_password"] = "Passwords do not match"
    return errors


def validate_profile_form(username: str, display_name: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    if username.strip() == "":
        errors["username"] = "Username is required"
    elif len(username) < MIN_USERNAME_LENGTH:
        errors["username"] = f"Username must be at least {MIN_USERNAME_LENGTH} characters"
    elif not _USERNAME_RE.fullmatch(username):
        errors["username"] = "Username can only contain letters, numbers, and underscores"

    if display_name.strip() == "":
        errors["display_name"] = "Display name is required"
    return errors


def require(errors: dict[str, str]) -> None:
    """Raise ValidationError when a validator reported anything."""
    if errors:
        raise ValidationError(errors)


def parse_tag_input(text: str) -> list[str]:
    """Split comma separated tag input, trimming whitespace and dropping empty segments."""
    return [part.strip() for part in text.split(",") if part.strip()]


def parse_amount(text: str | int | float | Decimal) -> Decimal:
    try:
        amount = Decimal(str(text).strip())
    except InvalidOperation:
        raise ValidationError({"amount": "Valid amount is required"}) from None
    if not amount.is_finite():
        raise ValidationError({"amount": "Valid amount is required"})
    return amount
