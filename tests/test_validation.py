from __future__ import annotations

from decimal import Decimal

import pytest

from contourz.errors import ValidationError
from contourz.validation import (
    parse_amount,
    parse_tag_input,
    require,
    validate_login,
    validate_profile_form,
    validate_signup,
)


def test_login_requires_both_fields():
    assert validate_login("", "") == {
        "email": "Email is required",
        "password": "Password is required",
    }


def test_login_checks_email_shape_and_password_length():
    errors = validate_login("not-an-email", "12345")
    assert errors["email"] == "Please enter a valid email"
    assert errors["password"] == "Password must be at least 6 characters"
    assert validate_login("jane@example.com", "123456") == {}


def test_signup_errors():
    errors = validate_signup("nope", "123", "456")
    assert errors == {
        "email": "Invalid email address",
        "password": "Password must be at least 6 characters",
        "confirm_password": "Passwords do not match",
    }
    assert validate_signup("jane@example.com", "secret123", "secret123") == {}


@pytest.mark.parametrize(
    "username, message",
    [
        ("", "Username is required"),
        ("   ", "Username is required"),
        ("ab", "Username must be at least 3 characters"),
        ("bad name!", "Username can only contain letters, numbers, and underscores"),
        ("jane\n", "Username can only contain letters, numbers, and underscores"),
    ],
)
def test_profile_username_rules(username, message):
    assert validate_profile_form(username, "Jane")["username"] == message


def test_profile_form_valid_and_display_name_required():
    assert validate_profile_form("jane_doe1", "Jane") == {}
    assert validate_profile_form("jane_doe1", " ") == {"display_name": "Display name is required"}


def test_require():
    require({})
    with pytest.raises(ValidationError) as exc_info:
        require({"name": "Name is required"})
    assert exc_info.value.errors == {"name": "Name is required"}
    assert str(exc_info.value) == "Name is required"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("", []),
        ("client", ["client"]),
        ("a, ,b,,  c ", ["a", "b", "c"]),
        (" , ,", []),
        ("vip,  big spender", ["vip", "big spender"]),
    ],
)
def test_parse_tag_input(text, expected):
    tags = parse_tag_input(text)
    assert tags == expected
    assert all(t and t == t.strip() for t in tags)


def test_parse_amount():
    assert parse_amount("12.50") == Decimal("12.50")
    assert parse_amount(" 3 ") == Decimal("3")
    for bad in ("", "abc", "NaN", "inf"):
        with pytest.raises(ValidationError) as exc_info:
            parse_amount(bad)
        assert exc_info.value.errors == {"amount": "Valid amount is required"}
