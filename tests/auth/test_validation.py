"""Tests for form input validation."""

import pytest

from portal.auth import constants
from portal.auth.validation import (
    InvalidInputError,
    check_password_length,
    check_passwords_match,
    normalize_email,
    require_email,
    require_email_and_password,
    require_new_password,
)
from portal.config import get_settings


class TestEmailAndPassword:
    @pytest.mark.parametrize(
        ("email", "password"),
        [(None, "secret"), ("", "secret"), ("   ", "secret"), ("a@x.com", None), ("a@x.com", "")],
    )
    def test_missing_field(self, email, password):
        with pytest.raises(InvalidInputError, match=constants.EMAIL_AND_PASSWORD_REQUIRED):
            require_email_and_password(email, password)

    def test_present(self):
        assert require_email_and_password("a@x.com", "secret") == ("a@x.com", "secret")

    def test_email_only(self):
        with pytest.raises(InvalidInputError, match=constants.EMAIL_REQUIRED):
            require_email(None)
        assert require_email("a@x.com") == "a@x.com"


class TestPasswordLength:
    def test_minimum_is_six(self):
        with pytest.raises(InvalidInputError, match="Password must be at least 6 characters"):
            check_password_length("12345")
        check_password_length("123456")

    def test_maximum(self):
        limit = get_settings().password_max_length
        check_password_length("a" * limit)
        with pytest.raises(InvalidInputError, match=f"must not exceed {limit}"):
            check_password_length("a" * (limit + 1))

    def test_minimum_is_configurable(self, monkeypatch):
        monkeypatch.setenv("PORTAL_PASSWORD_MIN_LENGTH", "10")
        get_settings.cache_clear()
        with pytest.raises(InvalidInputError, match="at least 10 characters"):
            check_password_length("123456789")
        check_password_length("1234567890")


class TestNewPassword:
    def test_presence_checked_first(self):
        with pytest.raises(InvalidInputError, match=constants.PASSWORD_REQUIRED):
            require_new_password("", "")
        with pytest.raises(InvalidInputError, match=constants.PASSWORD_REQUIRED):
            require_new_password("secret", None)

    def test_length_checked_before_match(self):
        with pytest.raises(InvalidInputError, match="at least 6 characters"):
            require_new_password("abc", "xyz")

    def test_mismatch(self):
        with pytest.raises(InvalidInputError, match=constants.PASSWORDS_DO_NOT_MATCH):
            require_new_password("secret1", "secret2")
        with pytest.raises(InvalidInputError, match=constants.PASSWORDS_DO_NOT_MATCH):
            check_passwords_match("a", "b")

    def test_valid(self):
        assert require_new_password("secret1", "secret1") == "secret1"


def test_normalize_email():
    assert normalize_email("  A@X.Com ") == "a@x.com"
