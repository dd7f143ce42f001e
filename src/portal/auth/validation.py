"""
Form input validation for the authentication actions.

Validators raise InvalidInputError carrying the user-facing message, and
return the checked values so callers get non-optional types back.
"""

from __future__ import annotations

from portal.auth import constants
from portal.config import get_settings


class InvalidInputError(ValueError):
    """Raised when a form field is missing or unacceptable."""


def require_email_and_password(email: str | None, password: str | None) -> tuple[str, str]:
    """Both fields must be present and non-blank."""
    if not email or not email.strip() or not password:
        raise InvalidInputError(constants.EMAIL_AND_PASSWORD_REQUIRED)
    return email, password


def require_email(email: str | None) -> str:
    if not email or not email.strip():
        raise InvalidInputError(constants.EMAIL_REQUIRED)
    return email


def check_password_length(password: str) -> None:
    """Enforce the configured minimum and maximum password length."""
    settings = get_settings()
    if len(password) < settings.password_min_length:
        raise InvalidInputError(constants.password_too_short_message())
    if len(password) > settings.password_max_length:
        raise InvalidInputError(constants.password_too_long_message())


def check_passwords_match(password: str, confirm_password: str) -> None:
    if password != confirm_password:
        raise InvalidInputError(constants.PASSWORDS_DO_NOT_MATCH)


def require_new_password(password: str | None, confirm_password: str | None) -> str:
    """Presence, then length, then equality of the new password and its confirmation."""
    if not password or not confirm_password:
        raise InvalidInputError(constants.PASSWORD_REQUIRED)
    check_password_length(password)
    check_passwords_match(password, confirm_password)
    return password


def normalize_email(email: str) -> str:
    return email.strip().lower()
