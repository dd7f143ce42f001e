"""Authentication messages and paths."""

from portal.config import get_settings

EMAIL_REQUIRED = "Email is required"
PASSWORD_REQUIRED = "Password is required"
EMAIL_AND_PASSWORD_REQUIRED = "Email and password are required"
PASSWORDS_DO_NOT_MATCH = "Passwords do not match"
EMAIL_ALREADY_REGISTERED = "Email already registered"
INVALID_CREDENTIALS = "Invalid email or password"
GENERIC_ERROR = "An error occurred"
PASSWORD_RESET_UNAVAILABLE = "Password reset is not available for password accounts yet"
EMAIL_NOT_VERIFIED = "Please verify your email address before signing in"
VERIFICATION_TOKEN_REQUIRED = "Verification token is required"
INVALID_VERIFICATION_TOKEN = "Invalid or expired verification link"

RESET_PASSWORD_PATH = "/auth/reset-password"
VERIFY_EMAIL_PATH = "/auth/verify-email"


def password_too_short_message() -> str:
    return f"Password must be at least {get_settings().password_min_length} characters"


def password_too_long_message() -> str:
    return f"Password must not exceed {get_settings().password_max_length} characters"
