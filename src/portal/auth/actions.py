"""
Authentication actions.

Each action orchestrates the store, the identity provider, the session issuer
and the email service in response to one form submission, and always returns
an ApiResponse envelope. Actions never raise and never redirect: navigation is
the caller's decision, driven by the envelope.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import jwt
import structlog

from portal.auth import constants
from portal.auth.password import hash_password
from portal.auth.schemas import ApiResponse, AuthData, EmailData, Session
from portal.auth.session import VERIFICATION_TOKEN_TYPE
from portal.auth.validation import (
    InvalidInputError,
    check_password_length,
    normalize_email,
    require_email,
    require_email_and_password,
    require_new_password,
)
from portal.config import get_settings
from portal.profiles.service import ensure_profile_exists

if TYPE_CHECKING:
    from portal.auth.identity import IdentityProvider
    from portal.auth.session import SessionIssuer
    from portal.email.service import EmailService
    from portal.store.interfaces import ProfileStore

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Sign-up
# ---------------------------------------------------------------------------


async def sign_up(
    store: ProfileStore,
    identity: IdentityProvider,
    sessions: SessionIssuer,
    email_service: EmailService,
    email: str | None,
    password: str | None,
    full_name: str | None = None,
) -> ApiResponse[AuthData]:
    """
    Register a new email + password account.

    validate -> check duplicate -> hash -> create profile -> store credential
    -> welcome email -> auto sign-in. Nothing is rolled back if a later step
    fails; the emails and the auto sign-in are soft failures.

    With email verification enabled the auto sign-in is replaced by a
    verification email, and sign-in stays closed until the link is used.
    """
    try:
        email, password = require_email_and_password(email, password)
        check_password_length(password)
    except InvalidInputError as e:
        return ApiResponse[AuthData].fail(str(e))

    email = normalize_email(email)
    settings = get_settings()

    try:
        if await store.get_profile_by_email(email) is not None:
            return ApiResponse[AuthData].fail(constants.EMAIL_ALREADY_REGISTERED)

        password_hash = hash_password(password)
        user_id = str(uuid.uuid4())

        profile = await ensure_profile_exists(store, user_id, email, full_name)
        if profile is None or profile.id != user_id:
            logger.warning("sign_up_profile_not_created", user_id=user_id)
            return ApiResponse[AuthData].fail(f"{constants.GENERIC_ERROR} during sign up")

        await store.upsert_password_hash(user_id, password_hash)
        logger.info("user_signed_up", user_id=user_id)

        await _send_welcome_email(email_service, email, full_name)

        if settings.email_verification_enabled:
            await _send_verification_email(email_service, sessions, user_id, email)
            return ApiResponse[AuthData].ok(
                AuthData(email=email, auto_signed_in=False, requires_verification=True)
            )

        signed_in = await identity.authorize(email, password)
        if signed_in is None:
            logger.warning("sign_up_auto_sign_in_failed", user_id=user_id)
            return ApiResponse[AuthData].ok(AuthData(email=email, auto_signed_in=False))

        return ApiResponse[AuthData].ok(AuthData(email=email, session_token=sessions.issue(signed_in)))
    except Exception:
        logger.exception("sign_up_failed")
        return ApiResponse[AuthData].fail(f"{constants.GENERIC_ERROR} during sign up")


async def _send_welcome_email(email_service: EmailService, email: str, full_name: str | None) -> None:
    """Best effort: a failed welcome email never fails the sign-up."""
    try:
        result = await email_service.send_welcome_email(email, full_name)
    except Exception:
        logger.exception("welcome_email_failed")
        return
    if not result.success:
        logger.warning("welcome_email_failed", error=result.error)


async def _send_verification_email(
    email_service: EmailService, sessions: SessionIssuer, user_id: str, email: str
) -> None:
    """Best effort: the user can ask for another link from the sign-in page."""
    token = sessions.issue_verification_token(user_id, email)
    verify_url = f"{get_settings().app_url}{constants.VERIFY_EMAIL_PATH}?token={token}"
    try:
        result = await email_service.send_verification_email(email, verify_url)
    except Exception:
        logger.exception("verification_email_failed", user_id=user_id)
        return
    if not result.success:
        logger.warning("verification_email_failed", user_id=user_id, error=result.error)


# ---------------------------------------------------------------------------
# Email verification
# ---------------------------------------------------------------------------


async def verify_email(store: ProfileStore, sessions: SessionIssuer, token: str | None) -> ApiResponse[EmailData]:
    """
    Confirm an email address from the link mailed at sign-up.

    The token must still match the profile's current email, so a link goes
    stale once the address is changed. Using a link twice is harmless.
    """
    if not token:
        return ApiResponse[EmailData].fail(constants.VERIFICATION_TOKEN_REQUIRED)

    try:
        payload = sessions.decode(token, expected_type=VERIFICATION_TOKEN_TYPE)
    except jwt.InvalidTokenError as e:
        logger.info("verification_token_rejected", reason=str(e))
        return ApiResponse[EmailData].fail(constants.INVALID_VERIFICATION_TOKEN)

    user_id = payload["sub"]
    try:
        profile = await store.get_profile(user_id)
        email = profile.email if profile is not None else None
        if not email or email.lower() != str(payload.get("email", "")).lower():
            logger.info("verification_token_rejected", reason="email_mismatch", user_id=user_id)
            return ApiResponse[EmailData].fail(constants.INVALID_VERIFICATION_TOKEN)
        await store.mark_email_verified(user_id)
    except Exception:
        logger.exception("email_verification_failed", user_id=user_id)
        return ApiResponse[EmailData].fail(f"{constants.GENERIC_ERROR} during email verification")

    logger.info("email_verified", user_id=user_id)
    return ApiResponse[EmailData].ok(EmailData(email=email))


async def resend_verification(
    store: ProfileStore,
    sessions: SessionIssuer,
    email_service: EmailService,
    email: str | None,
) -> ApiResponse[EmailData]:
    """
    Mail a fresh verification link.

    Succeeds for unknown and already-verified addresses too, so the response
    does not reveal which emails have accounts.
    """
    try:
        email = normalize_email(require_email(email))
    except InvalidInputError as e:
        return ApiResponse[EmailData].fail(str(e))

    try:
        profile = await store.get_profile_by_email(email)
    except Exception:
        logger.exception("resend_verification_failed")
        return ApiResponse[EmailData].fail(f"{constants.GENERIC_ERROR} while sending the verification email")

    if profile is not None and profile.email_verified_at is None:
        await _send_verification_email(email_service, sessions, profile.id, email)
    return ApiResponse[EmailData].ok(EmailData(email=email))


# ---------------------------------------------------------------------------
# Sign-in / sign-out
# ---------------------------------------------------------------------------


async def sign_in(
    identity: IdentityProvider,
    sessions: SessionIssuer,
    email: str | None,
    password: str | None,
) -> ApiResponse[AuthData]:
    """Authenticate with email + password and issue a session token."""
    try:
        email, password = require_email_and_password(email, password)
    except InvalidInputError as e:
        return ApiResponse[AuthData].fail(str(e))

    email = normalize_email(email)
    try:
        signed_in = await identity.authorize(email, password)
        if signed_in is None:
            return ApiResponse[AuthData].fail(constants.INVALID_CREDENTIALS)
        if get_settings().email_verification_enabled and not signed_in.email_verified:
            logger.info("sign_in_rejected", reason="email_not_verified", user_id=signed_in.id)
            return ApiResponse[AuthData].fail(constants.EMAIL_NOT_VERIFIED)
        token = sessions.issue(signed_in)
    except Exception:
        logger.exception("sign_in_failed")
        return ApiResponse[AuthData].fail(f"{constants.GENERIC_ERROR} during sign in")

    logger.info("user_signed_in", user_id=signed_in.id)
    return ApiResponse[AuthData].ok(AuthData(email=email, session_token=token))


async def sign_out(sessions: SessionIssuer, token: str | None) -> ApiResponse[None]:
    """
    End the current session.

    Tokens are stateless: the HTTP layer drops the cookie and this only
    records the event. The token is decoded without a store lookup, so
    signing out works while the database is unavailable.
    """
    if token:
        try:
            user_id = sessions.decode(token)["sub"]
        except jwt.InvalidTokenError:
            user_id = None
        if user_id:
            logger.info("user_signed_out", user_id=user_id)
    return ApiResponse[None].ok()


# ---------------------------------------------------------------------------
# Password reset / update
# ---------------------------------------------------------------------------


async def reset_password(identity: IdentityProvider, email: str | None) -> ApiResponse[EmailData]:
    """Ask the identity provider to send a password reset message."""
    try:
        email = normalize_email(require_email(email))
    except InvalidInputError as e:
        return ApiResponse[EmailData].fail(str(e))

    reset_url = f"{get_settings().app_url}{constants.RESET_PASSWORD_PATH}"
    try:
        result = await identity.request_password_reset(email, reset_url)
    except Exception:
        logger.exception("password_reset_failed")
        return ApiResponse[EmailData].fail(f"{constants.GENERIC_ERROR} during password reset")

    if not result.success:
        return ApiResponse[EmailData].fail(result.error or "Failed to send password reset email")
    return ApiResponse[EmailData].ok(EmailData(email=email))


async def update_password(
    identity: IdentityProvider,
    email_service: EmailService,
    session: Session | None,
    password: str | None,
    confirm_password: str | None,
) -> ApiResponse[None]:
    """Set a new password for the signed-in user."""
    try:
        password = require_new_password(password, confirm_password)
    except InvalidInputError as e:
        return ApiResponse[None].fail(str(e))

    if session is None:
        return ApiResponse[None].fail("You must be signed in to update your password")

    try:
        result = await identity.set_password(session.user.id, password)
    except Exception:
        logger.exception("password_update_failed", user_id=session.user.id)
        return ApiResponse[None].fail(f"{constants.GENERIC_ERROR} during password update")

    if result.success and session.user.email:
        try:
            await email_service.send_password_changed_email(session.user.email, session.user.name)
        except Exception:
            logger.exception("password_changed_email_failed", user_id=session.user.id)
    return result
