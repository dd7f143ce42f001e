"""
Identity providers.

The actions talk to an IdentityProvider, never to a concrete backend, so a
managed auth service could replace the credentials-backed provider without
touching the sign-up / sign-in orchestration.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import structlog

from portal.auth import constants
from portal.auth.password import check_needs_rehash, hash_password, verify_password
from portal.auth.schemas import ApiResponse, Identity
from portal.store.exceptions import StoreError
from portal.store.interfaces import ProfileStore

logger = structlog.get_logger()


@runtime_checkable
class IdentityProvider(Protocol):
    """Contract the authentication actions depend on."""

    async def authorize(self, email: str | None, password: str | None) -> Identity | None:
        """
        Check an email/password pair.

        Returns:
            The identity on success, None on any rejection. Callers cannot
            tell a missing account from a wrong password.
        """
        ...

    async def set_password(self, user_id: str, password: str) -> ApiResponse[None]:
        """Persist a new password for an existing account."""
        ...

    async def request_password_reset(self, email: str, redirect_url: str) -> ApiResponse[None]:
        """Dispatch a password reset message for ``email``."""
        ...


class CredentialsIdentityProvider:
    """IdentityProvider backed by the profiles and user_passwords tables."""

    def __init__(self, store: ProfileStore) -> None:
        self.store = store

    async def authorize(self, email: str | None, password: str | None) -> Identity | None:
        if not email or not password:
            logger.info("authorize_rejected", reason="missing_credentials")
            return None

        try:
            profile = await self.store.get_profile_by_email(email)
            if profile is None:
                logger.info("authorize_rejected", reason="unknown_email")
                return None

            password_hash = await self.store.get_password_hash(profile.id)
            if password_hash is None:
                logger.info("authorize_rejected", reason="no_password", user_id=profile.id)
                return None

            if not verify_password(password, password_hash):
                logger.info("authorize_rejected", reason="password_mismatch", user_id=profile.id)
                return None

            if check_needs_rehash(password_hash):
                await self.store.upsert_password_hash(profile.id, hash_password(password))
                logger.info("password_rehashed", user_id=profile.id)
        except StoreError:
            logger.exception("authorize_failed")
            return None

        return Identity(
            id=profile.id,
            email=profile.email or email,
            name=profile.full_name,
            avatar_url=profile.avatar_url,
            email_verified=profile.email_verified_at is not None,
        )

    async def set_password(self, user_id: str, password: str) -> ApiResponse[None]:
        try:
            await self.store.upsert_password_hash(user_id, hash_password(password))
        except StoreError:
            logger.exception("set_password_failed", user_id=user_id)
            return ApiResponse[None].fail("Failed to update password")
        logger.info("password_updated", user_id=user_id)
        return ApiResponse[None].ok()

    async def request_password_reset(self, email: str, redirect_url: str) -> ApiResponse[None]:
        # TODO: issue a single-use reset token and mail it once the reset-token table exists.
        logger.warning("password_reset_unavailable", email=email, redirect_url=redirect_url)
        return ApiResponse[None].fail(constants.PASSWORD_RESET_UNAVAILABLE)
