"""
Profile business logic.

Every function returns ``None`` / ``False`` when the store fails; callers treat
that as "cannot proceed". Store exceptions never escape this module.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from portal.auth.roles import DEFAULT_ROLE, UserRole
from portal.profiles.schemas import Profile, ProfileCreate, ProfileUpdate
from portal.store.exceptions import DuplicateRecordError, StoreError

if TYPE_CHECKING:
    from portal.store.interfaces import ProfileStore

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_profile(store: ProfileStore, user_id: str) -> Profile | None:
    """Fetch a profile by ID."""
    try:
        return await store.get_profile(user_id)
    except StoreError:
        logger.exception("profile_fetch_failed", user_id=user_id)
        return None


async def get_profile_by_email(store: ProfileStore, email: str) -> Profile | None:
    """Fetch a profile by email (case-insensitive)."""
    try:
        return await store.get_profile_by_email(email)
    except StoreError:
        logger.exception("profile_fetch_by_email_failed")
        return None


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def create_profile(store: ProfileStore, profile: ProfileCreate) -> Profile | None:
    """Insert a profile. Returns None if the id/email is taken or the store fails."""
    try:
        created = await store.insert_profile(profile)
    except DuplicateRecordError:
        logger.info("profile_create_conflict", user_id=profile.id)
        return None
    except StoreError:
        logger.exception("profile_create_failed", user_id=profile.id)
        return None
    logger.info("profile_created", user_id=created.id, role=created.role)
    return created


async def update_profile(store: ProfileStore, user_id: str, changes: ProfileUpdate) -> Profile | None:
    """Apply a partial update; ``updated_at`` is refreshed by the store."""
    try:
        return await store.update_profile(user_id, changes)
    except StoreError:
        logger.exception("profile_update_failed", user_id=user_id)
        return None


async def set_role(store: ProfileStore, user_id: str, role: UserRole) -> Profile | None:
    """Change a user's role (e.g. promotion to admin)."""
    profile = await update_profile(store, user_id, ProfileUpdate(role=role))
    if profile is not None:
        logger.info("profile_role_changed", user_id=user_id, role=role)
    return profile


# ---------------------------------------------------------------------------
# Bootstrap
# ---------------------------------------------------------------------------


async def ensure_profile_exists(
    store: ProfileStore,
    user_id: str,
    email: str | None,
    full_name: str | None = None,
) -> Profile | None:
    """
    Return the profile for ``user_id``, creating it with the default role if missing.

    An existing row is returned unchanged even if ``email`` / ``full_name``
    differ. When a concurrent caller inserts the same id first, the store's
    uniqueness constraint rejects our insert and the winner's row is re-read,
    so at most one row is ever created.

    Returns:
        The profile, or None if the store failed.
    """
    try:
        existing = await store.get_profile(user_id)
        if existing is not None:
            return existing

        logger.info("profile_bootstrap", user_id=user_id)
        try:
            return await store.insert_profile(
                ProfileCreate(id=user_id, email=email, full_name=full_name or None, role=DEFAULT_ROLE)
            )
        except DuplicateRecordError:
            winner = await store.get_profile(user_id)
            if winner is None:
                # The conflict was on email, not id: another profile owns that address.
                logger.warning("profile_bootstrap_email_conflict", user_id=user_id)
            return winner
    except StoreError:
        logger.exception("profile_bootstrap_failed", user_id=user_id)
        return None
