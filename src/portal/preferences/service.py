"""User settings business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from portal.config import get_settings
from portal.preferences.schemas import UserSettings, UserSettingsUpdate
from portal.store.exceptions import StoreError

if TYPE_CHECKING:
    from portal.store.interfaces import ProfileStore

logger = structlog.get_logger()


def resolve_locale(locale: str | None) -> str:
    """Return ``locale`` if supported, otherwise the default locale."""
    settings = get_settings()
    if locale and locale in settings.supported_locales:
        return locale
    return settings.default_locale


def default_user_settings(user_id: str) -> UserSettings:
    return UserSettings(user_id=user_id, locale=get_settings().default_locale)


async def get_user_settings(store: ProfileStore, user_id: str) -> UserSettings | None:
    """
    Get user settings, falling back to defaults when no row exists yet.

    Defaults are not persisted; the row is created on the first write.
    Returns None if the store failed.
    """
    try:
        stored = await store.get_user_settings(user_id)
    except StoreError:
        logger.exception("settings_fetch_failed", user_id=user_id)
        return None
    return stored or default_user_settings(user_id)


async def update_user_settings(
    store: ProfileStore,
    user_id: str,
    changes: UserSettingsUpdate,
) -> UserSettings | None:
    """
    Merge ``changes`` into the current settings and upsert the result.

    Only the provided fields change; an unsupported locale falls back to the
    default locale.
    """
    current = await get_user_settings(store, user_id)
    if current is None:
        return None

    values = changes.model_dump(exclude_unset=True, exclude_none=True)
    if "locale" in values:
        values["locale"] = resolve_locale(values["locale"])
    merged = current.model_copy(update=values)

    try:
        saved = await store.save_user_settings(merged)
    except StoreError:
        logger.exception("settings_update_failed", user_id=user_id)
        return None
    logger.info("settings_updated", user_id=user_id, fields=sorted(values))
    return saved
