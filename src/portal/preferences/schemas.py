"""User settings models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

Theme = Literal["light", "dark", "system"]

DEFAULT_THEME: Theme = "light"


class UserSettings(BaseModel):
    """Locale, theme and notification preferences for one user."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    locale: str
    theme: Theme = DEFAULT_THEME
    notifications_enabled: bool = True
    email_notifications_enabled: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserSettingsUpdate(BaseModel):
    """Partial settings update. Unset fields keep their current (or default) value."""

    locale: str | None = None
    theme: Theme | None = None
    notifications_enabled: bool | None = None
    email_notifications_enabled: bool | None = None
