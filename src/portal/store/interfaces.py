"""
Store interface.

Services depend on ProfileStore, not on a concrete backend, so the SQL
implementation can be swapped for an in-memory fake in tests.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Protocol, runtime_checkable

from portal.preferences.schemas import UserSettings
from portal.profiles.schemas import Profile, ProfileCreate, ProfileUpdate


@runtime_checkable
class ProfileStore(Protocol):
    """
    Persistence operations used by the authentication flow.

    Every method raises StoreError on backend failure and
    DuplicateRecordError when a uniqueness constraint rejects a write.
    """

    async def ping(self) -> None:
        """Round-trip to the backend (readiness probe)."""
        ...

    async def get_profile(self, user_id: str) -> Profile | None:
        ...

    async def get_profile_by_email(self, email: str) -> Profile | None:
        """Look up a profile by email, case-insensitively."""
        ...

    async def insert_profile(self, profile: ProfileCreate) -> Profile:
        """
        Insert a new profile.

        Raises:
            DuplicateRecordError: If the id or email is already taken.
        """
        ...

    async def update_profile(self, user_id: str, changes: ProfileUpdate) -> Profile | None:
        """Apply the explicitly-set fields of ``changes``. Returns None if no such profile."""
        ...

    async def mark_email_verified(self, user_id: str) -> Profile | None:
        """Stamp ``email_verified_at`` unless already set. Returns None if no such profile."""
        ...

    async def delete_profile(self, user_id: str) -> bool:
        """Delete a profile and its dependent rows. Returns True if a row was removed."""
        ...

    async def list_profiles(self, limit: int, offset: int) -> list[Profile]:
        """Profiles ordered newest first."""
        ...

    async def count_profiles_by_role(self) -> dict[str, int]:
        ...

    async def get_password_hash(self, user_id: str) -> str | None:
        ...

    async def upsert_password_hash(self, user_id: str, password_hash: str) -> None:
        """Create or overwrite the credential row for ``user_id``."""
        ...

    async def get_user_settings(self, user_id: str) -> UserSettings | None:
        ...

    async def save_user_settings(self, settings: UserSettings) -> UserSettings:
        """Insert or overwrite the settings row for ``settings.user_id``."""
        ...


StoreProvider = Callable[[], AbstractAsyncContextManager[ProfileStore]]
"""Opens a store scoped to one request or one command invocation."""
