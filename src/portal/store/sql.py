"""
SQLAlchemy-backed store.

Each write commits on its own: the sign-up flow is a sequence of independent
writes with no surrounding transaction, so a later failure never undoes an
earlier step.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, func, select, text, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from portal.database import get_session_factory
from portal.db.models import ProfileRow, UserPasswordRow, UserSettingsRow
from portal.preferences.schemas import UserSettings
from portal.profiles.schemas import Profile, ProfileCreate, ProfileUpdate
from portal.store.exceptions import DuplicateRecordError, StoreError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


class SqlAlchemyStore:
    """ProfileStore implementation on top of an AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def _translate_errors(self, operation: str) -> AsyncIterator[None]:
        """Roll back and re-raise SQLAlchemy errors as store errors."""
        try:
            yield
        except IntegrityError as e:
            await self._session.rollback()
            raise DuplicateRecordError(f"{operation}: {e.orig}") from e
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.warning("store_operation_failed", operation=operation, error=str(e))
            raise StoreError(f"{operation} failed") from e

    async def ping(self) -> None:
        async with self._translate_errors("ping"):
            result = await self._session.execute(text("SELECT 1"))
            result.scalar()

    # -----------------------------------------------------------------------
    # Profiles
    # -----------------------------------------------------------------------

    async def get_profile(self, user_id: str) -> Profile | None:
        async with self._translate_errors("get_profile"):
            result = await self._session.execute(select(ProfileRow).where(ProfileRow.id == user_id))
            row = result.scalar_one_or_none()
        return Profile.model_validate(row) if row is not None else None

    async def get_profile_by_email(self, email: str) -> Profile | None:
        async with self._translate_errors("get_profile_by_email"):
            result = await self._session.execute(
                select(ProfileRow).where(func.lower(ProfileRow.email) == email.lower()).limit(1)
            )
            row = result.scalar_one_or_none()
        return Profile.model_validate(row) if row is not None else None

    async def insert_profile(self, profile: ProfileCreate) -> Profile:
        now = datetime.now(timezone.utc)
        row = ProfileRow(
            id=profile.id,
            email=profile.email,
            full_name=profile.full_name,
            avatar_url=profile.avatar_url,
            role=profile.role,
            email_verified_at=profile.email_verified_at,
            created_at=now,
            updated_at=now,
        )
        async with self._translate_errors("insert_profile"):
            self._session.add(row)
            await self._session.commit()
        return Profile.model_validate(row)

    async def update_profile(self, user_id: str, changes: ProfileUpdate) -> Profile | None:
        values = changes.model_dump(exclude_unset=True)
        if values.get("role", "") is None:
            del values["role"]
        if not values:
            return await self.get_profile(user_id)

        values["updated_at"] = datetime.now(timezone.utc)
        async with self._translate_errors("update_profile"):
            result = await self._session.execute(
                update(ProfileRow).where(ProfileRow.id == user_id).values(**values).returning(ProfileRow)
            )
            row = result.scalar_one_or_none()
            await self._session.commit()
        return Profile.model_validate(row) if row is not None else None

    async def mark_email_verified(self, user_id: str) -> Profile | None:
        now = datetime.now(timezone.utc)
        async with self._translate_errors("mark_email_verified"):
            result = await self._session.execute(
                update(ProfileRow)
                .where(ProfileRow.id == user_id)
                .values(email_verified_at=func.coalesce(ProfileRow.email_verified_at, now), updated_at=now)
                .returning(ProfileRow)
            )
            row = result.scalar_one_or_none()
            await self._session.commit()
        return Profile.model_validate(row) if row is not None else None

    async def delete_profile(self, user_id: str) -> bool:
        async with self._translate_errors("delete_profile"):
            result = await self._session.execute(delete(ProfileRow).where(ProfileRow.id == user_id))
            await self._session.commit()
        return bool(result.rowcount)

    async def list_profiles(self, limit: int, offset: int) -> list[Profile]:
        async with self._translate_errors("list_profiles"):
            result = await self._session.execute(
                select(ProfileRow).order_by(ProfileRow.created_at.desc()).limit(limit).offset(offset)
            )
            rows = result.scalars().all()
        return [Profile.model_validate(row) for row in rows]

    async def count_profiles_by_role(self) -> dict[str, int]:
        async with self._translate_errors("count_profiles_by_role"):
            result = await self._session.execute(
                select(ProfileRow.role, func.count()).group_by(ProfileRow.role)
            )
            return {role: int(count) for role, count in result.all()}

    # -----------------------------------------------------------------------
    # Credentials
    # -----------------------------------------------------------------------

    async def get_password_hash(self, user_id: str) -> str | None:
        async with self._translate_errors("get_password_hash"):
            result = await self._session.execute(
                select(UserPasswordRow.password_hash).where(UserPasswordRow.user_id == user_id)
            )
            return result.scalar_one_or_none()

    async def upsert_password_hash(self, user_id: str, password_hash: str) -> None:
        now = datetime.now(timezone.utc)
        stmt = pg_insert(UserPasswordRow).values(user_id=user_id, password_hash=password_hash, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserPasswordRow.user_id],
            set_={"password_hash": stmt.excluded.password_hash, "updated_at": now},
        )
        async with self._translate_errors("upsert_password_hash"):
            await self._session.execute(stmt)
            await self._session.commit()

    # -----------------------------------------------------------------------
    # User settings
    # -----------------------------------------------------------------------

    async def get_user_settings(self, user_id: str) -> UserSettings | None:
        async with self._translate_errors("get_user_settings"):
            result = await self._session.execute(
                select(UserSettingsRow).where(UserSettingsRow.user_id == user_id)
            )
            row = result.scalar_one_or_none()
        return UserSettings.model_validate(row) if row is not None else None

    async def save_user_settings(self, settings: UserSettings) -> UserSettings:
        now = datetime.now(timezone.utc)
        values = settings.model_dump(exclude={"created_at", "updated_at"})
        stmt = pg_insert(UserSettingsRow).values(**values, created_at=now, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserSettingsRow.user_id],
            set_={
                "locale": stmt.excluded.locale,
                "theme": stmt.excluded.theme,
                "notifications_enabled": stmt.excluded.notifications_enabled,
                "email_notifications_enabled": stmt.excluded.email_notifications_enabled,
                "updated_at": now,
            },
        ).returning(UserSettingsRow)
        async with self._translate_errors("save_user_settings"):
            result = await self._session.execute(stmt)
            row = result.scalar_one()
            await self._session.commit()
        return UserSettings.model_validate(row)


@asynccontextmanager
async def open_sql_store() -> AsyncIterator[SqlAlchemyStore]:
    """Store provider backed by the process-wide session factory."""
    async with get_session_factory()() as session:
        yield SqlAlchemyStore(session)
