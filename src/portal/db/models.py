"""ORM models for the profile, credential and settings tables.

The schema itself is owned by the Alembic migrations under ``alembic/versions``.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from portal.db.base import Base


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class ProfileRow(Base):
    """Maps to the 'profiles' table."""

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("role IN ('user', 'moderator', 'admin')", name="ck_profiles_role"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, server_default="user")
    email_verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


# Email uniqueness is case-insensitive
Index("ix_profiles_email_lower", func.lower(ProfileRow.email), unique=True)


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class UserPasswordRow(Base):
    """Password hash for accounts that sign in with email + password."""

    __tablename__ = "user_passwords"

    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


# ---------------------------------------------------------------------------
# User Settings
# ---------------------------------------------------------------------------


class UserSettingsRow(Base):
    """Per-user locale, theme and notification preferences."""

    __tablename__ = "user_settings"

    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    locale: Mapped[str] = mapped_column(String(8), nullable=False, server_default="en")
    theme: Mapped[str] = mapped_column(String(16), nullable=False, server_default="light")
    notifications_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")
    email_notifications_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
