"""Profile models shared by the store, the services and the HTTP layer."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from portal.auth.roles import DEFAULT_ROLE, UserRole


class Profile(BaseModel):
    """The application's durable user record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    role: UserRole = DEFAULT_ROLE
    email_verified_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ProfileCreate(BaseModel):
    """Fields accepted when inserting a profile."""

    id: str
    email: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    role: UserRole = DEFAULT_ROLE
    email_verified_at: datetime | None = None


class ProfileUpdate(BaseModel):
    """Partial profile update. Only fields that are explicitly set are written."""

    email: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    role: UserRole | None = None


class ProfileUpdateRequest(BaseModel):
    """Self-service profile edit (role is not user-editable)."""

    full_name: str | None = Field(None, max_length=255)
    avatar_url: str | None = Field(None, max_length=2048)


class RoleUpdateRequest(BaseModel):
    """Admin role change."""

    role: UserRole
