"""Result envelope and identity/session models for the authentication flow."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from portal.auth.roles import UserRole

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform success/failure envelope returned by every action."""

    success: bool
    data: T | None = None
    error: str | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> ApiResponse[T]:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> ApiResponse[T]:
        return cls(success=False, error=error)


# ---------------------------------------------------------------------------
# Identity and session
# ---------------------------------------------------------------------------


class Identity(BaseModel):
    """Minimal identity returned by a successful credentials check. Never carries the hash."""

    id: str
    email: str
    name: str | None = None
    avatar_url: str | None = None
    email_verified: bool = False


class SessionUser(BaseModel):
    """User part of a materialized session. ``role`` is re-read from the store on every read."""

    id: str
    email: str | None = None
    name: str | None = None
    avatar_url: str | None = None
    role: UserRole | None = None


class Session(BaseModel):
    user: SessionUser


# ---------------------------------------------------------------------------
# Action payloads
# ---------------------------------------------------------------------------


class AuthData(BaseModel):
    """Payload of a successful sign-up or sign-in.

    ``session_token`` stays server-side: the HTTP layer moves it into a cookie.
    """

    email: str
    auto_signed_in: bool = True
    requires_verification: bool = False
    session_token: str | None = Field(default=None, exclude=True)


class EmailData(BaseModel):
    email: str
