"""FastAPI authentication dependencies."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, Request

from portal.auth.identity import CredentialsIdentityProvider, IdentityProvider
from portal.auth.roles import is_admin
from portal.auth.schemas import Session
from portal.auth.session import SessionIssuer, get_session_issuer
from portal.config import get_settings
from portal.store.interfaces import ProfileStore, StoreProvider


async def get_store(request: Request) -> AsyncGenerator[ProfileStore, None]:
    """Open a store for the duration of the request."""
    provider: StoreProvider = request.app.state.store_provider
    async with provider() as store:
        yield store


def get_identity_provider(store: ProfileStore = Depends(get_store)) -> IdentityProvider:
    return CredentialsIdentityProvider(store)


def read_session_token(request: Request) -> str | None:
    """Session token from the session cookie, falling back to an ``Authorization: Bearer`` header."""
    token = request.cookies.get(get_settings().session_cookie_name)
    if token:
        return token
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return None


async def get_current_session(
    request: Request,
    store: ProfileStore = Depends(get_store),
    sessions: SessionIssuer = Depends(get_session_issuer),
) -> Session | None:
    """The caller's session with a freshly read role, or None when signed out."""
    return await sessions.get_session(read_session_token(request), store)


async def require_session(
    session: Session | None = Depends(get_current_session),
) -> Session:
    """Raises 401 when there is no valid session."""
    if session is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return session


async def require_admin(
    session: Session = Depends(require_session),
) -> Session:
    """Raises 403 unless the caller's current role is admin."""
    if not is_admin(session.user.role):
        raise HTTPException(status_code=403, detail="Admin access required")
    return session
