"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable, Generator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from portal.auth.password import get_password_hasher, hash_password
from portal.auth.roles import UserRole
from portal.auth.schemas import Identity
from portal.auth.session import SessionIssuer, get_session_issuer
from portal.config import get_settings
from portal.email.service import EmailService, get_email_service, reset_email_service
from portal.main import create_app
from portal.profiles.schemas import ProfileCreate
from tests.fakes import TEST_PASSWORD, InMemoryStore, RecordingEmailProvider


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Drop cached settings, hasher, session issuer and email service around every test."""
    get_settings.cache_clear()
    get_password_hasher.cache_clear()
    get_session_issuer.cache_clear()
    reset_email_service()
    yield
    get_settings.cache_clear()
    get_password_hasher.cache_clear()
    get_session_issuer.cache_clear()
    reset_email_service()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def email_provider() -> RecordingEmailProvider:
    return RecordingEmailProvider()


@pytest.fixture
def email_service(email_provider: RecordingEmailProvider) -> EmailService:
    return EmailService(provider=email_provider)


@pytest.fixture
def sessions() -> SessionIssuer:
    return get_session_issuer()


@pytest.fixture
def app(store: InMemoryStore, email_service: EmailService) -> FastAPI:
    application = create_app(store_provider=store.provider())
    application.dependency_overrides[get_email_service] = lambda: email_service
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client talking to the app in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


UserFactory = Callable[..., Awaitable[dict]]


@pytest.fixture
def make_user(store: InMemoryStore, sessions: SessionIssuer) -> UserFactory:
    """Insert a profile with a password straight into the store and mint a session token for it."""
    counter = {"n": 0}

    async def _make(
        email: str | None = None,
        role: UserRole = "user",
        password: str = TEST_PASSWORD,
        full_name: str | None = "Test User",
    ) -> dict:
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        profile = await store.insert_profile(
            ProfileCreate(id=f"user-{counter['n']}", email=email, full_name=full_name, role=role)
        )
        await store.upsert_password_hash(profile.id, hash_password(password))
        token = sessions.issue(Identity(id=profile.id, email=email, name=full_name))
        return {"id": profile.id, "email": email, "password": password, "token": token}

    return _make
