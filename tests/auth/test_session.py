"""Tests for session tokens."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from portal.auth.schemas import Identity
from portal.auth.session import VERIFICATION_TOKEN_TYPE, SessionIssuer
from portal.store.exceptions import StoreError
from tests.fakes import InMemoryStore

SECRET = "test-secret"


@pytest.fixture
def issuer() -> SessionIssuer:
    return SessionIssuer(secret=SECRET, algorithm="HS256", expire_minutes=60, issuer="portal")


@pytest.fixture
def identity() -> Identity:
    return Identity(id="user-1", email="a@x.com", name="Alice", avatar_url="https://img/a.png")


class TestIssueAndDecode:
    def test_claims(self, issuer: SessionIssuer, identity: Identity):
        payload = issuer.decode(issuer.issue(identity))
        assert payload["sub"] == "user-1"
        assert payload["email"] == "a@x.com"
        assert payload["name"] == "Alice"
        assert payload["picture"] == "https://img/a.png"
        assert payload["type"] == "session"

    def test_role_not_embedded(self, issuer: SessionIssuer, identity: Identity):
        payload = issuer.decode(issuer.issue(identity))
        assert "role" not in payload

    def test_wrong_secret_rejected(self, issuer: SessionIssuer, identity: Identity):
        other = SessionIssuer(secret="other", algorithm="HS256", expire_minutes=60, issuer="portal")
        with pytest.raises(jwt.InvalidTokenError):
            other.decode(issuer.issue(identity))

    def test_expired_rejected(self, issuer: SessionIssuer):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "user-1", "iat": now - timedelta(hours=2), "exp": now - timedelta(hours=1),
             "iss": "portal", "type": "session"},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(jwt.InvalidTokenError, match="expired"):
            issuer.decode(token)

    def test_wrong_type_rejected(self, issuer: SessionIssuer):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "user-1", "exp": now + timedelta(hours=1), "iss": "portal", "type": "refresh"},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(jwt.InvalidTokenError):
            issuer.decode(token)

    def test_max_age(self, issuer: SessionIssuer):
        assert issuer.max_age_seconds == 3600


class TestVerificationTokens:
    def test_claims(self, issuer: SessionIssuer):
        payload = issuer.decode(issuer.issue_verification_token("user-1", "a@x.com"), VERIFICATION_TOKEN_TYPE)
        assert payload["sub"] == "user-1"
        assert payload["email"] == "a@x.com"
        assert payload["exp"] - payload["iat"] == 24 * 3600

    def test_lifetime_is_configurable(self):
        issuer = SessionIssuer(
            secret=SECRET, algorithm="HS256", expire_minutes=60, issuer="portal", verification_expire_hours=2
        )
        payload = issuer.decode(issuer.issue_verification_token("user-1", "a@x.com"), VERIFICATION_TOKEN_TYPE)
        assert payload["exp"] - payload["iat"] == 2 * 3600

    async def test_not_usable_as_session(self, issuer: SessionIssuer):
        token = issuer.issue_verification_token("user-1", "a@x.com")
        with pytest.raises(jwt.InvalidTokenError, match="Expected token type"):
            issuer.decode(token)
        assert await issuer.get_session(token, InMemoryStore()) is None

    def test_session_not_usable_for_verification(self, issuer: SessionIssuer, identity: Identity):
        with pytest.raises(jwt.InvalidTokenError):
            issuer.decode(issuer.issue(identity), VERIFICATION_TOKEN_TYPE)


class TestGetSession:
    async def test_no_token(self, issuer: SessionIssuer):
        assert await issuer.get_session(None, InMemoryStore()) is None
        assert await issuer.get_session("", InMemoryStore()) is None

    async def test_invalid_token(self, issuer: SessionIssuer):
        assert await issuer.get_session("garbage", InMemoryStore()) is None

    async def test_missing_profile_gives_no_role(self, issuer: SessionIssuer, identity: Identity):
        session = await issuer.get_session(issuer.issue(identity), InMemoryStore())
        assert session is not None
        assert session.user.id == "user-1"
        assert session.user.email == "a@x.com"
        assert session.user.role is None

    async def test_role_change_visible_immediately(self, issuer: SessionIssuer, store: InMemoryStore, make_user):
        from portal.profiles.schemas import ProfileUpdate

        user = await make_user(role="admin")
        token = issuer.issue(Identity(id=user["id"], email=user["email"]))

        session = await issuer.get_session(token, store)
        assert session.user.role == "admin"

        await store.update_profile(user["id"], ProfileUpdate(role="user"))
        session = await issuer.get_session(token, store)
        assert session.user.role == "user"

    async def test_store_error_propagates(self, issuer: SessionIssuer, identity: Identity):
        store = InMemoryStore()
        store.fail_on.add("get_profile")
        with pytest.raises(StoreError):
            await issuer.get_session(issuer.issue(identity), store)
