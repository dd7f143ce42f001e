"""
Signed session tokens (JWT strategy).

The token only proves identity: ``sub``, ``email``, ``name`` and ``picture``.
The role is not in the token; it is read from the store every time a session
is materialized, so a demotion takes effect on the next request.

The same issuer signs the email-verification links mailed at sign-up, under
a separate token type that is never accepted as a session.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import jwt
import structlog

from portal.auth.schemas import Identity, Session, SessionUser
from portal.config import get_settings

if TYPE_CHECKING:
    from portal.store.interfaces import ProfileStore

logger = structlog.get_logger()

TOKEN_TYPE = "session"
VERIFICATION_TOKEN_TYPE = "email_verification"


class SessionIssuer:
    """Exchanges a validated identity for a signed token and reads tokens back."""

    def __init__(
        self,
        secret: str,
        algorithm: str,
        expire_minutes: int,
        issuer: str,
        verification_expire_hours: int = 24,
    ) -> None:
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self.issuer = issuer
        self.verification_expire_hours = verification_expire_hours

    @property
    def max_age_seconds(self) -> int:
        return self.expire_minutes * 60

    def issue(self, identity: Identity) -> str:
        """
        Create a session token for ``identity``.

        Returns:
            Encoded JWT string.
        """
        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "sub": identity.id,
            "email": identity.email,
            "name": identity.name,
            "picture": identity.avatar_url,
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
            "iss": self.issuer,
            "type": TOKEN_TYPE,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def issue_verification_token(self, user_id: str, email: str) -> str:
        """Single-purpose token proving control of ``email``, mailed after sign-up."""
        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "sub": user_id,
            "email": email,
            "iat": now,
            "exp": now + timedelta(hours=self.verification_expire_hours),
            "iss": self.issuer,
            "type": VERIFICATION_TOKEN_TYPE,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str, expected_type: str = TOKEN_TYPE) -> dict[str, Any]:
        """
        Verify and decode a token of ``expected_type``.

        Raises:
            jwt.InvalidTokenError: If the token is invalid, expired, or of another type.
        """
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            msg = "Token has expired"
            raise jwt.InvalidTokenError(msg) from None

        if payload.get("type") != expected_type:
            msg = f"Expected token type '{expected_type}', got '{payload.get('type')}'"
            raise jwt.InvalidTokenError(msg)
        return payload

    async def get_session(self, token: str | None, store: ProfileStore) -> Session | None:
        """
        Materialize the session for ``token``.

        Returns None when there is no token or it does not verify. The role is
        hydrated from the current profile row; a token whose subject has no
        profile yields a session with ``role=None``. Store errors propagate.
        """
        if not token:
            return None
        try:
            payload = self.decode(token)
        except jwt.InvalidTokenError as e:
            logger.info("session_token_rejected", reason=str(e))
            return None

        profile = await store.get_profile(payload["sub"])
        return Session(
            user=SessionUser(
                id=payload["sub"],
                email=payload.get("email"),
                name=payload.get("name"),
                avatar_url=payload.get("picture"),
                role=profile.role if profile is not None else None,
            )
        )


@lru_cache
def get_session_issuer() -> SessionIssuer:
    """Session issuer configured from settings."""
    settings = get_settings()
    return SessionIssuer(
        secret=settings.session_secret,
        algorithm=settings.session_algorithm,
        expire_minutes=settings.session_expire_minutes,
        issuer=settings.session_issuer,
        verification_expire_hours=settings.email_verification_token_ttl_hours,
    )
