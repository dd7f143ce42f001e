"""Authentication router: all /auth/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, Request, Response

from portal.auth import actions, constants
from portal.auth.dependencies import get_current_session, get_identity_provider, get_store, read_session_token
from portal.auth.identity import IdentityProvider
from portal.auth.schemas import ApiResponse, AuthData, EmailData, Session
from portal.auth.session import SessionIssuer, get_session_issuer
from portal.config import get_settings
from portal.email.service import EmailService, get_email_service
from portal.store.interfaces import ProfileStore

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _set_session_cookie(response: Response, token: str, sessions: SessionIssuer) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=sessions.max_age_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )


def _clear_session_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )


def _finish(response: Response, result: ApiResponse, failure_status: int = 400) -> ApiResponse:
    """Failed envelopes keep their body but get a 4xx status."""
    if not result.success:
        response.status_code = failure_status
    return result


# ---------------------------------------------------------------------------
# Sign-up / sign-in / sign-out
# ---------------------------------------------------------------------------


@router.post("/sign-up", response_model=ApiResponse[AuthData])
async def sign_up(
    response: Response,
    email: str | None = Form(None),
    password: str | None = Form(None),
    full_name: str | None = Form(None),
    store: ProfileStore = Depends(get_store),
    identity: IdentityProvider = Depends(get_identity_provider),
    sessions: SessionIssuer = Depends(get_session_issuer),
    email_service: EmailService = Depends(get_email_service),
) -> ApiResponse[AuthData]:
    """Create an email + password account and sign it in."""
    result = await actions.sign_up(store, identity, sessions, email_service, email, password, full_name)
    if result.data is not None and result.data.session_token:
        _set_session_cookie(response, result.data.session_token, sessions)
    return _finish(response, result)


@router.post("/sign-in", response_model=ApiResponse[AuthData])
async def sign_in(
    response: Response,
    email: str | None = Form(None),
    password: str | None = Form(None),
    identity: IdentityProvider = Depends(get_identity_provider),
    sessions: SessionIssuer = Depends(get_session_issuer),
) -> ApiResponse[AuthData]:
    result = await actions.sign_in(identity, sessions, email, password)
    if result.data is not None and result.data.session_token:
        _set_session_cookie(response, result.data.session_token, sessions)
    if result.error == constants.INVALID_CREDENTIALS:
        return _finish(response, result, failure_status=401)
    if result.error == constants.EMAIL_NOT_VERIFIED:
        return _finish(response, result, failure_status=403)
    return _finish(response, result)


@router.post("/sign-out", response_model=ApiResponse[None])
async def sign_out(
    request: Request,
    response: Response,
    sessions: SessionIssuer = Depends(get_session_issuer),
) -> ApiResponse[None]:
    """Always clears the session cookie, even when the store is unavailable."""
    result = await actions.sign_out(sessions, read_session_token(request))
    _clear_session_cookie(response)
    return result


@router.get("/session", response_model=ApiResponse[Session])
async def current_session(
    session: Session | None = Depends(get_current_session),
) -> ApiResponse[Session]:
    """The current session (``data`` is null when signed out)."""
    return ApiResponse[Session].ok(session)


# ---------------------------------------------------------------------------
# Email verification
# ---------------------------------------------------------------------------


@router.post("/verify-email", response_model=ApiResponse[EmailData])
async def verify_email(
    response: Response,
    token: str | None = Form(None),
    store: ProfileStore = Depends(get_store),
    sessions: SessionIssuer = Depends(get_session_issuer),
) -> ApiResponse[EmailData]:
    result = await actions.verify_email(store, sessions, token)
    return _finish(response, result)


@router.post("/resend-verification", response_model=ApiResponse[EmailData])
async def resend_verification(
    response: Response,
    email: str | None = Form(None),
    store: ProfileStore = Depends(get_store),
    sessions: SessionIssuer = Depends(get_session_issuer),
    email_service: EmailService = Depends(get_email_service),
) -> ApiResponse[EmailData]:
    """Mail a new verification link. The reply is the same whether or not the account exists."""
    result = await actions.resend_verification(store, sessions, email_service, email)
    return _finish(response, result)


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------


@router.post("/forgot-password", response_model=ApiResponse[EmailData])
async def forgot_password(
    response: Response,
    email: str | None = Form(None),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> ApiResponse[EmailData]:
    result = await actions.reset_password(identity, email)
    return _finish(response, result)


@router.post("/update-password", response_model=ApiResponse[None])
async def update_password(
    response: Response,
    password: str | None = Form(None),
    confirm_password: str | None = Form(None),
    session: Session | None = Depends(get_current_session),
    identity: IdentityProvider = Depends(get_identity_provider),
    email_service: EmailService = Depends(get_email_service),
) -> ApiResponse[None]:
    result = await actions.update_password(identity, email_service, session, password, confirm_password)
    return _finish(response, result)
