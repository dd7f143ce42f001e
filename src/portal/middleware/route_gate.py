"""Route gate: only admins get through to the protected path prefix."""

from __future__ import annotations

from urllib.parse import urlencode

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from portal.auth.dependencies import read_session_token
from portal.auth.roles import is_admin
from portal.auth.session import get_session_issuer
from portal.store.interfaces import StoreProvider

logger = structlog.get_logger()


class RouteGateMiddleware(BaseHTTPMiddleware):
    """
    Guard every path under ``protected_prefix``.

    - no valid session: redirect to sign-in with ``?redirect=<path>``
    - signed in but not admin: redirect home
    - any error while deciding: redirect home (fail closed)

    The role is read from the store on every request. Nothing is cached, so a
    demotion locks the user out on their very next request.
    """

    def __init__(
        self,
        app: ASGIApp,
        protected_prefix: str = "/admin",
        sign_in_path: str = "/auth/sign-in",
        home_path: str = "/",
    ) -> None:
        super().__init__(app)
        self.protected_prefix = protected_prefix.rstrip("/")
        self.sign_in_path = sign_in_path
        self.home_path = home_path

    def is_protected(self, path: str) -> bool:
        return path == self.protected_prefix or path.startswith(self.protected_prefix + "/")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not self.is_protected(path):
            return await call_next(request)

        try:
            token = read_session_token(request)

            store_provider: StoreProvider = request.app.state.store_provider
            async with store_provider() as store:
                session = await get_session_issuer().get_session(token, store)
        except Exception:
            logger.exception("route_gate_error", path=path)
            return RedirectResponse(self.home_path)

        if session is None:
            logger.info("route_gate_redirect", reason="no_session", path=path)
            return RedirectResponse(f"{self.sign_in_path}?{urlencode({'redirect': path})}")

        if not is_admin(session.user.role):
            logger.info("route_gate_redirect", reason="not_admin", path=path, user_id=session.user.id)
            return RedirectResponse(self.home_path)

        return await call_next(request)
