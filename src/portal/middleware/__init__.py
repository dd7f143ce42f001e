"""Middleware registration."""

from fastapi import FastAPI

from portal.config import Settings
from portal.middleware.cors import setup_cors
from portal.middleware.error_handler import setup_error_handlers
from portal.middleware.logging import setup_logging
from portal.middleware.request_id import RequestIdMiddleware
from portal.middleware.route_gate import RouteGateMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    FastAPI/Starlette executes middleware in reverse-add order (last added = outermost).
    The route gate runs inside RequestIdMiddleware so its log lines carry the request id.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RouteGateMiddleware,
        protected_prefix=settings.protected_prefix,
        sign_in_path=settings.sign_in_path,
        home_path=settings.home_path,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)  # added last → outermost
