"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from portal.admin.router import router as admin_router
from portal.auth.router import router as auth_router
from portal.config import get_settings
from portal.database import close_db, init_db
from portal.health.router import router as health_router
from portal.middleware import setup_middleware
from portal.preferences.router import router as preferences_router
from portal.profiles.router import router as profiles_router
from portal.store.interfaces import StoreProvider
from portal.store.sql import open_sql_store

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    uses_database = app.state.store_provider is open_sql_store
    if uses_database:
        await init_db(settings.database_url)
    logger.info("app_started", environment=settings.environment, database=uses_database)

    yield

    if uses_database:
        await close_db()


def create_app(store_provider: StoreProvider | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``store_provider`` defaults to the PostgreSQL store; tests pass an
    in-memory one.
    """
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Accounts, sessions and role-gated administration",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.store_provider = store_provider or open_sql_store

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(profiles_router)
    app.include_router(preferences_router)
    app.include_router(admin_router)

    return app
