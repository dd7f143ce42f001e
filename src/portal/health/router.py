"""Health, readiness, and version endpoints."""

from fastapi import APIRouter, Depends

from portal.auth.dependencies import get_store
from portal.config import get_settings
from portal.store.exceptions import StoreError
from portal.store.interfaces import ProfileStore

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: returns 200 if the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    store: ProfileStore = Depends(get_store),  # noqa: B008
) -> dict[str, object]:
    """Readiness probe: checks store connectivity."""
    checks: dict[str, object] = {}

    try:
        await store.ping()
        checks["database"] = "ok"
    except StoreError as exc:
        checks["database"] = f"error: {exc}"

    all_ok = all(v == "ok" for v in checks.values())
    return {"status": "ready" if all_ok else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    """Return API version and environment."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
