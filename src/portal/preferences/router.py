"""Settings router: the signed-in user's preferences under /api/v1/settings."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from portal.auth.dependencies import get_store, require_session
from portal.auth.schemas import ApiResponse, Session
from portal.preferences.schemas import UserSettings, UserSettingsUpdate
from portal.preferences.service import get_user_settings, update_user_settings
from portal.store.interfaces import ProfileStore

router = APIRouter(prefix="/api/v1/settings", tags=["Settings"])


@router.get("/me", response_model=ApiResponse[UserSettings])
async def get_my_settings(
    session: Session = Depends(require_session),
    store: ProfileStore = Depends(get_store),
) -> ApiResponse[UserSettings]:
    settings = await get_user_settings(store, session.user.id)
    if settings is None:
        raise HTTPException(status_code=503, detail="Could not load settings")
    return ApiResponse[UserSettings].ok(settings)


@router.patch("/me", response_model=ApiResponse[UserSettings])
async def update_my_settings(
    body: UserSettingsUpdate,
    session: Session = Depends(require_session),
    store: ProfileStore = Depends(get_store),
) -> ApiResponse[UserSettings]:
    settings = await update_user_settings(store, session.user.id, body)
    if settings is None:
        raise HTTPException(status_code=503, detail="Could not save settings")
    return ApiResponse[UserSettings].ok(settings)
