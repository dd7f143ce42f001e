"""Profile router: the signed-in user's own profile under /api/v1/profiles."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from portal.auth.dependencies import get_store, require_session
from portal.auth.schemas import ApiResponse, Session
from portal.profiles.schemas import Profile, ProfileUpdate, ProfileUpdateRequest
from portal.profiles.service import ensure_profile_exists, get_profile, update_profile
from portal.store.interfaces import ProfileStore

router = APIRouter(prefix="/api/v1/profiles", tags=["Profiles"])


@router.get("/me", response_model=ApiResponse[Profile])
async def get_my_profile(
    session: Session = Depends(require_session),
    store: ProfileStore = Depends(get_store),
) -> ApiResponse[Profile]:
    profile = await get_profile(store, session.user.id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ApiResponse[Profile].ok(profile)


@router.patch("/me", response_model=ApiResponse[Profile])
async def update_my_profile(
    body: ProfileUpdateRequest,
    session: Session = Depends(require_session),
    store: ProfileStore = Depends(get_store),
) -> ApiResponse[Profile]:
    """Update display name and avatar. The role cannot be changed here."""
    changes = ProfileUpdate(**body.model_dump(exclude_unset=True))
    profile = await update_profile(store, session.user.id, changes)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ApiResponse[Profile].ok(profile)


@router.post("/me/ensure", response_model=ApiResponse[Profile])
async def ensure_my_profile(
    session: Session = Depends(require_session),
    store: ProfileStore = Depends(get_store),
) -> ApiResponse[Profile]:
    """Create the caller's profile if it is missing. Safe to call repeatedly."""
    profile = await ensure_profile_exists(store, session.user.id, session.user.email, session.user.name)
    if profile is None:
        raise HTTPException(status_code=503, detail="Could not load or create profile")
    return ApiResponse[Profile].ok(profile)
