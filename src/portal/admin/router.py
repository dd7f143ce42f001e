"""Admin router: everything under /admin.

RouteGateMiddleware already keeps non-admins out of this prefix; the
``require_admin`` dependency checks again so the endpoints stay safe if the
gate is reconfigured. Store failures are not absorbed here: they reach the
global handler and come back as 503.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from portal.auth.dependencies import get_store, require_admin
from portal.auth.roles import get_all_roles
from portal.auth.schemas import ApiResponse, Session
from portal.profiles.schemas import Profile, ProfileUpdate, RoleUpdateRequest
from portal.store.interfaces import ProfileStore

logger = structlog.get_logger()

router = APIRouter(prefix="/admin", tags=["Admin"])


class AdminOverview(BaseModel):
    total_users: int
    users_by_role: dict[str, int]


@router.get("", response_model=ApiResponse[AdminOverview])
async def overview(
    _admin: Session = Depends(require_admin),
    store: ProfileStore = Depends(get_store),
) -> ApiResponse[AdminOverview]:
    """User counts per role."""
    counts = await store.count_profiles_by_role()
    by_role = {role: counts.get(role, 0) for role in get_all_roles()}
    return ApiResponse[AdminOverview].ok(AdminOverview(total_users=sum(by_role.values()), users_by_role=by_role))


@router.get("/users", response_model=ApiResponse[list[Profile]])
async def users(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _admin: Session = Depends(require_admin),
    store: ProfileStore = Depends(get_store),
) -> ApiResponse[list[Profile]]:
    return ApiResponse[list[Profile]].ok(await store.list_profiles(limit, offset))


@router.get("/users/{user_id}", response_model=ApiResponse[Profile])
async def user_detail(
    user_id: str,
    _admin: Session = Depends(require_admin),
    store: ProfileStore = Depends(get_store),
) -> ApiResponse[Profile]:
    profile = await store.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return ApiResponse[Profile].ok(profile)


@router.patch("/users/{user_id}/role", response_model=ApiResponse[Profile])
async def change_role(
    user_id: str,
    body: RoleUpdateRequest,
    admin: Session = Depends(require_admin),
    store: ProfileStore = Depends(get_store),
) -> ApiResponse[Profile]:
    """Set a user's role. Admins cannot demote themselves."""
    if user_id == admin.user.id and body.role != "admin":
        raise HTTPException(status_code=400, detail="Admins cannot change their own role")
    profile = await store.update_profile(user_id, ProfileUpdate(role=body.role))
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("profile_role_changed", user_id=user_id, role=body.role, changed_by=admin.user.id)
    return ApiResponse[Profile].ok(profile)


@router.delete("/users/{user_id}", response_model=ApiResponse[None])
async def remove_user(
    user_id: str,
    admin: Session = Depends(require_admin),
    store: ProfileStore = Depends(get_store),
) -> ApiResponse[None]:
    """Delete a profile together with its credential and settings rows."""
    if user_id == admin.user.id:
        raise HTTPException(status_code=400, detail="Admins cannot delete themselves")
    if not await store.delete_profile(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("profile_deleted", user_id=user_id, deleted_by=admin.user.id)
    return ApiResponse[None].ok()
