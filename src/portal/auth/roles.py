"""User roles and permission checks."""

from __future__ import annotations

from typing import Literal, get_args

UserRole = Literal["user", "moderator", "admin"]

DEFAULT_ROLE: UserRole = "user"

# Higher number = more permissions
ROLE_HIERARCHY: dict[str, int] = {
    "user": 1,
    "moderator": 2,
    "admin": 3,
}


def get_all_roles() -> list[UserRole]:
    """Return every role, lowest privilege first."""
    return list(get_args(UserRole))


def has_role(user_role: str | None, required_role: UserRole) -> bool:
    """Check whether ``user_role`` is at least as privileged as ``required_role``."""
    if user_role not in ROLE_HIERARCHY:
        return False
    return ROLE_HIERARCHY[user_role] >= ROLE_HIERARCHY[required_role]


def is_admin(role: str | None) -> bool:
    return has_role(role, "admin")
