"""
Account administration commands.

Usage:
    portal-admin promote user@example.com              # Make an existing user admin
    portal-admin promote user@example.com --role user  # Demote
    portal-admin create-admin admin@example.com 's3cret!' --name "Site Admin"

Reads the database URL from PORTAL_DATABASE_URL.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from portal.auth.password import hash_password
from portal.auth.roles import get_all_roles
from portal.auth.validation import InvalidInputError, check_password_length, normalize_email
from portal.config import get_settings
from portal.database import close_db, init_db
from portal.middleware.logging import setup_logging
from portal.profiles.schemas import ProfileCreate
from portal.profiles.service import create_profile, get_profile_by_email, set_role
from portal.store.sql import open_sql_store

if TYPE_CHECKING:
    from portal.auth.roles import UserRole
    from portal.store.interfaces import ProfileStore


async def promote(store: ProfileStore, email: str, role: UserRole = "admin") -> int:
    """Set the role of the user with ``email``. Returns a process exit code."""
    profile = await get_profile_by_email(store, normalize_email(email))
    if profile is None:
        print(f"No user with email {email}", file=sys.stderr)
        return 1

    if profile.role == role:
        print(f"{profile.email} is already {role}")
        return 0

    updated = await set_role(store, profile.id, role)
    if updated is None:
        print(f"Failed to update role for {email}", file=sys.stderr)
        return 1
    print(f"{updated.email}: {profile.role} -> {updated.role}")
    return 0


async def create_admin(store: ProfileStore, email: str, password: str, name: str | None = None) -> int:
    """
    Create an admin account with a password.

    An existing account with the same email is promoted and gets the new
    password instead.
    """
    try:
        check_password_length(password)
    except InvalidInputError as e:
        print(e, file=sys.stderr)
        return 1

    email = normalize_email(email)
    profile = await get_profile_by_email(store, email)
    if profile is None:
        new_admin = ProfileCreate(
            id=str(uuid.uuid4()),
            email=email,
            full_name=name,
            role="admin",
            email_verified_at=datetime.now(timezone.utc),
        )
        profile = await create_profile(store, new_admin)
        if profile is None:
            print(f"Failed to create {email}", file=sys.stderr)
            return 1
        print(f"Created admin {email} ({profile.id})")
    else:
        profile = await set_role(store, profile.id, "admin")
        if profile is None:
            print(f"Failed to promote {email}", file=sys.stderr)
            return 1
        print(f"Promoted existing user {email} to admin")
        await store.mark_email_verified(profile.id)

    await store.upsert_password_hash(profile.id, hash_password(password))
    print(f"Password set for {email}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="portal-admin", description="Account administration")
    commands = parser.add_subparsers(dest="command", required=True)

    promote_cmd = commands.add_parser("promote", help="Change the role of an existing user")
    promote_cmd.add_argument("email")
    promote_cmd.add_argument("--role", choices=get_all_roles(), default="admin")

    create_cmd = commands.add_parser("create-admin", help="Create (or promote) an admin with a password")
    create_cmd.add_argument("email")
    create_cmd.add_argument("password")
    create_cmd.add_argument("--name", default=None)

    return parser


async def _run(args: argparse.Namespace) -> int:
    settings = get_settings()
    await init_db(settings.database_url)
    try:
        async with open_sql_store() as store:
            if args.command == "promote":
                return await promote(store, args.email, args.role)
            return await create_admin(store, args.email, args.password, args.name)
    finally:
        await close_db()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(get_settings())
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
