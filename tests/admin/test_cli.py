"""Tests for the portal-admin commands."""

import pytest

from portal.auth.password import verify_password
from portal.cli import build_parser, create_admin, promote
from portal.profiles.schemas import ProfileCreate
from tests.fakes import InMemoryStore


class TestPromote:
    async def test_promotes(self, store: InMemoryStore, capsys):
        await store.insert_profile(ProfileCreate(id="u", email="a@x.com"))
        assert await promote(store, "A@x.com") == 0
        assert store.profiles["u"].role == "admin"
        assert "user -> admin" in capsys.readouterr().out

    async def test_demotes(self, store: InMemoryStore):
        await store.insert_profile(ProfileCreate(id="u", email="a@x.com", role="admin"))
        assert await promote(store, "a@x.com", "user") == 0
        assert store.profiles["u"].role == "user"

    async def test_already_admin(self, store: InMemoryStore, capsys):
        await store.insert_profile(ProfileCreate(id="u", email="a@x.com", role="admin"))
        assert await promote(store, "a@x.com") == 0
        assert "already admin" in capsys.readouterr().out
        assert "update_profile" not in store.calls

    async def test_unknown_email(self, store: InMemoryStore, capsys):
        assert await promote(store, "nobody@x.com") == 1
        assert "No user" in capsys.readouterr().err


class TestCreateAdmin:
    async def test_creates(self, store: InMemoryStore):
        assert await create_admin(store, "Admin@x.com", "admin-pass", "Site Admin") == 0
        profile = await store.get_profile_by_email("admin@x.com")
        assert profile.role == "admin"
        assert profile.full_name == "Site Admin"
        assert verify_password("admin-pass", store.passwords[profile.id])
        assert profile.email_verified_at is not None

    async def test_existing_user_promoted(self, store: InMemoryStore):
        await store.insert_profile(ProfileCreate(id="u", email="a@x.com"))
        assert await create_admin(store, "a@x.com", "admin-pass") == 0
        assert store.profiles["u"].role == "admin"
        assert verify_password("admin-pass", store.passwords["u"])
        assert store.profiles["u"].email_verified_at is not None
        assert len(store.profiles) == 1

    async def test_short_password(self, store: InMemoryStore):
        assert await create_admin(store, "a@x.com", "123") == 1
        assert store.profiles == {}


class TestParser:
    def test_promote_defaults_to_admin(self):
        args = build_parser().parse_args(["promote", "a@x.com"])
        assert args.command == "promote"
        assert args.role == "admin"

    def test_rejects_unknown_role(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["promote", "a@x.com", "--role", "owner"])

    def test_create_admin(self):
        args = build_parser().parse_args(["create-admin", "a@x.com", "pw123456", "--name", "Ann"])
        assert (args.email, args.password, args.name) == ("a@x.com", "pw123456", "Ann")
