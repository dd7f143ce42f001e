"""Tests for /api/v1/profiles."""

from httpx import AsyncClient

from tests.fakes import InMemoryStore, bearer


class TestMyProfile:
    async def test_get(self, client: AsyncClient, make_user):
        user = await make_user(email="a@x.com", full_name="Alice")
        response = await client.get("/api/v1/profiles/me", headers=bearer(user["token"]))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == "a@x.com"
        assert data["full_name"] == "Alice"
        assert data["role"] == "user"

    async def test_requires_auth(self, client: AsyncClient):
        assert (await client.get("/api/v1/profiles/me")).status_code == 401

    async def test_patch(self, client: AsyncClient, make_user):
        user = await make_user(full_name="Alice")
        response = await client.patch(
            "/api/v1/profiles/me", json={"avatar_url": "https://img/a.png"}, headers=bearer(user["token"])
        )
        data = response.json()["data"]
        assert data["avatar_url"] == "https://img/a.png"
        assert data["full_name"] == "Alice"

    async def test_role_not_self_editable(self, client: AsyncClient, store: InMemoryStore, make_user):
        user = await make_user()
        await client.patch("/api/v1/profiles/me", json={"role": "admin"}, headers=bearer(user["token"]))
        assert store.profiles[user["id"]].role == "user"

    async def test_missing_profile_404(self, client: AsyncClient, store: InMemoryStore, make_user):
        user = await make_user()
        del store.profiles[user["id"]]
        response = await client.get("/api/v1/profiles/me", headers=bearer(user["token"]))
        assert response.status_code == 404


class TestEnsure:
    async def test_recreates_missing_profile(self, client: AsyncClient, store: InMemoryStore, make_user):
        user = await make_user(email="a@x.com", full_name="Alice")
        del store.profiles[user["id"]]

        response = await client.post("/api/v1/profiles/me/ensure", headers=bearer(user["token"]))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == user["id"]
        assert data["email"] == "a@x.com"
        assert data["role"] == "user"

    async def test_existing_profile_untouched(self, client: AsyncClient, make_user):
        user = await make_user(role="moderator")
        response = await client.post("/api/v1/profiles/me/ensure", headers=bearer(user["token"]))
        assert response.json()["data"]["role"] == "moderator"
