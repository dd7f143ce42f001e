"""Tests for /admin endpoints."""

from httpx import AsyncClient

from tests.fakes import InMemoryStore, bearer


class TestOverview:
    async def test_counts_by_role(self, client: AsyncClient, make_user):
        admin = await make_user(role="admin")
        await make_user(role="user")
        await make_user(role="user")
        response = await client.get("/admin", headers=bearer(admin["token"]))
        data = response.json()["data"]
        assert data["total_users"] == 3
        assert data["users_by_role"] == {"user": 2, "moderator": 0, "admin": 1}


class TestUsers:
    async def test_list(self, client: AsyncClient, make_user):
        admin = await make_user(role="admin")
        await make_user()
        response = await client.get("/admin/users", params={"limit": 10}, headers=bearer(admin["token"]))
        assert response.status_code == 200
        assert len(response.json()["data"]) == 2

    async def test_detail(self, client: AsyncClient, make_user):
        admin = await make_user(role="admin")
        user = await make_user(email="b@x.com")
        response = await client.get(f"/admin/users/{user['id']}", headers=bearer(admin["token"]))
        assert response.json()["data"]["email"] == "b@x.com"

    async def test_detail_404(self, client: AsyncClient, make_user):
        admin = await make_user(role="admin")
        response = await client.get("/admin/users/missing", headers=bearer(admin["token"]))
        assert response.status_code == 404


class TestChangeRole:
    async def test_promote(self, client: AsyncClient, store: InMemoryStore, make_user):
        admin = await make_user(role="admin")
        user = await make_user()
        response = await client.patch(
            f"/admin/users/{user['id']}/role", json={"role": "admin"}, headers=bearer(admin["token"])
        )
        assert response.status_code == 200
        assert store.profiles[user["id"]].role == "admin"

        # The promoted user is let through on their next request
        assert (await client.get("/admin", headers=bearer(user["token"]))).status_code == 200

    async def test_invalid_role(self, client: AsyncClient, make_user):
        admin = await make_user(role="admin")
        user = await make_user()
        response = await client.patch(
            f"/admin/users/{user['id']}/role", json={"role": "owner"}, headers=bearer(admin["token"])
        )
        assert response.status_code == 422

    async def test_cannot_demote_self(self, client: AsyncClient, store: InMemoryStore, make_user):
        admin = await make_user(role="admin")
        response = await client.patch(
            f"/admin/users/{admin['id']}/role", json={"role": "user"}, headers=bearer(admin["token"])
        )
        assert response.status_code == 400
        assert store.profiles[admin["id"]].role == "admin"

    async def test_non_admin_redirected(self, client: AsyncClient, make_user):
        user = await make_user(role="moderator")
        response = await client.patch(
            f"/admin/users/{user['id']}/role", json={"role": "admin"}, headers=bearer(user["token"])
        )
        assert response.status_code == 307


class TestDeleteUser:
    async def test_delete(self, client: AsyncClient, store: InMemoryStore, make_user):
        admin = await make_user(role="admin")
        user = await make_user()
        response = await client.delete(f"/admin/users/{user['id']}", headers=bearer(admin["token"]))
        assert response.status_code == 200
        assert user["id"] not in store.profiles
        assert user["id"] not in store.passwords

        # The deleted user's token no longer carries a role
        session = await client.get("/auth/session", headers=bearer(user["token"]))
        assert session.json()["data"]["user"]["role"] is None

    async def test_delete_missing(self, client: AsyncClient, make_user):
        admin = await make_user(role="admin")
        assert (await client.delete("/admin/users/missing", headers=bearer(admin["token"]))).status_code == 404

    async def test_cannot_delete_self(self, client: AsyncClient, store: InMemoryStore, make_user):
        admin = await make_user(role="admin")
        response = await client.delete(f"/admin/users/{admin['id']}", headers=bearer(admin["token"]))
        assert response.status_code == 400
        assert admin["id"] in store.profiles


class TestStoreFailures:
    """A failing store is reported as 503, never as an empty result or a 404."""

    async def test_overview(self, client: AsyncClient, store: InMemoryStore, make_user):
        admin = await make_user(role="admin")
        store.fail_on.add("count_profiles_by_role")
        response = await client.get("/admin", headers=bearer(admin["token"]))
        assert response.status_code == 503
        assert response.json() == {"success": False, "error": "Service temporarily unavailable"}

    async def test_user_list(self, client: AsyncClient, store: InMemoryStore, make_user):
        admin = await make_user(role="admin")
        store.fail_on.add("list_profiles")
        response = await client.get("/admin/users", headers=bearer(admin["token"]))
        assert response.status_code == 503
        assert response.json()["success"] is False

    async def test_delete(self, client: AsyncClient, store: InMemoryStore, make_user):
        admin = await make_user(role="admin")
        user = await make_user()
        store.fail_on.add("delete_profile")
        response = await client.delete(f"/admin/users/{user['id']}", headers=bearer(admin["token"]))
        assert response.status_code == 503
        assert user["id"] in store.profiles

    async def test_role_change(self, client: AsyncClient, store: InMemoryStore, make_user):
        admin = await make_user(role="admin")
        user = await make_user()
        store.fail_on.add("update_profile")
        response = await client.patch(
            f"/admin/users/{user['id']}/role", json={"role": "admin"}, headers=bearer(admin["token"])
        )
        assert response.status_code == 503
