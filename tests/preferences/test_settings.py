"""Tests for user settings."""

from httpx import AsyncClient

from portal.preferences.schemas import UserSettingsUpdate
from portal.preferences.service import get_user_settings, resolve_locale, update_user_settings
from tests.fakes import InMemoryStore, bearer


class TestLocale:
    def test_supported(self):
        assert resolve_locale("fr") == "fr"

    def test_unsupported_falls_back(self):
        assert resolve_locale("xx") == "en"
        assert resolve_locale(None) == "en"


class TestSettingsService:
    async def test_defaults_when_no_row(self, store: InMemoryStore):
        settings = await get_user_settings(store, "user-1")
        assert settings.locale == "en"
        assert settings.theme == "light"
        assert settings.notifications_enabled is True
        assert store.settings == {}

    async def test_partial_update_keeps_other_fields(self, store: InMemoryStore):
        await update_user_settings(store, "user-1", UserSettingsUpdate(theme="dark"))
        saved = await update_user_settings(store, "user-1", UserSettingsUpdate(notifications_enabled=False))
        assert saved.theme == "dark"
        assert saved.notifications_enabled is False
        assert saved.email_notifications_enabled is True

    async def test_unsupported_locale_saved_as_default(self, store: InMemoryStore):
        saved = await update_user_settings(store, "user-1", UserSettingsUpdate(locale="xx"))
        assert saved.locale == "en"

    async def test_store_failure(self, store: InMemoryStore):
        store.fail_on.add("save_user_settings")
        assert await update_user_settings(store, "user-1", UserSettingsUpdate(theme="dark")) is None
        store.fail_on.add("get_user_settings")
        assert await get_user_settings(store, "user-1") is None


class TestSettingsEndpoints:
    async def test_get_defaults(self, client: AsyncClient, make_user):
        user = await make_user()
        response = await client.get("/api/v1/settings/me", headers=bearer(user["token"]))
        assert response.status_code == 200
        assert response.json()["data"]["locale"] == "en"

    async def test_patch(self, client: AsyncClient, make_user):
        user = await make_user()
        response = await client.patch(
            "/api/v1/settings/me", json={"locale": "fr", "theme": "system"}, headers=bearer(user["token"])
        )
        data = response.json()["data"]
        assert data["locale"] == "fr"
        assert data["theme"] == "system"

        again = await client.get("/api/v1/settings/me", headers=bearer(user["token"]))
        assert again.json()["data"]["theme"] == "system"

    async def test_requires_auth(self, client: AsyncClient):
        assert (await client.patch("/api/v1/settings/me", json={"theme": "dark"})).status_code == 401

    async def test_store_failure_503(self, client: AsyncClient, store: InMemoryStore, make_user):
        user = await make_user()
        store.fail_on.add("save_user_settings")
        response = await client.patch("/api/v1/settings/me", json={"theme": "dark"}, headers=bearer(user["token"]))
        assert response.status_code == 503
