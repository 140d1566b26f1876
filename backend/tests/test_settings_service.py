import pytest

from vansales.services import settings_service
from vansales.services.settings_service import GatewayConfig
from vansales.validation import ValidationError


@pytest.fixture
def env_credentials(app):
    app.config.update(BIGCOMMERCE_STORE_HASH="envhash", BIGCOMMERCE_ACCESS_TOKEN="envtok")
    yield
    app.config.update(BIGCOMMERCE_STORE_HASH="", BIGCOMMERCE_ACCESS_TOKEN="")


class TestGatewayConfig:

    def test_unconfigured(self, db_session):
        assert settings_service.get_gateway_config() is None

    def test_environment_fallback(self, db_session, env_credentials):
        assert settings_service.get_gateway_config() == GatewayConfig(store_hash="envhash", token="envtok")

    def test_stored_setting_wins(self, db_session, env_credentials):
        settings_service.set_setting("bigcommerce_config", {"storeHash": " abc ", "token": "tok"})
        assert settings_service.get_gateway_config() == GatewayConfig(store_hash="abc", token="tok")

    def test_incomplete_setting_is_unconfigured(self, db_session, env_credentials):
        settings_service.set_setting("bigcommerce_config", {"storeHash": "abc", "token": ""})
        assert settings_service.get_gateway_config() is None

    @pytest.mark.parametrize("value", ["abc", {"storeHash": 1, "token": "x"}, {"token": "x"}])
    def test_invalid_config_rejected(self, db_session, value):
        with pytest.raises(ValidationError):
            settings_service.set_setting("bigcommerce_config", value)


class TestSheetsWebhook:

    def test_upsert(self, db_session):
        settings_service.set_setting("google_sheets_webhook", "https://sheets.test/a")
        settings_service.set_setting("google_sheets_webhook", "https://sheets.test/b")
        assert settings_service.get_sheets_webhook_url() == "https://sheets.test/b"

    def test_empty_disables_mirror(self, db_session, app):
        app.config["GOOGLE_SHEETS_WEBHOOK_URL"] = "https://env.test/hook"
        try:
            assert settings_service.get_sheets_webhook_url() == "https://env.test/hook"
            settings_service.set_setting("google_sheets_webhook", "")
            assert settings_service.get_sheets_webhook_url() is None
        finally:
            app.config["GOOGLE_SHEETS_WEBHOOK_URL"] = ""

    def test_rejects_non_http_url(self, db_session):
        with pytest.raises(ValidationError):
            settings_service.set_setting("google_sheets_webhook", "ftp://sheets.test/hook")


class TestSettingsRoutes:

    def test_save_and_read(self, client, admin, as_user):
        resp = client.post(
            "/api/settings",
            json={"key": "bigcommerce_config", "value": {"storeHash": "abc", "token": "tok"}},
            headers=as_user(admin),
        )
        assert resp.status_code == 200

        resp = client.get("/api/settings/bigcommerce_config", headers=as_user(admin))
        assert resp.status_code == 200
        assert resp.get_json()["value"] == {"storeHash": "abc", "token": "tok"}

    def test_missing_setting(self, client, admin, as_user):
        assert client.get("/api/settings/nope", headers=as_user(admin)).status_code == 404

    def test_invalid_value(self, client, admin, as_user):
        resp = client.post("/api/settings", json={"key": "bigcommerce_config", "value": "x"}, headers=as_user(admin))
        assert resp.status_code == 400


def test_health_reports_integrations(client, db_session):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "healthy"
    assert body["checks"]["bigcommerce"] == {"configured": False}
    assert body["checks"]["google_sheets"] == {"configured": False}


class TestMalformedSettingsInput:

    @pytest.mark.parametrize(
        "payload",
        [
            {"key": 5, "value": 1},
            {"key": ["bigcommerce_config"], "value": {}},
            {"key": "google_sheets_webhook", "value": "http://"},
            {"key": "google_sheets_webhook", "value": "http://[::1"},
            {"key": "google_sheets_webhook", "value": "https:///no-host"},
            {"key": "bigcommerce_config", "value": {"storeHash": "abc123", "token": "tök"}},
            {"key": "bigcommerce_config", "value": {"storeHash": "äbc", "token": "tok"}},
        ],
    )
    def test_rejected_with_400(self, client, admin, as_user, payload):
        resp = client.post("/api/settings", json=payload, headers=as_user(admin))
        assert resp.status_code == 400
        assert resp.get_json()["error"]
