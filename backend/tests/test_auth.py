"""
Authentication tests.

Verifies:
- Login returns the user record (never the hash) for valid credentials
- Unknown username and wrong password both return 401
- A disabled account gets 403 whatever password is supplied
- X-User-Id identifies the caller and is re-checked on every request
"""

from conftest import PASSWORD


class TestLogin:

    def test_login_success(self, client, agent):
        resp = client.post("/api/auth/login", json={"username": agent.username, "password": PASSWORD})
        assert resp.status_code == 200
        user = resp.get_json()["user"]
        assert user["id"] == agent.id
        assert user["role"] == "agent"
        assert "password_hash" not in user

    def test_login_trims_username(self, client, agent):
        resp = client.post("/api/auth/login", json={"username": f"  {agent.username} ", "password": PASSWORD})
        assert resp.status_code == 200

    def test_wrong_password(self, client, agent):
        resp = client.post("/api/auth/login", json={"username": agent.username, "password": "nope-nope"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials"

    def test_unknown_user(self, client, db_session):
        resp = client.post("/api/auth/login", json={"username": "ghost@vansales.com", "password": PASSWORD})
        assert resp.status_code == 401

    def test_disabled_account_with_correct_password(self, client, disabled_agent):
        resp = client.post("/api/auth/login", json={"username": disabled_agent.username, "password": PASSWORD})
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Account is disabled"

    def test_disabled_account_with_wrong_password(self, client, disabled_agent):
        resp = client.post("/api/auth/login", json={"username": disabled_agent.username, "password": "wrong-one"})
        assert resp.status_code == 403

    def test_missing_fields(self, client, db_session):
        resp = client.post("/api/auth/login", json={"username": "someone"})
        assert resp.status_code == 400


class TestIdentityHeader:

    def test_me(self, client, agent, as_user):
        resp = client.get("/api/auth/me", headers=as_user(agent))
        assert resp.status_code == 200
        assert resp.get_json()["user"]["username"] == agent.username

    def test_missing_header(self, client, db_session):
        assert client.get("/api/auth/me").status_code == 401

    def test_non_numeric_header(self, client, db_session):
        assert client.get("/api/auth/me", headers={"X-User-Id": "abc"}).status_code == 401

    def test_unknown_user_id(self, client, db_session):
        assert client.get("/api/auth/me", headers={"X-User-Id": "9999"}).status_code == 401

    def test_disabled_user_rejected(self, client, disabled_agent, as_user):
        assert client.get("/api/auth/me", headers=as_user(disabled_agent)).status_code == 401

    def test_disabling_takes_effect_immediately(self, client, admin, agent, as_user):
        assert client.get("/api/products/pinned", headers=as_user(agent)).status_code == 200

        resp = client.patch(
            f"/api/users/{agent.id}/status",
            json={"is_enabled": False},
            headers=as_user(admin),
        )
        assert resp.status_code == 200

        assert client.get("/api/products/pinned", headers=as_user(agent)).status_code == 401
