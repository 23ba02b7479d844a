"""
API tests for registration, login, profile and access control
"""
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from store_ratings.core import security
from store_ratings.core.rate_limit import limiter
from store_ratings.main import app

REGISTRATION = {
    "name": "Registered Person From Test",
    "email": "registered@example.com",
    "password": "Secret@123",
    "address": "12 Registration Road",
}


@pytest.mark.e2e
class TestRegisterAndLogin:
    def test_register_then_login(self, client):
        response = client.post("/api/auth/register", json=REGISTRATION)
        assert response.status_code == 201
        body = response.json()
        assert body["user"]["role"] == "normal_user"
        assert "password" not in body["user"]
        assert "hashed_password" not in body["user"]

        response = client.post(
            "/api/auth/login",
            json={"email": REGISTRATION["email"], "password": REGISTRATION["password"]},
        )
        assert response.status_code == 200
        payload = security.decode_access_token(response.json()["access_token"])
        assert payload["sub"] == str(body["user"]["id"])
        assert payload["role"] == "normal_user"

    def test_register_cannot_choose_role(self, client):
        response = client.post("/api/auth/register", json=dict(REGISTRATION, role="system_admin"))
        assert response.status_code == 201
        assert response.json()["user"]["role"] == "normal_user"

    def test_duplicate_email(self, client):
        client.post("/api/auth/register", json=REGISTRATION)
        response = client.post("/api/auth/register", json=REGISTRATION)
        assert response.status_code == 400
        assert response.json()["detail"] == "User with this email already exists"

    def test_validation_errors_are_400_and_listed(self, client):
        response = client.post(
            "/api/auth/register",
            json=dict(REGISTRATION, name="Short", password="weak"),
        )
        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Validation failed"
        assert {error["field"] for error in body["errors"]} == {"name", "password"}

    def test_login_wrong_password(self, client, normal_user):
        response = client.post(
            "/api/auth/login", json={"email": normal_user.email, "password": "Wrong@123"}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_token_form_login(self, client, normal_user):
        response = client.post(
            "/api/auth/token", data={"username": normal_user.email, "password": "Secret@123"}
        )
        assert response.status_code == 200
        assert response.json()["token_type"] == "bearer"


@pytest.mark.e2e
class TestProfile:
    def test_read_profile(self, client, normal_user, user_headers):
        response = client.get("/api/auth/profile", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["email"] == normal_user.email

    def test_update_profile(self, client, user_headers):
        response = client.put(
            "/api/auth/profile",
            json={"name": "Updated Name Of This User", "role": "system_admin"},
            headers=user_headers,
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Updated Name Of This User"
        assert response.json()["role"] == "normal_user"

    def test_empty_profile_update(self, client, user_headers):
        response = client.put("/api/auth/profile", json={}, headers=user_headers)
        assert response.status_code == 400

    def test_change_password(self, client, normal_user, user_headers):
        response = client.put(
            "/api/auth/password",
            json={"current_password": "Secret@123", "new_password": "Changed@123"},
            headers=user_headers,
        )
        assert response.status_code == 200

        response = client.post(
            "/api/auth/login", json={"email": normal_user.email, "password": "Changed@123"}
        )
        assert response.status_code == 200

    def test_change_password_wrong_current(self, client, user_headers):
        response = client.put(
            "/api/auth/password",
            json={"current_password": "Wrong@123", "new_password": "Changed@123"},
            headers=user_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Current password is incorrect"


@pytest.mark.e2e
class TestAccessControl:
    def test_missing_token(self, client):
        assert client.get("/api/auth/profile").status_code == 401

    def test_malformed_token(self, client):
        response = client.get("/api/auth/profile", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_token_of_deleted_user(self, client, test_db, make_user, headers_for):
        user = make_user()
        headers = headers_for(user)
        test_db.delete(user)
        test_db.commit()
        assert client.get("/api/auth/profile", headers=headers).status_code == 401

    @pytest.mark.parametrize(
        "path",
        ["/api/admin/dashboard", "/api/admin/users", "/api/stores/owner/dashboard", "/api/users/store"],
    )
    def test_normal_user_forbidden(self, client, user_headers, path):
        response = client.get(path, headers=user_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Insufficient permissions"

    def test_owner_cannot_use_admin(self, client, owner_headers):
        assert client.get("/api/admin/stores", headers=owner_headers).status_code == 403


@pytest.mark.e2e
def test_login_rate_limit(client, normal_user):
    limiter.enabled = True
    limiter.reset()
    try:
        credentials = {"email": normal_user.email, "password": "Wrong@123"}
        codes = [client.post("/api/auth/login", json=credentials).status_code for _ in range(6)]
        assert codes[:5] == [401] * 5
        assert codes[5] == 429
    finally:
        limiter.reset()
        limiter.enabled = False


@pytest.mark.e2e
def test_unexpected_error_is_500(client, user_headers):
    quiet_client = TestClient(app, raise_server_exceptions=False)
    with patch(
        "store_ratings.routers.users.analytics_service.user_stats",
        side_effect=RuntimeError("boom"),
    ):
        response = quiet_client.get("/api/users/stats", headers=user_headers)
    assert response.status_code == 500
    assert response.json()["detail"] == "Internal server error"


@pytest.mark.e2e
def test_health(client):
    assert client.get("/").json()["status"] == "running"
    assert client.get("/api/health").json()["status"] == "OK"
