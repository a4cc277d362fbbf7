"""Integration tests for the auth API via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from identity.api.routes import router
from protean.integrations.fastapi import register_exception_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(router)
    return TestClient(app)


_ACCOUNT = {
    "email": "lan.nguyen@example.com",
    "name": "Nguyễn Thị Lan",
    "password": "matkhau123",
    "phone": "0901234567",
}


def _register(client, **overrides):
    response = client.post("/auth/register", json={**_ACCOUNT, **overrides})
    assert response.status_code == 201
    return response.json()["user_id"]


def _token(client, **credentials):
    credentials = credentials or {"email": _ACCOUNT["email"], "password": _ACCOUNT["password"]}
    response = client.post("/auth/login", json=credentials)
    assert response.status_code == 200
    return response.json()["access_token"]


class TestRegister:
    def test_register(self, client):
        assert _register(client)

    def test_duplicate_is_400(self, client):
        _register(client)
        assert client.post("/auth/register", json=_ACCOUNT).status_code == 400

    def test_short_password_is_422(self, client):
        assert client.post("/auth/register", json={**_ACCOUNT, "password": "123"}).status_code == 422

    def test_invalid_email_is_400(self, client):
        assert client.post("/auth/register", json={**_ACCOUNT, "email": "lan@@x"}).status_code == 400


class TestLogin:
    def test_login_returns_user(self, client):
        user_id = _register(client)
        response = client.post("/auth/login", json={"phone": "0901234567", "password": "matkhau123"})

        body = response.json()
        assert body["user"]["id"] == user_id
        assert body["user"]["role"] == "user"

    def test_bad_credentials_is_401(self, client):
        _register(client)
        response = client.post("/auth/login", json={"email": _ACCOUNT["email"], "password": "sai-mat-khau"})
        assert response.status_code == 401

    def test_needs_exactly_one_handle(self, client):
        assert client.post("/auth/login", json={"password": "matkhau123"}).status_code == 422
        both = {"email": _ACCOUNT["email"], "phone": _ACCOUNT["phone"], "password": "matkhau123"}
        assert client.post("/auth/login", json=both).status_code == 422


class TestProfile:
    def test_me(self, client):
        _register(client)
        headers = {"Authorization": f"Bearer {_token(client)}"}

        me = client.get("/auth/me", headers=headers).json()
        assert me["email"] == "lan.nguyen@example.com"
        assert "password_hash" not in me

    def test_me_requires_token(self, client):
        assert client.get("/auth/me").status_code == 401

    def test_update_profile_and_password(self, client):
        _register(client)
        headers = {"Authorization": f"Bearer {_token(client)}"}

        assert client.put("/auth/profile", json={"name": "Lan"}, headers=headers).status_code == 200
        assert client.get("/auth/me", headers=headers).json()["name"] == "Lan"

        response = client.put(
            "/auth/password",
            json={"current_password": "matkhau123", "new_password": "matkhaumoi456"},
            headers=headers,
        )
        assert response.status_code == 200
        assert _token(client, email=_ACCOUNT["email"], password="matkhaumoi456")


class TestPasswordRecovery:
    def test_forgot_password_answers_alike_for_known_and_unknown(self, client, mailer):
        _register(client)

        known = client.post("/auth/forgot-password", json={"email": _ACCOUNT["email"]})
        unknown = client.post("/auth/forgot-password", json={"email": "khong.co@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert len(mailer.sent_emails) == 1

    def test_reset_then_login_with_new_password(self, client, mailer):
        _register(client)
        client.post("/auth/forgot-password", json={"email": _ACCOUNT["email"]})
        token = mailer.sent_emails[0]["body"].split("token=")[1].split()[0]

        response = client.post("/auth/reset-password", json={"token": token, "new_password": "matkhaumoi456"})

        assert response.status_code == 200
        assert _token(client, email=_ACCOUNT["email"], password="matkhaumoi456")
        assert client.post("/auth/login", json={"email": _ACCOUNT["email"], "password": "matkhau123"}).status_code == 401

    def test_bad_token_is_400(self, client):
        response = client.post("/auth/reset-password", json={"token": "khong-hop-le", "new_password": "matkhaumoi456"})
        assert response.status_code == 400
