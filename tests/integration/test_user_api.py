"""API tests for the account endpoints."""

import pytest


pytestmark = pytest.mark.integration


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


class TestRegister:
    def test_register_returns_token_and_user(self, client):
        response = client.post(
            "/api/users/register",
            json={"name": "Ada", "email": "Ada@Example.com", "password": "password123", "passwordConfirm": "password123"},
        )

        body = response.json()
        assert response.status_code == 201
        assert body["status"] == "success"
        assert body["token"]
        assert body["data"]["user"]["email"] == "ada@example.com"
        assert "password_hash" not in body["data"]["user"]

    def test_duplicate_email(self, client, register_user):
        register_user()

        response = client.post(
            "/api/users/register",
            json={
                "name": "Again",
                "email": "test@example.com",
                "password": "password123",
                "passwordConfirm": "password123",
            },
        )

        assert response.status_code == 400
        assert response.json()["code"] == "ERR_USER_ALREADY_EXISTS"

    def test_password_mismatch(self, client):
        response = client.post(
            "/api/users/register",
            json={"name": "Ada", "email": "ada@example.com", "password": "password123", "passwordConfirm": "nope12345"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Passwords do not match"


class TestLogin:
    def test_login_issues_working_token(self, client, register_user):
        register_user()

        response = client.post("/api/users/login", json={"email": "test@example.com", "password": "password123"})
        token = response.json()["token"]
        me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert me.status_code == 200
        assert me.json()["data"]["user"]["email"] == "test@example.com"

    def test_wrong_password(self, client, register_user):
        register_user()

        response = client.post("/api/users/login", json={"email": "test@example.com", "password": "wrong-pass"})

        assert response.status_code == 401
        assert response.json()["message"] == "Incorrect email or password"


class TestProfile:
    def test_me_requires_auth(self, client):
        assert client.get("/api/users/me").status_code == 401

    def test_update_me(self, client, auth_headers):
        response = client.patch("/api/users/updateMe", json={"name": "Renamed"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["user"]["name"] == "Renamed"

    def test_update_me_to_taken_email(self, client, auth_headers, other_auth_headers):
        response = client.patch("/api/users/updateMe", json={"email": "other@example.com"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["code"] == "ERR_USER_ALREADY_EXISTS"
