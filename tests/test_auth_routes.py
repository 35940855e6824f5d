"""
tests/test_auth_routes.py -- register / login / me / profile through the real ASGI stack.
"""

from __future__ import annotations

from datetime import timedelta

from fastapi.testclient import TestClient

from easylaptop.core.security import TokenService
from easylaptop.models.user import User


class TestRegister:
    def test_register_returns_token_and_public_user(self, client: TestClient) -> None:
        resp = client.post(
            "/api/auth/register",
            json={"name": "Ana", "email": "Ana@Example.com", "password": "secret12", "college": "MIT", "userType": "seller"},
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["token"]
        user = body["user"]
        assert user["email"] == "ana@example.com"
        assert user["userType"] == "seller"
        assert user["role"] == "student"
        assert user["college"] == "MIT"
        assert "password" not in user
        assert "hashedPassword" not in user

    def test_missing_fields(self, client: TestClient) -> None:
        resp = client.post("/api/auth/register", json={"email": "ana@example.com"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Please provide name, email, and password"

    def test_invalid_email(self, client: TestClient) -> None:
        resp = client.post("/api/auth/register", json={"name": "Ana", "email": "not-an-email", "password": "secret12"})
        assert resp.status_code == 400
        assert "message" in resp.json()

    def test_invalid_user_type(self, client: TestClient) -> None:
        resp = client.post(
            "/api/auth/register",
            json={"name": "Ana", "email": "ana@example.com", "password": "secret12", "userType": "vendor"},
        )
        assert resp.status_code == 400

    def test_duplicate_email_case_insensitive(self, client: TestClient, register_user) -> None:
        register_user("ana@example.com")
        resp = client.post("/api/auth/register", json={"name": "Ana 2", "email": "ANA@example.com", "password": "secret12"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "User already exists with this email"


class TestLogin:
    def test_login_success(self, client: TestClient, register_user) -> None:
        register_user("ana@example.com", password="secret12")
        resp = client.post("/api/auth/login", json={"email": "ANA@example.com", "password": "secret12"})
        assert resp.status_code == 200
        assert resp.json()["token"]
        assert resp.json()["user"]["email"] == "ana@example.com"

    def test_wrong_password(self, client: TestClient, register_user) -> None:
        register_user("ana@example.com", password="secret12")
        resp = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "secret13"})
        assert resp.status_code == 401
        assert resp.json() == {"message": "Invalid email or password"}

    def test_unknown_email(self, client: TestClient) -> None:
        resp = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "secret12"})
        assert resp.status_code == 401

    def test_missing_fields(self, client: TestClient) -> None:
        resp = client.post("/api/auth/login", json={"email": "ana@example.com"})
        assert resp.status_code == 400


class TestMe:
    def test_me_with_token(self, client: TestClient, register_user, auth_header) -> None:
        token, user = register_user("ana@example.com")
        resp = client.get("/api/auth/me", headers=auth_header(token))
        assert resp.status_code == 200
        assert resp.json()["id"] == user["id"]
        assert "hashedPassword" not in resp.json()

    def test_me_without_token(self, client: TestClient) -> None:
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert "message" in resp.json()

    def test_me_with_garbage_token(self, client: TestClient, auth_header) -> None:
        assert client.get("/api/auth/me", headers=auth_header("garbage")).status_code == 401

    def test_me_with_non_bearer_scheme(self, client: TestClient, register_user) -> None:
        token, _ = register_user("ana@example.com")
        assert client.get("/api/auth/me", headers={"Authorization": f"Basic {token}"}).status_code == 401

    def test_me_with_expired_token(self, client: TestClient, register_user, auth_header, settings) -> None:
        _, user = register_user("ana@example.com")
        expired = TokenService(settings).issue(user["id"], expires_delta=timedelta(seconds=-5))
        assert client.get("/api/auth/me", headers=auth_header(expired)).status_code == 401

    def test_me_with_out_of_range_user_id(self, client: TestClient, auth_header, settings) -> None:
        token = TokenService(settings).issue(10**20)
        assert client.get("/api/auth/me", headers=auth_header(token)).status_code == 401

    def test_me_for_deleted_user(self, client: TestClient, register_user, auth_header, db_session) -> None:
        token, user = register_user("ana@example.com")
        db_session.delete(db_session.get(User, user["id"]))
        db_session.commit()
        assert client.get("/api/auth/me", headers=auth_header(token)).status_code == 401


class TestProfile:
    def test_update_profile(self, client: TestClient, register_user, auth_header) -> None:
        token, _ = register_user("ana@example.com", college="MIT")
        resp = client.put(
            "/api/users/profile",
            json={"name": "Ana Maria", "phone": "555-0100", "userType": "customer", "email": "evil@example.com", "role": "admin"},
            headers=auth_header(token),
        )
        assert resp.status_code == 200
        user = resp.json()["user"]
        assert user["name"] == "Ana Maria"
        assert user["phone"] == "555-0100"
        assert user["userType"] == "customer"
        assert user["college"] == "MIT"
        # email and role are immutable through this route
        assert user["email"] == "ana@example.com"
        assert user["role"] == "student"

    def test_password_still_works_after_profile_update(self, client: TestClient, register_user, auth_header) -> None:
        token, _ = register_user("ana@example.com", password="secret12")
        client.put("/api/users/profile", json={"name": "Ana Maria"}, headers=auth_header(token))
        resp = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "secret12"})
        assert resp.status_code == 200

    def test_update_profile_requires_auth(self, client: TestClient) -> None:
        assert client.put("/api/users/profile", json={"name": "X"}).status_code == 401
