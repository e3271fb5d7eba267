from datetime import datetime, timedelta, timezone

import jwt
import pytest

from fintech_index import config
from fintech_index.models import Role, User
from fintech_index.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def register(client, **overrides):
    payload = {"email": "new@example.com", "password": "secret123", "name": "New User", "role": "viewer"}
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


class TestRegister():
    def test_register_creates_unverified_user(self, client, db):
        response = register(client, email="  New@Example.com ")
        assert response.status_code == 201
        assert response.json() == {"message": "User registered. Awaiting admin verification."}

        user = db.query(User).filter(User.email == "new@example.com").one()
        assert user.is_verified is False
        assert user.role == "viewer"
        assert user.password_hash != "secret123"

    def test_register_as_admin_is_forbidden(self, client, db):
        response = register(client, role="admin")
        assert response.status_code == 403
        assert db.query(User).count() == 0

    @pytest.mark.parametrize("role", ["superuser", "", None])
    def test_register_invalid_role(self, client, role):
        assert register(client, role=role).status_code == 400

    def test_register_duplicate_email(self, client):
        assert register(client).status_code == 201
        response = register(client, email="NEW@example.com", role="editor")
        assert response.status_code == 409

    def test_register_missing_fields(self, client):
        response = client.post("/api/auth/register", json={"email": "x@example.com"})
        assert response.status_code == 400


class TestLogin():
    def test_login_returns_token_and_user(self, client, make_user):
        user = make_user(email="editor@example.com", role=Role.EDITOR)
        response = client.post("/api/auth/login",
                               json={"email": "editor@example.com", "password": "secret123"})
        assert response.status_code == 200
        body = response.json()
        assert body["user"]["email"] == "editor@example.com"
        assert body["user"]["role"] == "editor"
        assert body["user"]["isVerified"] is True
        assert "passwordHash" not in body["user"]

        claims = decode_access_token(body["token"])
        assert claims.id == user.id
        assert claims.role == Role.EDITOR

    def test_login_unverified_is_forbidden(self, client, make_user):
        make_user(email="pending@example.com", verified=False)
        response = client.post("/api/auth/login",
                               json={"email": "pending@example.com", "password": "secret123"})
        assert response.status_code == 403

    def test_login_unverified_checked_before_password(self, client, make_user):
        make_user(email="pending@example.com", verified=False)
        response = client.post("/api/auth/login",
                               json={"email": "pending@example.com", "password": "wrong"})
        assert response.status_code == 403

    def test_login_wrong_password(self, client, make_user):
        make_user()
        response = client.post("/api/auth/login",
                               json={"email": "viewer@example.com", "password": "wrong"})
        assert response.status_code == 401

    def test_login_unknown_user(self, client):
        response = client.post("/api/auth/login",
                               json={"email": "ghost@example.com", "password": "secret123"})
        assert response.status_code == 401


class TestMe():
    def test_me(self, client, admin, admin_headers):
        response = client.get("/api/auth/me", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["email"] == "admin@example.com"

    def test_me_without_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "No token"

    def test_me_with_garbage_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token"

    def test_me_with_expired_token(self, client, admin):
        issued = datetime.now(timezone.utc) - timedelta(hours=config.JWT_EXPIRES_HOURS + 1)
        token = create_access_token(admin, now=issued)
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_me_with_token_signed_elsewhere(self, client, admin):
        token = jwt.encode({"id": admin.id, "role": "admin", "email": admin.email},
                           "another-secret", algorithm="HS256")
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestPasswords():
    def test_hash_and_verify(self):
        stored = hash_password("secret123")
        assert verify_password("secret123", stored)
        assert not verify_password("secret124", stored)

    def test_only_first_72_bytes_count(self):
        stored = hash_password("a" * 72 + "tail")
        assert verify_password("a" * 72 + "different", stored)

    def test_corrupt_hash_does_not_verify(self):
        assert not verify_password("secret123", "not-a-bcrypt-hash")


def test_token_expires_after_configured_hours(admin):
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    token = create_access_token(admin, now=now)
    payload = jwt.decode(token, config.JWT_SECRET, algorithms=["HS256"],
                         options={"verify_exp": False})
    assert payload["exp"] - payload["iat"] == config.JWT_EXPIRES_HOURS * 3600
    assert payload["role"] == "admin"
