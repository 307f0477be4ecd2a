"""Tests for /api/v1/auth."""

from datetime import timedelta

from fastapi.testclient import TestClient
import jwt

from app.auth import create_access_token
from app.core.config import settings

TEST_PASSWORD = "SandCourt123!"


def test_register(client: TestClient):
    response = client.post(
        "/api/v1/auth/register",
        json={
            "email": "New@Example.com",
            "password": "BumpSetSpike1",
            "first_name": "Sarah",
            "last_name": "Hughes",
            "skill_level": "beginner",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "new@example.com"
    assert body["role"] == "student"
    assert body["skill_level"] == "beginner"
    assert "hashed_password" not in body


def test_register_duplicate_email(client: TestClient, test_student):
    response = client.post(
        "/api/v1/auth/register",
        json={
            "email": "student@example.com",
            "password": "BumpSetSpike1",
            "first_name": "Dup",
            "last_name": "Licate",
        },
    )

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "EMAIL_TAKEN"


def test_register_rejects_admin_role_and_short_password(client: TestClient):
    admin = client.post(
        "/api/v1/auth/register",
        json={
            "email": "boss@example.com",
            "password": "BumpSetSpike1",
            "first_name": "Boss",
            "last_name": "Person",
            "role": "admin",
        },
    )
    short = client.post(
        "/api/v1/auth/register",
        json={"email": "x@example.com", "password": "short", "first_name": "A", "last_name": "B"},
    )

    assert admin.status_code == 422
    assert short.status_code == 422


def test_login_and_me(client: TestClient, test_student):
    login = client.post(
        "/api/v1/auth/login",
        data={"username": "student@example.com", "password": TEST_PASSWORD},
    )
    assert login.status_code == 200
    token = login.json()["access_token"]
    assert login.json()["token_type"] == "bearer"

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["id"] == test_student.id


def test_login_wrong_password(client: TestClient, test_student):
    response = client.post(
        "/api/v1/auth/login",
        data={"username": "student@example.com", "password": "not-the-password"},
    )
    assert response.status_code == 401


def test_login_inactive_account(client: TestClient, db, test_student):
    test_student.is_active = False
    db.commit()

    response = client.post(
        "/api/v1/auth/login",
        data={"username": "student@example.com", "password": TEST_PASSWORD},
    )
    assert response.status_code == 403


def test_me_requires_token(client: TestClient):
    assert client.get("/api/v1/auth/me").status_code == 401
    assert (
        client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"}).status_code
        == 401
    )


def test_update_me(client: TestClient, auth_headers_student):
    response = client.patch(
        "/api/v1/auth/me",
        json={"first_name": "Kerri Lee", "skill_level": "advanced"},
        headers=auth_headers_student,
    )

    assert response.status_code == 200
    assert response.json()["first_name"] == "Kerri Lee"
    assert response.json()["skill_level"] == "advanced"


def test_update_me_rejects_unknown_fields(client: TestClient, auth_headers_student):
    response = client.patch(
        "/api/v1/auth/me", json={"role": "admin"}, headers=auth_headers_student
    )
    assert response.status_code == 422


def test_expired_and_foreign_tokens_are_rejected(client: TestClient, test_student):
    expired = create_access_token(test_student.id, expires_delta=timedelta(seconds=-1))
    foreign = jwt.encode(
        {"sub": test_student.id, "iss": "someone-else", "exp": 9999999999},
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )

    for token in (expired, foreign):
        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
