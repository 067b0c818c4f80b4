"""Tests for authentication endpoints."""

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from forum_core.core.settings import settings
from forum_core.models import User, UserSession
from forum_core.repositories.session_repo import SessionRepository
from forum_core.services.sessions import SessionManager


def test_register_creates_account(client: TestClient) -> None:
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "dave@example.com", "username": "dave", "password": "hunter22"},
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["username"] == "dave"
    assert data["role"] == "user"
    assert "password" not in data


def test_register_duplicate_email(client: TestClient, test_user: User) -> None:
    response = client.post(
        "/api/v1/auth/register",
        json={"email": test_user.email, "username": "someone", "password": "pw"},
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json() == {"success": False, "message": "Email already taken."}


def test_register_invalid_email(client: TestClient) -> None:
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "nope", "username": "someone", "password": "pw"},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_register_malformed_body(client: TestClient) -> None:
    response = client.post("/api/v1/auth/register", json={"email": "x@example.com"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["success"] is False


def test_login_sets_session_cookie(
    client: TestClient, test_user: User, test_password: str
) -> None:
    response = client.post(
        "/api/v1/auth/login",
        json={"email": test_user.email, "password": test_password},
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["success"] is True
    set_cookie = response.headers["set-cookie"]
    assert f"{settings.session_cookie_name}=" in set_cookie
    assert "HttpOnly" in set_cookie
    assert "samesite=lax" in set_cookie.lower()

    me = client.get("/api/v1/auth/me")
    assert me.status_code == status.HTTP_200_OK
    assert me.json()["id"] == test_user.id


def test_login_wrong_password(client: TestClient, test_user: User) -> None:
    response = client.post(
        "/api/v1/auth/login",
        json={"email": test_user.email, "password": "wrong"},
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["message"] == "Invalid email or password."
    assert "set-cookie" not in response.headers


def test_second_login_revokes_first(
    client: TestClient, db_session: Session, test_user: User, login_as
) -> None:
    first = login_as(test_user)
    second = login_as(test_user)

    client.cookies.set(settings.session_cookie_name, first)
    assert client.get("/api/v1/auth/me").status_code == status.HTTP_401_UNAUTHORIZED

    client.cookies.set(settings.session_cookie_name, second)
    assert client.get("/api/v1/auth/me").status_code == status.HTTP_200_OK


def test_logout_revokes_and_clears_cookie(
    client: TestClient, db_session: Session, test_user: User, login_as
) -> None:
    token = login_as(test_user)

    response = client.post("/api/v1/auth/logout")

    assert response.status_code == status.HTTP_200_OK
    assert f'{settings.session_cookie_name}=""' in response.headers["set-cookie"]
    remaining = db_session.scalar(
        select(func.count()).select_from(UserSession).where(UserSession.session_id == token)
    )
    assert remaining == 0


def test_logout_clears_cookie_when_store_delete_fails(
    client: TestClient,
    session_manager: SessionManager,
    test_user: User,
    login_as,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    token = login_as(test_user)

    def _boom(self, token):
        raise OperationalError("DELETE", {}, Exception("database is locked"))

    monkeypatch.setattr(SessionRepository, "delete", _boom)

    response = client.post("/api/v1/auth/logout")

    assert response.status_code == status.HTTP_200_OK
    assert f'{settings.session_cookie_name}=""' in response.headers["set-cookie"]
    assert token not in session_manager.mirror


def test_logout_without_session_still_clears_cookie(client: TestClient) -> None:
    response = client.post("/api/v1/auth/logout")

    assert response.status_code == status.HTTP_200_OK
    assert settings.session_cookie_name in response.headers["set-cookie"]


def test_me_requires_session(client: TestClient) -> None:
    response = client.get("/api/v1/auth/me")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"success": False, "message": "Not authenticated."}


def test_garbage_cookie_is_anonymous(client: TestClient) -> None:
    client.cookies.set(settings.session_cookie_name, "forged-token")
    assert client.get("/api/v1/auth/me").status_code == status.HTTP_401_UNAUTHORIZED
