"""
Auth endpoints end to end over the in-memory document store.
"""

import pytest
from fastapi.testclient import TestClient

from nocturna.config import settings
from nocturna.main import app

PASSWORD = "Vigilia#2026"


@pytest.fixture
def client(fake_store):
    return TestClient(app)


def _register(client, email="secretaria@nocturna.org", password=PASSWORD, name="Secretaria"):
    return client.post("/auth/register", json={"email": email, "password": password, "name": name})


def test_register_signs_in(client):
    response = _register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["user"]["email"] == "secretaria@nocturna.org"
    assert "password_hash" not in body["user"]

    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f"{settings.SESSION_COOKIE_NAME}=")
    assert "HttpOnly" in set_cookie


def test_session_after_login(client):
    _register(client)
    client.cookies.clear()

    login = client.post("/auth/login", json={"email": "Secretaria@Nocturna.org", "password": PASSWORD})
    assert login.status_code == 200

    session = client.get("/auth/session")
    assert session.status_code == 200
    assert session.json()["user"]["name"] == "Secretaria"


def test_logout_expires_cookie(client):
    _register(client)

    response = client.post("/auth/logout")

    assert response.status_code == 200
    assert "Max-Age=0" in response.headers["set-cookie"]


def test_duplicate_registration_is_400(client):
    _register(client)

    response = _register(client, email="SECRETARIA@nocturna.org")

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Email already registered"}


def test_wrong_password_and_unknown_email_look_the_same(client):
    _register(client)
    client.cookies.clear()

    wrong_password = client.post(
        "/auth/login", json={"email": "secretaria@nocturna.org", "password": "Wrong#Pass1"}
    )
    unknown_email = client.post("/auth/login", json={"email": "nadie@nocturna.org", "password": PASSWORD})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["message"] == "Invalid email or password"


def test_register_missing_fields(client):
    response = client.post("/auth/register", json={"email": "a@x.com"})

    assert response.status_code == 400
    assert response.json()["message"] == "Email, password, and name are required"


def test_weak_password_lists_problems(client):
    response = _register(client, password="short")

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Password does not meet requirements"
    assert all(error["field"] == "password" for error in body["errors"])


def test_session_without_cookie(client):
    response = client.get("/auth/session")

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Not authenticated"}


def test_session_with_garbage_cookie(client):
    client.cookies.set(settings.SESSION_COOKIE_NAME, "not-a-token")

    response = client.get("/auth/session")

    assert response.status_code == 401


def test_protected_routes_require_session(client):
    assert client.get("/vigils").status_code == 401
    assert client.get("/members").status_code == 401
