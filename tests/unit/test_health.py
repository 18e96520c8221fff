"""
Tests for health check endpoints.
"""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from nocturna.main import app

client = TestClient(app)


def test_healthz_endpoint():
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_readyz_all_healthy():
    db_health = {
        "healthy": True,
        "connection_time_ms": 1.2,
        "pool_stats": {"pool_size": 2, "pool_available": 2, "requests_waiting": 0},
    }
    with patch("nocturna.routes.health.db_health_check", AsyncMock(return_value=db_health)):
        response = client.get("/readyz")

    assert response.status_code == 200
    data = response.json()
    assert data["overall_ok"] is True
    assert data["checks"]["database"]["ok"] is True
    assert data["checks"]["database"]["pool_size"] == 2
    assert isinstance(data["checks"]["database"]["latency_ms"], (int, float))


def test_readyz_database_down():
    db_health = {"healthy": False, "error": "Pool not initialized", "service": "database_pool"}
    with patch("nocturna.routes.health.db_health_check", AsyncMock(return_value=db_health)):
        response = client.get("/readyz")

    # Still 200; readiness is reported in the body
    assert response.status_code == 200
    data = response.json()
    assert data["overall_ok"] is False
    assert data["checks"]["database"]["error"] == "Pool not initialized"


def test_readyz_missing_jwt_secret():
    with (
        patch("nocturna.routes.health.db_health_check", AsyncMock(return_value={"healthy": True})),
        patch("nocturna.routes.health.settings.JWT_SECRET", None),
    ):
        response = client.get("/readyz")

    data = response.json()
    assert data["overall_ok"] is False
    assert "JWT_SECRET not set" in data["checks"]["configuration"]["issues"]


def test_responses_carry_request_id_and_security_headers():
    response = client.get("/healthz", headers={"X-Request-ID": "trace-me"})

    assert response.headers["X-Request-ID"] == "trace-me"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
