"""
Tests for health check endpoints.

System role: Verification of liveness and database checks
"""

from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.exc import OperationalError

from knowledge_chat.boundary.db import get_async_db


def test_health(client) -> None:
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "message": "Server Healthy"}


def test_health_db_ok(app, client) -> None:
    db = MagicMock()
    db.execute = AsyncMock()
    app.dependency_overrides[get_async_db] = lambda: db

    response = client.get("/api/v1/health/db")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    db.execute.assert_awaited_once()


def test_health_db_unreachable(app, client) -> None:
    db = MagicMock()
    db.execute = AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("refused")))
    app.dependency_overrides[get_async_db] = lambda: db

    response = client.get("/api/v1/health/db")

    assert response.status_code == 503
    assert response.json() == {"status": "unhealthy", "message": "Database unreachable"}
