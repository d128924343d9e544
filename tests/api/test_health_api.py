"""Tests for health check endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from knowledge_context.api.deps import get_cache_store_dependency
from knowledge_context.api.main import create_app
from knowledge_context.boundary.cache.memory_cache import MemoryCacheStore
from knowledge_context.boundary.db import get_async_db


def session_override(session):
    async def _db():
        yield session

    return _db


@pytest.fixture
def db_session():
    session = MagicMock()
    session.execute = AsyncMock(return_value=MagicMock())
    return session


@pytest.fixture
def app(db_session):
    app = create_app()
    app.dependency_overrides[get_async_db] = session_override(db_session)
    app.dependency_overrides[get_cache_store_dependency] = lambda: MemoryCacheStore()
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def test_health_check(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "message": "Server Healthy"}


def test_health_check_db(client, db_session):
    response = client.get("/api/v1/health/db")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "message": "Database connection OK"}
    db_session.execute.assert_awaited_once()


def test_health_check_db_unreachable(app, db_session):
    db_session.execute.side_effect = ConnectionError("refused")

    response = TestClient(app).get("/api/v1/health/db")

    assert response.status_code == 503
    assert response.json()["detail"] == "Database unreachable"


def test_health_check_cache(client):
    response = client.get("/api/v1/health/cache")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "message": "Cache reachable"}


def test_health_check_cache_degraded(app):
    cache = MagicMock()
    cache.ping = AsyncMock(return_value=False)
    app.dependency_overrides[get_cache_store_dependency] = lambda: cache

    response = TestClient(app).get("/api/v1/health/cache")

    assert response.status_code == 200
    assert response.json() == {"status": "degraded", "message": "Cache unreachable"}
