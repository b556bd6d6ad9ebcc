# tests/test_api.py

"""Tests for the system endpoints and the error envelope."""

import pytest
from httpx import AsyncClient

from combatstats import config
from combatstats.exceptions import DatabaseError
from combatstats.main import app
from combatstats.queries.executor import get_executor


class _BrokenExecutor:
    """Executor stand-in whose store is unreachable."""

    async def ping(self):
        raise DatabaseError("Database error: connection refused")

    async def fetch_all(self, stmt):
        raise DatabaseError("Database error: Invalid object name 'CBT_User'")


@pytest.mark.asyncio
async def test_read_root(async_client: AsyncClient):
    """The root describes the service and lists its endpoints."""
    response = await async_client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Combat Stats API"
    assert data["documentation"] == "/docs"
    assert "GET /api/stats" in data["endpoints"]
    assert "GET /health" in data["endpoints"]


@pytest.mark.asyncio
async def test_legacy_docs_path_redirects(async_client: AsyncClient):
    response = await async_client.get("/api-docs")

    assert response.status_code == 307
    assert response.headers["location"] == "/docs"


@pytest.mark.asyncio
async def test_health_ok(async_client: AsyncClient):
    response = await async_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "OK"
    assert data["database"] == "Connected"
    assert "timestamp" in data
    assert "error" not in data


@pytest.mark.asyncio
async def test_health_reports_unreachable_store(async_client: AsyncClient):
    app.dependency_overrides[get_executor] = lambda: _BrokenExecutor()

    response = await async_client.get("/health")

    assert response.status_code == 500
    data = response.json()
    assert data["status"] == "ERROR"
    assert data["database"] == "Disconnected"
    assert data["error"] == "Database error: connection refused"


@pytest.mark.asyncio
async def test_database_errors_are_hidden_in_production(
    async_client: AsyncClient, monkeypatch
):
    monkeypatch.setattr(config, "APP_ENV", "production")
    app.dependency_overrides[get_executor] = lambda: _BrokenExecutor()

    response = await async_client.get("/api/users")

    assert response.status_code == 500
    assert response.json() == {"error": "An internal database error occurred"}


@pytest.mark.asyncio
async def test_database_errors_are_shown_in_development(
    async_client: AsyncClient, monkeypatch
):
    monkeypatch.setattr(config, "APP_ENV", "development")
    app.dependency_overrides[get_executor] = lambda: _BrokenExecutor()

    response = await async_client.get("/api/ranking")

    assert response.status_code == 500
    assert response.json() == {
        "error": "Database error: Invalid object name 'CBT_User'"
    }


@pytest.mark.asyncio
async def test_request_id_is_echoed(async_client: AsyncClient):
    response = await async_client.get("/", headers={"X-Request-ID": "abc123"})

    assert response.headers["X-Request-ID"] == "abc123"


@pytest.mark.asyncio
async def test_request_id_is_generated(async_client: AsyncClient):
    response = await async_client.get("/")

    assert len(response.headers["X-Request-ID"]) == 8


@pytest.mark.asyncio
async def test_cors_preflight_allows_reads(async_client: AsyncClient):
    response = await async_client.options(
        "/api/users",
        headers={
            "Origin": "http://example.com",
            "Access-Control-Request-Method": "GET",
        },
    )

    assert response.status_code == 200
    assert "GET" in response.headers["access-control-allow-methods"]
