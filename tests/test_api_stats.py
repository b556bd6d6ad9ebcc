# tests/test_api_stats.py

"""Tests for the server-wide summary endpoint."""

import pytest
from httpx import AsyncClient

from combatstats import config
from combatstats.db.models import Guild, User
from combatstats.exceptions import DatabaseError
from combatstats.main import app
from combatstats.queries.executor import get_executor
from combatstats.services import stats_service


class _FlakyExecutor:
    """Fails the named metrics and answers the rest with a fixed row."""

    def __init__(self, failing):
        self.failing = set(failing)

    async def fetch_one(self, name, statement):
        if name in self.failing:
            raise DatabaseError(f"Database error: {name} unavailable")
        return {"total": 1}


@pytest.mark.asyncio
async def test_summary(async_client: AsyncClient, seed):
    await seed(
        User(oidUser=1, NickName="a", EXP=100, PlayRoundCnt=10),
        User(oidUser=2, NickName="b", EXP=300, PlayRoundCnt=5),
        # Characters never named are not counted as players
        User(oidUser=3, NickName=None, EXP=0, PlayRoundCnt=0),
        Guild(oidGuild=1, strName="Wolves"),
    )

    response = await async_client.get("/api/stats")

    assert response.status_code == 200
    assert response.json() == {
        "totalPlayers": {"total": 2},
        "totalClans": {"total": 1},
        "totalMatches": {"total": 15},
        "avgLevel": {"average": 200.0},
    }


@pytest.mark.asyncio
async def test_summary_on_empty_store(async_client: AsyncClient):
    data = (await async_client.get("/api/stats")).json()

    assert data["totalPlayers"] == {"total": 0}
    assert data["totalMatches"] == {"total": None}
    assert data["avgLevel"] == {"average": None}


@pytest.mark.asyncio
async def test_summary_reports_failed_metrics(async_client: AsyncClient):
    """One failing metric does not hide the others."""
    app.dependency_overrides[get_executor] = lambda: _FlakyExecutor(["totalClans"])

    response = await async_client.get("/api/stats")

    assert response.status_code == 200
    data = response.json()
    assert data["totalClans"] == {"error": "Database error: totalClans unavailable"}
    assert data["totalPlayers"] == {"total": 1}
    assert data["errors"] == ["totalClans"]


@pytest.mark.asyncio
async def test_summary_fails_when_every_metric_fails():
    executor = _FlakyExecutor(["totalPlayers", "totalClans", "totalMatches", "avgLevel"])

    with pytest.raises(DatabaseError) as exc_info:
        await stats_service.compute_summary(executor)  # type: ignore[arg-type]

    assert exc_info.value.details["metrics"] == [
        "avgLevel",
        "totalClans",
        "totalMatches",
        "totalPlayers",
    ]


@pytest.mark.asyncio
async def test_summary_total_failure_is_a_server_error(
    async_client: AsyncClient, monkeypatch
):
    monkeypatch.setattr(config, "APP_ENV", "production")
    app.dependency_overrides[get_executor] = lambda: _FlakyExecutor(
        ["totalPlayers", "totalClans", "totalMatches", "avgLevel"]
    )

    response = await async_client.get("/api/stats")

    assert response.status_code == 500
    assert response.json() == {"error": "An internal database error occurred"}


@pytest.mark.asyncio
async def test_summary_survives_a_missing_table(async_client: AsyncClient, engine, seed):
    """A metric whose table is gone fails alone; the session stays usable."""
    await seed(
        User(oidUser=1, NickName="a", EXP=100, PlayRoundCnt=10),
        User(oidUser=2, NickName="b", EXP=300, PlayRoundCnt=5),
    )
    async with engine.begin() as conn:
        await conn.run_sync(Guild.__table__.drop)

    response = await async_client.get("/api/stats")

    assert response.status_code == 200
    data = response.json()
    assert data["errors"] == ["totalClans"]
    assert data["totalClans"]["error"].startswith("Database error:")
    assert data["totalPlayers"] == {"total": 2}
    assert data["totalMatches"] == {"total": 15}
    assert data["avgLevel"] == {"average": 200.0}
