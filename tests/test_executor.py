# tests/test_executor.py

"""Tests for the execution adapter: success, driver faults and timeouts."""

import asyncio

import pytest
from sqlalchemy import select, text
from sqlalchemy.exc import OperationalError

from combatstats.db.models import User
from combatstats.exceptions import DatabaseError, QueryTimeoutError
from combatstats.queries import catalog
from combatstats.queries.composer import compose
from combatstats.queries.executor import QueryExecutor
from combatstats.queries.filters import resolve


class _FailingSession:
    """Session stand-in whose driver always rejects the statement."""

    def __init__(self):
        self.calls = 0
        self.rollbacks = 0

    async def execute(self, statement, params=None):
        self.calls += 1
        raise OperationalError("SELECT 1", {}, Exception("Login failed for user 'sa'"))

    async def rollback(self):
        self.rollbacks += 1


class _SlowSession:
    def __init__(self):
        self.rollbacks = 0

    async def execute(self, statement, params=None):
        await asyncio.sleep(1)

    async def rollback(self):
        self.rollbacks += 1


class _BrokenRollbackSession(_FailingSession):
    async def rollback(self):
        await super().rollback()
        raise OperationalError("ROLLBACK", {}, Exception("Connection is busy"))


@pytest.mark.asyncio
async def test_fetch_all_returns_rows_as_dicts(executor: QueryExecutor, seed):
    await seed(User(oidUser=1, NickName="alpha", EXP=10))

    resolved = resolve(catalog.RANKING, {})
    rows = await executor.fetch_all(
        compose(catalog.RANKING, resolved.criteria, resolved.sort, resolved.page)
    )

    assert len(rows) == 1
    assert isinstance(rows[0], dict)
    assert rows[0]["NickName"] == "alpha"
    assert rows[0]["oiduser"] == 1


@pytest.mark.asyncio
async def test_fetch_one_returns_none_without_rows(executor: QueryExecutor):
    row = await executor.fetch_one("lookup", select(User.oidUser).where(User.oidUser == 99))
    assert row is None


@pytest.mark.asyncio
async def test_ping_succeeds_against_live_store(executor: QueryExecutor):
    await executor.ping()


@pytest.mark.asyncio
async def test_driver_errors_become_database_errors():
    session = _FailingSession()
    executor = QueryExecutor(session)  # type: ignore[arg-type]

    with pytest.raises(DatabaseError) as exc_info:
        await executor.ping()

    assert exc_info.value.message == "Database error: Login failed for user 'sa'"
    assert exc_info.value.details == {"template": "health"}
    # Statements are never retried
    assert session.calls == 1
    assert session.rollbacks == 1


@pytest.mark.asyncio
async def test_slow_statements_time_out():
    session = _SlowSession()
    executor = QueryExecutor(session, timeout=0.01)  # type: ignore[arg-type]

    with pytest.raises(QueryTimeoutError) as exc_info:
        await executor.fetch_one("totalPlayers", catalog.SUMMARY_METRICS["totalPlayers"])

    assert isinstance(exc_info.value, DatabaseError)
    assert exc_info.value.details["template"] == "totalPlayers"
    assert session.rollbacks == 1


@pytest.mark.asyncio
async def test_failed_rollback_keeps_the_original_error():
    session = _BrokenRollbackSession()
    executor = QueryExecutor(session)  # type: ignore[arg-type]

    with pytest.raises(DatabaseError) as exc_info:
        await executor.ping()

    assert exc_info.value.message == "Database error: Login failed for user 'sa'"
    assert session.rollbacks == 1


@pytest.mark.asyncio
async def test_session_is_usable_after_a_failed_statement(executor: QueryExecutor, seed):
    await seed(User(oidUser=1, NickName="alpha", EXP=10))

    with pytest.raises(DatabaseError):
        await executor.fetch_one("broken", select(text("missing_column")).select_from(User))

    row = await executor.fetch_one("after", select(User.NickName))
    assert row == {"NickName": "alpha"}
