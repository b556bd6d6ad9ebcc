# src/combatstats/queries/executor.py

"""Runs bound statements against the relational store."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from fastapi import Depends
from sqlalchemy import Select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.expression import Executable

from combatstats import config
from combatstats.db.session import get_db
from combatstats.exceptions import DatabaseError, QueryTimeoutError
from combatstats.queries.composer import BoundStatement

logger = logging.getLogger(__name__)


def _describe(exc: SQLAlchemyError) -> str:
    """Prefer the driver's own message over SQLAlchemy's wrapper text."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class QueryExecutor:
    """Execution adapter bound to one request-scoped session.

    Every statement runs exactly once with a bounded wait. Driver faults and
    timeouts surface as DatabaseError after the session is rolled back, so
    the next statement on the same session starts clean. Rows are never
    partially returned.
    """

    def __init__(self, session: AsyncSession, timeout: float | None = None) -> None:
        self._session = session
        self._timeout = timeout if timeout is not None else config.QUERY_TIMEOUT_SECONDS

    async def fetch_all(self, stmt: BoundStatement) -> list[dict[str, Any]]:
        """Execute a composed statement and return the whole page as dicts."""
        return await self._run(stmt.template, stmt.statement, dict(stmt.params))

    async def fetch_one(self, name: str, statement: Select[Any]) -> dict[str, Any] | None:
        """Execute a single-row query, e.g. an aggregate metric."""
        rows = await self._run(name, statement, None)
        return rows[0] if rows else None

    async def ping(self) -> None:
        """Run a no-op statement to prove the store is reachable."""
        await self._run("health", text("SELECT 1"), None)

    async def _rollback(self, name: str) -> None:
        """Return the session to a clean state so later statements can still run."""
        try:
            await self._session.rollback()
        except SQLAlchemyError as exc:
            logger.warning(
                "Rollback after failed query also failed: %s",
                _describe(exc),
                extra={"template": name},
            )

    async def _run(
        self,
        name: str,
        statement: Executable,
        params: dict[str, Any] | None,
    ) -> list[dict[str, Any]]:
        start_time = time.perf_counter()

        async def _execute() -> list[dict[str, Any]]:
            result = await self._session.execute(statement, params)
            return [dict(row) for row in result.mappings().all()]

        try:
            rows = await asyncio.wait_for(_execute(), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.error(
                "Query timed out",
                extra={"template": name, "timeout": self._timeout},
            )
            await self._rollback(name)
            raise QueryTimeoutError(name, self._timeout) from None
        except SQLAlchemyError as exc:
            message = _describe(exc)
            logger.error(
                "Query failed: %s",
                message,
                extra={"template": name},
                exc_info=True,
            )
            await self._rollback(name)
            raise DatabaseError(
                f"Database error: {message}", details={"template": name}
            ) from exc

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "Query %s returned %d row(s) in %.2fms",
            name,
            len(rows),
            duration_ms,
            extra={
                "template": name,
                "params": sorted(params or {}),
                "row_count": len(rows),
                "duration_ms": round(duration_ms, 2),
            },
        )
        return rows


async def get_executor(db: AsyncSession = Depends(get_db)) -> QueryExecutor:
    """FastAPI dependency providing an executor over the request's session."""
    return QueryExecutor(db)
