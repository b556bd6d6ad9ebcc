# src/combatstats/services/stats_service.py

"""Read operations shared by the API routers."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from combatstats.exceptions import DatabaseError
from combatstats.queries.catalog import SUMMARY_METRICS
from combatstats.queries.composer import compose
from combatstats.queries.executor import QueryExecutor
from combatstats.queries.filters import resolve
from combatstats.queries.templates import QueryTemplate

logger = logging.getLogger(__name__)


async def fetch_page(
    executor: QueryExecutor,
    template: QueryTemplate,
    raw_params: Mapping[str, str | None],
) -> list[dict[str, Any]]:
    """
    Resolve, compose and execute one list request.

    Validation errors are raised before any statement is built, so a
    rejected request never reaches the database.
    """
    resolved = resolve(template, raw_params)
    stmt = compose(template, resolved.criteria, resolved.sort, resolved.page)
    logger.debug(
        "Composed %s query",
        template.name,
        extra={
            "template": template.name,
            "filters": sorted(resolved.criteria),
            "sort_key": resolved.sort.key,
            "page": resolved.page.page,
            "size": resolved.page.size,
        },
    )
    return await executor.fetch_all(stmt)


async def compute_summary(executor: QueryExecutor) -> dict[str, Any]:
    """
    Gather the server-wide metrics.

    Each metric runs on its own. A failing metric is reported under its own
    key as {"error": message} and listed in "errors"; the summary only fails
    as a whole when no metric could be computed.
    """
    summary: dict[str, Any] = {}
    failures: dict[str, DatabaseError] = {}

    for name, statement in SUMMARY_METRICS.items():
        try:
            summary[name] = await executor.fetch_one(name, statement)
        except DatabaseError as exc:
            logger.warning("Summary metric %s failed: %s", name, exc.message)
            failures[name] = exc
            summary[name] = {"error": exc.message}

    if failures and len(failures) == len(SUMMARY_METRICS):
        first = next(iter(failures.values()))
        raise DatabaseError(first.message, details={"metrics": sorted(failures)})

    if failures:
        summary["errors"] = sorted(failures)
    return summary
