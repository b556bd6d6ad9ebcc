# src/combatstats/api/stats.py

"""Server-wide aggregate statistics."""

from typing import Any

from fastapi import APIRouter, Depends

from combatstats.queries.executor import QueryExecutor, get_executor
from combatstats.schemas.common import ErrorResponse
from combatstats.services import stats_service

router = APIRouter(
    prefix="/api",
    tags=["Rankings"],
    responses={500: {"model": ErrorResponse}},
)


@router.get("/stats")
async def read_server_stats(
    executor: QueryExecutor = Depends(get_executor),
) -> dict[str, Any]:
    """
    Total players, clans and rounds played, and the average experience.

    A metric that could not be computed is returned as {"error": ...} and
    named in "errors"; the other metrics are still returned.
    """
    return await stats_service.compute_summary(executor)
