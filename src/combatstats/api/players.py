# src/combatstats/api/players.py

"""API endpoints for player profiles, rankings and match history."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from combatstats.queries import catalog
from combatstats.queries.executor import QueryExecutor, get_executor
from combatstats.schemas.common import ErrorResponse
from combatstats.services import stats_service

router = APIRouter(
    prefix="/api",
    tags=["Users"],
    responses={500: {"model": ErrorResponse}},
)


@router.get("/users")
async def search_users(
    discordid: str | None = Query(None, description="Discord ID of the player"),
    oidUser: str | None = Query(None, description="Unique user ID (oidUser)"),
    nickname: str | None = Query(None, description="Player nickname (partial match)"),
    page: str | None = Query(None, description="Page number (default 1)"),
    size: str | None = Query(None, description="Page size (default 20)"),
    executor: QueryExecutor = Depends(get_executor),
) -> list[dict[str, Any]]:
    """
    Search player profiles by Discord ID, oidUser or nickname.

    Results are ordered by experience, highest first.
    """
    return await stats_service.fetch_page(
        executor,
        catalog.USERS,
        {
            "discordid": discordid,
            "oidUser": oidUser,
            "nickname": nickname,
            "page": page,
            "size": size,
        },
    )


@router.get("/ranking", tags=["Rankings"])
async def read_ranking(
    type: str | None = Query(
        None, description="Ranking metric: exp, kills, wins, money or headshots"
    ),
    orderby: str | None = Query(None, description="Sort direction: desc or asc"),
    nickname: str | None = Query(None, description="Player nickname (partial match)"),
    page: str | None = Query(None, description="Page number (default 1)"),
    size: str | None = Query(None, description="Page size (default 50)"),
    limit: str | None = Query(None, description="Deprecated alias of size"),
    executor: QueryExecutor = Depends(get_executor),
) -> list[dict[str, Any]]:
    """
    Rank players by a metric.

    - **type**: unknown metrics fall back to experience
    - **orderby**: anything other than asc sorts descending

    Ties are broken by experience, then by user ID.
    """
    return await stats_service.fetch_page(
        executor,
        catalog.RANKING,
        {
            "type": type,
            "orderby": orderby,
            "nickname": nickname,
            "page": page,
            "size": size,
            "limit": limit,
        },
    )


@router.get("/gamemode-stats", tags=["Rankings"])
async def read_gamemode_stats(
    oiduser: str | None = Query(None, description="Unique user ID"),
    nickname: str | None = Query(None, description="Player nickname (partial match)"),
    page: str | None = Query(None, description="Page number (default 1)"),
    size: str | None = Query(None, description="Page size (default 20)"),
    executor: QueryExecutor = Depends(get_executor),
) -> list[dict[str, Any]]:
    """
    Per map and game mode summary: wins, kills, K/D, headshot rate,
    experience and GP earned.
    """
    return await stats_service.fetch_page(
        executor,
        catalog.GAMEMODE_STATS,
        {"oiduser": oiduser, "nickname": nickname, "page": page, "size": size},
    )


@router.get("/player-matches")
async def read_player_matches(
    oiduser: str | None = Query(None, description="Unique user ID"),
    nickname: str | None = Query(None, description="Player nickname (partial match)"),
    startDate: str | None = Query(None, description="Only matches on or after (ISO 8601)"),
    endDate: str | None = Query(None, description="Only matches on or before (ISO 8601)"),
    page: str | None = Query(None, description="Page number (default 1)"),
    size: str | None = Query(None, description="Page size (default 20)"),
    executor: QueryExecutor = Depends(get_executor),
) -> list[dict[str, Any]]:
    """
    Match history, most recent first, with an optional date range.
    """
    return await stats_service.fetch_page(
        executor,
        catalog.PLAYER_MATCHES,
        {
            "oiduser": oiduser,
            "nickname": nickname,
            "startDate": startDate,
            "endDate": endDate,
            "page": page,
            "size": size,
        },
    )
