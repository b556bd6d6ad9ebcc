# src/combatstats/api/clans.py

"""API endpoints for clans and their rosters."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from combatstats.queries import catalog
from combatstats.queries.executor import QueryExecutor, get_executor
from combatstats.schemas.common import ErrorResponse
from combatstats.services import stats_service

router = APIRouter(
    prefix="/api",
    tags=["Clans"],
    responses={500: {"model": ErrorResponse}},
)


@router.get("/clans")
async def read_clans(
    clanname: str | None = Query(None, description="Clan name (partial match)"),
    nickname: str | None = Query(None, description="Leader nickname (partial match)"),
    sortBy: str | None = Query(
        None,
        description="Point, Exp, qt_membros, ElimWinRate, SNDWinRate, "
        "ElimProWinRate, CTFWinRate, CaptureFlagCnt or ForfeitedCnt",
    ),
    sortOrder: str | None = Query(None, description="desc (default) or asc"),
    page: str | None = Query(None, description="Page number (default 1)"),
    size: str | None = Query(None, description="Page size (default 20)"),
    executor: QueryExecutor = Depends(get_executor),
) -> list[dict[str, Any]]:
    """
    List clans with member counts and per-mode win rates.

    - **sortBy**: unknown fields fall back to Exp, descending
    - Ties are broken by Exp, then Point, then clan ID
    """
    return await stats_service.fetch_page(
        executor,
        catalog.CLANS,
        {
            "clanname": clanname,
            "nickname": nickname,
            "sortBy": sortBy,
            "sortOrder": sortOrder,
            "page": page,
            "size": size,
        },
    )


@router.get("/clanmembers", responses={400: {"model": ErrorResponse}})
async def read_clan_members(
    clanname: str | None = Query(None, description="Exact clan name (required)"),
    nickname: str | None = Query(None, description="Member nickname (partial match)"),
    page: str | None = Query(None, description="Page number (default 1)"),
    size: str | None = Query(None, description="Page size (default 20)"),
    executor: QueryExecutor = Depends(get_executor),
) -> list[dict[str, Any]]:
    """
    Roster of one clan: leader first, then administrators, then members
    by join date.

    Raises:
        400 Bad Request: If clanname is missing.
    """
    return await stats_service.fetch_page(
        executor,
        catalog.CLAN_MEMBERS,
        {"clanname": clanname, "nickname": nickname, "page": page, "size": size},
    )
