# src/combatstats/api/inventory.py

"""API endpoints for equipped items and store deliveries."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from combatstats.queries import catalog
from combatstats.queries.executor import QueryExecutor, get_executor
from combatstats.schemas.common import ErrorResponse
from combatstats.services import stats_service

router = APIRouter(
    prefix="/api",
    tags=["Inventory"],
    responses={500: {"model": ErrorResponse}},
)


@router.get("/inventory")
async def read_inventory(
    discordid: str | None = Query(None, description="Discord ID of the player"),
    nickname: str | None = Query(None, description="Player nickname (partial match)"),
    page: str | None = Query(None, description="Page number (default 1)"),
    size: str | None = Query(None, description="Page size (default 20)"),
    executor: QueryExecutor = Depends(get_executor),
) -> list[dict[str, Any]]:
    """
    Equipped loadout per player, one item number and name per slot.
    """
    return await stats_service.fetch_page(
        executor,
        catalog.INVENTORY,
        {"discordid": discordid, "nickname": nickname, "page": page, "size": size},
    )


@router.get("/userstore")
async def read_user_store(
    oiduser: str | None = Query(None, description="Unique user ID"),
    nickname: str | None = Query(None, description="Player nickname (partial match)"),
    page: str | None = Query(None, description="Page number (default 1)"),
    size: str | None = Query(None, description="Page size (default 20)"),
    executor: QueryExecutor = Depends(get_executor),
) -> list[dict[str, Any]]:
    """
    Purchases and gifts delivered to players, newest first.
    """
    return await stats_service.fetch_page(
        executor,
        catalog.USER_STORE,
        {"oiduser": oiduser, "nickname": nickname, "page": page, "size": size},
    )
