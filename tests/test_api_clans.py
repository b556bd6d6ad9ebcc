# tests/test_api_clans.py

"""Tests for the clan listing and clan roster endpoints."""

from datetime import datetime

import pytest
from httpx import AsyncClient

from combatstats.db.models import ClanInfo, Guild, GuildMember, User, UserAuth
from combatstats.main import app
from combatstats.queries.executor import get_executor


class _RecordingExecutor:
    """Executor stand-in that records statements instead of running them."""

    def __init__(self):
        self.statements = []

    async def fetch_all(self, stmt):
        self.statements.append(stmt)
        return []


async def _seed_clans(seed):
    await seed(
        User(oidUser=1, NickName="wolfking"),
        User(oidUser=2, NickName="bearboss"),
        UserAuth(oidUser=1, strDiscordID="d-1"),
        Guild(oidGuild=100, strName="Wolves", oidUser_master=1),
        Guild(oidGuild=200, strName="Bears", oidUser_master=2),
        ClanInfo(oiduser_group=100, Exp=500, Point=10, TDMWinCnt=3, TDMLoseCnt=1),
        ClanInfo(oiduser_group=200, Exp=900, Point=40),
        GuildMember(oidGuild=100, oidUser=1, CodeMemberType=1),
        GuildMember(oidGuild=100, oidUser=3),
        GuildMember(oidGuild=100, oidUser=4),
        GuildMember(oidGuild=200, oidUser=2, CodeMemberType=1),
    )


# ===============================================
# /api/clans
# ===============================================


@pytest.mark.asyncio
async def test_clans_default_to_experience_desc(async_client: AsyncClient, seed):
    await _seed_clans(seed)

    response = await async_client.get("/api/clans")

    assert response.status_code == 200
    data = response.json()
    assert [row["nm_clan"] for row in data] == ["Bears", "Wolves"]


@pytest.mark.asyncio
async def test_clan_win_rates(async_client: AsyncClient, seed):
    """Elimination win rate is 75% for 3-1; no games decided gives 0."""
    await _seed_clans(seed)

    data = (await async_client.get("/api/clans")).json()
    by_name = {row["nm_clan"]: row for row in data}

    assert by_name["Wolves"]["ElimWinRate"] == 75.0
    assert by_name["Bears"]["ElimWinRate"] == 0.0
    assert by_name["Wolves"]["SNDWinRate"] == 0.0


@pytest.mark.asyncio
async def test_clan_leader_and_member_count(async_client: AsyncClient, seed):
    await _seed_clans(seed)

    data = (await async_client.get("/api/clans", params={"clanname": "wol"})).json()

    assert len(data) == 1
    assert data[0]["Lider"] == "wolfking"
    assert data[0]["DiscordID_Lider"] == "d-1"
    assert data[0]["qt_membros"] == 3


@pytest.mark.asyncio
async def test_clans_filter_by_leader_nickname(async_client: AsyncClient, seed):
    await _seed_clans(seed)

    data = (await async_client.get("/api/clans", params={"nickname": "bear"})).json()

    assert [row["nm_clan"] for row in data] == ["Bears"]


@pytest.mark.asyncio
async def test_clans_sort_by_member_count(async_client: AsyncClient, seed):
    await _seed_clans(seed)

    response = await async_client.get(
        "/api/clans", params={"sortBy": "qt_membros", "sortOrder": "desc"}
    )

    assert [row["nm_clan"] for row in response.json()] == ["Wolves", "Bears"]


@pytest.mark.asyncio
async def test_clans_sort_ascending(async_client: AsyncClient, seed):
    await _seed_clans(seed)

    response = await async_client.get(
        "/api/clans", params={"sortBy": "Point", "sortOrder": "asc"}
    )

    assert [row["Point"] for row in response.json()] == [10, 40]


@pytest.mark.asyncio
async def test_clans_direction_without_sort_field(async_client: AsyncClient, seed):
    """Without sortBy clans are ordered by experience, in the requested order."""
    await _seed_clans(seed)

    response = await async_client.get("/api/clans", params={"sortOrder": "asc"})

    assert response.status_code == 200
    assert [row["Exp"] for row in response.json()] == [500, 900]


@pytest.mark.asyncio
async def test_clans_unknown_sort_field_falls_back(async_client: AsyncClient, seed):
    await _seed_clans(seed)

    response = await async_client.get(
        "/api/clans", params={"sortBy": "strName", "sortOrder": "asc"}
    )

    assert response.status_code == 200
    # Default key with its default direction, not the requested one
    assert [row["nm_clan"] for row in response.json()] == ["Bears", "Wolves"]


# ===============================================
# /api/clanmembers
# ===============================================


@pytest.mark.asyncio
async def test_clan_members_requires_clan_name(async_client: AsyncClient):
    """A missing clan name is rejected before any query runs."""
    recorder = _RecordingExecutor()
    app.dependency_overrides[get_executor] = lambda: recorder

    response = await async_client.get("/api/clanmembers")

    assert response.status_code == 400
    assert response.json() == {"error": "The 'clanname' parameter is required."}
    assert recorder.statements == []


@pytest.mark.asyncio
async def test_clan_members_roster_order(async_client: AsyncClient, seed):
    await seed(
        Guild(oidGuild=100, strName="Wolves", oidUser_master=1),
        GuildMember(
            oidGuild=100,
            oidUser=5,
            dn_strCharacterName="late",
            dateCreated=datetime(2024, 3, 1),
        ),
        GuildMember(
            oidGuild=100,
            oidUser=4,
            dn_strCharacterName="early",
            dateCreated=datetime(2024, 1, 1),
        ),
        GuildMember(
            oidGuild=100,
            oidUser=2,
            dn_strCharacterName="officer",
            CodeMemberType=2,
            CodeMemberGroup=1,
            dateCreated=datetime(2024, 6, 1),
        ),
        GuildMember(
            oidGuild=100,
            oidUser=1,
            dn_strCharacterName="boss",
            CodeMemberType=1,
            dateCreated=datetime(2024, 9, 1),
        ),
    )

    response = await async_client.get("/api/clanmembers", params={"clanname": "Wolves"})

    assert response.status_code == 200
    data = response.json()
    assert [row["Nickname"] for row in data] == ["boss", "officer", "early", "late"]
    assert [row["cargo"] for row in data] == [
        "Líder",
        "Administrador",
        "Membro",
        "Membro",
    ]
    assert data[0]["NomeClan"] == "Wolves"


@pytest.mark.asyncio
async def test_clan_members_name_is_exact(async_client: AsyncClient, seed):
    await _seed_clans(seed)

    response = await async_client.get("/api/clanmembers", params={"clanname": "Wolf"})

    assert response.status_code == 200
    assert response.json() == []
