# src/combatstats/queries/catalog.py

"""The fixed query templates, one per list resource.

Every template is built once at import time. Output column labels are the
public JSON field names and must stay stable.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

from sqlalchemy import Float, Select, and_, case, cast, distinct, func, select
from sqlalchemy.orm import aliased

from combatstats.db.models import (
    CharacterInfoUpdateLog,
    ClanInfo,
    GameMap,
    GameMode,
    GameModeType,
    GradeInfo,
    Guild,
    GuildMember,
    ItemInfo,
    NXGradeInfo,
    User,
    UserAuth,
    UserClanInfo,
    UserDetailInfo,
    UserEquipItems,
    UserFakeMark,
    UserGameModeInfo,
    UserStore,
)
from combatstats.queries.templates import (
    FilterKind,
    FilterSpec,
    QueryTemplate,
    TieBreaker,
    headshot_rate,
    kill_death_ratio,
    win_rate,
)
from combatstats.schemas.pagination import SortOrder

# ===============================================
# Shared column groups
# ===============================================

# Lifetime counters from CBT_User, in public field order
_COMBAT_COUNTERS = (
    "SuperRoomMaster",
    "AgreeCnt",
    "DisagreeCnt",
    "KickedCnt",
    "EXP",
)
_ROUND_COUNTERS = (
    "Money",
    "PlayRoundCnt",
    "WinCnt",
    "LoseCnt",
    "Forfeited",
    "KillCnt",
    "Assist",
    "HeadshotCnt",
    "DeadCnt",
)
_FEAT_COUNTERS = (
    "FirstKill",
    "DoubleKillCnt",
    "MultiKillCnt",
    "UltraKillCnt",
    "FantasticKillCnt",
    "UnbelievableCnt",
    "UnbelievablePlusCnt",
    "RevengeCnt",
    "KillsStreak",
    "MostKills",
    "BombsPlanted",
    "BombsExploded",
    "BombsDefused",
    "CaptureFlag",
    "RecoverFlag",
)


def _user_columns(names: tuple[str, ...]) -> list[Any]:
    return [getattr(User, name) for name in names]


def _mode_detail_columns() -> list[Any]:
    """Spy Hunt, HQ/SQ and Quarantine counters from CBT_UserDetailInfo."""
    i = UserDetailInfo
    return [
        i.SpyKillCnt.label("SpyHunt_KillCnt"),
        i.SpyDeadCnt.label("SpyHunt_DeadCnt"),
        i.SpyUploading.label("SpyHunt_Uploading"),
        i.HQPoint,
        i.SQPoint,
        i.SaveBullionNum,
        i.HumanKillCnt.label("QRT_KillCnt"),
        i.HumanDeathCnt.label("QRT_DeathCnt"),
        i.HumanWin.label("QRT_HumanWin"),
        i.InfectKillCnt.label("QRT_InfectKillCnt"),
        i.InfectDeathCnt.label("QRT_InfectDeathCnt"),
        i.InfectWin.label("QRT_InfectWin"),
        i.QuaRanTinePlayNum.label("QRT_PlayNum"),
    ]


def _player_rates() -> list[Any]:
    return [
        win_rate(User.WinCnt, User.LoseCnt).label("WinRate"),
        kill_death_ratio(User.KillCnt, User.DeadCnt).label("KDR"),
        headshot_rate(User.HeadshotCnt, User.KillCnt).label("HeadshotRate"),
    ]


def _join_player_profile(stmt: Select[Any]) -> Select[Any]:
    """Outer-join the lookups every player profile row shows."""
    return (
        stmt.outerjoin(GradeInfo, User.EXP.between(GradeInfo.MinExp, GradeInfo.MaxExp))
        .outerjoin(UserAuth, User.oidUser == UserAuth.oidUser)
        .outerjoin(UserDetailInfo, User.oidUser == UserDetailInfo.oidUser)
        .outerjoin(NXGradeInfo, User.UsedNX.between(NXGradeInfo.MinNX, NXGradeInfo.MaxNX))
        .outerjoin(UserFakeMark, User.oidUser == UserFakeMark.oidUser)
        # One row per membership row; the game keeps at most one per player
        .outerjoin(GuildMember, GuildMember.oidUser == User.oidUser)
        .outerjoin(Guild, Guild.oidGuild == GuildMember.oidGuild)
    )


def _nickname_filter(column: Any) -> FilterSpec:
    return FilterSpec("nickname", column, FilterKind.CONTAINS)


# ===============================================
# Players
# ===============================================

_users_base = _join_player_profile(
    select(
        UserAuth.strDiscordID,
        UserAuth.strNexonID,
        User.oidUser.label("oiduser"),
        User.NickName,
        UserFakeMark.NationEmblem.label("nr_MarcaBatalha"),
        User.UsedNX,
        NXGradeInfo.NXGradeName,
        User.NickNameColor,
        User.ColorEndDate,
        *_user_columns(_COMBAT_COUNTERS),
        GradeInfo.GradeName,
        *_user_columns(_ROUND_COUNTERS),
        UserDetailInfo.NutShotCnt,
        UserDetailInfo.NutShotDeadCnt,
        *_user_columns(_FEAT_COUNTERS),
        Guild.oidGuild.label("ClanID"),
        Guild.strName.label("ClanName"),
        ClanInfo.Background.label("BackGroundClan"),
        ClanInfo.Emblem.label("EmblemaClan"),
        ClanInfo.NameColor.label("NameColorClan"),
        ClanInfo.ColorEndDate.label("ColorEndDateClan"),
        User.ClanWin.label("ClanWinGeral"),
        User.ClanDraw.label("ClanDrawGeral"),
        User.ClanLose.label("ClanLoseGeral"),
        User.ClanKill.label("ClanKillGeral"),
        User.ClanDead.label("ClanDeadGeral"),
        UserClanInfo.WinCnt.label("WinCntClanAtual"),
        UserClanInfo.LoseCnt.label("LoseCntClanAtual"),
        UserClanInfo.DrawCnt.label("DrawCntClanAtual"),
        UserClanInfo.KillCnt.label("KillCntClanAtual"),
        UserClanInfo.DeadCnt.label("DeadCntClanAtual"),
        UserClanInfo.ClanForfeited.label("ClanForfeitedClanAtual"),
        *_mode_detail_columns(),
        *_player_rates(),
    ).select_from(User)
)
_users_base = _users_base.outerjoin(
    ClanInfo, ClanInfo.oiduser_group == Guild.oidGuild
).outerjoin(
    UserClanInfo,
    and_(
        UserClanInfo.oiduserclan == Guild.oidGuild,
        UserClanInfo.oiduser == User.oidUser,
    ),
)

USERS = QueryTemplate(
    name="users",
    description="Player profile search",
    base=_users_base,
    filters=(
        FilterSpec("discordid", UserAuth.strDiscordID),
        FilterSpec("oidUser", User.oidUser, FilterKind.INTEGER),
        _nickname_filter(User.NickName),
    ),
    sort_keys={"EXP": User.EXP},
    default_sort="EXP",
    tie_breakers=(TieBreaker(User.oidUser.asc()),),
)

_ranking_base = _join_player_profile(
    select(
        UserAuth.strDiscordID,
        UserAuth.strNexonID,
        User.oidUser.label("oiduser"),
        User.NickName,
        UserFakeMark.NationEmblem.label("nr_MarcaBatalha"),
        UserAuth.BlockEndDate.label("DataFimBan"),
        case((UserAuth.BlockEndDate > func.now(), "Sim"), else_="Não").label(
            "BanVigente"
        ),
        User.UsedNX,
        NXGradeInfo.NXGradeName,
        User.NickNameColor,
        User.ColorEndDate,
        Guild.strName.label("clanName"),
        *_user_columns(_COMBAT_COUNTERS),
        GradeInfo.GradeName,
        *_user_columns(_ROUND_COUNTERS),
        UserDetailInfo.NutShotCnt,
        UserDetailInfo.NutShotDeadCnt,
        *_user_columns(_FEAT_COUNTERS),
        User.ClanWin,
        User.ClanDraw,
        User.ClanLose,
        User.ClanKill,
        User.ClanDead,
        *_mode_detail_columns(),
        *_player_rates(),
    ).select_from(User)
)

RANKING = QueryTemplate(
    name="ranking",
    description="Player ranking by metric",
    base=_ranking_base,
    filters=(_nickname_filter(User.NickName),),
    sort_keys={
        "exp": User.EXP,
        "kills": User.KillCnt,
        "wins": User.WinCnt,
        "money": User.Money,
        "headshots": User.HeadshotCnt,
    },
    default_sort="exp",
    tie_breakers=(
        TieBreaker(User.EXP.desc(), key="exp"),
        TieBreaker(User.oidUser.asc()),
    ),
    sort_param="type",
    direction_param="orderby",
    size_params=("size", "limit"),
    default_page_size=50,
)

# ===============================================
# Inventory and store
# ===============================================

# (public slot name, CBT_UserEquipItems column)
EQUIP_SLOTS = (
    ("Assault", "AssultItemNo"),
    ("SubGun", "SubGunItemNo"),
    ("Knife", "KnifeItemNo"),
    ("Bomb", "BombItemNo"),
    ("Helmet", "HelmetItemNo"),
    ("Face", "FaceItemNo"),
    ("Goggle", "GoggleItemNo"),
    ("Camo", "CamoItemNo"),
    ("Vest", "VestItemNo"),
    ("BackPackItem", "BackPackItemNo"),
    ("BackPack00", "BackPack00"),
    ("BackPack01", "BackPack01"),
    ("BackPack02", "BackPack02"),
    ("BackPack03", "BackPack03"),
)


def _build_inventory_base() -> Select[Any]:
    slot_columns: list[Any] = []
    slot_joins = []
    for index, (slot, column) in enumerate(EQUIP_SLOTS):
        item = aliased(ItemInfo, name=f"it{index}")
        slot_columns += [
            item.ItemNo.label(f"Nr_Slot_{slot}"),
            item.Name.label(f"Slot_{slot}"),
        ]
        slot_joins.append((item, getattr(UserEquipItems, column) == item.ItemNo))

    stmt = (
        select(
            UserAuth.strDiscordID,
            UserAuth.strNexonID,
            UserEquipItems.oidUser,
            User.NickName,
            *slot_columns,
        )
        .select_from(UserEquipItems)
        .outerjoin(User, UserEquipItems.oidUser == User.oidUser)
        .outerjoin(UserAuth, UserEquipItems.oidUser == UserAuth.oidUser)
    )
    for item, onclause in slot_joins:
        stmt = stmt.outerjoin(item, onclause)
    return stmt


INVENTORY = QueryTemplate(
    name="inventory",
    description="Equipped loadout per player",
    base=_build_inventory_base(),
    filters=(
        FilterSpec("discordid", UserAuth.strDiscordID),
        _nickname_filter(User.NickName),
    ),
    sort_keys={"oidUser": UserEquipItems.oidUser},
    default_sort="oidUser",
    default_direction=SortOrder.ASC,
)

USER_STORE = QueryTemplate(
    name="userstore",
    description="Store purchases and gifts received",
    base=select(
        UserStore.UserStoreSeqNo,
        UserStore.OidUser,
        User.NickName,
        UserStore.ProductID,
        UserStore.ProductNo,
        UserStore.GiftType,
        UserStore.ConfirmType,
        UserStore.InventorySeqno,
        UserStore.UseDate,
        UserStore.SendOidUser,
        UserStore.SendNickname,
        UserStore.Message,
        UserStore.RecvDate,
        UserStore.orderno,
        UserStore.ordernofaillog,
        UserStore.enddate,
    )
    .select_from(UserStore)
    .outerjoin(User, UserStore.OidUser == User.oidUser),
    filters=(
        FilterSpec("oiduser", UserStore.OidUser, FilterKind.INTEGER),
        _nickname_filter(User.NickName),
    ),
    sort_keys={"RecvDate": UserStore.RecvDate},
    default_sort="RecvDate",
    tie_breakers=(TieBreaker(UserStore.UserStoreSeqNo.asc()),),
)

# ===============================================
# Clans
# ===============================================

_member_count = (
    select(func.count(distinct(GuildMember.oidUser)))
    .where(GuildMember.oidGuild == Guild.oidGuild)
    .scalar_subquery()
    .label("qt_membros")
)
_elim_rate = win_rate(ClanInfo.TDMWinCnt, ClanInfo.TDMLoseCnt).label("ElimWinRate")
_snd_rate = win_rate(ClanInfo.TMMWinCnt, ClanInfo.TMMLoseCnt).label("SNDWinRate")
_elim_pro_rate = win_rate(ClanInfo.TSVWinCnt, ClanInfo.TSVLoseCnt).label(
    "ElimProWinRate"
)
_ctf_rate = win_rate(ClanInfo.CTFWinCnt, ClanInfo.CTFLoseCnt).label("CTFWinRate")

CLANS = QueryTemplate(
    name="clans",
    description="Clan listing with per-mode win rates",
    base=select(
        UserAuth.strDiscordID.label("DiscordID_Lider"),
        UserAuth.oidUser.label("oidUser_Lider"),
        User.NickName.label("Lider"),
        Guild.oidGuild,
        Guild.strName.label("nm_clan"),
        ClanInfo.Point,
        ClanInfo.Exp,
        _member_count,
        ClanInfo.Emblem,
        ClanInfo.Background,
        ClanInfo.NameColor,
        ClanInfo.ColorEndDate,
        ClanInfo.TDMWinCnt.label("ElimWinCnt"),
        ClanInfo.TDMLoseCnt.label("ElimLoseCnt"),
        _elim_rate,
        ClanInfo.TMMWinCnt.label("SNDWinCnt"),
        ClanInfo.TMMLoseCnt.label("SNDLoseCnt"),
        _snd_rate,
        ClanInfo.TSVWinCnt.label("ElimProWinCnt"),
        ClanInfo.TSVLoseCnt.label("ElimProLoseCnt"),
        _elim_pro_rate,
        ClanInfo.CTFWinCnt,
        ClanInfo.CTFLoseCnt,
        _ctf_rate,
        ClanInfo.CaptureFlagCnt,
        ClanInfo.ForfeitedCnt,
    )
    .select_from(Guild)
    .outerjoin(ClanInfo, Guild.oidGuild == ClanInfo.oiduser_group)
    .outerjoin(User, Guild.oidUser_master == User.oidUser)
    .outerjoin(UserAuth, User.oidUser == UserAuth.oidUser),
    filters=(
        FilterSpec("clanname", Guild.strName, FilterKind.CONTAINS),
        _nickname_filter(User.NickName),
    ),
    sort_keys={
        "Point": ClanInfo.Point,
        "Exp": ClanInfo.Exp,
        "qt_membros": _member_count,
        "ElimWinRate": _elim_rate,
        "SNDWinRate": _snd_rate,
        "ElimProWinRate": _elim_pro_rate,
        "CTFWinRate": _ctf_rate,
        "CaptureFlagCnt": ClanInfo.CaptureFlagCnt,
        "ForfeitedCnt": ClanInfo.ForfeitedCnt,
    },
    default_sort="Exp",
    tie_breakers=(
        TieBreaker(ClanInfo.Exp.desc(), key="Exp"),
        TieBreaker(ClanInfo.Point.desc(), key="Point"),
        TieBreaker(Guild.oidGuild.asc()),
    ),
    sort_param="sortBy",
    direction_param="sortOrder",
)

# Leader first, then administrators, then everyone else
_role_rank = case(
    (GuildMember.CodeMemberType == 1, 1),
    (and_(GuildMember.CodeMemberType == 2, GuildMember.CodeMemberGroup == 1), 2),
    else_=3,
).label("cd_cargo")

CLAN_MEMBERS = QueryTemplate(
    name="clanmembers",
    description="Roster of one clan",
    base=select(
        GuildMember.oidGuild,
        Guild.strName.label("NomeClan"),
        UserAuth.strDiscordID,
        UserAuth.strNexonID,
        GuildMember.oidUser,
        GuildMember.dn_strCharacterName.label("Nickname"),
        _role_rank,
        case(
            (GuildMember.CodeMemberType == 1, "Líder"),
            (
                and_(GuildMember.CodeMemberType == 2, GuildMember.CodeMemberGroup == 1),
                "Administrador",
            ),
            else_="Membro",
        ).label("cargo"),
        GuildMember.dateCreated.label("DataEntrada"),
    )
    .select_from(GuildMember)
    .outerjoin(Guild, Guild.oidGuild == GuildMember.oidGuild)
    .outerjoin(UserAuth, UserAuth.oidUser == GuildMember.oidUser),
    filters=(
        FilterSpec("clanname", Guild.strName, required=True),
        _nickname_filter(GuildMember.dn_strCharacterName),
    ),
    sort_keys={"cargo": _role_rank},
    default_sort="cargo",
    default_direction=SortOrder.ASC,
    tie_breakers=(
        TieBreaker(GuildMember.dateCreated.asc()),
        TieBreaker(GuildMember.oidUser.asc()),
    ),
)

# ===============================================
# Per-mode statistics and match history
# ===============================================


def _log_total(column: Any) -> Any:
    """Sum of a match-log column for the enclosing player/mode/map row."""
    log = CharacterInfoUpdateLog
    return (
        select(func.sum(column))
        .where(
            log.oidUser == UserGameModeInfo.oidUser,
            log.Input_GameMode == UserGameModeInfo.GameMode,
            log.Input_MapNo == UserGameModeInfo.MapNo,
        )
        .scalar_subquery()
    )


_mode_exp = _log_total(CharacterInfoUpdateLog.Input_Exp).label("qt_exp")

GAMEMODE_STATS = QueryTemplate(
    name="gamemode-stats",
    description="Per map and mode player summary",
    base=select(
        UserGameModeInfo.oidUser.label("oiduser"),
        User.NickName,
        GameMap.Name.label("map"),
        GameMode.Name.label("mode"),
        GameModeType.Name.label("type"),
        (UserGameModeInfo.WinCnt + UserGameModeInfo.LoseCnt).label("qt_partidas"),
        UserGameModeInfo.WinCnt.label("wincnt"),
        UserGameModeInfo.LoseCnt.label("losecnt"),
        UserGameModeInfo.KillCnt.label("killcnt"),
        _log_total(CharacterInfoUpdateLog.Input_HeadshotCnt).label("HeadshotCnt"),
        headshot_rate(
            _log_total(CharacterInfoUpdateLog.Input_HeadshotCnt),
            UserGameModeInfo.KillCnt,
        ).label("HeadshotRate"),
        UserGameModeInfo.DeadCnt.label("deadcnt"),
        kill_death_ratio(UserGameModeInfo.KillCnt, UserGameModeInfo.DeadCnt).label(
            "KDR"
        ),
        UserGameModeInfo.MostKillCnt.label("mostkillcnt"),
        _mode_exp,
        _log_total(CharacterInfoUpdateLog.Input_Money).label("qt_gp"),
    )
    .select_from(UserGameModeInfo)
    .outerjoin(User, UserGameModeInfo.oidUser == User.oidUser)
    .outerjoin(GameMap, UserGameModeInfo.MapNo == GameMap.MapID)
    .outerjoin(GameMode, GameMode.Mode == UserGameModeInfo.GameMode)
    .outerjoin(GameModeType, GameMode.ModeType == GameModeType.ModeType),
    filters=(
        FilterSpec("oiduser", UserGameModeInfo.oidUser, FilterKind.INTEGER),
        _nickname_filter(User.NickName),
    ),
    sort_keys={"qt_exp": _mode_exp},
    default_sort="qt_exp",
    tie_breakers=(
        TieBreaker(UserGameModeInfo.oidUser.asc()),
        TieBreaker(UserGameModeInfo.GameMode.asc()),
        TieBreaker(UserGameModeInfo.MapNo.asc()),
    ),
)

_log = CharacterInfoUpdateLog

PLAYER_MATCHES = QueryTemplate(
    name="player-matches",
    description="Round history from the match log",
    base=select(
        UserAuth.strDiscordID,
        _log.oidUser,
        UserAuth.strNexonID,
        User.NickName,
        _log.LogDate.label("DataHoraPartida"),
        GradeInfo.GradeName.label("Patente"),
        GameMode.Name.label("Modo"),
        GameMap.Name.label("Mapa"),
        (_log.User_Exp_After - _log.User_Exp_Before).label("ExpGanha"),
        (_log.User_Money_After - _log.User_Money_Before).label("GPGanho"),
        _log.Input_KillCnt.label("Kills"),
        _log.Input_DeadCnt.label("Mortes"),
        _log.Input_HeadshotCnt.label("Headshots"),
        case(
            {0: "Derrota", 1: "Vitória", 2: "Empate"},
            value=_log.Input_isWin,
            else_="Desconhecido",
        ).label("Resultado"),
    )
    .select_from(_log)
    .outerjoin(User, _log.oidUser == User.oidUser)
    .outerjoin(UserAuth, _log.oidUser == UserAuth.oidUser)
    .outerjoin(
        GradeInfo,
        and_(
            _log.User_Exp_After >= GradeInfo.MinExp,
            _log.User_Exp_After <= GradeInfo.MaxExp,
        ),
    )
    .outerjoin(GameMap, _log.Input_MapNo == GameMap.MapID)
    .outerjoin(GameMode, _log.Input_GameMode == GameMode.Mode)
    # Rounds the game server failed to process are not real matches
    .where(_log.ErrorCode_MainProc == 0),
    filters=(
        FilterSpec("oiduser", _log.oidUser, FilterKind.INTEGER),
        _nickname_filter(User.NickName),
        FilterSpec("startDate", _log.LogDate, FilterKind.ON_OR_AFTER),
        FilterSpec("endDate", _log.LogDate, FilterKind.ON_OR_BEFORE),
    ),
    sort_keys={"LogDate": _log.LogDate},
    default_sort="LogDate",
    tie_breakers=(TieBreaker(_log.oidUser.asc()),),
)

# ===============================================
# Registry
# ===============================================

TEMPLATES = MappingProxyType(
    {
        template.name: template
        for template in (
            USERS,
            INVENTORY,
            CLANS,
            CLAN_MEMBERS,
            RANKING,
            GAMEMODE_STATS,
            PLAYER_MATCHES,
            USER_STORE,
        )
    }
)

# Server-wide metrics; each is an independent single-row query
SUMMARY_METRICS = MappingProxyType(
    {
        "totalPlayers": select(func.count().label("total"))
        .select_from(User)
        .where(User.NickName.is_not(None)),
        "totalClans": select(func.count().label("total")).select_from(Guild),
        "totalMatches": select(func.sum(User.PlayRoundCnt).label("total")),
        "avgLevel": select(func.avg(cast(User.EXP, Float)).label("average")).where(
            User.EXP > 0
        ),
    }
)
