# src/combatstats/db/models.py

"""ORM mappings of the game server's relational store.

The store is owned by the game server; these mappings only describe the
columns the API reads. Every table declares one of the logical schemas from
``combatstats.config`` which the engine translates to the physical
``database.owner`` pair at execution time.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from combatstats.config import SCHEMA_GAME, SCHEMA_GAME_LOG, SCHEMA_GUILD

Base = declarative_base()


def _counter() -> Mapped[int | None]:
    """A nullable statistics counter that defaults to zero on insert."""
    return mapped_column(default=0, nullable=True)


# ===============================================
# Players (COMBATARMS)
# ===============================================


class User(Base):
    """A player character and its lifetime statistics."""

    __tablename__ = "CBT_User"
    __table_args__ = {"schema": SCHEMA_GAME}

    oidUser: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    NickName: Mapped[str | None] = mapped_column(String(32))
    UsedNX: Mapped[int | None] = _counter()
    NickNameColor: Mapped[int | None] = _counter()
    ColorEndDate: Mapped[datetime | None] = mapped_column(default=None)
    SuperRoomMaster: Mapped[int | None] = _counter()
    AgreeCnt: Mapped[int | None] = _counter()
    DisagreeCnt: Mapped[int | None] = _counter()
    KickedCnt: Mapped[int | None] = _counter()
    EXP: Mapped[int | None] = _counter()
    Money: Mapped[int | None] = _counter()
    PlayRoundCnt: Mapped[int | None] = _counter()
    WinCnt: Mapped[int | None] = _counter()
    LoseCnt: Mapped[int | None] = _counter()
    Forfeited: Mapped[int | None] = _counter()
    KillCnt: Mapped[int | None] = _counter()
    Assist: Mapped[int | None] = _counter()
    HeadshotCnt: Mapped[int | None] = _counter()
    DeadCnt: Mapped[int | None] = _counter()
    FirstKill: Mapped[int | None] = _counter()
    DoubleKillCnt: Mapped[int | None] = _counter()
    MultiKillCnt: Mapped[int | None] = _counter()
    UltraKillCnt: Mapped[int | None] = _counter()
    FantasticKillCnt: Mapped[int | None] = _counter()
    UnbelievableCnt: Mapped[int | None] = _counter()
    UnbelievablePlusCnt: Mapped[int | None] = _counter()
    RevengeCnt: Mapped[int | None] = _counter()
    KillsStreak: Mapped[int | None] = _counter()
    MostKills: Mapped[int | None] = _counter()
    BombsPlanted: Mapped[int | None] = _counter()
    BombsExploded: Mapped[int | None] = _counter()
    BombsDefused: Mapped[int | None] = _counter()
    CaptureFlag: Mapped[int | None] = _counter()
    RecoverFlag: Mapped[int | None] = _counter()
    ClanWin: Mapped[int | None] = _counter()
    ClanDraw: Mapped[int | None] = _counter()
    ClanLose: Mapped[int | None] = _counter()
    ClanKill: Mapped[int | None] = _counter()
    ClanDead: Mapped[int | None] = _counter()


class UserAuth(Base):
    """Account linkage (Discord / Nexon) and ban state of a player."""

    __tablename__ = "CBT_UserAuth"
    __table_args__ = {"schema": SCHEMA_GAME}

    oidUser: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    strDiscordID: Mapped[str | None] = mapped_column(String(64))
    strNexonID: Mapped[str | None] = mapped_column(String(64))
    BlockEndDate: Mapped[datetime | None] = mapped_column(default=None)


class UserDetailInfo(Base):
    """Per-mode counters that do not fit in CBT_User."""

    __tablename__ = "CBT_UserDetailInfo"
    __table_args__ = {"schema": SCHEMA_GAME}

    oidUser: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    NutShotCnt: Mapped[int | None] = _counter()
    NutShotDeadCnt: Mapped[int | None] = _counter()
    SpyKillCnt: Mapped[int | None] = _counter()
    SpyDeadCnt: Mapped[int | None] = _counter()
    SpyUploading: Mapped[int | None] = _counter()
    HQPoint: Mapped[int | None] = _counter()
    SQPoint: Mapped[int | None] = _counter()
    SaveBullionNum: Mapped[int | None] = _counter()
    HumanKillCnt: Mapped[int | None] = _counter()
    HumanDeathCnt: Mapped[int | None] = _counter()
    HumanWin: Mapped[int | None] = _counter()
    InfectKillCnt: Mapped[int | None] = _counter()
    InfectDeathCnt: Mapped[int | None] = _counter()
    InfectWin: Mapped[int | None] = _counter()
    QuaRanTinePlayNum: Mapped[int | None] = _counter()


class UserFakeMark(Base):
    """The battle mark (nation emblem) a player displays."""

    __tablename__ = "CBT_UserFakeMark"
    __table_args__ = {"schema": SCHEMA_GAME}

    oidUser: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    NationEmblem: Mapped[int | None] = _counter()


class GradeInfo(Base):
    """Rank (patent) bands keyed by experience range."""

    __tablename__ = "CBT_GradeInfo"
    __table_args__ = {"schema": SCHEMA_GAME}

    MinExp: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    MaxExp: Mapped[int] = mapped_column()
    GradeName: Mapped[str | None] = mapped_column(String(64))


class NXGradeInfo(Base):
    """Premium-currency spending tiers keyed by NX range."""

    __tablename__ = "CBT_NXGradeInfo"
    __table_args__ = {"schema": SCHEMA_GAME}

    MinNX: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    MaxNX: Mapped[int] = mapped_column()
    NXGradeName: Mapped[str | None] = mapped_column(String(64))


# ===============================================
# Items and inventory
# ===============================================


class ItemInfo(Base):
    """Catalog of every item the game knows."""

    __tablename__ = "CBT_ItemInfo"
    __table_args__ = {"schema": SCHEMA_GAME}

    ItemNo: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    Name: Mapped[str | None] = mapped_column(String(128))


class UserEquipItems(Base):
    """The loadout currently equipped by a player, one item number per slot."""

    __tablename__ = "CBT_UserEquipItems"
    __table_args__ = {"schema": SCHEMA_GAME}

    oidUser: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    # "Assult" is the store's own spelling
    AssultItemNo: Mapped[int | None] = mapped_column(default=None)
    SubGunItemNo: Mapped[int | None] = mapped_column(default=None)
    KnifeItemNo: Mapped[int | None] = mapped_column(default=None)
    BombItemNo: Mapped[int | None] = mapped_column(default=None)
    HelmetItemNo: Mapped[int | None] = mapped_column(default=None)
    FaceItemNo: Mapped[int | None] = mapped_column(default=None)
    GoggleItemNo: Mapped[int | None] = mapped_column(default=None)
    CamoItemNo: Mapped[int | None] = mapped_column(default=None)
    VestItemNo: Mapped[int | None] = mapped_column(default=None)
    BackPackItemNo: Mapped[int | None] = mapped_column(default=None)
    BackPack00: Mapped[int | None] = mapped_column(default=None)
    BackPack01: Mapped[int | None] = mapped_column(default=None)
    BackPack02: Mapped[int | None] = mapped_column(default=None)
    BackPack03: Mapped[int | None] = mapped_column(default=None)


class UserStore(Base):
    """Purchases and gifts delivered to a player's storage."""

    __tablename__ = "CBT_UserStore"
    __table_args__ = {"schema": SCHEMA_GAME}

    UserStoreSeqNo: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    OidUser: Mapped[int] = mapped_column()
    ProductID: Mapped[int | None] = mapped_column(default=None)
    ProductNo: Mapped[int | None] = mapped_column(default=None)
    GiftType: Mapped[int | None] = mapped_column(default=None)
    ConfirmType: Mapped[int | None] = mapped_column(default=None)
    InventorySeqno: Mapped[int | None] = mapped_column(default=None)
    UseDate: Mapped[datetime | None] = mapped_column(default=None)
    SendOidUser: Mapped[int | None] = mapped_column(default=None)
    SendNickname: Mapped[str | None] = mapped_column(String(32), default=None)
    Message: Mapped[str | None] = mapped_column(String(256), default=None)
    RecvDate: Mapped[datetime | None] = mapped_column(default=None)
    orderno: Mapped[str | None] = mapped_column(String(64), default=None)
    ordernofaillog: Mapped[str | None] = mapped_column(String(256), default=None)
    enddate: Mapped[datetime | None] = mapped_column(default=None)


# ===============================================
# Maps and modes
# ===============================================


class GameMap(Base):
    __tablename__ = "CBT_GameMap"
    __table_args__ = {"schema": SCHEMA_GAME}

    MapID: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    Name: Mapped[str | None] = mapped_column(String(64))


class GameMode(Base):
    __tablename__ = "CBT_GameMode"
    __table_args__ = {"schema": SCHEMA_GAME}

    Mode: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    Name: Mapped[str | None] = mapped_column(String(64))
    ModeType: Mapped[int | None] = mapped_column(default=None)


class GameModeType(Base):
    __tablename__ = "CBT_GameModeType"
    __table_args__ = {"schema": SCHEMA_GAME}

    ModeType: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    Name: Mapped[str | None] = mapped_column(String(64))


class UserGameModeInfo(Base):
    """Per player, per map, per mode win/kill counters."""

    __tablename__ = "CBT_UserGameModeInfo"
    __table_args__ = {"schema": SCHEMA_GAME}

    oidUser: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    GameMode: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    MapNo: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    WinCnt: Mapped[int | None] = _counter()
    LoseCnt: Mapped[int | None] = _counter()
    KillCnt: Mapped[int | None] = _counter()
    DeadCnt: Mapped[int | None] = _counter()
    MostKillCnt: Mapped[int | None] = _counter()


# ===============================================
# Clans
# ===============================================


class ClanInfo(Base):
    """Clan appearance and per-mode clan war results."""

    __tablename__ = "CBT_ClanInfo"
    __table_args__ = {"schema": SCHEMA_GAME}

    oiduser_group: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    Background: Mapped[int | None] = _counter()
    Emblem: Mapped[int | None] = _counter()
    NameColor: Mapped[int | None] = _counter()
    ColorEndDate: Mapped[datetime | None] = mapped_column(default=None)
    Point: Mapped[int | None] = _counter()
    Exp: Mapped[int | None] = _counter()
    # TDM = Elimination, TMM = Search and Destroy, TSV = Elimination Pro
    TDMWinCnt: Mapped[int | None] = _counter()
    TDMLoseCnt: Mapped[int | None] = _counter()
    TMMWinCnt: Mapped[int | None] = _counter()
    TMMLoseCnt: Mapped[int | None] = _counter()
    TSVWinCnt: Mapped[int | None] = _counter()
    TSVLoseCnt: Mapped[int | None] = _counter()
    CTFWinCnt: Mapped[int | None] = _counter()
    CTFLoseCnt: Mapped[int | None] = _counter()
    CaptureFlagCnt: Mapped[int | None] = _counter()
    ForfeitedCnt: Mapped[int | None] = _counter()


class UserClanInfo(Base):
    """A player's results while playing for their current clan."""

    __tablename__ = "CBT_UserClanInfo"
    __table_args__ = {"schema": SCHEMA_GAME}

    oiduserclan: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    oiduser: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    WinCnt: Mapped[int | None] = _counter()
    LoseCnt: Mapped[int | None] = _counter()
    DrawCnt: Mapped[int | None] = _counter()
    KillCnt: Mapped[int | None] = _counter()
    DeadCnt: Mapped[int | None] = _counter()
    ClanForfeited: Mapped[int | None] = _counter()


class Guild(Base):
    """A clan as registered in the guild master database."""

    __tablename__ = "gdt_Guild"
    __table_args__ = {"schema": SCHEMA_GUILD}

    oidGuild: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    strName: Mapped[str] = mapped_column(String(32))
    oidUser_master: Mapped[int | None] = mapped_column(default=None)


class GuildMember(Base):
    """Clan membership; CodeMemberType 1 is the leader."""

    __tablename__ = "gdt_Member"
    __table_args__ = {"schema": SCHEMA_GUILD}

    oidGuild: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    oidUser: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    dn_strCharacterName: Mapped[str | None] = mapped_column(String(32))
    CodeMemberType: Mapped[int | None] = mapped_column(default=3)
    CodeMemberGroup: Mapped[int | None] = mapped_column(default=0)
    dateCreated: Mapped[datetime | None] = mapped_column(default=None)


# ===============================================
# Match log (COMBATARMS_LOG)
# ===============================================


class CharacterInfoUpdateLog(Base):
    """One row per finished round, written by the game server."""

    __tablename__ = "BST_CharacterInfoUpdateLog"
    __table_args__ = {"schema": SCHEMA_GAME_LOG}

    oidUser: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    LogDate: Mapped[datetime] = mapped_column(primary_key=True)
    Input_GameMode: Mapped[int | None] = mapped_column(default=None)
    Input_MapNo: Mapped[int | None] = mapped_column(default=None)
    Input_KillCnt: Mapped[int | None] = _counter()
    Input_DeadCnt: Mapped[int | None] = _counter()
    Input_HeadshotCnt: Mapped[int | None] = _counter()
    Input_Exp: Mapped[int | None] = _counter()
    Input_Money: Mapped[int | None] = _counter()
    # 0 = loss, 1 = win, 2 = draw
    Input_isWin: Mapped[int | None] = mapped_column(default=None)
    User_Exp_Before: Mapped[int | None] = _counter()
    User_Exp_After: Mapped[int | None] = _counter()
    User_Money_Before: Mapped[int | None] = _counter()
    User_Money_After: Mapped[int | None] = _counter()
    ErrorCode_MainProc: Mapped[int] = mapped_column(default=0)
