# src/combatstats/config.py

"""Environment driven configuration for the Combat Stats API."""

import os

# "development" exposes database error details in API responses
APP_ENV = os.getenv("APP_ENV", "production")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./combatstats.db")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "1800"))
DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"

# Logical schema names used by the models, translated to physical schemas
# (database.owner on SQL Server) when statements are compiled.
SCHEMA_GAME = "game"
SCHEMA_GUILD = "guild"
SCHEMA_GAME_LOG = "game_log"

PHYSICAL_SCHEMAS = {
    SCHEMA_GAME: os.getenv("DB_SCHEMA_GAME", "COMBATARMS.dbo"),
    SCHEMA_GUILD: os.getenv("DB_SCHEMA_GUILD", "NX_GuildMaster.dbo"),
    SCHEMA_GAME_LOG: os.getenv("DB_SCHEMA_GAME_LOG", "COMBATARMS_LOG.dbo"),
}

# SQLite has no multi-part schemas; every table lives in the main database.
SQLITE_SCHEMAS: dict[str, str | None] = {
    SCHEMA_GAME: None,
    SCHEMA_GUILD: None,
    SCHEMA_GAME_LOG: None,
}

QUERY_TIMEOUT_SECONDS = float(os.getenv("QUERY_TIMEOUT_SECONDS", "30"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "500"))

CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))


def is_development() -> bool:
    """Whether the service runs in development mode."""
    return APP_ENV.lower() == "development"


def schema_translate_map(url: str) -> dict[str, str | None]:
    """Pick the logical -> physical schema mapping for a database URL."""
    if url.startswith("sqlite"):
        return dict(SQLITE_SCHEMAS)
    return dict(PHYSICAL_SCHEMAS)
