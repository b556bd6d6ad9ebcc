# src/combatstats/main.py

"""Main FastAPI application for the Combat Stats API."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from combatstats import __version__, config
from combatstats.api import clans, inventory, players, stats
from combatstats.db.session import engine
from combatstats.exceptions import (
    CombatStatsError,
    DatabaseError,
    ValidationError,
)
from combatstats.middleware.logging import RequestLoggingMiddleware
from combatstats.queries.executor import QueryExecutor, get_executor
from combatstats.schemas.common import HealthStatus

logger = logging.getLogger(__name__)

# Message returned instead of driver details outside development
HIDDEN_DATABASE_ERROR = "An internal database error occurred"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for startup and shutdown events."""
    logger.info(
        "Starting Combat Stats API",
        extra={"environment": config.APP_ENV, "database": engine.url.get_backend_name()},
    )
    yield
    # Shutdown: release every pooled connection
    await engine.dispose()


app = FastAPI(
    title="Combat Stats API",
    description="Read-only statistics for the Combat Arms game server",
    version=__version__,
    lifespan=lifespan,
)

# Add middleware (order matters - last added = outermost)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS"],
    allow_headers=["*"],
)


# =============================================================================
# Global Exception Handlers
# =============================================================================


@app.exception_handler(ValidationError)
async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Handle all request validation errors -> 400."""
    logger.warning("Validation error: %s", exc.message, extra=exc.details)
    return JSONResponse(status_code=400, content={"error": exc.message})


@app.exception_handler(DatabaseError)
async def database_error_handler(
    request: Request, exc: DatabaseError
) -> JSONResponse:
    """Handle data source faults -> 500, hiding details outside development."""
    logger.error("Database error: %s", exc.message, extra=exc.details)
    message = exc.message if config.is_development() else HIDDEN_DATABASE_ERROR
    return JSONResponse(status_code=500, content={"error": message})


@app.exception_handler(CombatStatsError)
async def combatstats_error_handler(
    request: Request, exc: CombatStatsError
) -> JSONResponse:
    """Catch-all for any other Combat Stats errors -> 500."""
    logger.error("Combat Stats error: %s", exc.message, extra=exc.details, exc_info=True)
    return JSONResponse(status_code=500, content={"error": exc.message})


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Catch-all for database errors raised outside the executor."""
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(status_code=500, content={"error": HIDDEN_DATABASE_ERROR})


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions."""
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": str(exc) if config.is_development() else "Something went wrong",
        },
    )


# Include routers into the main application
app.include_router(players.router)
app.include_router(inventory.router)
app.include_router(clans.router)
app.include_router(stats.router)

ENDPOINTS = [
    "GET /api/users?discordid=<discordid>&oidUser=<oidUser>&nickname=<nickname>"
    "&page=<page>&size=<size>",
    "GET /api/inventory?discordid=<discordid>&nickname=<nickname>&page=<page>&size=<size>",
    "GET /api/clans?clanname=<clanname>&nickname=<nickname>&sortBy=<sortBy>"
    "&sortOrder=<sortOrder>&page=<page>&size=<size>",
    "GET /api/clanmembers?clanname=<clanname>&nickname=<nickname>&page=<page>&size=<size>",
    "GET /api/ranking?type=<exp|kills|wins|money|headshots>&orderby=<desc|asc>"
    "&nickname=<nickname>&page=<page>&size=<size>",
    "GET /api/gamemode-stats?oiduser=<oiduser>&nickname=<nickname>&page=<page>&size=<size>",
    "GET /api/player-matches?oiduser=<oiduser>&nickname=<nickname>"
    "&startDate=<startDate>&endDate=<endDate>&page=<page>&size=<size>",
    "GET /api/stats",
    "GET /api/userstore?oiduser=<oiduser>&nickname=<nickname>&page=<page>&size=<size>",
    "GET /health",
]


@app.get("/", tags=["System"])
async def read_root() -> dict:
    """Describes the API and lists its endpoints."""
    return {
        "message": "Combat Stats API",
        "version": __version__,
        "database": engine.url.get_backend_name(),
        "documentation": app.docs_url,
        "endpoints": ENDPOINTS,
    }


@app.get("/api-docs", include_in_schema=False)
async def legacy_docs() -> RedirectResponse:
    """Old documentation path; the interactive docs live at /docs."""
    return RedirectResponse(url=app.docs_url or "/docs")


@app.get(
    "/health",
    tags=["System"],
    response_model=HealthStatus,
    response_model_exclude_none=True,
)
async def health_check(executor: QueryExecutor = Depends(get_executor)):
    """Liveness probe: runs a no-op query against the store."""
    server = engine.url.host
    try:
        await executor.ping()
    except DatabaseError as exc:
        status = HealthStatus(
            status="ERROR",
            database="Disconnected",
            server=server,
            error=exc.message,
            timestamp=datetime.now(timezone.utc),
        )
        return JSONResponse(
            status_code=500,
            content=status.model_dump(mode="json", exclude_none=True),
        )
    return HealthStatus(
        status="OK",
        database="Connected",
        server=server,
        timestamp=datetime.now(timezone.utc),
    )
