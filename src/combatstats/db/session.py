# src/combatstats/db/session.py

"""Database session management."""
import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from combatstats import config

logger = logging.getLogger(__name__)


def _create_engine():
    """Create the async engine with appropriate configuration.

    SQLite doesn't support connection pooling, so we only configure
    pool settings for server databases like SQL Server.
    """
    url = config.DATABASE_URL
    execution_options = {"schema_translate_map": config.schema_translate_map(url)}

    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=config.DB_ECHO,
            execution_options=execution_options,
        )

    return create_async_engine(
        url,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_pre_ping=True,  # Verify connections before use
        pool_recycle=config.DB_POOL_RECYCLE,
        echo=config.DB_ECHO,
        execution_options=execution_options,
    )


# The engine owns the shared connection pool for the process lifetime.
engine = _create_engine()

# Sessions are read-only in practice; nothing is ever flushed or committed.
AsyncSessionLocal = async_sessionmaker(
    bind=engine, autoflush=False, expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that provides a request-scoped async session.

    Rolls back on exceptions and ensures the connection returns to the pool.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error("Database session error, rolling back: %s", e)
            await session.rollback()
            raise
