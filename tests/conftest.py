# tests/conftest.py

"""Pytest configuration and fixtures."""

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from combatstats import config
from combatstats.db.models import Base
from combatstats.db.session import get_db
from combatstats.main import app
from combatstats.queries.executor import QueryExecutor

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """A fresh in-memory database per test, with the game schemas created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        # One shared connection so every session sees the same memory database
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        execution_options={"schema_translate_map": dict(config.SQLITE_SCHEMAS)},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Fixture to provide a database session to a test."""
    session_factory = async_sessionmaker(
        bind=engine, expire_on_commit=False, autoflush=False
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
def executor(db_session: AsyncSession) -> QueryExecutor:
    return QueryExecutor(db_session)


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Fixture to provide an async test client for the API."""

    # Override the get_db dependency to use the test database
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    # Clean up the overrides after the test
    app.dependency_overrides.clear()


@pytest.fixture
def seed(db_session: AsyncSession):
    """Insert ORM rows and commit them in one call."""

    async def _seed(*rows) -> None:
        db_session.add_all(rows)
        await db_session.commit()

    return _seed
