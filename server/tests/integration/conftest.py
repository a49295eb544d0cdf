"""Fixtures for database integration tests (in-memory SQLite)."""

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

from tessera.config import DatabaseConfig
from tessera.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
    create_tables,
)


@pytest_asyncio.fixture
async def engine():
    """Per-test engine over a fresh in-memory database."""
    engine = create_db_engine(DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine: AsyncEngine):
    factory = create_session_factory(engine)
    async with factory() as session:
        yield session
        await session.rollback()
