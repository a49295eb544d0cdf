"""Database engine and session factory creation."""

import os
from pathlib import Path
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from tessera.config import DatabaseConfig
from tessera.infrastructure.persistence.tables import metadata


def _is_memory(url: str) -> bool:
    return url.endswith(":memory:") or url.rstrip("/").endswith("sqlite+aiosqlite:")


def _expand_sqlite_path(url: str) -> str:
    """Expand ~ in SQLite URLs and ensure parent directory exists."""
    if not url.startswith("sqlite") or _is_memory(url):
        return url

    # Extract path from URL (sqlite+aiosqlite:///path or sqlite:///path)
    prefix_end = url.index("///") + 3
    prefix = url[:prefix_end]
    path = url[prefix_end:]

    abs_path = os.path.abspath(os.path.expanduser(path))
    Path(abs_path).parent.mkdir(parents=True, exist_ok=True)

    return f"{prefix}{abs_path}"


def create_db_engine(config: DatabaseConfig) -> AsyncEngine:
    """Create async database engine.

    Handles SQLite and PostgreSQL with appropriate settings.
    """
    url = _expand_sqlite_path(config.url)

    if config.is_sqlite and _is_memory(url):
        engine_kwargs: dict[str, Any] = {
            "echo": config.echo,
            # One shared connection, so an in-memory database outlives a
            # single session and aiosqlite can use it across threads
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    elif config.is_sqlite:
        # Pooled connections: each unit of work gets its own transaction
        engine_kwargs = {"echo": config.echo}
    else:
        engine_kwargs = {
            "echo": config.echo,
            "pool_pre_ping": True,
            "pool_size": 5,
            "max_overflow": 10,
        }

    return create_async_engine(url, **engine_kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory for dependency injection."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables directly from metadata.

    Used for SQLite development databases and tests; PostgreSQL deployments
    run Alembic migrations instead.
    """
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
