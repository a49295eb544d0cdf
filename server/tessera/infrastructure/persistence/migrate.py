"""Database migration utilities.

Alembic runs synchronously, so migrations are applied before the async
server starts (`tessera server migrate`), never from inside the event loop.
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig

from tessera.config import DatabaseConfig

logger = logging.getLogger(__name__)

# server/ directory, where alembic.ini and migrations/ live
SERVER_ROOT = Path(__file__).parent.parent.parent.parent


def to_sync_url(database_url: str) -> str:
    """Convert an async database URL to its sync equivalent.

    - sqlite+aiosqlite:/// -> sqlite:///
    - postgresql+asyncpg:// -> postgresql://
    """
    url = database_url.replace("+aiosqlite", "").replace("+asyncpg", "")
    if url.startswith("sqlite:///"):
        path = url.removeprefix("sqlite:///")
        if path.startswith("~"):
            url = f"sqlite:///{Path(path).expanduser()}"
    return url


def get_alembic_config(database_url: str) -> AlembicConfig:
    """Alembic config pointing at Tessera's migrations and the given database."""
    config = AlembicConfig(str(SERVER_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(SERVER_ROOT / "migrations"))
    config.set_main_option("sqlalchemy.url", to_sync_url(database_url))
    config.attributes["configure_logger"] = False
    return config


def run_migrations(database: DatabaseConfig, revision: str = "head") -> None:
    """Upgrade the database to `revision`."""
    sync_url = to_sync_url(database.url)

    if sync_url.startswith("sqlite:///") and not sync_url.endswith(":memory:"):
        Path(sync_url.removeprefix("sqlite:///")).parent.mkdir(parents=True, exist_ok=True)

    command.upgrade(get_alembic_config(database.url), revision)
    logger.info("Database migrations complete: revision=%s", revision)
