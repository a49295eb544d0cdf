"""Server commands: run the API and migrate its database."""

import cyclopts
import uvicorn

from tessera.cli.console import get_console
from tessera.config import Config
from tessera.infrastructure.persistence.migrate import run_migrations

app = cyclopts.App(name="server", help="Run and maintain the Tessera server")


@app.command
def serve(host: str = "127.0.0.1", port: int = 8000, reload: bool = False) -> None:
    """Run the HTTP server.

    Args:
        host: Interface to bind.
        port: Port to listen on.
        reload: Restart on code changes (development).
    """
    uvicorn.run(
        "tessera.application.api.rest.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        proxy_headers=True,
    )


@app.command
def migrate(revision: str = "head") -> None:
    """Apply Alembic migrations to the configured database.

    Args:
        revision: Target revision.
    """
    console = get_console()
    config = Config()  # type: ignore[call-arg]
    run_migrations(config.database, revision)
    console.success(f"Database at revision {revision}")
