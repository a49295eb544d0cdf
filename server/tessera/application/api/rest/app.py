import logging
from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from tessera.application.api.v1.errors import map_tessera_error
from tessera.application.api.v1.routes import accounts, health, identity, session
from tessera.application.di import create_container
from tessera.config import Config, configure_logging
from tessera.domain.shared.authorization.startup import validate_all_handlers
from tessera.domain.shared.error import TesseraError
from tessera.infrastructure.auth.mailer import MailQueue
from tessera.infrastructure.persistence.database import create_tables
from tessera.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = app.state.dishka_container
    config = await container.get(Config)

    # SQLite databases are created in place; PostgreSQL runs `tessera server migrate`
    if config.database.is_sqlite and config.database.auto_migrate:
        engine = await container.get(AsyncEngine)
        await create_tables(engine)

    # Deliver mail out-of-band for the lifetime of the app
    mail_queue = await container.get(MailQueue)

    async with mail_queue:
        yield

    await container.close()


def create_app(config: Config | None = None) -> FastAPI:
    """Create FastAPI application."""
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    # Configure logging early
    configure_logging(config.logging)
    logger.info("Starting Tessera server: %s v%s", config.server.name, config.server.version)

    # Validate all handlers have authorization declarations (fail fast)
    validate_all_handlers()

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    logfire.instrument_httpx()
    logfire.instrument_fastapi(app_instance)

    # Setup dependency injection
    container = create_container(config)
    setup_dishka(container, app_instance)

    # Account routes live under /<external_id>/..., so no common prefix
    app_instance.include_router(health.router)
    app_instance.include_router(session.router)
    app_instance.include_router(identity.router)
    app_instance.include_router(accounts.router)

    # Global Tessera error handler - maps domain and infrastructure errors to HTTP responses
    @app_instance.exception_handler(TesseraError)
    async def tessera_error_handler(request: Request, exc: TesseraError):
        http_exc = map_tessera_error(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content=http_exc.detail,
            headers=http_exc.headers,
        )

    # Global exception handler - logs all unhandled exceptions
    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app_instance
