"""DI provider for auth infrastructure."""

from typing import AsyncIterable

import httpx
from dishka import provide

from tessera.config import Config
from tessera.domain.auth.port.mailer import Mailer
from tessera.domain.auth.port.rate_limiter import RateLimiter
from tessera.infrastructure.auth.mailer import (
    HttpMailTransport,
    LogMailTransport,
    MailQueue,
    MailTransport,
)
from tessera.infrastructure.auth.rate_limiter import InMemoryRateLimiter
from tessera.util.di.base import Provider
from tessera.util.di.scope import Scope

# HTTP client timeout configuration
_HTTP_TIMEOUT = httpx.Timeout(
    connect=5.0,  # Connection timeout
    read=10.0,  # Read timeout
    write=5.0,  # Write timeout
    pool=5.0,  # Pool timeout
)


class AuthInfraProvider(Provider):
    """DI provider for auth infrastructure adapters."""

    @provide(scope=Scope.APP)
    def get_rate_limiter(self) -> RateLimiter:
        """One counter store per process, shared by every request."""
        return InMemoryRateLimiter()

    @provide(scope=Scope.APP)
    async def get_mail_http_client(self) -> AsyncIterable[httpx.AsyncClient]:
        """Shared HTTP client for the mail relay (connection pooling)."""
        async with httpx.AsyncClient(timeout=_HTTP_TIMEOUT) as client:
            yield client

    @provide(scope=Scope.APP)
    def get_mail_transport(self, config: Config, http_client: httpx.AsyncClient) -> MailTransport:
        if config.mail.backend == "http":
            return HttpMailTransport(config.mail.http_url, http_client)
        return LogMailTransport()

    @provide(scope=Scope.APP)
    def get_mail_queue(self, config: Config, transport: MailTransport) -> MailQueue:
        return MailQueue(config.mail, transport)

    @provide(scope=Scope.APP)
    def get_mailer(self, queue: MailQueue) -> Mailer:
        return queue
