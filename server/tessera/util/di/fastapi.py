"""Dishka FastAPI integration using Scope.UOW."""

from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from dishka import AsyncContainer

from tessera.util.di.scope import Scope as TesseraScope


class ContainerMiddleware:
    """ASGI middleware that opens one Scope.UOW container per HTTP request.

    A variant of dishka.integrations.starlette.ContainerMiddleware using
    Scope.UOW instead of dishka.Scope.REQUEST. The request is the UOW
    container's context, so providers can read cookies and client metadata
    from it. Everything resolved here (database session, Current, handlers)
    belongs to this request alone.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        request = Request(scope, receive=receive, send=send)
        async with request.app.state.dishka_container(
            {Request: request},
            scope=TesseraScope.UOW,
        ) as request_container:
            request.state.dishka_container = request_container
            return await self.app(scope, receive, send)


def setup_dishka(container: AsyncContainer, app) -> None:
    """Install the UOW middleware and attach the root container to the app.

    Args:
        container: The async DI container
        app: FastAPI or Starlette application
    """
    app.add_middleware(ContainerMiddleware)
    app.state.dishka_container = container
