"""DI provider for auth domain."""

import logging
from http.cookies import CookieError, SimpleCookie

from dishka import from_context, provide
from starlette.requests import Request

from tessera.config import Config
from tessera.domain.auth.command.identity import (
    SendEmailVerificationHandler,
    VerifyEmailHandler,
)
from tessera.domain.auth.command.session import (
    EndSessionHandler,
    RedeemMagicLinkHandler,
    RequestMagicLinkHandler,
    SignUpHandler,
)
from tessera.domain.auth.model.current import ANONYMOUS, Current
from tessera.domain.auth.port.mailer import Mailer
from tessera.domain.auth.port.rate_limiter import RateLimiter
from tessera.domain.auth.port.repository import (
    AccountRepository,
    IdentityRepository,
    SessionRepository,
    UserRepository,
)
from tessera.domain.auth.query.get_current_session import GetCurrentSessionHandler
from tessera.domain.auth.service.auth import AuthService
from tessera.domain.auth.service.token import TokenService
from tessera.util.di.base import Provider
from tessera.util.di.scope import Scope

logger = logging.getLogger(__name__)


def session_cookie_values(request: Request, name: str) -> list[str]:
    """All values the browser sent for the session cookie, most specific path first.

    A browser holding both a ``/`` cookie and a ``/1234567`` cookie sends both
    on ``/1234567/...`` requests, longest path first. ``request.cookies`` keeps
    only one of them, so the raw header is parsed here.
    """
    values: list[str] = []
    for pair in request.headers.get("cookie", "").split(";"):
        key, sep, value = pair.strip().partition("=")
        if sep and key == name and value:
            try:
                morsel = SimpleCookie(f"{key}={value}").get(key)
            except CookieError:
                continue
            if morsel is not None:
                values.append(morsel.value)
    return values


class AuthProvider(Provider):
    """DI provider for auth domain services and handlers."""

    request = from_context(provides=Request, scope=Scope.UOW)

    # Command Handlers
    request_magic_link_handler = provide(RequestMagicLinkHandler, scope=Scope.UOW)
    sign_up_handler = provide(SignUpHandler, scope=Scope.UOW)
    redeem_magic_link_handler = provide(RedeemMagicLinkHandler, scope=Scope.UOW)
    end_session_handler = provide(EndSessionHandler, scope=Scope.UOW)
    send_email_verification_handler = provide(SendEmailVerificationHandler, scope=Scope.UOW)
    verify_email_handler = provide(VerifyEmailHandler, scope=Scope.UOW)

    # Query Handlers
    get_current_session_handler = provide(GetCurrentSessionHandler, scope=Scope.UOW)

    @provide(scope=Scope.UOW)
    def get_token_service(self, config: Config) -> TokenService:
        """Provide TokenService."""
        return TokenService(_config=config.auth)

    @provide(scope=Scope.UOW)
    def get_auth_service(
        self,
        config: Config,
        identity_repo: IdentityRepository,
        account_repo: AccountRepository,
        user_repo: UserRepository,
        session_repo: SessionRepository,
        token_service: TokenService,
        rate_limiter: RateLimiter,
        mailer: Mailer,
    ) -> AuthService:
        """Provide AuthService."""
        return AuthService(
            _identity_repo=identity_repo,
            _account_repo=account_repo,
            _user_repo=user_repo,
            _session_repo=session_repo,
            _token_service=token_service,
            _rate_limiter=rate_limiter,
            _mailer=mailer,
            _config=config.auth,
            _base_url=config.server.base_url.rstrip("/"),
        )

    @provide(scope=Scope.UOW)
    async def get_current(
        self,
        request: Request,
        config: Config,
        auth_service: AuthService,
    ) -> Current:
        """Resolve this request's Current from its session cookie.

        Returns ANONYMOUS when no cookie resolves to a live session.
        """
        for value in session_cookie_values(request, config.auth.session.cookie_name):
            current = await auth_service.resolve_current(value)
            if current.is_authenticated:
                logger.debug(
                    "Current resolved: session_id=%s, identity_id=%s",
                    current.session.id if current.session else None,
                    current.identity.id if current.identity else None,
                )
                return current
        return ANONYMOUS
