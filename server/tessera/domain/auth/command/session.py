"""Session commands: magic-link requests, sign-up, redemption and logout."""

import logfire
import pydantic

from tessera.domain.auth.model.current import Current
from tessera.domain.auth.model.value import ClientInfo, Email
from tessera.domain.auth.port.repository import AccountRepository
from tessera.domain.auth.service.auth import AuthService
from tessera.domain.auth.service.token import TokenService
from tessera.domain.shared.authorization.gate import authenticated, public
from tessera.domain.shared.command import Command, CommandHandler, Result
from tessera.domain.shared.error import ValidationError

CHECK_YOUR_EMAIL = "Check your email for a sign-in link."


def parse_email(value: str) -> Email:
    """Normalize a submitted address, raising the domain ValidationError on bad shape."""
    try:
        return Email(value)
    except pydantic.ValidationError as e:
        raise ValidationError("Invalid email address", field="email") from e


class MagicLinkRequested(Result):
    """The only answer a link request ever gets, whether or not the email is known."""

    message: str = CHECK_YOUR_EMAIL


# =============================================================================
# Request a magic link
# =============================================================================


class RequestMagicLink(Command):
    email: str
    account_external_id: int | None = None  # set when requested from /<account>/...
    user_agent: str | None = None
    ip_address: str | None = None


class RequestMagicLinkHandler(CommandHandler[RequestMagicLink, MagicLinkRequested]):
    __auth__ = public()
    auth_service: AuthService
    account_repo: AccountRepository

    async def run(self, cmd: RequestMagicLink) -> MagicLinkRequested:
        with logfire.span("RequestMagicLink"):
            email = parse_email(cmd.email)

            account = None
            if cmd.account_external_id is not None:
                account = await self.account_repo.get_by_external_id(cmd.account_external_id)

            await self.auth_service.request_magic_link(
                email,
                ClientInfo(user_agent=cmd.user_agent, ip_address=cmd.ip_address),
                account=account,
            )
            return MagicLinkRequested()


# =============================================================================
# Sign up
# =============================================================================


class SignUp(Command):
    email: str
    user_agent: str | None = None
    ip_address: str | None = None


class SignUpHandler(CommandHandler[SignUp, MagicLinkRequested]):
    __auth__ = public()
    auth_service: AuthService

    async def run(self, cmd: SignUp) -> MagicLinkRequested:
        with logfire.span("SignUp"):
            await self.auth_service.sign_up(
                parse_email(cmd.email),
                ClientInfo(user_agent=cmd.user_agent, ip_address=cmd.ip_address),
            )
            return MagicLinkRequested()


# =============================================================================
# Redeem a magic link
# =============================================================================


class RedeemMagicLink(Command):
    token: str
    user_agent: str | None = None
    ip_address: str | None = None


class SessionIssued(Result):
    """A new session, and how to hand it to the browser."""

    session_id: str
    identity_id: str
    user_id: str | None
    cookie_value: str
    cookie_path: str  # account path for account-scoped sessions, else "/"
    redirect_to: str


class RedeemMagicLinkHandler(CommandHandler[RedeemMagicLink, SessionIssued]):
    __auth__ = public()
    auth_service: AuthService
    token_service: TokenService

    async def run(self, cmd: RedeemMagicLink) -> SessionIssued:
        with logfire.span("RedeemMagicLink"):
            issued = await self.auth_service.redeem_magic_link(
                cmd.token,
                ClientInfo(user_agent=cmd.user_agent, ip_address=cmd.ip_address),
            )
            path = issued.account.path if issued.account else "/"
            return SessionIssued(
                session_id=str(issued.session.id),
                identity_id=str(issued.identity.id),
                user_id=str(issued.session.user_id) if issued.session.user_id else None,
                cookie_value=self.token_service.sign_session_id(issued.session.id),
                cookie_path=path,
                redirect_to=path,
            )


# =============================================================================
# Logout
# =============================================================================


class EndSession(Command):
    pass


class SessionEnded(Result):
    cookie_path: str


class EndSessionHandler(CommandHandler[EndSession, SessionEnded]):
    __auth__ = authenticated()
    current: Current
    auth_service: AuthService

    async def run(self, cmd: EndSession) -> SessionEnded:
        with logfire.span("EndSession"):
            assert self.current.session is not None  # Guaranteed by __auth__ gate
            await self.auth_service.end_session(self.current.session)
            account = self.current.account
            return SessionEnded(cookie_path=account.path if account else "/")
