"""Auth service orchestrating magic-link sign-in and sessions."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from urllib.parse import urlencode

from tessera.config import AuthConfig
from tessera.domain.auth.model.account import Account
from tessera.domain.auth.model.current import ANONYMOUS, Current
from tessera.domain.auth.model.identity import Identity
from tessera.domain.auth.model.session import Session
from tessera.domain.auth.model.value import ClientInfo, Email, IdentityId
from tessera.domain.auth.port.mailer import MailMessage, Mailer
from tessera.domain.auth.port.rate_limiter import RateLimiter
from tessera.domain.auth.port.repository import (
    AccountRepository,
    IdentityRepository,
    SessionRepository,
    UserRepository,
)
from tessera.domain.auth.service.token import TokenService
from tessera.domain.shared.error import AuthenticationError, RateLimitedError
from tessera.domain.shared.service import Service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedSession:
    """A freshly created session and the account it is scoped to, if any."""

    session: Session
    identity: Identity
    account: Account | None


class AuthService(Service):
    """Orchestrates passwordless authentication.

    - request_magic_link: rate limit, then mail a sign-in link if the email is known
    - sign_up: create the identity if needed, then mail a sign-in link
    - redeem_magic_link: verify a link and open a new session
    - resolve_current: turn a session cookie into the request's Current context
    - end_session: log out

    Link requests return nothing, whether or not the email matched. Callers
    must answer every request the same way.
    """

    _identity_repo: IdentityRepository
    _account_repo: AccountRepository
    _user_repo: UserRepository
    _session_repo: SessionRepository
    _token_service: TokenService
    _rate_limiter: RateLimiter
    _mailer: Mailer
    _config: AuthConfig
    _base_url: str

    async def request_magic_link(
        self,
        email: Email,
        client: ClientInfo,
        account: Account | None = None,
        now: datetime | None = None,
    ) -> None:
        """Mail a sign-in link to `email` if an identity owns it.

        Raises:
            RateLimitedError: If the email or the source address exceeded the limit.
        """
        await self._check_rate_limit(email, client, now)

        identity = await self._identity_repo.get_by_email(email)
        if identity is None:
            # Same signing work as a real issuance, then nothing is sent
            self._token_service.create_magic_link_token(IdentityId.generate(), None, now)
            logger.info("Magic link requested for unknown email")
            return

        self._send_magic_link(identity, account, now)

    async def sign_up(self, email: Email, client: ClientInfo, now: datetime | None = None) -> None:
        """Create an identity for `email` if none exists, then mail a sign-in link.

        Raises:
            RateLimitedError: If the email or the source address exceeded the limit.
        """
        await self._check_rate_limit(email, client, now)

        identity = await self._identity_repo.get_by_email(email)
        if identity is None:
            identity = Identity.create(email)
            await self._identity_repo.save(identity)
            logger.info("New identity created: identity_id=%s", identity.id)

        self._send_magic_link(identity, None, now)

    async def redeem_magic_link(
        self,
        token: str,
        client: ClientInfo,
        now: datetime | None = None,
    ) -> IssuedSession:
        """Verify a magic link and create exactly one new session.

        If the link was requested from an account the identity belongs to, the
        session's active user is that membership.

        Raises:
            AuthenticationError: If the link is invalid, expired, or its identity is gone.
        """
        claims = self._token_service.verify_magic_link_token(token, now)

        identity = await self._identity_repo.get(claims.identity_id)
        if identity is None:
            logger.warning("Magic link for missing identity: identity_id=%s", claims.identity_id)
            raise AuthenticationError()

        account = None
        user = None
        if claims.account_id is not None:
            account = await self._account_repo.get(claims.account_id)
            if account is not None:
                user = await self._user_repo.get_by_account_and_identity(account.id, identity.id)
            if user is None:
                account = None

        if not identity.email_verified:
            identity.verify_email(now)
            await self._identity_repo.save(identity)

        session = Session.create(identity, client, user, now)
        await self._session_repo.add(session)

        logger.info(
            "Session created: session_id=%s, identity_id=%s, account=%s",
            session.id,
            identity.id,
            account.external_id if account else None,
        )
        return IssuedSession(session=session, identity=identity, account=account)

    async def resolve_current(self, cookie_value: str | None, now: datetime | None = None) -> Current:
        """Build the request context from a signed session cookie.

        Missing, tampered, unknown and expired cookies all resolve to anonymous.
        Expired sessions are deleted on sight.
        """
        if not cookie_value:
            return ANONYMOUS

        session_id = self._token_service.unsign_session_id(cookie_value)
        if session_id is None:
            return ANONYMOUS

        session = await self._session_repo.get(session_id)
        if session is None:
            return ANONYMOUS

        if session.is_expired(self.session_max_age, now):
            await self._session_repo.delete(session.id)
            logger.info("Expired session removed: session_id=%s", session.id)
            return ANONYMOUS

        identity = await self._identity_repo.get(session.identity_id)
        if identity is None:
            return ANONYMOUS

        user = await self._user_repo.get(session.user_id) if session.user_id else None
        account = await self._account_repo.get(user.account_id) if user else None

        return Current(session=session, identity=identity, user=user, account=account)

    async def end_session(self, session: Session) -> bool:
        """Destroy a session (logout)."""
        deleted = await self._session_repo.delete(session.id)
        logger.info("Session ended: session_id=%s", session.id)
        return deleted

    async def send_email_verification(self, identity: Identity, now: datetime | None = None) -> None:
        """Mail an email-verification link to an identity's address."""
        token = self._token_service.create_email_verification_token(
            identity.id, str(identity.email), now
        )
        url = f"{self._base_url}/identity/email_verification?{urlencode({'token': token})}"
        self._mailer.enqueue(
            MailMessage(
                to=str(identity.email),
                subject="Confirm your email address",
                body=f"Confirm your email address by opening this link:\n\n{url}\n\n"
                f"The link expires in {self._config.email_verification.expire_hours} hours.",
            )
        )

    async def verify_email(self, token: str, now: datetime | None = None) -> Identity:
        """Redeem an email-verification link.

        Raises:
            AuthenticationError: If the link is invalid, expired, or was issued
                for an address the identity no longer has.
        """
        claims = self._token_service.verify_email_verification_token(token, now)
        identity = await self._identity_repo.get(claims.identity_id)
        if identity is None or str(identity.email) != claims.email:
            raise AuthenticationError("Invalid or expired verification link")

        identity.verify_email(now)
        await self._identity_repo.save(identity)
        return identity

    @property
    def session_max_age(self) -> timedelta:
        return timedelta(days=self._config.session.max_age_days)

    async def _check_rate_limit(
        self, email: Email, client: ClientInfo, now: datetime | None
    ) -> None:
        # Keyed on the email string, not the identity, so unknown addresses
        # consume the same budget as known ones.
        limit = self._config.magic_link.rate_limit_requests
        window = timedelta(minutes=self._config.magic_link.rate_limit_window_minutes)

        keys = [f"magic_link:email:{email}"]
        if client.ip_address:
            keys.append(f"magic_link:ip:{client.ip_address}")

        rejected = await self._rate_limiter.hit_all(keys, limit, window, now)
        if rejected is not None:
            logger.warning("Magic link rate limit exceeded: key_type=%s", rejected.split(":")[1])
            raise RateLimitedError(
                "Too many sign-in requests. Try again later.",
                retry_after=int(window.total_seconds()),
            )

    def _send_magic_link(
        self, identity: Identity, account: Account | None, now: datetime | None
    ) -> None:
        token = self._token_service.create_magic_link_token(
            identity.id, account.id if account else None, now or datetime.now(UTC)
        )
        url = f"{self._base_url}/session/magic_link?{urlencode({'token': token})}"
        self._mailer.enqueue(
            MailMessage(
                to=str(identity.email),
                subject="Your sign-in link",
                body=f"Sign in by opening this link:\n\n{url}\n\n"
                f"The link expires in {self._config.magic_link.expire_minutes} minutes. "
                "If you did not ask for it, you can ignore this email.",
            )
        )
        logger.info("Magic link issued: identity_id=%s", identity.id)
