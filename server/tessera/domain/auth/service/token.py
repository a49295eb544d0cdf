"""Token service for signed magic links, email verification and session cookies."""

import hashlib
import hmac
import logging
import secrets
from base64 import urlsafe_b64decode, urlsafe_b64encode
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import jwt

from tessera.config import AuthConfig
from tessera.domain.auth.model.value import AccountId, IdentityId, SessionId
from tessera.domain.shared.error import AuthenticationError, ConfigurationError
from tessera.domain.shared.service import Service

logger = logging.getLogger(__name__)

MAGIC_LINK_PURPOSE = "magic_link"
EMAIL_VERIFICATION_PURPOSE = "email_verification"
_SESSION_COOKIE_CONTEXT = b"session_cookie"


@dataclass(frozen=True)
class MagicLinkClaims:
    """Verified contents of a magic-link token."""

    identity_id: IdentityId
    account_id: AccountId | None
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class EmailVerificationClaims:
    identity_id: IdentityId
    email: str


class TokenService(Service):
    """Signs and verifies everything Tessera hands to a browser.

    - Magic-link and email-verification tokens are JWTs (HS256) tagged with a
      purpose, which is also used as the audience so a token minted for one
      purpose never validates for another.
    - Session cookies carry the session id signed with HMAC-SHA256.

    Expiry is checked against an explicit `now` with zero leeway.
    """

    _config: AuthConfig

    def __post_init__(self) -> None:
        if not self._config.jwt.secret:
            raise ConfigurationError("auth.jwt.secret must be set", code="missing_secret")

    # -------------------------------------------------------------------------
    # Magic links
    # -------------------------------------------------------------------------

    @property
    def magic_link_ttl(self) -> timedelta:
        return timedelta(minutes=self._config.magic_link.expire_minutes)

    def create_magic_link_token(
        self,
        identity_id: IdentityId,
        account_id: AccountId | None = None,
        now: datetime | None = None,
    ) -> str:
        """Create a signed, time-boxed sign-in token for an identity.

        Args:
            identity_id: Who the link signs in.
            account_id: Account the link was requested from, if any. Redeeming
                scopes the session to this account when the identity is a member.
            now: Issue time (defaults to the current time).

        Returns:
            Encoded JWT string
        """
        claims: dict[str, Any] = {}
        if account_id is not None:
            claims["account"] = str(account_id)
        return self._encode(MAGIC_LINK_PURPOSE, str(identity_id), self.magic_link_ttl, now, claims)

    def verify_magic_link_token(self, token: str, now: datetime | None = None) -> MagicLinkClaims:
        """Validate signature, purpose and expiry of a magic-link token.

        Raises:
            AuthenticationError: For any failure, without saying which.
        """
        payload = self._decode(MAGIC_LINK_PURPOSE, token, now)
        try:
            account = payload.get("account")
            return MagicLinkClaims(
                identity_id=IdentityId(UUID(payload["sub"])),
                account_id=AccountId(UUID(account)) if account else None,
                issued_at=datetime.fromtimestamp(payload["iat"], UTC),
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Magic link token has malformed claims: %s", e)
            raise AuthenticationError() from e

    # -------------------------------------------------------------------------
    # Email verification
    # -------------------------------------------------------------------------

    def create_email_verification_token(
        self, identity_id: IdentityId, email: str, now: datetime | None = None
    ) -> str:
        ttl = timedelta(hours=self._config.email_verification.expire_hours)
        return self._encode(
            EMAIL_VERIFICATION_PURPOSE, str(identity_id), ttl, now, {"email": email}
        )

    def verify_email_verification_token(
        self, token: str, now: datetime | None = None
    ) -> EmailVerificationClaims:
        payload = self._decode(EMAIL_VERIFICATION_PURPOSE, token, now)
        try:
            return EmailVerificationClaims(
                identity_id=IdentityId(UUID(payload["sub"])),
                email=payload["email"],
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Email verification token has malformed claims: %s", e)
            raise AuthenticationError("Invalid or expired verification link") from e

    # -------------------------------------------------------------------------
    # Session cookies
    # -------------------------------------------------------------------------

    def sign_session_id(self, session_id: SessionId) -> str:
        """Create the signed cookie value for a session.

        Returns:
            URL-safe value in format: payload.signature
        """
        payload_bytes = str(session_id).encode()
        payload_b64 = urlsafe_b64encode(payload_bytes).rstrip(b"=").decode()
        signature_b64 = urlsafe_b64encode(self._cookie_signature(payload_bytes)).rstrip(b"=")
        return f"{payload_b64}.{signature_b64.decode()}"

    def unsign_session_id(self, value: str) -> SessionId | None:
        """Verify a signed cookie value and return the session id if valid."""
        try:
            parts = value.split(".")
            if len(parts) != 2:
                return None

            payload_b64, signature_b64 = parts

            # Restore base64 padding
            payload_bytes = urlsafe_b64decode(payload_b64 + "==")
            signature = urlsafe_b64decode(signature_b64 + "==")

            if not hmac.compare_digest(signature, self._cookie_signature(payload_bytes)):
                logger.warning("Session cookie signature verification failed")
                return None

            return SessionId(UUID(payload_bytes.decode()))

        except (ValueError, UnicodeDecodeError) as e:
            logger.warning("Session cookie verification error: %s", e)
            return None

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _cookie_signature(self, payload: bytes) -> bytes:
        key = hmac.new(
            self._config.jwt.secret.encode(), _SESSION_COOKIE_CONTEXT, hashlib.sha256
        ).digest()
        return hmac.new(key, payload, hashlib.sha256).digest()

    def _encode(
        self,
        purpose: str,
        subject: str,
        ttl: timedelta,
        now: datetime | None,
        extra: dict[str, Any],
    ) -> str:
        now = now or datetime.now(UTC)
        payload = {
            "sub": subject,
            "purpose": purpose,
            "aud": purpose,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "jti": secrets.token_hex(16),
            **extra,
        }
        return jwt.encode(payload, self._config.jwt.secret, algorithm=self._config.jwt.algorithm)

    def _decode(self, purpose: str, token: str, now: datetime | None) -> dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                self._config.jwt.secret,
                algorithms=[self._config.jwt.algorithm],
                audience=purpose,
                options={
                    "require": ["exp", "iat", "sub", "aud"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as e:
            logger.info("Rejected %s token: %s", purpose, type(e).__name__)
            raise AuthenticationError() from e

        if payload.get("purpose") != purpose:
            logger.info("Rejected %s token: purpose mismatch", purpose)
            raise AuthenticationError()

        now = now or datetime.now(UTC)
        if now.timestamp() >= payload["exp"]:
            logger.info("Rejected %s token: expired", purpose)
            raise AuthenticationError()

        return payload
