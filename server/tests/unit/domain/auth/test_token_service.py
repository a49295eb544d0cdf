"""Unit tests for TokenService: magic-link tokens and session cookies."""

from datetime import UTC, datetime, timedelta

import jwt as pyjwt
import pytest

from tessera.config import AuthConfig, JwtConfig
from tessera.domain.auth.model.value import AccountId, IdentityId, SessionId
from tessera.domain.auth.service.token import MAGIC_LINK_PURPOSE, TokenService
from tessera.domain.shared.error import AuthenticationError, ConfigurationError

SECRET = "test-secret-key-for-signing-min-32"


def _make_token_service(secret: str = SECRET) -> TokenService:
    return TokenService(_config=AuthConfig(jwt=JwtConfig(secret=secret)))


@pytest.fixture
def token_service() -> TokenService:
    return _make_token_service()


class TestMagicLinkToken:
    def test_roundtrip_carries_identity_and_account(self, token_service: TokenService):
        identity_id = IdentityId.generate()
        account_id = AccountId.generate()

        token = token_service.create_magic_link_token(identity_id, account_id)
        claims = token_service.verify_magic_link_token(token)

        assert claims.identity_id == identity_id
        assert claims.account_id == account_id

    def test_account_is_optional(self, token_service: TokenService):
        token = token_service.create_magic_link_token(IdentityId.generate())

        assert token_service.verify_magic_link_token(token).account_id is None

    def test_payload_is_tagged_with_purpose(self, token_service: TokenService):
        token = token_service.create_magic_link_token(IdentityId.generate())

        payload = pyjwt.decode(token, options={"verify_signature": False})

        assert payload["purpose"] == MAGIC_LINK_PURPOSE
        assert payload["exp"] - payload["iat"] == 15 * 60

    def test_valid_just_before_expiry(self, token_service: TokenService):
        issued = datetime.now(UTC)
        token = token_service.create_magic_link_token(IdentityId.generate(), now=issued)

        claims = token_service.verify_magic_link_token(
            token, now=issued + timedelta(minutes=14, seconds=59)
        )

        assert claims.expires_at > claims.issued_at

    def test_rejected_after_fifteen_minutes(self, token_service: TokenService):
        issued = datetime.now(UTC)
        token = token_service.create_magic_link_token(IdentityId.generate(), now=issued)

        with pytest.raises(AuthenticationError):
            token_service.verify_magic_link_token(
                token, now=issued + timedelta(minutes=15, seconds=1)
            )

    def test_rejects_token_minted_for_another_purpose(self, token_service: TokenService):
        token = token_service.create_email_verification_token(
            IdentityId.generate(), "ada@example.com"
        )

        with pytest.raises(AuthenticationError):
            token_service.verify_magic_link_token(token)

    def test_rejects_tampered_token(self, token_service: TokenService):
        token = token_service.create_magic_link_token(IdentityId.generate())
        header, payload, signature = token.split(".")
        tampered = f"{header}.{payload}.{signature[:-2]}{'AA' if signature[-2:] != 'AA' else 'BB'}"

        with pytest.raises(AuthenticationError):
            token_service.verify_magic_link_token(tampered)

    def test_rejects_token_signed_with_other_secret(self, token_service: TokenService):
        other = _make_token_service("a-completely-different-secret-000")
        token = other.create_magic_link_token(IdentityId.generate())

        with pytest.raises(AuthenticationError):
            token_service.verify_magic_link_token(token)

    def test_rejects_garbage(self, token_service: TokenService):
        with pytest.raises(AuthenticationError):
            token_service.verify_magic_link_token("not-a-token")

    def test_failures_share_one_message(self, token_service: TokenService):
        issued = datetime.now(UTC)
        expired = token_service.create_magic_link_token(IdentityId.generate(), now=issued)

        with pytest.raises(AuthenticationError) as expired_exc:
            token_service.verify_magic_link_token(expired, now=issued + timedelta(hours=1))
        with pytest.raises(AuthenticationError) as garbage_exc:
            token_service.verify_magic_link_token("not-a-token")

        assert expired_exc.value.message == garbage_exc.value.message
        assert expired_exc.value.code == "invalid_or_expired"


class TestEmailVerificationToken:
    def test_roundtrip(self, token_service: TokenService):
        identity_id = IdentityId.generate()
        token = token_service.create_email_verification_token(identity_id, "ada@example.com")

        claims = token_service.verify_email_verification_token(token)

        assert claims.identity_id == identity_id
        assert claims.email == "ada@example.com"

    def test_magic_link_token_is_not_a_verification_token(self, token_service: TokenService):
        token = token_service.create_magic_link_token(IdentityId.generate())

        with pytest.raises(AuthenticationError):
            token_service.verify_email_verification_token(token)


class TestSessionCookie:
    def test_sign_and_unsign(self, token_service: TokenService):
        session_id = SessionId.generate()

        value = token_service.sign_session_id(session_id)

        assert token_service.unsign_session_id(value) == session_id

    def test_value_is_cookie_safe(self, token_service: TokenService):
        value = token_service.sign_session_id(SessionId.generate())

        allowed = set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_.")
        assert all(c in allowed for c in value)

    def test_rejects_tampered_payload(self, token_service: TokenService):
        value = token_service.sign_session_id(SessionId.generate())
        payload, signature = value.split(".")
        other_payload = token_service.sign_session_id(SessionId.generate()).split(".")[0]

        assert token_service.unsign_session_id(f"{other_payload}.{signature}") is None
        assert payload != other_payload

    def test_rejects_value_signed_with_other_secret(self, token_service: TokenService):
        other = _make_token_service("a-completely-different-secret-000")
        value = other.sign_session_id(SessionId.generate())

        assert token_service.unsign_session_id(value) is None

    @pytest.mark.parametrize("value", ["", "no-dot", "a.b.c", "!!!.???"])
    def test_rejects_malformed_values(self, token_service: TokenService, value: str):
        assert token_service.unsign_session_id(value) is None


class TestConfiguration:
    def test_missing_secret_fails_fast(self):
        with pytest.raises(ConfigurationError):
            TokenService(_config=AuthConfig(jwt=JwtConfig(secret="")))
