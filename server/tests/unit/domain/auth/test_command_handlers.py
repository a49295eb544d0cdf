"""Tests for session and identity command handlers."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from tessera.domain.auth.command.identity import (
    SendEmailVerification,
    SendEmailVerificationHandler,
)
from tessera.domain.auth.command.session import (
    CHECK_YOUR_EMAIL,
    EndSession,
    EndSessionHandler,
    RedeemMagicLink,
    RedeemMagicLinkHandler,
    RequestMagicLink,
    RequestMagicLinkHandler,
)
from tessera.domain.auth.model.account import Account
from tessera.domain.auth.model.current import ANONYMOUS, Current
from tessera.domain.auth.model.identity import Identity
from tessera.domain.auth.model.session import Session
from tessera.domain.auth.model.user import User
from tessera.domain.auth.model.value import ClientInfo, Email
from tessera.domain.auth.query.get_current_session import (
    GetCurrentSession,
    GetCurrentSessionHandler,
)
from tessera.domain.auth.service.auth import IssuedSession
from tessera.domain.shared.error import AuthorizationError, ValidationError


def _signed_in(scoped: bool = False) -> Current:
    identity = Identity.create(Email("ada@example.com"))
    if not scoped:
        return Current(session=Session.create(identity, ClientInfo()), identity=identity)
    account = Account.create("Acme", external_id=1234567)
    user = User.create(account.id, identity.id, "Ada")
    return Current(
        session=Session.create(identity, ClientInfo(), user),
        identity=identity,
        user=user,
        account=account,
    )


class TestRequestMagicLinkHandler:
    @pytest.mark.asyncio
    async def test_public_and_uniform(self):
        auth_service = AsyncMock()
        account_repo = AsyncMock()
        handler = RequestMagicLinkHandler(auth_service=auth_service, account_repo=account_repo)

        result = await handler.run(RequestMagicLink(email=" Ada@Example.com "))

        assert result.message == CHECK_YOUR_EMAIL
        email = auth_service.request_magic_link.call_args.args[0]
        assert str(email) == "ada@example.com"
        account_repo.get_by_external_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_looks_up_the_account_from_the_path(self):
        account = Account.create("Acme", external_id=1234567)
        auth_service = AsyncMock()
        account_repo = AsyncMock()
        account_repo.get_by_external_id.return_value = account
        handler = RequestMagicLinkHandler(auth_service=auth_service, account_repo=account_repo)

        await handler.run(RequestMagicLink(email="ada@example.com", account_external_id=1234567))

        assert auth_service.request_magic_link.call_args.kwargs["account"] == account

    @pytest.mark.asyncio
    async def test_unknown_account_answers_the_same(self):
        auth_service = AsyncMock()
        account_repo = AsyncMock()
        account_repo.get_by_external_id.return_value = None
        handler = RequestMagicLinkHandler(auth_service=auth_service, account_repo=account_repo)

        result = await handler.run(
            RequestMagicLink(email="ada@example.com", account_external_id=7654321)
        )

        assert result.message == CHECK_YOUR_EMAIL
        assert auth_service.request_magic_link.call_args.kwargs["account"] is None

    @pytest.mark.asyncio
    async def test_malformed_email_is_a_validation_error(self):
        handler = RequestMagicLinkHandler(auth_service=AsyncMock(), account_repo=AsyncMock())

        with pytest.raises(ValidationError) as exc_info:
            await handler.run(RequestMagicLink(email="not-an-email"))
        assert exc_info.value.field == "email"


class TestRedeemMagicLinkHandler:
    @pytest.mark.asyncio
    async def test_scoped_session_cookie_uses_account_path(self):
        current = _signed_in(scoped=True)
        assert current.session is not None and current.identity is not None
        auth_service = AsyncMock()
        auth_service.redeem_magic_link.return_value = IssuedSession(
            session=current.session, identity=current.identity, account=current.account
        )
        token_service = MagicMock()
        token_service.sign_session_id.return_value = "signed.value"
        handler = RedeemMagicLinkHandler(auth_service=auth_service, token_service=token_service)

        result = await handler.run(RedeemMagicLink(token="t", user_agent="ua", ip_address="::1"))

        assert result.cookie_path == "/1234567"
        assert result.redirect_to == "/1234567"
        assert result.cookie_value == "signed.value"
        assert current.user is not None
        assert result.user_id == str(current.user.id)

    @pytest.mark.asyncio
    async def test_unscoped_session_cookie_uses_root_path(self):
        current = _signed_in()
        assert current.session is not None and current.identity is not None
        auth_service = AsyncMock()
        auth_service.redeem_magic_link.return_value = IssuedSession(
            session=current.session, identity=current.identity, account=None
        )
        token_service = MagicMock()
        token_service.sign_session_id.return_value = "signed.value"
        handler = RedeemMagicLinkHandler(auth_service=auth_service, token_service=token_service)

        result = await handler.run(RedeemMagicLink(token="t"))

        assert result.cookie_path == "/"
        assert result.user_id is None


class TestAuthenticatedHandlers:
    @pytest.mark.asyncio
    async def test_end_session_requires_a_session(self):
        handler = EndSessionHandler(current=ANONYMOUS, auth_service=AsyncMock())

        with pytest.raises(AuthorizationError) as exc_info:
            await handler.run(EndSession())
        assert exc_info.value.code == "missing_session"

    @pytest.mark.asyncio
    async def test_end_session_clears_the_scoped_path(self):
        current = _signed_in(scoped=True)
        auth_service = AsyncMock()
        handler = EndSessionHandler(current=current, auth_service=auth_service)

        result = await handler.run(EndSession())

        auth_service.end_session.assert_awaited_once_with(current.session)
        assert result.cookie_path == "/1234567"

    @pytest.mark.asyncio
    async def test_send_email_verification_requires_a_session(self):
        auth_service = AsyncMock()
        handler = SendEmailVerificationHandler(current=ANONYMOUS, auth_service=auth_service)

        with pytest.raises(AuthorizationError):
            await handler.run(SendEmailVerification())
        auth_service.send_email_verification.assert_not_called()

    @pytest.mark.asyncio
    async def test_current_session_reports_the_request_context(self):
        current = _signed_in(scoped=True)
        handler = GetCurrentSessionHandler(current=current)

        result = await handler.run(GetCurrentSession())

        assert result.email == "ada@example.com"
        assert result.user is not None
        assert result.user.account_path == "/1234567"

    @pytest.mark.asyncio
    async def test_current_session_rejects_anonymous(self):
        handler = GetCurrentSessionHandler(current=ANONYMOUS)

        with pytest.raises(AuthorizationError):
            await handler.run(GetCurrentSession())
