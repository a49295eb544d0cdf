"""Tests for AuthProvider's per-request Current resolution."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from tessera.config import Config
from tessera.domain.auth.model.current import ANONYMOUS, Current
from tessera.domain.auth.model.identity import Identity
from tessera.domain.auth.model.session import Session
from tessera.domain.auth.model.value import ClientInfo, Email
from tessera.domain.auth.util.di.provider import AuthProvider, session_cookie_values


def _make_request(cookie_header: str | None = None) -> MagicMock:
    request = MagicMock()
    headers: dict[str, str] = {}
    if cookie_header is not None:
        headers["cookie"] = cookie_header
    request.headers = headers
    return request


def _signed_in() -> Current:
    identity = Identity.create(Email("ada@example.com"))
    return Current(session=Session.create(identity, ClientInfo()), identity=identity)


class TestSessionCookieValues:
    def test_no_header(self):
        assert session_cookie_values(_make_request(), "session_token") == []

    def test_keeps_every_value_in_order(self):
        request = _make_request("session_token=scoped.sig; theme=dark; session_token=root.sig")

        assert session_cookie_values(request, "session_token") == ["scoped.sig", "root.sig"]

    def test_ignores_other_cookies(self):
        request = _make_request("other_token=x.y; session_token_old=a.b")

        assert session_cookie_values(request, "session_token") == []


class TestGetCurrent:
    @pytest.mark.asyncio
    async def test_no_cookie_is_anonymous(self):
        auth_service = AsyncMock()
        provider = AuthProvider()

        current = await provider.get_current(_make_request(), Config(), auth_service)

        assert current is ANONYMOUS
        auth_service.resolve_current.assert_not_called()

    @pytest.mark.asyncio
    async def test_first_live_cookie_wins(self):
        signed_in = _signed_in()
        auth_service = AsyncMock()
        auth_service.resolve_current.side_effect = [ANONYMOUS, signed_in]
        provider = AuthProvider()

        current = await provider.get_current(
            _make_request("session_token=stale.sig; session_token=live.sig"),
            Config(),
            auth_service,
        )

        assert current is signed_in
        assert [c.args[0] for c in auth_service.resolve_current.call_args_list] == [
            "stale.sig",
            "live.sig",
        ]

    @pytest.mark.asyncio
    async def test_each_request_gets_its_own_current(self):
        ada, bob = _signed_in(), _signed_in()
        auth_service = AsyncMock()
        auth_service.resolve_current.side_effect = [ada, bob]
        provider = AuthProvider()

        first = await provider.get_current(
            _make_request("session_token=a.sig"), Config(), auth_service
        )
        second = await provider.get_current(
            _make_request("session_token=b.sig"), Config(), auth_service
        )

        assert first is ada
        assert second is bob
