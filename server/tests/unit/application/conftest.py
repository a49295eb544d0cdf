"""Fixtures for HTTP-level tests against the full app (in-memory SQLite)."""

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from tessera.application.api.rest.app import create_app
from tessera.config import AuthConfig, Config, DatabaseConfig, JwtConfig, SessionConfig
from tessera.domain.account.service.account import AccountService
from tessera.domain.auth.model.account import Account
from tessera.domain.auth.model.identity import Identity
from tessera.domain.auth.model.user import User
from tessera.domain.auth.model.value import Email
from tessera.domain.auth.port.repository import IdentityRepository
from tessera.domain.auth.service.token import TokenService
from tessera.util.di.scope import Scope

SECRET = "test-secret-for-route-tests-min-32"


@pytest.fixture
def config() -> Config:
    return Config(
        database=DatabaseConfig(url="sqlite+aiosqlite:///:memory:"),
        auth=AuthConfig(jwt=JwtConfig(secret=SECRET), session=SessionConfig(secure=False)),
    )


@pytest.fixture
def token_service(config: Config) -> TokenService:
    return TokenService(_config=config.auth)


@pytest.fixture
def client(config: Config) -> Iterator[TestClient]:
    app = create_app(config)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def create_account(client: TestClient) -> Callable[..., tuple[Account, User]]:
    """Create an account with one member, the way `tessera accounts create` does."""
    container = client.app.state.dishka_container  # type: ignore[attr-defined]

    async def _create(external_id: int, email: str, name: str) -> tuple[Account, User]:
        async with container(scope=Scope.UOW) as uow:
            service = await uow.get(AccountService)
            return await service.create_account("Acme", Email(email), name, external_id)

    def create(external_id: int = 1234567, email: str = "ada@example.com", name: str = "Ada"):
        return client.portal.call(_create, external_id, email, name)  # type: ignore[union-attr]

    return create


@pytest.fixture
def find_identity(client: TestClient) -> Callable[[str], Identity | None]:
    container = client.app.state.dishka_container  # type: ignore[attr-defined]

    async def _find(email: str) -> Identity | None:
        async with container(scope=Scope.UOW) as uow:
            repo = await uow.get(IdentityRepository)
            return await repo.get_by_email(Email(email))

    def find(email: str) -> Identity | None:
        return client.portal.call(_find, email)  # type: ignore[union-attr]

    return find


@pytest.fixture
def sign_in(client: TestClient, token_service: TokenService):
    """Redeem a freshly minted magic link, leaving the session cookie in the client."""

    def sign_in(user: User | Identity, account: Account | None = None):
        identity_id = user.identity_id if isinstance(user, User) else user.id
        token = token_service.create_magic_link_token(
            identity_id, account.id if account else None
        )
        response = client.get(
            "/session/magic_link", params={"token": token}, follow_redirects=False
        )
        assert response.status_code == 303
        return response

    return sign_in
