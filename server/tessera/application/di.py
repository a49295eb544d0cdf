from dishka import AsyncContainer, from_context, make_async_container

from tessera.config import Config
from tessera.domain.account.util.di import AccountProvider
from tessera.domain.auth.util.di import AuthProvider
from tessera.infrastructure.auth import AuthInfraProvider
from tessera.infrastructure.cache import CacheProvider
from tessera.infrastructure.persistence import PersistenceProvider
from tessera.util.di.base import Provider
from tessera.util.di.scope import Scope


class ConfigProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    return make_async_container(
        ConfigProvider(),
        PersistenceProvider(),
        CacheProvider(),
        AuthProvider(),
        AuthInfraProvider(),
        AccountProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
