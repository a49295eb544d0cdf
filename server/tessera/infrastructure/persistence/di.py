from typing import AsyncIterable

from dishka import provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tessera.config import Config
from tessera.domain.auth.port.repository import (
    AccountRepository,
    IdentityRepository,
    SessionRepository,
    UserRepository,
)
from tessera.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
)
from tessera.infrastructure.persistence.repository.auth import (
    SqlAccountRepository,
    SqlIdentityRepository,
    SqlSessionRepository,
    SqlUserRepository,
)
from tessera.util.di.base import Provider
from tessera.util.di.scope import Scope


class PersistenceProvider(Provider):
    # APP-scoped factories
    @provide(scope=Scope.APP)
    async def get_engine(self, config: Config) -> AsyncIterable[AsyncEngine]:
        engine = create_db_engine(config.database)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(self, engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    # UOW-scoped session (one per unit of work), committed when the unit ends
    @provide(scope=Scope.UOW)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterable[AsyncSession]:
        async with session_factory() as session:
            yield session
            await session.commit()

    # UOW-scoped repositories
    identity_repo = provide(SqlIdentityRepository, scope=Scope.UOW, provides=IdentityRepository)
    account_repo = provide(SqlAccountRepository, scope=Scope.UOW, provides=AccountRepository)
    user_repo = provide(SqlUserRepository, scope=Scope.UOW, provides=UserRepository)
    session_repo = provide(SqlSessionRepository, scope=Scope.UOW, provides=SessionRepository)
