"""GetCurrentSession query and handler."""

from datetime import datetime

from pydantic import BaseModel

from tessera.domain.auth.model.current import Current
from tessera.domain.shared.authorization.gate import authenticated
from tessera.domain.shared.query import Query, QueryHandler
from tessera.domain.shared.query import Result as QueryResult


class GetCurrentSession(Query):
    pass


class UserSummary(BaseModel):
    id: str
    name: str
    account_external_id: int | None
    account_path: str | None


class CurrentSessionResult(QueryResult):
    session_id: str
    created_at: datetime
    user_agent: str | None
    ip_address: str | None
    identity_id: str
    email: str
    email_verified: bool
    user: UserSummary | None


class GetCurrentSessionHandler(QueryHandler[GetCurrentSession, CurrentSessionResult]):
    __auth__ = authenticated()
    current: Current

    async def run(self, query: GetCurrentSession) -> CurrentSessionResult:
        session, identity = self.current.session, self.current.identity
        assert session is not None and identity is not None  # Guaranteed by __auth__ gate

        user = None
        if self.current.user is not None:
            account = self.current.account
            user = UserSummary(
                id=str(self.current.user.id),
                name=self.current.user.name,
                account_external_id=account.external_id if account else None,
                account_path=account.path if account else None,
            )

        return CurrentSessionResult(
            session_id=str(session.id),
            created_at=session.created_at,
            user_agent=session.user_agent,
            ip_address=session.ip_address,
            identity_id=str(identity.id),
            email=str(identity.email),
            email_verified=identity.email_verified,
            user=user,
        )
