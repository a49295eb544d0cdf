"""Current: the per-request authentication context."""

from dataclasses import dataclass

from tessera.domain.auth.model.account import Account
from tessera.domain.auth.model.identity import Identity
from tessera.domain.auth.model.session import Session
from tessera.domain.auth.model.user import User


@dataclass(frozen=True)
class Current:
    """Who is making this request.

    Resolved once per request (dishka UOW scope) from the session cookie and
    passed explicitly to handlers. There is no process-wide instance: two
    concurrent requests always hold two separate values.
    """

    session: Session | None = None
    identity: Identity | None = None
    user: User | None = None
    account: Account | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None and self.identity is not None

    def is_member_of(self, account: Account) -> bool:
        return self.user is not None and self.user.account_id == account.id


ANONYMOUS = Current()
