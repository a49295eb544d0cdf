"""Repository ports for the auth domain."""

from abc import abstractmethod
from typing import Protocol

from tessera.domain.auth.model.account import Account
from tessera.domain.auth.model.identity import Identity
from tessera.domain.auth.model.session import Session
from tessera.domain.auth.model.user import User
from tessera.domain.auth.model.value import (
    AccountId,
    Email,
    IdentityId,
    SessionId,
    UserId,
)
from tessera.domain.shared.port import Port


class IdentityRepository(Port, Protocol):
    """Repository for Identity aggregate persistence."""

    @abstractmethod
    async def get(self, identity_id: IdentityId) -> Identity | None:
        """Get an identity by ID."""
        ...

    @abstractmethod
    async def get_by_email(self, email: Email) -> Identity | None:
        """Get an identity by normalized email."""
        ...

    @abstractmethod
    async def save(self, identity: Identity) -> None:
        """Save an identity (create or update)."""
        ...


class AccountRepository(Port, Protocol):
    """Repository for Account aggregate persistence."""

    @abstractmethod
    async def get(self, account_id: AccountId) -> Account | None: ...

    @abstractmethod
    async def get_by_external_id(self, external_id: int) -> Account | None:
        """Get an account by the number used in its URL path."""
        ...

    @abstractmethod
    async def save(self, account: Account) -> None: ...


class UserRepository(Port, Protocol):
    """Repository for User persistence.

    Implementations must bump the owning account's `updated_at` in the same
    unit of work whenever a user is saved.
    """

    @abstractmethod
    async def get(self, user_id: UserId) -> User | None: ...

    @abstractmethod
    async def get_by_account_and_identity(
        self, account_id: AccountId, identity_id: IdentityId
    ) -> User | None: ...

    @abstractmethod
    async def list_by_account(self, account_id: AccountId) -> list[User]:
        """List an account's members, oldest first."""
        ...

    @abstractmethod
    async def save(self, user: User) -> None: ...


class SessionRepository(Port, Protocol):
    """Repository for Session persistence."""

    @abstractmethod
    async def get(self, session_id: SessionId) -> Session | None: ...

    @abstractmethod
    async def add(self, session: Session) -> None:
        """Insert a new session row. Never updates an existing one."""
        ...

    @abstractmethod
    async def delete(self, session_id: SessionId) -> bool:
        """Delete a session. Returns True if a row was removed."""
        ...

    @abstractmethod
    async def list_by_identity(self, identity_id: IdentityId) -> list[Session]: ...
