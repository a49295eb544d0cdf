"""SQL repository implementations for the auth domain."""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

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
from tessera.domain.auth.port.repository import (
    AccountRepository,
    IdentityRepository,
    SessionRepository,
    UserRepository,
)
from tessera.infrastructure.persistence.tables import (
    accounts_table,
    identities_table,
    sessions_table,
    users_table,
)


def _utc(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo on the way back; stored values are always UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _row_to_identity(row: dict) -> Identity:
    """Convert a database row to an Identity model."""
    return Identity(
        id=IdentityId(UUID(row["id"])),
        email=Email(row["email"]),
        email_verified_at=_utc(row["email_verified_at"]),
        created_at=_utc(row["created_at"]),
        updated_at=_utc(row["updated_at"]),
    )


def _identity_to_dict(identity: Identity) -> dict:
    """Convert an Identity model to a database row dict."""
    return {
        "id": str(identity.id),
        "email": str(identity.email),
        "email_verified_at": identity.email_verified_at,
        "created_at": identity.created_at,
        "updated_at": identity.updated_at,
    }


def _row_to_account(row: dict) -> Account:
    return Account(
        id=AccountId(UUID(row["id"])),
        external_id=row["external_id"],
        name=row["name"],
        created_at=_utc(row["created_at"]),
        updated_at=_utc(row["updated_at"]),
    )


def _account_to_dict(account: Account) -> dict:
    return {
        "id": str(account.id),
        "external_id": account.external_id,
        "name": account.name,
        "created_at": account.created_at,
        "updated_at": account.updated_at,
    }


def _row_to_user(row: dict) -> User:
    return User(
        id=UserId(UUID(row["id"])),
        account_id=AccountId(UUID(row["account_id"])),
        identity_id=IdentityId(UUID(row["identity_id"])),
        name=row["name"],
        created_at=_utc(row["created_at"]),
        updated_at=_utc(row["updated_at"]),
    )


def _user_to_dict(user: User) -> dict:
    return {
        "id": str(user.id),
        "account_id": str(user.account_id),
        "identity_id": str(user.identity_id),
        "name": user.name,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def _row_to_session(row: dict) -> Session:
    """Convert a database row to a Session model."""
    return Session(
        id=SessionId(UUID(row["id"])),
        identity_id=IdentityId(UUID(row["identity_id"])),
        user_id=UserId(UUID(row["user_id"])) if row["user_id"] else None,
        user_agent=row["user_agent"],
        ip_address=row["ip_address"],
        created_at=_utc(row["created_at"]),
    )


def _session_to_dict(session: Session) -> dict:
    return {
        "id": str(session.id),
        "identity_id": str(session.identity_id),
        "user_id": str(session.user_id) if session.user_id else None,
        "user_agent": session.user_agent,
        "ip_address": session.ip_address,
        "created_at": session.created_at,
    }


class SqlIdentityRepository(IdentityRepository):
    """SQLAlchemy implementation of IdentityRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, identity_id: IdentityId) -> Identity | None:
        stmt = select(identities_table).where(identities_table.c.id == str(identity_id))
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_identity(dict(row)) if row else None

    async def get_by_email(self, email: Email) -> Identity | None:
        stmt = select(identities_table).where(identities_table.c.email == str(email))
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_identity(dict(row)) if row else None

    async def save(self, identity: Identity) -> None:
        identity_dict = _identity_to_dict(identity)
        existing = await self.get(identity.id)

        if existing:
            stmt = (
                update(identities_table)
                .where(identities_table.c.id == str(identity.id))
                .values(**identity_dict)
            )
        else:
            stmt = insert(identities_table).values(**identity_dict)

        await self.session.execute(stmt)
        await self.session.flush()


class SqlAccountRepository(AccountRepository):
    """SQLAlchemy implementation of AccountRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, account_id: AccountId) -> Account | None:
        stmt = select(accounts_table).where(accounts_table.c.id == str(account_id))
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_account(dict(row)) if row else None

    async def get_by_external_id(self, external_id: int) -> Account | None:
        stmt = select(accounts_table).where(accounts_table.c.external_id == external_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_account(dict(row)) if row else None

    async def save(self, account: Account) -> None:
        account_dict = _account_to_dict(account)
        existing = await self.get(account.id)

        if existing:
            stmt = (
                update(accounts_table)
                .where(accounts_table.c.id == str(account.id))
                .values(**account_dict)
            )
        else:
            stmt = insert(accounts_table).values(**account_dict)

        await self.session.execute(stmt)
        await self.session.flush()


class SqlUserRepository(UserRepository):
    """SQLAlchemy implementation of UserRepository.

    `save` touches the owning account in the same transaction, so anything
    keyed on the account notices member changes.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, user_id: UserId) -> User | None:
        stmt = select(users_table).where(users_table.c.id == str(user_id))
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_user(dict(row)) if row else None

    async def get_by_account_and_identity(
        self, account_id: AccountId, identity_id: IdentityId
    ) -> User | None:
        stmt = select(users_table).where(
            users_table.c.account_id == str(account_id),
            users_table.c.identity_id == str(identity_id),
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_user(dict(row)) if row else None

    async def list_by_account(self, account_id: AccountId) -> list[User]:
        stmt = (
            select(users_table)
            .where(users_table.c.account_id == str(account_id))
            .order_by(users_table.c.created_at, users_table.c.id)
        )
        result = await self.session.execute(stmt)
        return [_row_to_user(dict(row)) for row in result.mappings().all()]

    async def save(self, user: User) -> None:
        user_dict = _user_to_dict(user)
        existing = await self.get(user.id)

        if existing:
            stmt = update(users_table).where(users_table.c.id == str(user.id)).values(**user_dict)
        else:
            stmt = insert(users_table).values(**user_dict)

        await self.session.execute(stmt)

        # Touch the account, never moving its timestamp backwards
        await self.session.execute(
            update(accounts_table)
            .where(
                accounts_table.c.id == str(user.account_id),
                accounts_table.c.updated_at < user.updated_at,
            )
            .values(updated_at=user.updated_at)
        )
        await self.session.flush()


class SqlSessionRepository(SessionRepository):
    """SQLAlchemy implementation of SessionRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, session_id: SessionId) -> Session | None:
        stmt = select(sessions_table).where(sessions_table.c.id == str(session_id))
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_session(dict(row)) if row else None

    async def add(self, session: Session) -> None:
        await self.session.execute(insert(sessions_table).values(**_session_to_dict(session)))
        await self.session.flush()

    async def delete(self, session_id: SessionId) -> bool:
        result = await self.session.execute(
            delete(sessions_table).where(sessions_table.c.id == str(session_id))
        )
        await self.session.flush()
        return result.rowcount > 0

    async def list_by_identity(self, identity_id: IdentityId) -> list[Session]:
        stmt = (
            select(sessions_table)
            .where(sessions_table.c.identity_id == str(identity_id))
            .order_by(sessions_table.c.created_at)
        )
        result = await self.session.execute(stmt)
        return [_row_to_session(dict(row)) for row in result.mappings().all()]
