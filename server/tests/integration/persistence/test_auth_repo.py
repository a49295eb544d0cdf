"""Integration tests for the SQL auth repositories."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tessera.domain.auth.model.account import Account
from tessera.domain.auth.model.identity import Identity
from tessera.domain.auth.model.session import Session
from tessera.domain.auth.model.user import User
from tessera.domain.auth.model.value import ClientInfo, Email, SessionId
from tessera.infrastructure.persistence.repository.auth import (
    SqlAccountRepository,
    SqlIdentityRepository,
    SqlSessionRepository,
    SqlUserRepository,
)


async def _seed(db_session: AsyncSession) -> tuple[Identity, Account, User]:
    identity = Identity.create(Email("ada@example.com"))
    await SqlIdentityRepository(db_session).save(identity)
    account = Account.create("Acme", external_id=1234567)
    await SqlAccountRepository(db_session).save(account)
    user = User.create(account.id, identity.id, "Ada")
    await SqlUserRepository(db_session).save(user)
    return identity, account, user


class TestIdentityRepository:
    @pytest.mark.asyncio
    async def test_save_and_get_by_email(self, db_session: AsyncSession):
        repo = SqlIdentityRepository(db_session)
        identity = Identity.create(Email("ada@example.com"))

        await repo.save(identity)
        found = await repo.get_by_email(Email("ADA@example.com"))

        assert found is not None
        assert found.id == identity.id
        assert found.created_at == identity.created_at
        assert found.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_update_verification(self, db_session: AsyncSession):
        repo = SqlIdentityRepository(db_session)
        identity = Identity.create(Email("ada@example.com"))
        await repo.save(identity)

        identity.verify_email()
        await repo.save(identity)

        found = await repo.get(identity.id)
        assert found is not None and found.email_verified

    @pytest.mark.asyncio
    async def test_email_is_unique(self, db_session: AsyncSession):
        repo = SqlIdentityRepository(db_session)
        await repo.save(Identity.create(Email("ada@example.com")))

        with pytest.raises(IntegrityError):
            await repo.save(Identity.create(Email("ada@example.com")))


class TestAccountRepository:
    @pytest.mark.asyncio
    async def test_get_by_external_id(self, db_session: AsyncSession):
        _, account, _ = await _seed(db_session)

        found = await SqlAccountRepository(db_session).get_by_external_id(1234567)

        assert found is not None
        assert found.id == account.id
        assert await SqlAccountRepository(db_session).get_by_external_id(7654321) is None


class TestUserRepository:
    @pytest.mark.asyncio
    async def test_membership_lookup(self, db_session: AsyncSession):
        identity, account, user = await _seed(db_session)
        repo = SqlUserRepository(db_session)

        found = await repo.get_by_account_and_identity(account.id, identity.id)

        assert found is not None and found.id == user.id
        assert [u.id for u in await repo.list_by_account(account.id)] == [user.id]

    @pytest.mark.asyncio
    async def test_saving_a_user_touches_the_account(self, db_session: AsyncSession):
        _, account, user = await _seed(db_session)
        user.rename("Ada L.")
        user.touch(account.updated_at + timedelta(seconds=30))

        await SqlUserRepository(db_session).save(user)

        reloaded = await SqlAccountRepository(db_session).get(account.id)
        assert reloaded is not None
        assert reloaded.updated_at == user.updated_at

    @pytest.mark.asyncio
    async def test_touch_never_moves_the_account_backwards(self, db_session: AsyncSession):
        _, account, user = await _seed(db_session)
        account.touch(account.updated_at + timedelta(hours=1))
        await SqlAccountRepository(db_session).save(account)

        await SqlUserRepository(db_session).save(user)

        reloaded = await SqlAccountRepository(db_session).get(account.id)
        assert reloaded is not None
        assert reloaded.updated_at == account.updated_at


class TestSessionRepository:
    @pytest.mark.asyncio
    async def test_add_get_delete(self, db_session: AsyncSession):
        identity, _, user = await _seed(db_session)
        repo = SqlSessionRepository(db_session)
        session = Session.create(identity, ClientInfo(user_agent="pytest", ip_address="::1"), user)

        await repo.add(session)
        found = await repo.get(session.id)

        assert found == session
        assert await repo.delete(session.id)
        assert await repo.get(session.id) is None
        assert not await repo.delete(session.id)

    @pytest.mark.asyncio
    async def test_every_sign_in_is_a_separate_row(self, db_session: AsyncSession):
        identity, _, _ = await _seed(db_session)
        repo = SqlSessionRepository(db_session)

        await repo.add(Session.create(identity, ClientInfo()))
        await repo.add(Session.create(identity, ClientInfo()))

        assert len(await repo.list_by_identity(identity.id)) == 2

    @pytest.mark.asyncio
    async def test_unknown_session(self, db_session: AsyncSession):
        assert await SqlSessionRepository(db_session).get(SessionId.generate()) is None
