"""RenameUser command and handler."""

from datetime import datetime
from uuid import UUID

import logfire

from tessera.domain.account.service.account import AccountService
from tessera.domain.auth.model.current import Current
from tessera.domain.auth.model.value import UserId
from tessera.domain.auth.port.repository import UserRepository
from tessera.domain.shared.authorization.gate import authenticated
from tessera.domain.shared.command import Command, CommandHandler, Result
from tessera.domain.shared.error import AuthorizationError, NotFoundError


class RenameUser(Command):
    account_external_id: int
    user_id: UUID
    name: str


class UserRenamed(Result):
    id: str
    name: str
    updated_at: datetime
    account_updated_at: datetime


class RenameUserHandler(CommandHandler[RenameUser, UserRenamed]):
    __auth__ = authenticated()
    current: Current
    account_service: AccountService
    user_repo: UserRepository

    async def run(self, cmd: RenameUser) -> UserRenamed:
        with logfire.span("RenameUser"):
            account = await self.account_service.get_by_external_id(cmd.account_external_id)

            user = await self.user_repo.get(UserId(cmd.user_id))
            if user is None or user.account_id != account.id:
                raise NotFoundError(f"User not found: {cmd.user_id}", code="user_not_found")

            actor = await self.account_service.membership(account, self.current)
            if not user.can_be_renamed_by(actor):
                raise AuthorizationError("You can only rename yourself", code="forbidden")

            user.rename(cmd.name)
            await self.user_repo.save(user)

            # Saving the user touched the account
            account = await self.account_service.get_by_external_id(cmd.account_external_id)
            return UserRenamed(
                id=str(user.id),
                name=user.name,
                updated_at=user.updated_at,
                account_updated_at=account.updated_at,
            )
