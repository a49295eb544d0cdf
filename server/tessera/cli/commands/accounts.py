"""Account administration commands."""

import asyncio
import sys

import cyclopts
from sqlalchemy.ext.asyncio import AsyncEngine

from tessera.application.di import create_container
from tessera.cli.console import get_console
from tessera.config import Config
from tessera.domain.account.service.account import AccountService
from tessera.domain.auth.model.account import Account
from tessera.domain.auth.model.user import User
from tessera.domain.auth.model.value import Email
from tessera.domain.shared.error import TesseraError
from tessera.infrastructure.persistence.database import create_tables
from tessera.util.di.scope import Scope

app = cyclopts.App(name="accounts", help="Manage accounts")


async def _create(
    config: Config, name: str, owner_email: Email, owner_name: str, external_id: int | None
) -> tuple[Account, User]:
    container = create_container(config)
    try:
        if config.database.is_sqlite and config.database.auto_migrate:
            await create_tables(await container.get(AsyncEngine))
        async with container(scope=Scope.UOW) as uow:
            service = await uow.get(AccountService)
            return await service.create_account(name, owner_email, owner_name, external_id)
    finally:
        await container.close()


@app.command
def create(
    name: str,
    owner_email: str,
    owner_name: str,
    external_id: int | None = None,
) -> None:
    """Create an account and its first member.

    The owner signs in by requesting a magic link at the account's path.

    Args:
        name: Account name.
        owner_email: Email of the first member (identity created if new).
        owner_name: Display name of the first member.
        external_id: Seven-digit account number (random if omitted).
    """
    console = get_console()
    config = Config()  # type: ignore[call-arg]

    try:
        email = Email(owner_email)
    except ValueError:
        console.error(f"Invalid email address: {owner_email}")
        sys.exit(1)

    try:
        account, owner = asyncio.run(_create(config, name, email, owner_name, external_id))
    except TesseraError as e:
        console.error(e.message)
        sys.exit(1)

    console.success(f"Created account {account.name!r} at {account.path}")
    console.table(
        [{"id": str(owner.id), "name": owner.name, "email": str(email)}],
        [("id", "User"), ("name", "Name"), ("email", "Email")],
        title="Members",
    )
