"""DI provider for account domain."""

from dishka import provide

from tessera.domain.account.command.rename_user import RenameUserHandler
from tessera.domain.account.query.get_account import GetAccountHandler
from tessera.domain.account.service.account import AccountService
from tessera.util.di.base import Provider
from tessera.util.di.scope import Scope


class AccountProvider(Provider):
    """DI provider for account domain services and handlers."""

    account_service = provide(AccountService, scope=Scope.UOW)

    # Command Handlers
    rename_user_handler = provide(RenameUserHandler, scope=Scope.UOW)

    # Query Handlers
    get_account_handler = provide(GetAccountHandler, scope=Scope.UOW)
