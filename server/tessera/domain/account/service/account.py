"""AccountService - tenants, their members, and member fragments."""

import html
import logging
from dataclasses import dataclass

from tessera.domain.auth.model.account import Account
from tessera.domain.auth.model.current import Current
from tessera.domain.auth.model.identity import Identity
from tessera.domain.auth.model.user import User
from tessera.domain.auth.model.value import Email
from tessera.domain.auth.port.repository import (
    AccountRepository,
    IdentityRepository,
    UserRepository,
)
from tessera.domain.freshness.model.fragment import (
    FragmentKey,
    Personalization,
    overlay_attributes,
)
from tessera.domain.freshness.port.fragment_cache import FragmentCache
from tessera.domain.shared.error import ConflictError, NotFoundError
from tessera.domain.shared.service import Service

logger = logging.getLogger(__name__)

# "Is this me?" decorations on a member card are resolved client-side, so one
# cached card serves every viewer.
MEMBER_CARD = "member_card"
MEMBER_CARD_PERSONALIZATION = Personalization.OVERLAY


@dataclass(frozen=True)
class MemberFragment:
    user: User
    key: FragmentKey
    html: str


class AccountService(Service):
    """Creates accounts and renders their member list."""

    account_repo: AccountRepository
    identity_repo: IdentityRepository
    user_repo: UserRepository
    fragment_cache: FragmentCache

    async def get_by_external_id(self, external_id: int) -> Account:
        account = await self.account_repo.get_by_external_id(external_id)
        if account is None:
            raise NotFoundError(f"Account not found: {external_id}", code="account_not_found")
        return account

    async def membership(self, account: Account, current: Current) -> User | None:
        """The request's user in `account`, whether or not the session is scoped to it."""
        if current.user is not None and current.user.account_id == account.id:
            return current.user
        if current.identity is None:
            return None
        return await self.user_repo.get_by_account_and_identity(account.id, current.identity.id)

    async def create_account(
        self,
        name: str,
        owner_email: Email,
        owner_name: str,
        external_id: int | None = None,
    ) -> tuple[Account, User]:
        """Create an account with its first member, creating the identity if needed.

        Raises:
            ConflictError: If `external_id` is already taken.
        """
        if external_id is not None and await self.account_repo.get_by_external_id(external_id):
            raise ConflictError(f"Account {external_id} already exists", code="account_exists")

        identity = await self.identity_repo.get_by_email(owner_email)
        if identity is None:
            identity = Identity.create(owner_email)
            await self.identity_repo.save(identity)

        account = Account.create(name, external_id)
        await self.account_repo.save(account)

        owner = User.create(account.id, identity.id, owner_name)
        await self.user_repo.save(owner)

        logger.info("Account created: external_id=%s, owner=%s", account.external_id, owner.id)
        return account, owner

    async def member_fragments(
        self, account: Account, current: Current, preview: bool = False
    ) -> list[MemberFragment]:
        """Render (or fetch from cache) one card per member of `account`."""
        members = await self.user_repo.list_by_account(account.id)

        fragments = []
        for member in members:
            key = FragmentKey.personalized(
                MEMBER_CARD,
                account,
                member,
                personalization=MEMBER_CARD_PERSONALIZATION,
                current=current,
                preview=preview,
            )
            rendered = await self.fragment_cache.fetch(key, _card_renderer(member, preview))
            fragments.append(MemberFragment(user=member, key=key, html=rendered))
        return fragments


def _card_renderer(member: User, preview: bool):
    async def render() -> str:
        attrs = " ".join(
            f'{name}="{html.escape(value)}"' for name, value in overlay_attributes(member.id).items()
        )
        css = "member preview" if preview else "member"
        return f'<li class="{css}" {attrs}>{html.escape(member.name)}</li>'

    return render
