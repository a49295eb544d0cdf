"""GetAccount query and handler."""

from dataclasses import replace
from datetime import datetime

from pydantic import BaseModel

from tessera.domain.account.service.account import AccountService
from tessera.domain.auth.model.current import Current
from tessera.domain.freshness.model.fragment import viewer_meta
from tessera.domain.freshness.service.conditional import ConditionalGet, NotModified
from tessera.domain.shared.authorization.gate import authenticated
from tessera.domain.shared.error import AuthorizationError
from tessera.domain.shared.query import Query, QueryHandler
from tessera.domain.shared.query import Result as QueryResult


class GetAccount(Query):
    account_external_id: int
    if_none_match: str | None = None
    if_modified_since: str | None = None
    preview: bool = False


class MemberDTO(BaseModel):
    id: str
    name: str
    updated_at: datetime
    fragment_key: str
    html: str


class AccountDTO(BaseModel):
    id: str
    external_id: int
    path: str
    name: str
    updated_at: datetime
    members: list[MemberDTO]


class GetAccountResult(QueryResult):
    """Either the rendered account (`account` set) or a not-modified answer."""

    not_modified: bool
    headers: dict[str, str]
    account: AccountDTO | None = None
    viewer: dict[str, str | None] = {}


class GetAccountHandler(QueryHandler[GetAccount, GetAccountResult]):
    __auth__ = authenticated()
    current: Current
    account_service: AccountService

    async def run(self, query: GetAccount) -> GetAccountResult:
        account = await self.account_service.get_by_external_id(query.account_external_id)

        viewer = await self.account_service.membership(account, self.current)
        if viewer is None:
            raise AuthorizationError("Not a member of this account", code="not_a_member")

        # The account is touched by every member change, so (account, viewer)
        # captures the whole response.
        decision = ConditionalGet.evaluate(
            query.if_none_match,
            query.if_modified_since,
            account,
            viewer,
            query.preview,
        )
        if isinstance(decision, NotModified):
            return GetAccountResult(not_modified=True, headers=decision.headers)

        fragments = await self.account_service.member_fragments(
            account, self.current, preview=query.preview
        )
        return GetAccountResult(
            not_modified=False,
            headers=decision.headers,
            account=AccountDTO(
                id=str(account.id),
                external_id=account.external_id,
                path=account.path,
                name=account.name,
                updated_at=account.updated_at,
                members=[
                    MemberDTO(
                        id=str(f.user.id),
                        name=f.user.name,
                        updated_at=f.user.updated_at,
                        fragment_key=f.key.value,
                        html=f.html,
                    )
                    for f in fragments
                ],
            ),
            viewer=viewer_meta(replace(self.current, user=viewer, account=account)),
        )
