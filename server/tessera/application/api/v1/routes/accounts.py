"""Account routes: the member list (conditional GET) and member renames."""

from typing import Annotated
from uuid import UUID

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter, Query, Request, Response
from pydantic import BaseModel

from tessera.application.api.v1.conditional import PRIVATE_CACHE_HEADERS, not_modified
from tessera.domain.account.command.rename_user import RenameUser, RenameUserHandler, UserRenamed
from tessera.domain.account.query.get_account import (
    AccountDTO,
    GetAccount,
    GetAccountHandler,
)

router = APIRouter(tags=["Accounts"], route_class=DishkaRoute)


class AccountResponse(BaseModel):
    account: AccountDTO
    viewer: dict[str, str | None]


class RenameRequest(BaseModel):
    name: str


@router.get("/{account:int}/account", response_model=AccountResponse)
async def get_account(
    request: Request,
    response: Response,
    account: int,
    handler: FromDishka[GetAccountHandler],
    preview: Annotated[bool, Query()] = False,
) -> AccountResponse | Response:
    """The account and its member cards. Answers 304 when the client's copy is current."""
    result = await handler.run(
        GetAccount(
            account_external_id=account,
            if_none_match=request.headers.get("if-none-match"),
            if_modified_since=request.headers.get("if-modified-since"),
            preview=preview,
        )
    )
    if result.not_modified:
        return not_modified(result.headers)

    assert result.account is not None
    response.headers.update({**result.headers, **PRIVATE_CACHE_HEADERS})
    return AccountResponse(account=result.account, viewer=result.viewer)


@router.patch("/{account:int}/users/{user_id}", response_model=UserRenamed)
async def rename_user(
    account: int,
    user_id: UUID,
    body: RenameRequest,
    handler: FromDishka[RenameUserHandler],
) -> UserRenamed:
    """Rename your own membership."""
    return await handler.run(
        RenameUser(account_external_id=account, user_id=user_id, name=body.name)
    )
