"""Session routes: magic-link sign-in, sign-up, current session and logout."""

import logging
from typing import Annotated

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter, Query, Request, Response
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from tessera.application.api.v1.client import client_details
from tessera.application.api.v1.conditional import fresh_when
from tessera.application.api.v1.cookies import clear_session_cookie, set_session_cookie
from tessera.config import Config
from tessera.domain.auth.command.session import (
    EndSession,
    EndSessionHandler,
    MagicLinkRequested,
    RedeemMagicLink,
    RedeemMagicLinkHandler,
    RequestMagicLink,
    RequestMagicLinkHandler,
    SignUp,
    SignUpHandler,
)
from tessera.domain.auth.model.current import Current
from tessera.domain.auth.query.get_current_session import (
    CurrentSessionResult,
    GetCurrentSession,
    GetCurrentSessionHandler,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Session"], route_class=DishkaRoute)


class EmailRequest(BaseModel):
    """Request body for link requests and sign-up."""

    email: str


class MessageResponse(BaseModel):
    message: str


async def _request_magic_link(
    request: Request,
    body: EmailRequest,
    handler: RequestMagicLinkHandler,
    account: int | None,
) -> MessageResponse:
    client = client_details(request)
    result: MagicLinkRequested = await handler.run(
        RequestMagicLink(
            email=body.email,
            account_external_id=account,
            user_agent=client.user_agent,
            ip_address=client.ip_address,
        )
    )
    return MessageResponse(message=result.message)


@router.post("/session/magic_link", status_code=202, response_model=MessageResponse)
async def request_magic_link(
    request: Request,
    body: EmailRequest,
    handler: FromDishka[RequestMagicLinkHandler],
) -> MessageResponse:
    """Email a sign-in link. The answer is the same whether or not the email is known."""
    return await _request_magic_link(request, body, handler, None)


@router.post("/{account:int}/session/magic_link", status_code=202, response_model=MessageResponse)
async def request_account_magic_link(
    request: Request,
    account: int,
    body: EmailRequest,
    handler: FromDishka[RequestMagicLinkHandler],
) -> MessageResponse:
    """Email a sign-in link that signs into `account` when the identity is a member."""
    return await _request_magic_link(request, body, handler, account)


@router.get("/session/magic_link")
async def redeem_magic_link(
    request: Request,
    config: FromDishka[Config],
    handler: FromDishka[RedeemMagicLinkHandler],
    token: Annotated[str, Query()],
) -> Response:
    """Redeem a sign-in link: create a session, set its cookie, redirect."""
    client = client_details(request)
    result = await handler.run(
        RedeemMagicLink(
            token=token,
            user_agent=client.user_agent,
            ip_address=client.ip_address,
        )
    )

    response = RedirectResponse(url=result.redirect_to, status_code=303)
    set_session_cookie(response, config.auth.session, result.cookie_value, result.cookie_path)
    logger.info("Session cookie issued: session_id=%s, path=%s", result.session_id, result.cookie_path)
    return response


@router.post("/signup", status_code=202, response_model=MessageResponse)
async def sign_up(
    request: Request,
    body: EmailRequest,
    handler: FromDishka[SignUpHandler],
) -> MessageResponse:
    """Create an identity if needed and email a sign-in link."""
    client = client_details(request)
    result = await handler.run(
        SignUp(email=body.email, user_agent=client.user_agent, ip_address=client.ip_address)
    )
    return MessageResponse(message=result.message)


async def _current_session(
    request: Request,
    response: Response,
    current: Current,
    handler: GetCurrentSessionHandler,
) -> CurrentSessionResult | Response:
    result = await handler.run(GetCurrentSession())

    fresh = fresh_when(request, current.session, current.identity, current.user)
    if isinstance(fresh, Response):
        return fresh
    response.headers.update(fresh)
    return result


@router.get("/session", response_model=CurrentSessionResult)
async def get_session(
    request: Request,
    response: Response,
    current: FromDishka[Current],
    handler: FromDishka[GetCurrentSessionHandler],
) -> CurrentSessionResult | Response:
    """Describe the signed-in session."""
    return await _current_session(request, response, current, handler)


@router.get("/{account:int}/session", response_model=CurrentSessionResult)
async def get_account_session(
    request: Request,
    response: Response,
    account: int,
    current: FromDishka[Current],
    handler: FromDishka[GetCurrentSessionHandler],
) -> CurrentSessionResult | Response:
    """Describe the session the browser holds for `account`."""
    return await _current_session(request, response, current, handler)


async def _end_session(config: Config, handler: EndSessionHandler) -> Response:
    result = await handler.run(EndSession())
    response = Response(status_code=204)
    clear_session_cookie(response, config.auth.session, result.cookie_path)
    return response


@router.delete("/session", status_code=204)
async def end_session(
    config: FromDishka[Config],
    handler: FromDishka[EndSessionHandler],
) -> Response:
    """Log out: delete the session and clear its cookie."""
    return await _end_session(config, handler)


@router.delete("/{account:int}/session", status_code=204)
async def end_account_session(
    account: int,
    config: FromDishka[Config],
    handler: FromDishka[EndSessionHandler],
) -> Response:
    """Log out of `account`."""
    return await _end_session(config, handler)
