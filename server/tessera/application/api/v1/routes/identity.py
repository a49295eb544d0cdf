"""Identity routes: email verification."""

from typing import Annotated

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter, Query

from tessera.domain.auth.command.identity import (
    EmailVerificationSent,
    EmailVerified,
    SendEmailVerification,
    SendEmailVerificationHandler,
    VerifyEmail,
    VerifyEmailHandler,
)

router = APIRouter(prefix="/identity", tags=["Identity"], route_class=DishkaRoute)


@router.post("/email_verification", status_code=202, response_model=EmailVerificationSent)
async def send_email_verification(
    handler: FromDishka[SendEmailVerificationHandler],
) -> EmailVerificationSent:
    """Mail a confirmation link to the signed-in identity's address."""
    return await handler.run(SendEmailVerification())


@router.get("/email_verification", response_model=EmailVerified)
async def verify_email(
    handler: FromDishka[VerifyEmailHandler],
    token: Annotated[str, Query()],
) -> EmailVerified:
    """Confirm an email address from a verification link."""
    return await handler.run(VerifyEmail(token=token))
