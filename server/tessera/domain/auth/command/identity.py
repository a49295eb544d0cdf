"""Email verification commands."""

import logfire

from tessera.domain.auth.model.current import Current
from tessera.domain.auth.service.auth import AuthService
from tessera.domain.shared.authorization.gate import authenticated, public
from tessera.domain.shared.command import Command, CommandHandler, Result

CHECK_YOUR_INBOX = "Check your email to confirm your address."


class SendEmailVerification(Command):
    pass


class EmailVerificationSent(Result):
    message: str = CHECK_YOUR_INBOX


class SendEmailVerificationHandler(
    CommandHandler[SendEmailVerification, EmailVerificationSent]
):
    __auth__ = authenticated()
    current: Current
    auth_service: AuthService

    async def run(self, cmd: SendEmailVerification) -> EmailVerificationSent:
        with logfire.span("SendEmailVerification"):
            assert self.current.identity is not None  # Guaranteed by __auth__ gate
            await self.auth_service.send_email_verification(self.current.identity)
            return EmailVerificationSent()


class VerifyEmail(Command):
    token: str


class EmailVerified(Result):
    identity_id: str
    email: str


class VerifyEmailHandler(CommandHandler[VerifyEmail, EmailVerified]):
    __auth__ = public()
    auth_service: AuthService

    async def run(self, cmd: VerifyEmail) -> EmailVerified:
        with logfire.span("VerifyEmail"):
            identity = await self.auth_service.verify_email(cmd.token)
            return EmailVerified(identity_id=str(identity.id), email=str(identity.email))
