"""Auth domain commands."""

from .identity import (
    EmailVerificationSent,
    EmailVerified,
    SendEmailVerification,
    SendEmailVerificationHandler,
    VerifyEmail,
    VerifyEmailHandler,
)
from .session import (
    EndSession,
    EndSessionHandler,
    MagicLinkRequested,
    RedeemMagicLink,
    RedeemMagicLinkHandler,
    RequestMagicLink,
    RequestMagicLinkHandler,
    SessionEnded,
    SessionIssued,
    SignUp,
    SignUpHandler,
)

__all__ = [
    "EmailVerificationSent",
    "EmailVerified",
    "EndSession",
    "EndSessionHandler",
    "MagicLinkRequested",
    "RedeemMagicLink",
    "RedeemMagicLinkHandler",
    "RequestMagicLink",
    "RequestMagicLinkHandler",
    "SendEmailVerification",
    "SendEmailVerificationHandler",
    "SessionEnded",
    "SessionIssued",
    "SignUp",
    "SignUpHandler",
    "VerifyEmail",
    "VerifyEmailHandler",
]
