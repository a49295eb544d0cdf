"""Auth domain ports."""

from .mailer import MailMessage, Mailer
from .rate_limiter import RateLimiter
from .repository import (
    AccountRepository,
    IdentityRepository,
    SessionRepository,
    UserRepository,
)

__all__ = [
    "AccountRepository",
    "IdentityRepository",
    "MailMessage",
    "Mailer",
    "RateLimiter",
    "SessionRepository",
    "UserRepository",
]
