"""Auth domain models."""

from .account import Account
from .current import ANONYMOUS, Current
from .identity import Identity
from .session import Session
from .user import User
from .value import AccountId, ClientInfo, Email, IdentityId, SessionId, UserId

__all__ = [
    "ANONYMOUS",
    "Account",
    "AccountId",
    "ClientInfo",
    "Current",
    "Email",
    "Identity",
    "IdentityId",
    "Session",
    "SessionId",
    "User",
    "UserId",
]
