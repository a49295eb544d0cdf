"""Auth domain services."""

from .auth import AuthService, IssuedSession
from .token import TokenService

__all__ = ["AuthService", "IssuedSession", "TokenService"]
