"""Auth domain queries."""

from .get_current_session import (
    CurrentSessionResult,
    GetCurrentSession,
    GetCurrentSessionHandler,
    UserSummary,
)

__all__ = [
    "CurrentSessionResult",
    "GetCurrentSession",
    "GetCurrentSessionHandler",
    "UserSummary",
]
