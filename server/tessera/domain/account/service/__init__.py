"""Account domain services."""

from .account import AccountService, MemberFragment

__all__ = ["AccountService", "MemberFragment"]
