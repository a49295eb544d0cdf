"""Account domain queries."""

from .get_account import AccountDTO, GetAccount, GetAccountHandler, GetAccountResult, MemberDTO

__all__ = ["AccountDTO", "GetAccount", "GetAccountHandler", "GetAccountResult", "MemberDTO"]
