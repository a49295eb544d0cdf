from .provider import AccountProvider

__all__ = ["AccountProvider"]
