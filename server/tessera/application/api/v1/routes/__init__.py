from . import accounts, health, identity, session

__all__ = ["accounts", "health", "identity", "session"]
