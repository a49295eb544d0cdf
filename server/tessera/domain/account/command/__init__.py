"""Account domain commands."""

from .rename_user import RenameUser, RenameUserHandler, UserRenamed

__all__ = ["RenameUser", "RenameUserHandler", "UserRenamed"]
