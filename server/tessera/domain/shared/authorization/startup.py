"""Startup validation for handler authorization declarations."""

import logging

from tessera.domain.shared.authorization.gate import Gate
from tessera.domain.shared.command import CommandHandler
from tessera.domain.shared.error import ConfigurationError
from tessera.domain.shared.query import QueryHandler

logger = logging.getLogger(__name__)


def _all_subclasses(cls: type) -> list[type]:
    found: list[type] = []
    for sub in cls.__subclasses__():
        found.append(sub)
        found.extend(_all_subclasses(sub))
    return found


def validate_all_handlers() -> None:
    """Scan all CommandHandler and QueryHandler subclasses for an ``__auth__`` gate.

    Handler modules must be imported before this runs (the DI providers do that).

    Raises:
        ConfigurationError: Listing every handler without a gate.
    """
    violations = [
        handler_cls.__name__
        for handler_cls in _all_subclasses(CommandHandler) + _all_subclasses(QueryHandler)
        if not isinstance(getattr(handler_cls, "__auth__", None), Gate)
    ]

    if violations:
        raise ConfigurationError(
            f"Authorization validation failed for {len(violations)} handler(s):\n"
            + "\n".join(f"  - {v} has no __auth__ declaration" for v in violations)
        )

    logger.info("Authorization startup validation passed for all handlers")
