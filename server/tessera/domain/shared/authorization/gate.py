"""Handler-level authorization gates: public() and authenticated()."""

from dataclasses import dataclass


class Gate:
    """Base for handler-level authorization gates.

    Every CommandHandler/QueryHandler must declare ``__auth__: ClassVar[Gate]``.
    Finer-grained checks belong on the models themselves (predicate methods
    such as ``User.can_be_renamed_by``), not in the gate.
    """


@dataclass(frozen=True)
class Public(Gate):
    """No authentication required."""


@dataclass(frozen=True)
class Authenticated(Gate):
    """Requires a signed-in session on the request's Current context."""


_PUBLIC = Public()
_AUTHENTICATED = Authenticated()


def public() -> Public:
    """Mark a handler as publicly accessible (no session required)."""
    return _PUBLIC


def authenticated() -> Authenticated:
    """Mark a handler as requiring a signed-in session."""
    return _AUTHENTICATED
