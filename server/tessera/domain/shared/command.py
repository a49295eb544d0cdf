"""Command and CommandHandler base classes with authorization gate."""

from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from functools import wraps
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar, dataclass_transform

from pydantic import BaseModel

if TYPE_CHECKING:
    from tessera.domain.shared.authorization.gate import Gate

_auth_logger = logging.getLogger("tessera.authz")


class Command(BaseModel): ...


class Result(BaseModel): ...


C = TypeVar("C", bound=Command)
R = TypeVar("R", bound=Result)

# Unbound async handler method: (self, cmd) -> Coroutine -> Result
_HandlerMethod = Callable[..., Coroutine[Any, Any, Any]]


def check_gate(handler: Any) -> None:
    """Evaluate the handler's ``__auth__`` gate against its ``current`` field.

    Shared by command and query handlers.

    Raises:
        ConfigurationError: If the handler declares no gate.
        AuthorizationError: If the gate requires a session and there is none.
    """
    from tessera.domain.auth.model.current import Current
    from tessera.domain.shared.authorization.gate import Authenticated, Gate, Public
    from tessera.domain.shared.error import AuthorizationError, ConfigurationError

    gate = getattr(type(handler), "__auth__", None)
    if not isinstance(gate, Gate):
        raise ConfigurationError(f"Handler {type(handler).__name__} has no __auth__ declaration")

    if isinstance(gate, Public):
        return

    if isinstance(gate, Authenticated):
        current = getattr(handler, "current", None)
        if not isinstance(current, Current) or not current.is_authenticated:
            raise AuthorizationError("Authentication required", code="missing_session")
        _auth_logger.debug(
            "Auth check passed: handler=%s, session_id=%s",
            type(handler).__name__,
            current.session.id if current.session else None,
        )
        return

    raise ConfigurationError(  # pragma: no cover
        f"Handler {type(handler).__name__} has unhandled __auth__ type: {type(gate).__name__}"
    )


def _wrap_run_with_auth(original_run: _HandlerMethod) -> _HandlerMethod:
    """Wrap the run() method with __auth__ gate evaluation."""

    @wraps(original_run)
    async def auth_wrapped_run(self: Any, cmd: Any) -> Any:
        check_gate(self)
        return await original_run(self, cmd)

    return auth_wrapped_run


@dataclass_transform()
class _CommandHandlerMeta(ABCMeta):
    """Metaclass that combines ABC with auto-dataclass and __auth__ gate for subclasses."""

    def __new__(mcs, name: str, bases: tuple[type, ...], namespace: dict[str, Any]):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            cls = dataclass(cls)

            original_run = cls.__dict__.get("run")
            if original_run is not None:
                cls.run = _wrap_run_with_auth(original_run)

        return cls


class CommandHandler(Generic[C, R], metaclass=_CommandHandlerMeta):
    """Base class for command handlers. Subclasses are automatically dataclasses.

    Declare __auth__ to enforce access:
        class MyHandler(CommandHandler[MyCmd, MyResult]):
            __auth__ = authenticated()
            current: Current
    """

    __auth__: ClassVar[Gate]

    @abstractmethod
    async def run(self, cmd: C) -> R: ...
