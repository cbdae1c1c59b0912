"""Action - a named unit of dispatch with typed parameters.

An action declares an ordered parameter list. ``execute`` coerces the
caller's positional arguments into the declared types, then runs either
the configured delegate or the arity hooks.

Two ways to supply the logic:

    # Delegate: any callable, called with one argument per parameter
    echo = Action("echo").param("input", str).delegate(lambda s: s)

    # Subclass: override dispatch() or one of the arity hooks
    class Add(Action):
        def call2(self, a: int, b: int) -> int:
            return a + b

    add = Add("add").param("a", int).param("b", int)
    add.execute(["2", "3"])  # 5

Actions are configured during setup and then only executed. ``freeze()``
turns any later builder call into a RegistryFrozenError.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Callable

from ..config import get_validated_config
from . import codec
from .coercion import TypeCoercer
from .errors import ActionFailedError, DispatchError, RegistryFrozenError
from .types import ParameterDeclaration, TypeSpec


_logger = logging.getLogger(__name__)

_LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _failure_message(exc: Exception, include_type: bool) -> str:
    """Message carried by ActionFailedError for an original failure."""
    if isinstance(exc, ActionFailedError):
        return exc.message
    message = str(exc) or type(exc).__name__
    if include_type and not isinstance(exc, DispatchError):
        return f"{type(exc).__name__}: {message}"
    return message


class Action:
    """A named, typed-parameter unit of dispatch.

    Attributes:
        name: Registry key
        description: Free text, shown in interface listings
        parameters: Declared parameters, in positional order
    """

    name: str
    description: str
    parameters: list[ParameterDeclaration]

    def __init__(
        self,
        name: str,
        description: str = "",
        coercer: TypeCoercer | None = None,
    ) -> None:
        self.name = name
        self.description = description
        self.parameters = []
        self._delegate: Callable[..., Any] | None = None
        self._return_raw = False
        self._frozen = False
        self._coercer = coercer or TypeCoercer()

    def __repr__(self) -> str:
        params = ", ".join(f"{p.name}: {p.type.name}" for p in self.parameters)
        return f"Action({self.name!r}, [{params}])"

    # -- setup ---------------------------------------------------------------

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError(f"Action '{self.name}' is frozen")

    def param(self, name: str, type: Any, description: str = "") -> Action:
        """Append a parameter declaration.

        ``type`` is resolved immediately (see TypeSpec.of), so an unknown
        type name fails here rather than at invocation time.
        """
        self._check_mutable()
        declaration = ParameterDeclaration(
            name=name, type=TypeSpec.of(type), description=description
        )
        self.parameters.append(declaration)
        return self

    def delegate(self, fn: Callable[..., Any] | None) -> Action:
        """Set the callable that runs the action. None restores the arity hooks."""
        self._check_mutable()
        self._delegate = fn
        return self

    def return_raw(self, enabled: bool = True) -> Action:
        """Normalize results to plain dicts/lists/primitives."""
        self._check_mutable()
        self._return_raw = enabled
        return self

    def describe(self, text: str) -> Action:
        """Set the description."""
        self._check_mutable()
        self.description = text
        return self

    def freeze(self) -> Action:
        """End setup; builder calls raise RegistryFrozenError from now on."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def has_delegate(self) -> bool:
        return self._delegate is not None

    @property
    def returns_raw(self) -> bool:
        return self._return_raw

    # -- execution -----------------------------------------------------------

    def coerce_args(self, args: Sequence[Any]) -> list[Any]:
        """Coerce positional args to the declared parameter types.

        Always returns one value per declared parameter: missing positions
        become None, extra arguments are dropped.
        """
        return [
            self._coercer.coerce(args[i] if i < len(args) else None, p.type)
            for i, p in enumerate(self.parameters)
        ]

    def execute(self, args: Sequence[Any] | None = None) -> Any:
        """Coerce ``args``, run the action and return its result.

        Raises:
            ActionFailedError: If coercion, the delegate or a hook fails.
                Only the original message is kept.
        """
        try:
            coerced = self.coerce_args(args or [])
            if self._delegate is not None:
                result = self._delegate(*coerced)
            else:
                result = self.dispatch(coerced)
            if self._return_raw:
                result = codec.decode_untyped(codec.encode(result))
            return result
        except Exception as e:
            settings = get_validated_config().dispatch
            message = _failure_message(e, settings.include_error_type)
            _logger.log(
                _LOG_LEVELS[settings.failure_log_level],
                "Action '%s' failed: %s", self.name, message,
            )
            raise ActionFailedError(message) from None

    def dispatch(self, args: list[Any]) -> Any:
        """Run the action without a delegate.

        Override this for variadic actions. The default picks an arity
        hook from the number of coerced arguments.
        """
        n = len(args)
        _logger.debug("Action '%s' dispatching %d args", self.name, n)
        if n == 0:
            return self.call0()
        if n == 1:
            return self.call1(args[0])
        if n == 2:
            return self.call2(args[0], args[1])
        if n == 3:
            return self.call3(args[0], args[1], args[2])
        return self.call_n(args)

    def call0(self) -> Any:
        raise NotImplementedError("not implemented")

    def call1(self, arg: Any) -> Any:
        raise NotImplementedError("not implemented")

    def call2(self, arg1: Any, arg2: Any) -> Any:
        raise NotImplementedError("not implemented")

    def call3(self, arg1: Any, arg2: Any, arg3: Any) -> Any:
        raise NotImplementedError("not implemented")

    def call_n(self, args: list[Any]) -> Any:
        raise NotImplementedError("not implemented")
