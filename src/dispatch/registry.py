"""Registry - name-keyed store of actions with invoke-by-name.

Usage:
    registry = Registry("billing")
    registry.action("echo").param("input", str).delegate(lambda s: s)
    registry.freeze()

    registry.invoke("echo", ["hello"])           # positional
    registry.invoke("echo", {"input": "hello"})  # named
    registry.handle("echo", ["hello"])           # {"success": True, "result": "hello"}

A registry is filled during a single-threaded setup phase and then only
read. There is no internal locking; ``freeze()`` makes the read-only phase
explicit by rejecting further registration and action configuration.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from typing import Any

from .action import Action
from .errors import (
    ActionFailedError,
    ActionNotFoundError,
    InvalidArgumentsError,
    RegistryFrozenError,
    execution_error,
    resource_error,
    validation_error,
)
from .interface import validate_named_args
from .invocation_log import InvocationLog, InvocationRecord


_logger = logging.getLogger(__name__)


class Registry:
    """Collection of actions keyed by name.

    Attributes:
        description_text: Free text describing the registry
        actions: Registered actions by name
        invocation_log: Optional log that records every invocation
    """

    description_text: str
    actions: dict[str, Action]
    invocation_log: InvocationLog | None

    def __init__(
        self,
        description: str = "",
        invocation_log: InvocationLog | None = None,
    ) -> None:
        self.description_text = description
        self.actions = {}
        self.invocation_log = invocation_log
        self._frozen = False

    def __contains__(self, name: object) -> bool:
        return name in self.actions

    def __len__(self) -> int:
        return len(self.actions)

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError("Registry is frozen")

    # -- setup ---------------------------------------------------------------

    def action(self, name_or_action: str | Action | None) -> Action | None:
        """Get-or-create an action by name, or register a built one.

        - ``action("name")`` returns the existing action or creates an
          empty one under that name.
        - ``action(instance)`` stores ``instance`` under its own name,
          replacing any previous registration.
        - ``action(None)`` does nothing and returns None.
        """
        if name_or_action is None:
            return None

        if isinstance(name_or_action, Action):
            self._check_mutable()
            if name_or_action.name in self.actions:
                _logger.debug("Replacing action '%s'", name_or_action.name)
            self.actions[name_or_action.name] = name_or_action
            return name_or_action

        if not isinstance(name_or_action, str):
            raise TypeError(f"Expected action name or Action, got {type(name_or_action).__name__}")

        existing = self.actions.get(name_or_action)
        if existing is not None:
            return existing
        self._check_mutable()
        created = Action(name_or_action)
        self.actions[name_or_action] = created
        _logger.debug("Created action '%s'", name_or_action)
        return created

    def description(self, text: str) -> Registry:
        """Set the registry description."""
        self._check_mutable()
        self.description_text = text
        return self

    def freeze(self) -> Registry:
        """End the setup phase for the registry and all its actions."""
        self._frozen = True
        for action in self.actions.values():
            action.freeze()
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> Action | None:
        return self.actions.get(name)

    def names(self) -> list[str]:
        """Registered action names, sorted."""
        return sorted(self.actions)

    # -- invocation ----------------------------------------------------------

    def _lookup(self, name: str) -> Action:
        action = self.actions.get(name)
        if action is None:
            raise ActionNotFoundError(name)
        return action

    def invoke(
        self,
        name: str,
        args: Sequence[Any] | Mapping[str, Any] | None = None,
    ) -> Any:
        """Invoke an action by name.

        Args:
            name: Registered action name
            args: Positional list, or a mapping of parameter name -> value

        Raises:
            ActionNotFoundError: No action with this name (nothing is coerced)
            ActionFailedError: Coercion or the action itself failed
        """
        action = self._lookup(name)
        if isinstance(args, Mapping):
            return self._invoke_named(action, args)
        return self._run(action, args or [])

    def invoke_named(self, name: str, named: Mapping[str, Any]) -> Any:
        """Invoke an action with arguments given by parameter name.

        Missing names become None; names that match no parameter are
        ignored unless interface validation rejects them.
        """
        return self._invoke_named(self._lookup(name), named)

    def _invoke_named(self, action: Action, named: Mapping[str, Any]) -> Any:
        validation = validate_named_args(action, dict(named))
        if not validation.proceed:
            raise InvalidArgumentsError(validation.error_message)

        positional = [named.get(p.name) for p in action.parameters]
        return self._run(action, positional)

    def _run(self, action: Action, args: Sequence[Any]) -> Any:
        if self.invocation_log is None:
            return action.execute(args)

        start = time.perf_counter()
        try:
            result = action.execute(args)
        except ActionFailedError as e:
            self.invocation_log.record(InvocationRecord(
                action=action.name,
                success=False,
                duration_ms=(time.perf_counter() - start) * 1000,
                error=e.message,
            ))
            raise
        self.invocation_log.record(InvocationRecord(
            action=action.name,
            success=True,
            duration_ms=(time.perf_counter() - start) * 1000,
        ))
        return result

    def handle(
        self,
        name: str,
        args: Sequence[Any] | Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Invoke and wrap the outcome in a response dict.

        Returns:
            ``{"success": True, "result": ...}`` or an error response
            (see errors.py). Dispatcher errors never propagate.
        """
        try:
            result = self.invoke(name, args)
        except ActionNotFoundError as e:
            return resource_error(e.message, action=name)
        except InvalidArgumentsError as e:
            return validation_error(e.message, action=name)
        except ActionFailedError as e:
            return execution_error(e.message, action=name)
        return {"success": True, "result": result}
