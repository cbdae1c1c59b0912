"""Unit tests for Registry registration and invoke-by-name."""

from typing import Any
from unittest.mock import patch

import pytest

from src.config import set_config_value
from src.dispatch.action import Action
from src.dispatch.coercion import TypeCoercer
from src.dispatch.errors import (
    ActionFailedError,
    ActionNotFoundError,
    InvalidArgumentsError,
    RegistryFrozenError,
)
from src.dispatch.registry import Registry
from tests.testing_utils import AddAction


class TestRegistration:
    """action() get-or-create and register semantics."""

    def test_get_or_create_is_idempotent(self) -> None:
        registry = Registry()
        first = registry.action("echo")
        assert isinstance(first, Action)
        assert registry.action("echo") is first
        assert len(registry) == 1

    def test_register_instance_overwrites(self) -> None:
        registry = Registry()
        registry.action("add")
        replacement = AddAction("add")
        assert registry.action(replacement) is replacement
        assert registry.get("add") is replacement

    def test_register_none_is_noop(self) -> None:
        registry = Registry()
        assert registry.action(None) is None
        assert len(registry) == 0

    def test_register_wrong_type(self) -> None:
        with pytest.raises(TypeError):
            Registry().action(42)  # type: ignore[arg-type]

    def test_description_chains(self) -> None:
        registry = Registry()
        assert registry.description("billing") is registry
        assert registry.description_text == "billing"

    def test_names_and_contains(self, registry: Registry) -> None:
        assert registry.names() == ["add", "echo", "open_account"]
        assert "echo" in registry
        assert "missing" not in registry
        assert registry.get("missing") is None


class TestFreeze:
    """freeze() ends the setup phase."""

    def test_frozen_registry_rejects_new_actions(self, registry: Registry) -> None:
        registry.freeze()
        assert registry.frozen is True
        with pytest.raises(RegistryFrozenError):
            registry.action("new")
        with pytest.raises(RegistryFrozenError):
            registry.action(Action("echo"))
        with pytest.raises(RegistryFrozenError):
            registry.description("changed")

    def test_existing_lookup_still_allowed(self, registry: Registry) -> None:
        echo = registry.get("echo")
        registry.freeze()
        assert registry.action("echo") is echo

    def test_actions_are_frozen_too(self, registry: Registry) -> None:
        registry.freeze()
        with pytest.raises(RegistryFrozenError):
            registry.action("echo").param("extra", int)  # type: ignore[union-attr]

    def test_invoke_after_freeze(self, registry: Registry) -> None:
        registry.freeze()
        assert registry.invoke("add", ["2", "3"]) == 5


class TestInvoke:
    """Positional and named invocation."""

    def test_positional(self, registry: Registry) -> None:
        assert registry.invoke("echo", ["hello"]) == "hello"
        assert registry.invoke("echo", [42]) == "42"
        assert registry.invoke("add", ["2", "3"]) == 5

    def test_named(self, registry: Registry) -> None:
        assert registry.invoke("echo", {"input": "hello"}) == "hello"
        assert registry.invoke_named("add", {"b": "3", "a": 2}) == 5

    def test_no_args(self, registry: Registry) -> None:
        assert registry.invoke("echo") is None

    def test_missing_named_key_is_none(self) -> None:
        registry = Registry()
        registry.action("pair").param("a", int).param("b", int).delegate(lambda *a: a)
        assert registry.invoke("pair", {"b": "2"}) == (None, 2)

    @pytest.mark.parametrize("named", [
        {"a": "1", "b": "2"},
        {"a": 1},
        {"b": [3]},
        {},
        {"a": "1", "zzz": "ignored"},
    ])
    def test_named_equals_positional(self, named: dict[str, Any]) -> None:
        registry = Registry()
        action = registry.action("pair").param("a", int).param("b", str).delegate(lambda *a: a)
        positional = [named.get(p.name) for p in action.parameters]  # type: ignore[union-attr]
        assert registry.invoke("pair", named) == registry.invoke("pair", positional)

    def test_duplicate_names_read_same_key(self) -> None:
        registry = Registry()
        registry.action("dup").param("x", int).param("x", str).delegate(lambda *a: a)
        assert registry.invoke("dup", {"x": 7}) == (7, "7")

    def test_unknown_action(self) -> None:
        with pytest.raises(ActionNotFoundError, match="Action not found: missing") as exc_info:
            Registry().invoke("missing", [])
        assert not isinstance(exc_info.value, ActionFailedError)
        assert exc_info.value.action_name == "missing"

    def test_unknown_action_skips_coercion(self, registry: Registry) -> None:
        with patch.object(TypeCoercer, "coerce") as mock_coerce:
            with pytest.raises(ActionNotFoundError):
                registry.invoke("missing", ["1"])
            with pytest.raises(ActionNotFoundError):
                registry.invoke_named("missing", {"a": "1"})
        mock_coerce.assert_not_called()

    def test_action_failure_propagates(self, registry: Registry) -> None:
        with pytest.raises(ActionFailedError, match="Cannot convert"):
            registry.invoke("add", ["two", "3"])


class TestNamedValidation:
    """interface.validation_mode applies to named invocation."""

    def test_strict_rejects_unknown_names(self, registry: Registry) -> None:
        set_config_value("interface.validation_mode", "strict")
        with pytest.raises(InvalidArgumentsError, match="zzz"):
            registry.invoke("add", {"a": 1, "zzz": 2})

    def test_strict_failure_is_an_action_failure(self, registry: Registry) -> None:
        set_config_value("interface.validation_mode", "strict")
        with pytest.raises(ActionFailedError):
            registry.invoke("add", {"a": [1]})

    def test_strict_accepts_text(self, registry: Registry) -> None:
        set_config_value("interface.validation_mode", "strict")
        assert registry.invoke("add", {"a": "1", "b": 2}) == 3

    def test_strict_accepts_structures_for_strings(self, registry: Registry) -> None:
        set_config_value("interface.validation_mode", "strict")
        assert registry.invoke("echo", {"input": [1, 2]}) == "[1,2]"
        assert registry.invoke("echo", {"input": {"k": "v"}}) == '{"k":"v"}'

    def test_warn_proceeds(self, registry: Registry) -> None:
        set_config_value("interface.validation_mode", "warn")
        assert registry.invoke("add", {"a": 1, "b": 2, "zzz": 3}) == 3

    def test_positional_not_validated(self, registry: Registry) -> None:
        set_config_value("interface.validation_mode", "strict")
        assert registry.invoke("add", [1, 2, "extra"]) == 3


class TestHandle:
    """handle() wraps outcomes in response dicts."""

    def test_success(self, registry: Registry) -> None:
        assert registry.handle("add", ["2", "3"]) == {"success": True, "result": 5}

    def test_not_found(self, registry: Registry) -> None:
        response = registry.handle("missing")
        assert response["success"] is False
        assert response["category"] == "resource"
        assert response["code"] == "not_found"
        assert response["details"] == {"action": "missing"}

    def test_action_failed(self, registry: Registry) -> None:
        response = registry.handle("add", ["x", "1"])
        assert response["category"] == "execution"
        assert response["code"] == "action_failed"
        assert response["retriable"] is False
        assert "Cannot convert" in str(response["error"])

    def test_invalid_arguments(self, registry: Registry) -> None:
        set_config_value("interface.validation_mode", "strict")
        response = registry.handle("add", {"nope": 1})
        assert response["category"] == "validation"
        assert response["code"] == "invalid_argument"


class TestInvocationLogging:
    """Invocations are recorded when a log is attached."""

    def test_records_success_and_failure(self, logged_registry: Registry) -> None:
        logged_registry.invoke("add", ["1", "2"])
        with pytest.raises(ActionFailedError):
            logged_registry.invoke("add", ["x", "2"])

        log = logged_registry.invocation_log
        assert log is not None
        stats = log.stats_for("add")
        assert stats.total_invocations == 2
        assert stats.successful == 1
        assert stats.failed == 1
        failure = log.records_for("add", success=False)[0]
        assert failure.error is not None and failure.error.startswith("Cannot convert")

    def test_unknown_action_not_recorded(self, logged_registry: Registry) -> None:
        with pytest.raises(ActionNotFoundError):
            logged_registry.invoke("missing")
        assert logged_registry.invocation_log.count() == 0  # type: ignore[union-attr]
