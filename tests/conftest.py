"""Pytest fixtures for action dispatch tests.

Common fixtures for building registries and isolating config state.
"""

from __future__ import annotations

# Load environment variables from .env before any tests run
from dotenv import load_dotenv

load_dotenv()

from collections.abc import Iterator

import pytest

from src import config
from src.dispatch import InvocationLog, Registry
from tests.testing_utils import Account, AddAction


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "feature(name): mark test as belonging to a feature. "
        "Usage: @pytest.mark.feature('coercion')"
    )


@pytest.fixture(autouse=True)
def fresh_config() -> Iterator[None]:
    """Reload config for every test so overrides never leak."""
    config.reset_config()
    yield
    config.reset_config()


@pytest.fixture
def registry() -> Registry:
    """Registry pre-loaded with the canonical example actions.

    - echo(input: str) -> input, via delegate
    - add(a: int, b: int) -> a + b, via call2
    - open_account(account: Account) -> account, raw output
    """
    reg = Registry("test registry")
    reg.action("echo").param("input", str, "Text to echo").delegate(lambda s: s)
    reg.action(AddAction("add").param("a", int).param("b", int))
    reg.action("open_account").param("account", Account).delegate(lambda a: a).return_raw()
    return reg


@pytest.fixture
def logged_registry(registry: Registry) -> Registry:
    """The example registry with an invocation log attached."""
    registry.invocation_log = InvocationLog(max_records=100)
    return registry
