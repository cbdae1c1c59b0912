"""Pydantic schema for configuration validation.

All config values are validated at load time. Typos and invalid values
fail fast with clear error messages.

Usage:
    from src.config_schema import load_validated_config, AppConfig
    config = load_validated_config("config/config.yaml")
    # config is now a validated AppConfig instance
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# BASE MODEL WITH STRICT VALIDATION
# =============================================================================

class StrictModel(BaseModel):
    """Base model that rejects unknown fields (catches typos)."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# DISPATCH MODEL
# =============================================================================

class DispatchConfig(StrictModel):
    """How action failures are reported."""

    failure_log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        description="Log level used when an action invocation fails"
    )
    include_error_type: bool = Field(
        default=False,
        description="Prefix failure messages with the original exception class name"
    )


# =============================================================================
# INTERFACE MODEL
# =============================================================================

class InterfaceConfig(StrictModel):
    """Named-argument validation against action interface schemas."""

    validation_mode: Literal["none", "warn", "strict"] = Field(
        default="none",
        description="none: skip, warn: log mismatches, strict: reject mismatches"
    )


# =============================================================================
# INVOCATIONS MODEL
# =============================================================================

class InvocationsConfig(StrictModel):
    """In-memory invocation log settings."""

    max_records: int = Field(
        default=10000,
        ge=0,
        description="Records kept per log before the oldest are dropped (0 = unbounded)"
    )


# =============================================================================
# ROOT CONFIG MODEL
# =============================================================================

class AppConfig(StrictModel):
    """Root configuration model."""

    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)
    interface: InterfaceConfig = Field(default_factory=InterfaceConfig)
    invocations: InvocationsConfig = Field(default_factory=InvocationsConfig)


# =============================================================================
# LOADING FUNCTIONS
# =============================================================================

def load_validated_config(config_path: str | Path = "config/config.yaml") -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to config YAML file.

    Returns:
        Validated AppConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid (with detailed error message).
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw_config = yaml.safe_load(f) or {}

    return AppConfig.model_validate(raw_config)


def validate_config_dict(config_dict: dict[str, Any]) -> AppConfig:
    """Validate a configuration dictionary.

    Raises:
        pydantic.ValidationError: If config is invalid.
    """
    return AppConfig.model_validate(config_dict)


__all__ = [
    "AppConfig",
    "DispatchConfig",
    "InterfaceConfig",
    "InvocationsConfig",
    "StrictModel",
    "load_validated_config",
    "validate_config_dict",
]
