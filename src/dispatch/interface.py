"""Interface schemas for actions and named-argument validation.

This module provides:
- JSON schema fragments for declared parameter types
- MCP-compatible interface listings for actions and registries
- Validation of named arguments against an action's schema

Validation runs before coercion, so it only rejects what coercion could
never fix: unknown argument names and values of the wrong shape (a list
where an integer is declared). Text is accepted for every parameter.
"""

from __future__ import annotations

import logging
import typing
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import jsonschema
from pydantic import BaseModel, TypeAdapter
from pydantic.errors import PydanticUserError

from ..config import get
from .types import TypeSpec, TypeTag

if TYPE_CHECKING:
    from .action import Action
    from .registry import Registry


_logger = logging.getLogger(__name__)

_TAG_SCHEMAS: dict[TypeTag, dict[str, Any]] = {
    TypeTag.BOOL: {"type": "boolean"},
    TypeTag.INT: {"type": "integer"},
    TypeTag.LONG: {"type": "integer"},
    TypeTag.DOUBLE: {"type": "number"},
    TypeTag.DECIMAL: {"type": ["number", "string"]},
    TypeTag.STRING: {"type": "string"},
    TypeTag.LIST: {"type": "array"},
    TypeTag.SET: {"type": "array", "items": {"type": "string"}, "uniqueItems": True},
    TypeTag.MAP: {"type": "object"},
    TypeTag.DATE: {"type": "string", "format": "date"},
    TypeTag.TIME: {"type": "string", "format": "time"},
    TypeTag.DATETIME: {"type": "string", "format": "date-time"},
}

# Short type names for error summaries
_ABBREV = {"string": "str", "integer": "int", "number": "num",
           "boolean": "bool", "array": "list", "object": "dict"}


@dataclass
class ValidationResult:
    """Result from named-argument validation.

    Attributes:
        valid: Whether the arguments matched the interface schema
        proceed: Whether to proceed with the invocation
        skipped: Whether validation was skipped entirely
        error_message: Description of validation failure (if any)
    """
    valid: bool
    proceed: bool
    skipped: bool
    error_message: str


def json_schema_for(spec: TypeSpec) -> dict[str, Any]:
    """JSON schema fragment for one declared type.

    Structured types (models, dataclasses, typed generics) use pydantic's
    schema generation; their ``$defs`` are left in place for the caller
    to hoist.
    """
    if spec.tag in _TAG_SCHEMAS:
        return dict(_TAG_SCHEMAS[spec.tag])
    target = spec.target
    if typing.get_origin(target) is None and isinstance(target, type) and issubclass(target, BaseModel):
        return target.model_json_schema()
    try:
        return TypeAdapter(target).json_schema()
    except PydanticUserError:
        _logger.debug("No JSON schema for %r, accepting anything", target)
        return {}


def _property_schemas(action: Action) -> tuple[dict[str, Any], dict[str, Any]]:
    """Per-parameter schemas (first declaration wins) and hoisted $defs."""
    properties: dict[str, Any] = {}
    defs: dict[str, Any] = {}
    for p in action.parameters:
        if p.name in properties:
            continue
        schema = json_schema_for(p.type)
        defs.update(schema.pop("$defs", {}))
        if p.description:
            schema["description"] = p.description
        properties[p.name] = schema
    return properties, defs


def action_interface(action: Action) -> dict[str, Any]:
    """MCP-compatible tool entry for an action.

    Every parameter is optional: absent arguments reach the action as None.
    """
    properties, defs = _property_schemas(action)
    input_schema: dict[str, Any] = {
        "type": "object",
        "properties": properties,
        "required": [],
    }
    if defs:
        input_schema["$defs"] = defs
    return {
        "name": action.name,
        "description": action.description,
        "inputSchema": input_schema,
    }


def registry_interface(registry: Registry) -> dict[str, Any]:
    """Interface listing for every action in a registry."""
    return {
        "description": registry.description_text,
        "tools": [action_interface(registry.actions[name]) for name in registry.names()],
    }


def _lenient(schema: dict[str, Any], spec: TypeSpec) -> dict[str, Any]:
    """Widen a property schema to what coercion can still convert."""
    if spec.tag is TypeTag.STRING:
        return {}
    return {"anyOf": [schema, {"type": "string"}, {"type": "null"}]}


def _schema_summary(action: Action) -> str:
    """Concise ``{name: type, ...}`` summary for error messages."""
    parts: list[str] = []
    for p in action.parameters[:6]:
        schema_type = _TAG_SCHEMAS.get(p.type.tag, {}).get("type")
        if isinstance(schema_type, str):
            parts.append(f"{p.name}: {_ABBREV.get(schema_type, schema_type)}")
        else:
            parts.append(f"{p.name}: {p.type.name}")
    summary = ", ".join(parts)
    if len(action.parameters) > 6:
        summary += ", ..."
    return "{" + summary + "}"


def validate_named_args(
    action: Action,
    named: dict[str, Any],
    validation_mode: str | None = None,
) -> ValidationResult:
    """Validate named arguments against an action's interface schema.

    Args:
        action: The action about to be invoked
        named: Argument name -> raw value
        validation_mode: 'none', 'warn' or 'strict'; defaults to
            ``interface.validation_mode``

    Returns:
        ValidationResult indicating whether to proceed
    """
    mode = validation_mode or get("interface.validation_mode", "none")

    if mode == "none":
        return ValidationResult(valid=True, proceed=True, skipped=True, error_message="")

    properties, defs = _property_schemas(action)
    first = {p.name: p for p in reversed(action.parameters)}
    schema: dict[str, Any] = {
        "type": "object",
        "properties": {
            name: _lenient(prop, first[name].type) for name, prop in properties.items()
        },
        "additionalProperties": False,
    }
    if defs:
        schema["$defs"] = defs

    try:
        jsonschema.validate(instance=named, schema=schema)
        return ValidationResult(valid=True, proceed=True, skipped=False, error_message="")
    except jsonschema.ValidationError as e:
        error_msg = (
            f"{e.message}. "
            f"SCHEMA: {_schema_summary(action)}. "
            f"Action '{action.name}' rejected its arguments."
        )
        if mode == "warn":
            _logger.warning("Interface validation failed for '%s': %s", action.name, error_msg)
            return ValidationResult(valid=False, proceed=True, skipped=False, error_message=error_msg)
        return ValidationResult(valid=False, proceed=False, skipped=False, error_message=error_msg)
    except jsonschema.SchemaError as e:
        # Schema itself is invalid - treat as skip
        error_msg = f"Invalid interface schema: {e.message}"
        _logger.error("Interface schema error for '%s': %s", action.name, error_msg)
        return ValidationResult(valid=False, proceed=True, skipped=False, error_message=error_msg)
