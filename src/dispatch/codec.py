"""Structural text codec used by coercion and raw-output normalization.

Three operations:
- encode(value): any value (models, dataclasses, dates, decimals, sets)
  to JSON text
- decode(text, target): JSON text to an instance of ``target``
- decode_untyped(text): JSON text to plain dicts/lists/primitives

Typed decoding goes through pydantic ``TypeAdapter`` in lax mode, so
``"5"`` decodes to 5 for an int target. Text that is not valid JSON is
retried as a JSON string literal, which makes bare scalars such as
``2024-01-31`` or ``10:30`` decode into dates and times.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any

import pydantic_core
from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticUserError

from .errors import CoercionError
from .types import type_name


@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def _is_invalid_json(exc: ValidationError) -> bool:
    return any(err.get("type") == "json_invalid" for err in exc.errors())


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    err = errors[0]
    loc = ".".join(str(part) for part in err.get("loc", ()))
    msg = str(err.get("msg", "invalid value"))
    return f"{loc}: {msg}" if loc else msg


def encode(value: Any) -> str:
    """Serialize a value to JSON text.

    Raises:
        CoercionError: If the value has no JSON representation.
    """
    try:
        return pydantic_core.to_json(value).decode("utf-8")
    except pydantic_core.PydanticSerializationError as e:
        raise CoercionError(f"Cannot encode {type(value).__name__}: {e}") from e


def decode(text: str, target: Any) -> Any:
    """Parse JSON text into an instance of ``target``.

    Raises:
        CoercionError: On malformed text or a type mismatch.
    """
    try:
        adapter = _adapter(target)
        return adapter.validate_json(text)
    except PydanticUserError as e:
        raise CoercionError(f"Cannot decode into {type_name(target)}: {e}") from e
    except ValidationError as e:
        if not _is_invalid_json(e):
            raise CoercionError(
                f"Cannot convert {text!r} to {type_name(target)}: {_first_error(e)}"
            ) from e
    # Not JSON at all: treat the whole text as a string literal
    try:
        return adapter.validate_json(json.dumps(text))
    except ValidationError as e:
        raise CoercionError(
            f"Cannot convert {text!r} to {type_name(target)}: {_first_error(e)}"
        ) from e


def decode_untyped(text: str) -> Any:
    """Parse JSON text into dicts, lists and primitives only."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise CoercionError(f"Invalid JSON: {e.msg}") from e
