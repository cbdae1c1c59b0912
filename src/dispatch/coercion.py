"""Argument coercion - convert one raw value to one declared type.

Callers at a remote-call boundary send "5" instead of 5, generic dicts
instead of records, numbers where strings are declared. Coercion fixes
this up before an action body runs.

Rules, in order, for every declared type:
1. None passes through (absent argument)
2. A value that already has the declared type is returned as is
3. Text is decoded with the structural codec (plain decimal numerals are
   parsed with Decimal directly so no digits go through a float)
4. Anything else goes through a per-type best-effort cast

Types outside the closed tag set (TypeTag.OTHER) skip 3 and 4: the value
is encoded to JSON if needed and decoded into the target, which deep
converts nested dicts into models, dataclasses and typed collections.
"""

from __future__ import annotations

import typing
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from pydantic import BaseModel, TypeAdapter

from . import codec
from .errors import CoercionError
from .types import TypeSpec, TypeTag


_NUMBER_TAGS = frozenset({TypeTag.INT, TypeTag.LONG, TypeTag.DOUBLE, TypeTag.DECIMAL})
_SEQUENCE_TYPES = (list, tuple, set, frozenset)

_DATE_ADAPTER: TypeAdapter[date] = TypeAdapter(date)
_TIME_ADAPTER: TypeAdapter[time] = TypeAdapter(time)
_DATETIME_ADAPTER: TypeAdapter[datetime] = TypeAdapter(datetime)


class TypeCoercer:
    """Coerces raw values into declared parameter types.

    Subclass and override a ``to_*`` cast to change how non-text values
    are converted for one type.
    """

    def __init__(self) -> None:
        self._casts: dict[TypeTag, Callable[[Any, TypeSpec], Any]] = {
            TypeTag.BOOL: self.to_bool,
            TypeTag.INT: self.to_int,
            TypeTag.LONG: self.to_int,
            TypeTag.DOUBLE: self.to_float,
            TypeTag.DECIMAL: self.to_decimal,
            TypeTag.STRING: self.to_string,
            TypeTag.LIST: self.to_list,
            TypeTag.SET: self.to_set,
            TypeTag.MAP: self.to_map,
            TypeTag.DOMAIN_OBJECT: self.to_domain_object,
            TypeTag.DATE: self.to_date,
            TypeTag.TIME: self.to_time,
            TypeTag.DATETIME: self.to_datetime,
        }

    def coerce(self, value: Any, declared: Any) -> Any:
        """Convert ``value`` to the declared type.

        Args:
            value: Raw argument (text, dict, number, ...) or None
            declared: TypeSpec or anything TypeSpec.of() accepts

        Returns:
            The converted value; ``value`` itself if no conversion is needed

        Raises:
            CoercionError: If the value cannot be converted
        """
        spec = TypeSpec.of(declared)
        if value is None:
            return None
        if self.is_instance(value, spec):
            return value

        if spec.tag is TypeTag.OTHER:
            text = value if isinstance(value, str) else codec.encode(value)
            return codec.decode(text, spec.target)

        if isinstance(value, str):
            if spec.tag is TypeTag.DECIMAL:
                return self._text_to_decimal(value, spec)
            decoded = codec.decode(value, spec.decode_target)
            return self.to_set(decoded, spec) if spec.tag is TypeTag.SET else decoded

        try:
            return self._casts[spec.tag](value, spec)
        except CoercionError:
            raise
        except (TypeError, ValueError, ArithmeticError) as e:
            raise CoercionError(
                f"Cannot convert {type(value).__name__} to {spec.name}: {e}"
            ) from e

    @staticmethod
    def is_instance(value: Any, spec: TypeSpec) -> bool:
        """Whether ``value`` already has the declared type."""
        target = spec.target
        if typing.get_origin(target) is not None or not isinstance(target, type):
            return False
        # bool is an int and datetime is a date, neither counts here
        if isinstance(value, bool) and spec.tag in _NUMBER_TAGS:
            return False
        if spec.tag is TypeTag.DATE and isinstance(value, datetime):
            return False
        if spec.tag is TypeTag.SET:
            return isinstance(value, target) and all(isinstance(item, str) for item in value)
        return isinstance(value, target)

    @staticmethod
    def _text_to_decimal(text: str, spec: TypeSpec) -> Decimal:
        # JSON numbers go through float, so plain numerals are parsed here
        try:
            number = Decimal(text.strip())
        except InvalidOperation:
            return codec.decode(text, spec.target)
        if not number.is_finite():
            return codec.decode(text, spec.target)
        return number

    @staticmethod
    def _unsupported(value: Any, spec: TypeSpec) -> CoercionError:
        return CoercionError(f"Cannot convert {type(value).__name__} to {spec.name}")

    def to_bool(self, value: Any, spec: TypeSpec) -> bool:
        if isinstance(value, (int, float, Decimal)):
            return bool(value)
        raise self._unsupported(value, spec)

    def to_int(self, value: Any, spec: TypeSpec) -> int:
        if isinstance(value, (int, float, Decimal)):
            return int(value)
        raise self._unsupported(value, spec)

    def to_float(self, value: Any, spec: TypeSpec) -> float:
        if isinstance(value, (int, float, Decimal)):
            return float(value)
        raise self._unsupported(value, spec)

    def to_decimal(self, value: Any, spec: TypeSpec) -> Decimal:
        if isinstance(value, bool):
            return Decimal(int(value))
        if isinstance(value, (int, float)):
            return Decimal(str(value))
        raise self._unsupported(value, spec)

    def to_string(self, value: Any, spec: TypeSpec) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (*_SEQUENCE_TYPES, dict, BaseModel)):
            return codec.encode(value)
        return str(value)

    def to_list(self, value: Any, spec: TypeSpec) -> list[Any]:
        if isinstance(value, _SEQUENCE_TYPES):
            return list(value)
        raise self._unsupported(value, spec)

    def to_set(self, value: Any, spec: TypeSpec) -> set[str]:
        if isinstance(value, _SEQUENCE_TYPES):
            return {item if isinstance(item, str) else self.to_string(item, spec) for item in value}
        raise self._unsupported(value, spec)

    def to_map(self, value: Any, spec: TypeSpec) -> dict[str, Any]:
        if isinstance(value, Mapping):
            return dict(value)
        if isinstance(value, BaseModel):
            return value.model_dump()
        raise self._unsupported(value, spec)

    def to_domain_object(self, value: Any, spec: TypeSpec) -> Any:
        if isinstance(value, Mapping):
            return spec.target.model_validate(dict(value))
        if isinstance(value, BaseModel):
            return spec.target.model_validate(value.model_dump())
        raise self._unsupported(value, spec)

    def to_date(self, value: Any, spec: TypeSpec) -> date:
        if isinstance(value, datetime):
            return value.date()
        return _DATE_ADAPTER.validate_python(value)

    def to_time(self, value: Any, spec: TypeSpec) -> time:
        if isinstance(value, datetime):
            return value.time()
        return _TIME_ADAPTER.validate_python(value)

    def to_datetime(self, value: Any, spec: TypeSpec) -> datetime:
        if isinstance(value, date):
            return datetime.combine(value, time())
        return _DATETIME_ADAPTER.validate_python(value)


_default_coercer = TypeCoercer()


def coerce(value: Any, declared: Any) -> Any:
    """Coerce with the default TypeCoercer."""
    return _default_coercer.coerce(value, declared)
