"""Dispatch - Type definitions

Declared parameter types are resolved once, at registration time, into a
``TypeSpec``: a closed ``TypeTag`` plus the Python runtime type used for
instance checks and structural decoding. Coercion then branches on the tag
instead of comparing runtime types.
"""

from __future__ import annotations

import typing
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class DomainObject(BaseModel):
    """Base for domain records passed to actions.

    Extra fields are kept, so a bare ``DomainObject`` works as a generic
    record. Subclasses declare typed fields for stricter records.
    """

    model_config = ConfigDict(extra="allow")


class TypeTag(str, Enum):
    """Closed set of declared parameter kinds."""

    BOOL = "bool"
    INT = "int"
    LONG = "long"
    DOUBLE = "double"
    DECIMAL = "decimal"
    STRING = "string"
    LIST = "list"  # list of anything
    SET = "set"  # set of strings
    MAP = "map"  # str -> anything
    DOMAIN_OBJECT = "domain_object"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    OTHER = "other"  # arbitrary structured type, decoded structurally


_DEFAULT_TARGETS: dict[TypeTag, Any] = {
    TypeTag.BOOL: bool,
    TypeTag.INT: int,
    TypeTag.LONG: int,
    TypeTag.DOUBLE: float,
    TypeTag.DECIMAL: Decimal,
    TypeTag.STRING: str,
    TypeTag.LIST: list,
    TypeTag.SET: set,
    TypeTag.MAP: dict,
    TypeTag.DOMAIN_OBJECT: DomainObject,
    TypeTag.DATE: date,
    TypeTag.TIME: time,
    TypeTag.DATETIME: datetime,
}

# Checked with ``is``: bool/int and datetime/date are subclass pairs
_PY_TYPES: dict[Any, TypeTag] = {
    bool: TypeTag.BOOL,
    int: TypeTag.INT,
    float: TypeTag.DOUBLE,
    Decimal: TypeTag.DECIMAL,
    str: TypeTag.STRING,
    list: TypeTag.LIST,
    set: TypeTag.SET,
    dict: TypeTag.MAP,
    datetime: TypeTag.DATETIME,
    date: TypeTag.DATE,
    time: TypeTag.TIME,
}

_TAG_NAMES: dict[str, TypeTag] = {
    "boolean": TypeTag.BOOL,
    "bool": TypeTag.BOOL,
    "integer": TypeTag.INT,
    "int": TypeTag.INT,
    "long": TypeTag.LONG,
    "double": TypeTag.DOUBLE,
    "float": TypeTag.DOUBLE,
    "decimal": TypeTag.DECIMAL,
    "string": TypeTag.STRING,
    "str": TypeTag.STRING,
    "list": TypeTag.LIST,
    "set": TypeTag.SET,
    "map": TypeTag.MAP,
    "dict": TypeTag.MAP,
    "object": TypeTag.DOMAIN_OBJECT,
    "domain_object": TypeTag.DOMAIN_OBJECT,
    "date": TypeTag.DATE,
    "time": TypeTag.TIME,
    "datetime": TypeTag.DATETIME,
}


@dataclass(frozen=True)
class TypeSpec:
    """A resolved parameter type.

    Attributes:
        tag: Which coercion rules apply
        target: Runtime type (class or parametrised generic such as
            ``list[int]``) used for instance checks and decoding
    """

    tag: TypeTag
    target: Any

    @classmethod
    def of(cls, declared: Any) -> TypeSpec:
        """Resolve a declared type into a TypeSpec.

        Accepts a TypeSpec, a TypeTag, a tag name ("Integer", "Map", ...)
        or a Python type. Unknown classes and generic aliases resolve to
        OTHER.

        Raises:
            TypeError: If the declaration cannot be resolved.
        """
        if isinstance(declared, TypeSpec):
            return declared
        if isinstance(declared, TypeTag):
            if declared is TypeTag.OTHER:
                raise TypeError("TypeTag.OTHER needs a concrete target type")
            return cls(declared, _DEFAULT_TARGETS[declared])
        if isinstance(declared, str):
            tag = _TAG_NAMES.get(declared.strip().lower())
            if tag is None:
                raise TypeError(f"Unknown type name: {declared!r}")
            return cls(tag, _DEFAULT_TARGETS[tag])
        if typing.get_origin(declared) is not None:
            return cls(TypeTag.OTHER, declared)
        if isinstance(declared, type):
            for py_type, tag in _PY_TYPES.items():
                if declared is py_type:
                    return cls(tag, declared)
            if issubclass(declared, DomainObject):
                return cls(TypeTag.DOMAIN_OBJECT, declared)
            return cls(TypeTag.OTHER, declared)
        raise TypeError(f"Cannot resolve parameter type: {declared!r}")

    @property
    def decode_target(self) -> Any:
        """Type handed to the codec when decoding text for this spec."""
        if self.tag is TypeTag.LIST:
            return list[Any]
        if self.tag is TypeTag.SET:
            # elements are stringified after decoding
            return list[Any]
        if self.tag is TypeTag.MAP:
            return dict[str, Any]
        return self.target

    @property
    def name(self) -> str:
        """Human-readable type name for error messages."""
        if self.tag is TypeTag.OTHER or self.tag is TypeTag.DOMAIN_OBJECT:
            return type_name(self.target)
        return self.tag.value


def type_name(target: Any) -> str:
    """Readable name for a class or parametrised generic."""
    if typing.get_origin(target) is not None:
        return repr(target)
    return getattr(target, "__name__", repr(target))


@dataclass(frozen=True)
class ParameterDeclaration:
    """One declared action parameter."""

    name: str
    type: TypeSpec
    description: str = ""
