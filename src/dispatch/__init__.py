# Action dispatch package
from .types import DomainObject, ParameterDeclaration, TypeSpec, TypeTag
from .codec import encode, decode, decode_untyped
from .coercion import TypeCoercer, coerce
from .action import Action
from .registry import Registry
from .errors import (
    DispatchError, CoercionError, ActionFailedError, InvalidArgumentsError,
    ActionNotFoundError, RegistryFrozenError,
    ErrorCategory, ErrorCode, ErrorResponse,
)
from .interface import action_interface, registry_interface, validate_named_args, ValidationResult
from .invocation_log import InvocationLog, InvocationRecord, InvocationStats

__all__ = [
    "DomainObject", "ParameterDeclaration", "TypeSpec", "TypeTag",
    "encode", "decode", "decode_untyped",
    "TypeCoercer", "coerce",
    "Action",
    "Registry",
    "DispatchError", "CoercionError", "ActionFailedError", "InvalidArgumentsError",
    "ActionNotFoundError", "RegistryFrozenError",
    "ErrorCategory", "ErrorCode", "ErrorResponse",
    "action_interface", "registry_interface", "validate_named_args", "ValidationResult",
    "InvocationLog", "InvocationRecord", "InvocationStats",
]
