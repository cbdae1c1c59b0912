"""Exceptions and error response conventions for action dispatch.

Two layers live here:

1. Exceptions raised inside the dispatcher (coercion failures, missing
   actions, the uniform action failure, mutation after freeze).
2. Error response dicts for a remote-call host. ``Registry.handle`` turns
   dispatcher exceptions into these so a client can switch on ``code``
   and ``category`` instead of exception types.

Usage:
    from src.dispatch.errors import resource_error, ErrorCode

    return resource_error(
        "Action not found: refund",
        code=ErrorCode.NOT_FOUND,
        action="refund",
    )
"""

from dataclasses import dataclass
from enum import Enum


class DispatchError(Exception):
    """Base class for all dispatcher errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CoercionError(DispatchError):
    """A raw argument could not be converted to its declared type."""


class ActionFailedError(DispatchError):
    """Uniform failure raised by ``Action.execute``.

    Carries only the message of the original failure. The original type and
    traceback are dropped at this boundary, so callers can distinguish causes
    by message text only.
    """


class InvalidArgumentsError(ActionFailedError):
    """Named arguments were rejected by strict interface validation.

    Subclasses ActionFailedError so callers still see one failure kind.
    """


class ActionNotFoundError(DispatchError):
    """The registry has no action with the requested name."""

    def __init__(self, action_name: str) -> None:
        super().__init__(f"Action not found: {action_name}")
        self.action_name = action_name


class RegistryFrozenError(DispatchError):
    """A registry or action was modified after ``freeze()``."""


class ErrorCategory(str, Enum):
    """Categories for error classification.

    - VALIDATION: Caller provided bad input
    - RESOURCE: Action missing
    - EXECUTION: Coercion or action body failed
    """

    VALIDATION = "validation"
    RESOURCE = "resource"
    EXECUTION = "execution"


class ErrorCode(str, Enum):
    """Specific error codes for programmatic handling."""

    # Validation errors
    INVALID_ARGUMENT = "invalid_argument"
    UNKNOWN_ARGUMENT = "unknown_argument"

    # Resource errors
    NOT_FOUND = "not_found"

    # Execution errors
    ACTION_FAILED = "action_failed"


@dataclass
class ErrorResponse:
    """Standardized error response.

    Compatible with the plain ``{"success": False, "error": "message"}``
    shape; ``code`` and ``category`` are additions for clients that want
    to branch on them. There is no retry logic in the dispatcher, so
    ``retriable`` is always False unless a host says otherwise.
    """

    success: bool = False
    error: str = ""
    code: str = ""
    category: str = ""
    retriable: bool = False
    details: dict[str, object] | None = None

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        result: dict[str, object] = {
            "success": self.success,
            "error": self.error,
            "code": self.code,
            "category": self.category,
            "retriable": self.retriable,
        }
        if self.details:
            result["details"] = self.details
        return result


def validation_error(
    message: str,
    code: ErrorCode = ErrorCode.INVALID_ARGUMENT,
    **details: object,
) -> dict[str, object]:
    """Create a validation error response.

    Args:
        message: Human-readable error message
        code: Specific error code (default: INVALID_ARGUMENT)
        **details: Additional context

    Returns:
        Error response dict with success=False
    """
    return ErrorResponse(
        error=message,
        code=code.value,
        category=ErrorCategory.VALIDATION.value,
        details=dict(details) if details else None,
    ).to_dict()


def resource_error(
    message: str,
    code: ErrorCode = ErrorCode.NOT_FOUND,
    **details: object,
) -> dict[str, object]:
    """Create a resource error response (e.g. unknown action name)."""
    return ErrorResponse(
        error=message,
        code=code.value,
        category=ErrorCategory.RESOURCE.value,
        details=dict(details) if details else None,
    ).to_dict()


def execution_error(
    message: str,
    code: ErrorCode = ErrorCode.ACTION_FAILED,
    retriable: bool = False,
    **details: object,
) -> dict[str, object]:
    """Create an execution error response.

    Args:
        message: Human-readable error message
        code: Specific error code (default: ACTION_FAILED)
        retriable: Whether the host may retry the call
        **details: Additional context

    Returns:
        Error response dict with success=False
    """
    return ErrorResponse(
        error=message,
        code=code.value,
        category=ErrorCategory.EXECUTION.value,
        retriable=retriable,
        details=dict(details) if details else None,
    ).to_dict()
