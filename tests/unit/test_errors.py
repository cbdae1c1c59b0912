"""Unit tests for dispatcher exceptions and error responses."""

import pytest

from src.dispatch.errors import (
    ActionFailedError,
    ActionNotFoundError,
    CoercionError,
    DispatchError,
    ErrorCategory,
    ErrorCode,
    ErrorResponse,
    InvalidArgumentsError,
    RegistryFrozenError,
    execution_error,
    resource_error,
    validation_error,
)


class TestExceptions:
    """Exception hierarchy and payloads."""

    @pytest.mark.parametrize("exc_type", [
        CoercionError, ActionFailedError, InvalidArgumentsError, RegistryFrozenError,
    ])
    def test_message_attribute(self, exc_type: type[DispatchError]) -> None:
        exc = exc_type("went wrong")
        assert exc.message == "went wrong"
        assert str(exc) == "went wrong"
        assert isinstance(exc, DispatchError)

    def test_invalid_arguments_is_action_failure(self) -> None:
        assert issubclass(InvalidArgumentsError, ActionFailedError)

    def test_not_found(self) -> None:
        exc = ActionNotFoundError("refund")
        assert exc.action_name == "refund"
        assert exc.message == "Action not found: refund"
        assert not isinstance(exc, ActionFailedError)


class TestErrorEnums:
    """ErrorCategory and ErrorCode values."""

    def test_error_category_values(self) -> None:
        assert ErrorCategory.VALIDATION.value == "validation"
        assert ErrorCategory.RESOURCE.value == "resource"
        assert ErrorCategory.EXECUTION.value == "execution"

    def test_error_code_values(self) -> None:
        assert ErrorCode.INVALID_ARGUMENT.value == "invalid_argument"
        assert ErrorCode.NOT_FOUND.value == "not_found"
        assert ErrorCode.ACTION_FAILED.value == "action_failed"


class TestErrorResponse:
    """ErrorResponse dataclass and factories."""

    def test_error_to_dict(self) -> None:
        response = ErrorResponse(error="bad", code="x", category="y")
        assert response.to_dict() == {
            "success": False,
            "error": "bad",
            "code": "x",
            "category": "y",
            "retriable": False,
        }

    def test_details_included_when_present(self) -> None:
        response = ErrorResponse(error="bad", details={"action": "a"})
        assert response.to_dict()["details"] == {"action": "a"}

    def test_validation_error(self) -> None:
        result = validation_error("bad arg", code=ErrorCode.UNKNOWN_ARGUMENT, name="zzz")
        assert result["category"] == "validation"
        assert result["code"] == "unknown_argument"
        assert result["details"] == {"name": "zzz"}

    def test_resource_error(self) -> None:
        result = resource_error("Action not found: a")
        assert result["code"] == "not_found"
        assert "details" not in result

    def test_execution_error_retriable_flag(self) -> None:
        assert execution_error("boom")["retriable"] is False
        assert execution_error("boom", retriable=True)["retriable"] is True
