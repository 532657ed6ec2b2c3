"""
Error detail schemas shared by the engine and the transport adapter.

ErrorInfo travels inside ConflictError (from a denied OperationCheck or a
business rule) and is rendered into an ErrorDto by the exception handlers.

Usage:
    from crud_shared.utils.schemas import ErrorInfo, CommonFieldErrorCode

    error = ErrorInfo.conflict_on_field("isbn", CommonFieldErrorCode.NOT_UNIQUE, "978-0")
    return OperationCheck.denied(error)
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from crud_shared.config.constants import ErrorCodes


class CommonFieldErrorCode(str, Enum):
    """Field-level error codes with their default messages."""

    REQUIRED_NOT_BLANK = "must not be blank"
    REQUIRED_NOT_NULL = "must not be null"
    NOT_UNIQUE = "must be unique"
    INVALID_ENUM_VALUE = "must be one of allowed values"
    POSITIVE = "must be a positive number"
    MIN = "must be greater than or equal to {min}"
    MAX = "must be less than or equal to {max}"
    RANGE = "must be between {min} and {max}"
    INVALID = "is invalid"

    @property
    def default_message(self) -> str:
        return self.value

    @classmethod
    def from_validation_type(cls, error_type: str) -> "CommonFieldErrorCode":
        """Map a pydantic validation error type onto a field error code."""
        return _VALIDATION_TYPE_CODES.get(error_type, cls.INVALID)


_VALIDATION_TYPE_CODES: dict[str, CommonFieldErrorCode] = {
    "missing": CommonFieldErrorCode.REQUIRED_NOT_NULL,
    "string_too_short": CommonFieldErrorCode.REQUIRED_NOT_BLANK,
    "enum": CommonFieldErrorCode.INVALID_ENUM_VALUE,
    "greater_than": CommonFieldErrorCode.POSITIVE,
    "greater_than_equal": CommonFieldErrorCode.MIN,
    "less_than_equal": CommonFieldErrorCode.MAX,
}


class FieldErrorInfo(BaseModel):
    """Problem with a single field."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    rejected_value: Any = None
    params: dict[str, Any] | None = None

    @classmethod
    def of(
        cls,
        code: CommonFieldErrorCode,
        rejected_value: Any = None,
        params: dict[str, Any] | None = None,
    ) -> FieldErrorInfo:
        message = code.default_message
        if params:
            message = message.format(**params)
        return cls(code=code.name, message=message, rejected_value=rejected_value, params=params)


class ErrorInfo(BaseModel):
    """
    Structured error detail.

    Immutable; use the with_* helpers to derive variants.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str | None = None
    params: dict[str, Any] | None = None
    field_errors: dict[str, FieldErrorInfo] | None = None

    @classmethod
    def for_code(cls, code: str | Enum) -> ErrorInfo:
        return cls(code=code.name if isinstance(code, Enum) else code)

    @classmethod
    def conflict(cls, message: str) -> ErrorInfo:
        return cls(code=ErrorCodes.RESOURCE_CONFLICT, message=message)

    @classmethod
    def conflict_on_field(
        cls,
        field_name: str,
        code: CommonFieldErrorCode,
        rejected_value: Any = None,
    ) -> ErrorInfo:
        return cls(
            code=ErrorCodes.RESOURCE_CONFLICT,
            message="Operation cannot be completed due to a conflict.",
            field_errors={field_name: FieldErrorInfo.of(code, rejected_value)},
        )

    def with_message(self, message: str) -> ErrorInfo:
        return self.model_copy(update={"message": message})

    def with_params(self, params: dict[str, Any]) -> ErrorInfo:
        return self.model_copy(update={"params": params})

    def with_field_errors(self, field_errors: dict[str, FieldErrorInfo]) -> ErrorInfo:
        return self.model_copy(update={"field_errors": field_errors})


class ErrorDto(BaseModel):
    """Error response body rendered by the transport adapter."""

    code: str | None = None
    message: str
    field_errors: dict[str, FieldErrorInfo] | None = None
    params: dict[str, Any] | None = None
    details: list[dict[str, str]] | None = None

    @classmethod
    def of(cls, message: str, code: str | None = None) -> ErrorDto:
        return cls(code=code, message=message)

    def with_error_info(self, error: ErrorInfo | None) -> ErrorDto:
        if error is None:
            return self
        return self.model_copy(
            update={
                "code": error.code,
                "field_errors": error.field_errors,
                "params": error.params,
            }
        )
