"""
Utilities: error kinds, error schemas, validators.
"""

from crud_shared.utils.exceptions import (
    AppException,
    NotFoundError,
    ConflictError,
    InvalidArgumentError,
    PatchError,
    MethodNotAllowedError,
)
from crud_shared.utils.schemas import (
    CommonFieldErrorCode,
    ErrorDto,
    ErrorInfo,
    FieldErrorInfo,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "ConflictError",
    "InvalidArgumentError",
    "PatchError",
    "MethodNotAllowedError",
    "CommonFieldErrorCode",
    "ErrorDto",
    "ErrorInfo",
    "FieldErrorInfo",
]
