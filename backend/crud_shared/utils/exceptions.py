"""
Error kinds surfaced by the engine.

Every error extends AppException, which is a FastAPI HTTPException that
logs itself on construction, so the transport layer can render it without
a translation table.

Usage:
    from crud_shared.utils.exceptions import NotFoundError, ConflictError

    raise NotFoundError("Book", book_id)
    raise ConflictError("Book is referenced by an order", error=error_info)
"""

from typing import Any

from fastapi import HTTPException, status

from crud_shared.config.constants import ErrorCodes
from crud_shared.config.logging import get_logger
from crud_shared.utils.schemas import ErrorInfo

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All engine exceptions inherit from this class
    to ensure consistent logging and response format.
    """

    code: str = ErrorCodes.INVALID_ARGUMENT

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)

    @property
    def message(self) -> str:
        return self.detail

    @property
    def error(self) -> ErrorInfo | None:
        """Structured detail for the response body, if any."""
        return None


# =============================================================================
# 404 Not Found
# =============================================================================


class NotFoundError(AppException):
    """
    Resource (or parent resource) not found.

    Usage:
        raise NotFoundError("Book", 123)
        raise NotFoundError("Chapter", (7, 2))
    """

    code = ErrorCodes.RESOURCE_NOT_FOUND

    def __init__(self, resource_type: str, resource_id: Any = None, **log_context: Any):
        self.resource_type = resource_type
        self.resource_id = None if resource_id is None else str(resource_id)

        if self.resource_id is not None:
            detail = f"{resource_type} (ID: {self.resource_id}) not found"
        else:
            detail = f"{resource_type} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            resource_type=resource_type,
            resource_id=self.resource_id,
            **log_context,
        )


# =============================================================================
# 409 Conflict
# =============================================================================


class ConflictError(AppException):
    """
    A mutation was denied by an operation check or a business rule.

    Usage:
        raise ConflictError("Author still has books")
        raise ConflictError(error.message, error=error)
    """

    code = ErrorCodes.RESOURCE_CONFLICT

    def __init__(self, message: str, error: ErrorInfo | None = None, **log_context: Any):
        self._error = error
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=message,
            error_code=error.code if error else None,
            **log_context,
        )

    @property
    def error(self) -> ErrorInfo | None:
        return self._error


# =============================================================================
# 400 Bad Request
# =============================================================================


class InvalidArgumentError(AppException):
    """
    Malformed input at the identifier boundary.

    Usage:
        raise InvalidArgumentError("Invalid path variable value: 'abc' (expected type: int)")
    """

    code = ErrorCodes.INVALID_ARGUMENT

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            **log_context,
        )


class PatchError(AppException):
    """
    A patch value could not be converted or assigned.

    The whole patch fails; nothing from the payload is applied.
    """

    code = ErrorCodes.PATCH_FAILED

    def __init__(self, field: str, reason: str | None = None, **log_context: Any):
        self.field = field
        self.reason = reason
        detail = f"Failed to patch field '{field}'"
        if reason:
            detail = f"{detail}: {reason}"

        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            field=field,
            **log_context,
        )


# =============================================================================
# 405 Method Not Allowed
# =============================================================================


class MethodNotAllowedError(AppException):
    """Raised when a resource does not support the requested operation."""

    code = ErrorCodes.METHOD_NOT_ALLOWED

    def __init__(self, method: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            detail=f"HTTP method {method} is not supported for this resource.",
            method=method,
            **log_context,
        )
