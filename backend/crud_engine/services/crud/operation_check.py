"""
Operation checks: permission gates evaluated right before create, update
and delete.

Every check defaults to "permitted"; a resource opts in by supplying its
own callables when the service is built.

Usage:
    def author_deletable(author: Author) -> OperationCheck:
        if author.books:
            return OperationCheck.denied(ErrorInfo.conflict("Author still has books"))
        return OperationCheck.permitted()

    service = CrudService(repo, "Author", checks=OperationChecks(is_deletable=author_deletable))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from crud_shared.config.constants import DEFAULT_DENIED_MESSAGE
from crud_shared.utils.exceptions import ConflictError
from crud_shared.utils.schemas import ErrorInfo

ModelT = TypeVar("ModelT")
IdT = TypeVar("IdT")


@dataclass(frozen=True, slots=True)
class OperationCheck:
    """Outcome of a permission gate."""

    allowed: bool
    message: str | None = None
    error: ErrorInfo | None = None

    @classmethod
    def permitted(cls) -> OperationCheck:
        return cls(allowed=True)

    @classmethod
    def denied(cls, error: ErrorInfo | str | None = None) -> OperationCheck:
        """
        Deny the operation.

        The message is the error's own message when it has one, else the
        default denial message, so a denial always carries a message.
        """
        if isinstance(error, str):
            return cls(allowed=False, message=error)
        if error is None:
            return cls(allowed=False, message=DEFAULT_DENIED_MESSAGE)
        return cls(allowed=False, message=error.message or DEFAULT_DENIED_MESSAGE, error=error)

    def raise_if_denied(self, prefix: str | None = None, **log_context: Any) -> None:
        """Raise ConflictError when the check denied the operation."""
        if self.allowed:
            return
        message = self.message or DEFAULT_DENIED_MESSAGE
        if prefix:
            message = f"{prefix} Reason: {message}"
        raise ConflictError(message, error=self.error, **log_context)


def _permit(*_args: Any) -> OperationCheck:
    return OperationCheck.permitted()


@dataclass(frozen=True)
class OperationChecks(Generic[ModelT]):
    """Checks for a single-level resource."""

    is_creatable: Callable[[ModelT], OperationCheck] = _permit
    is_editable: Callable[[ModelT], OperationCheck] = _permit
    is_deletable: Callable[[ModelT], OperationCheck] = _permit


@dataclass(frozen=True)
class NestedOperationChecks(Generic[ModelT, IdT]):
    """
    Checks for a parent-scoped resource.

    is_editable receives the target id as well as the incoming resource so
    it can compare the stored state with the new one.
    """

    is_creatable: Callable[[ModelT], OperationCheck] = _permit
    is_editable: Callable[[IdT, ModelT], OperationCheck] = _permit
    is_deletable: Callable[[ModelT], OperationCheck] = _permit
