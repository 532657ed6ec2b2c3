"""
Identifier conversion at the transport boundary.

Path variables arrive as strings; convert_identifier() turns them into the
identifier type a resource declares, and derive_composite_id() wraps a
resource's (parent id, local token) -> id function. Both raise
InvalidArgumentError before any storage access.
"""

from __future__ import annotations

import uuid
from typing import Any, Callable, TypeVar

from crud_shared.utils.exceptions import InvalidArgumentError

T = TypeVar("T")
ParentIdT = TypeVar("ParentIdT")
TokenT = TypeVar("TokenT")
IdT = TypeVar("IdT")

_CONVERTERS: dict[type, Callable[[str], Any]] = {
    int: int,
    str: str,
    uuid.UUID: uuid.UUID,
}


def convert_identifier(raw: str | None, id_type: type[T]) -> T:
    """
    Convert a raw path value to id_type (int, str or UUID).

    Raises:
        InvalidArgumentError: If the value is missing, the type is not
            supported, or the value does not parse.
    """
    if raw is None:
        raise InvalidArgumentError(f"Missing path variable value for type: {id_type.__name__}")

    converter = _CONVERTERS.get(id_type)
    if converter is None:
        raise InvalidArgumentError(f"Unsupported path variable type: {id_type.__name__}")

    try:
        return converter(raw)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(
            f"Invalid path variable value: '{raw}' (expected type: {id_type.__name__})"
        ) from e


def derive_composite_id(
    derive: Callable[[ParentIdT, TokenT], IdT],
    parent_id: ParentIdT,
    token: TokenT,
) -> IdT:
    """
    Call a resource's pure id-derivation function.

    ValueError and TypeError from the function mean the token is malformed
    and become InvalidArgumentError.
    """
    try:
        return derive(parent_id, token)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(
            f"Cannot derive identifier from parent '{parent_id}' and token '{token}': {e}"
        ) from e
