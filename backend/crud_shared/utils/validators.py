"""
Reusable field validators for request schemas.

Usage:
    from typing import Annotated
    from crud_shared.utils.validators import enum_value, enum_values

    class BookRequest(BaseModel):
        genre: Annotated[str, enum_value(Genre)]
        tags: Annotated[list[str], enum_values(Tag)] = []
"""

from collections.abc import Collection
from enum import Enum

from pydantic import AfterValidator

ENUM_VALUE_MESSAGE = "must be one of the following values: {enum_values}"


def allowed_enum_values(enum_class: type[Enum]) -> list[str]:
    """Upper-cased names accepted for an enum-backed string field."""
    return [member.name.upper() for member in enum_class]


def _enum_message(enum_class: type[Enum], message: str) -> str:
    return message.replace("{enum_values}", ", ".join(allowed_enum_values(enum_class)))


def enum_value(
    enum_class: type[Enum],
    *,
    blankable: bool = False,
    message: str = ENUM_VALUE_MESSAGE,
) -> AfterValidator:
    """
    Validate that a string field holds one of the enum's values.

    Matching is case-insensitive. None or "" is accepted only when
    blankable is True.
    """
    allowed = set(allowed_enum_values(enum_class))
    error_message = _enum_message(enum_class, message)

    def _validate(value: str | None) -> str | None:
        if value is None or value == "":
            if blankable:
                return value
            raise ValueError(error_message)
        if value.upper() not in allowed:
            raise ValueError(error_message)
        return value

    return AfterValidator(_validate)


def enum_values(
    enum_class: type[Enum],
    *,
    message: str = ENUM_VALUE_MESSAGE,
) -> AfterValidator:
    """
    Validate every element of a string collection against the enum.

    An empty or missing collection is valid. The error names the offending
    positions.
    """
    allowed = set(allowed_enum_values(enum_class))
    error_message = _enum_message(enum_class, message)

    def _validate(values: Collection[str] | None) -> Collection[str] | None:
        if not values:
            return values

        invalid = [
            index
            for index, value in enumerate(values)
            if value is None or value.upper() not in allowed
        ]
        if invalid:
            positions = ", ".join(f"[{index}]" for index in invalid)
            raise ValueError(f"{positions} {error_message}")
        return values

    return AfterValidator(_validate)
