"""
Search filters: turn a client search term into a storage predicate.

A resource declares its FilterCriteria once; each request with a search
term gets a FilterSpecification which the repository turns into a WHERE
clause.

Usage:
    criteria = FilterCriteria(
        FilterableFields.of(["first_name", "last_name"], MatchingStrategy.CONCAT),
        FilterOperation.LIKE,
    )
    authors = repo.find_all(build_filter_specification(criteria, "john doe"))

    # Generates:
    # WHERE lower(coalesce(first_name, '') || ' ' || coalesce(last_name, ''))
    #       LIKE '%john doe%'
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from sqlalchemy import String, and_, cast, false, func, literal, or_, true
from sqlalchemy.sql import ColumnElement

from crud_engine.services.crud.repository import Specification, model_column


class MatchingStrategy(str, Enum):
    """How several fields combine into one match."""

    SINGLE = "SINGLE"  # exactly one field
    CONCAT = "CONCAT"  # space-joined values matched as one string
    OR = "OR"          # any field matches
    AND = "AND"        # every field matches


class FilterOperation(str, Enum):
    """How a value is compared with the search term."""

    EQUALITY = "EQUALITY"  # exact, case-sensitive
    LIKE = "LIKE"          # case-insensitive substring


@dataclass(frozen=True, slots=True)
class FilterableFields:
    """Ordered field names plus the strategy that combines them."""

    keys: tuple[str, ...]
    strategy: MatchingStrategy = MatchingStrategy.SINGLE

    def __post_init__(self) -> None:
        if self.strategy is MatchingStrategy.SINGLE and len(self.keys) != 1:
            raise ValueError(
                f"SINGLE matching needs exactly one field, got {len(self.keys)}"
            )

    @classmethod
    def of(cls, keys: Iterable[str], strategy: MatchingStrategy = MatchingStrategy.SINGLE) -> FilterableFields:
        return cls(keys=tuple(keys), strategy=strategy)


@dataclass(frozen=True, slots=True)
class FilterCriteria:
    """Which fields a search term targets and how it is compared."""

    fields: FilterableFields
    operation: FilterOperation = FilterOperation.LIKE

    @classmethod
    def single(cls, key: str, operation: FilterOperation = FilterOperation.LIKE) -> FilterCriteria:
        return cls(FilterableFields.of([key]), operation)

    @classmethod
    def concat(cls, keys: Iterable[str], operation: FilterOperation = FilterOperation.LIKE) -> FilterCriteria:
        return cls(FilterableFields.of(keys, MatchingStrategy.CONCAT), operation)

    @classmethod
    def any_of(cls, keys: Iterable[str], operation: FilterOperation = FilterOperation.LIKE) -> FilterCriteria:
        return cls(FilterableFields.of(keys, MatchingStrategy.OR), operation)

    @classmethod
    def all_of(cls, keys: Iterable[str], operation: FilterOperation = FilterOperation.LIKE) -> FilterCriteria:
        return cls(FilterableFields.of(keys, MatchingStrategy.AND), operation)


class FilterSpecification(Specification):
    """
    Specification built from FilterCriteria and a search term.

    Empty field lists: CONCAT and AND match everything, OR matches nothing
    (the identity element of the combining operator).
    """

    def __init__(self, criteria: FilterCriteria, value: str):
        self.criteria = criteria
        self.value = value

    def to_expression(self, model: type) -> ColumnElement[bool]:
        keys = self.criteria.fields.keys
        strategy = self.criteria.fields.strategy

        if strategy is MatchingStrategy.SINGLE:
            return self._compare(model_column(model, keys[0]))

        if strategy is MatchingStrategy.CONCAT:
            if not keys:
                return true()
            return self._compare(_concatenate(model, keys))

        predicates = [self._compare(model_column(model, key)) for key in keys]

        if strategy is MatchingStrategy.OR:
            return or_(*predicates) if predicates else false()

        return and_(*predicates) if predicates else true()

    def _compare(self, expression: Any) -> ColumnElement[bool]:
        if self.criteria.operation is FilterOperation.EQUALITY:
            return expression == self.value

        pattern = f"%{self.value.lower()}%"
        return func.lower(_as_string(expression)).like(pattern)


def _as_string(expression: Any) -> Any:
    """Cast non-string columns so string functions apply."""
    if isinstance(getattr(expression, "type", None), String):
        return expression
    return cast(expression, String)


def _concatenate(model: type, keys: tuple[str, ...]) -> Any:
    """coalesce(k1, '') || ' ' || coalesce(k2, '') || ..."""
    parts = [func.coalesce(_as_string(model_column(model, key)), "") for key in keys]

    combined = parts[0]
    for part in parts[1:]:
        combined = combined.concat(literal(" ")).concat(part)
    return combined


def build_filter_specification(criteria: FilterCriteria, value: str) -> FilterSpecification:
    """
    Build the predicate for a search term.

    Raises:
        ValueError: If value is empty; callers skip filtering instead.
    """
    if not value:
        raise ValueError("Search value must not be empty")
    return FilterSpecification(criteria, value)
