"""
Repository Pattern for database access.

Repository is the narrow storage contract the services consume.
SqlAlchemyRepository implements it on top of a SQLAlchemy Session and
understands Specification objects, which turn into WHERE clauses.

Usage:
    from crud_engine.services.crud.repository import (
        SqlAlchemyRepository,
        EqualsSpecification,
    )

    book_repo = SqlAlchemyRepository(Book, db)

    books = book_repo.find_all()
    book = book_repo.find_by_id(42)
    exists = book_repo.exists_by_id(42)

    # Specifications compose with &, | and ~
    by_author = EqualsSpecification("author_id", 7)
    books = book_repo.find_all(by_author & ~EqualsSpecification("title", "Draft"))

    # Paged
    page = book_repo.find_page(PageRequest(page=0, size=20), by_author)

Nothing here commits. Mutations are flushed so that generated keys are
visible; committing belongs to the surrounding unit of work
(see transaction()).
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Generic, Protocol, Sequence, TypeVar, runtime_checkable

from sqlalchemy import and_, exists as sql_exists, func, inspect, not_, or_, select, tuple_
from sqlalchemy.orm import Session
from sqlalchemy.sql import ColumnElement, Select

from crud_engine.services.crud.paging import Page, PageRequest
from crud_shared.config.logging import get_logger
from crud_shared.infrastructure.db import unit_of_work
from crud_shared.utils.exceptions import InvalidArgumentError

ModelT = TypeVar("ModelT")
IdT = TypeVar("IdT")

logger = get_logger(__name__)


# =============================================================================
# Specifications
# =============================================================================


class Specification:
    """
    Base class for query specifications.

    Specifications encapsulate query conditions that can be
    combined using logical operators (&, |, ~).

    Subclass this and implement to_expression() to create
    reusable query building blocks.
    """

    def to_expression(self, model: type) -> ColumnElement[bool]:
        """
        Convert specification to a SQLAlchemy boolean expression for model.

        Must be implemented by subclasses.
        """
        raise NotImplementedError

    def __and__(self, other: Specification) -> AndSpecification:
        """Combine with AND."""
        return AndSpecification(self, other)

    def __or__(self, other: Specification) -> OrSpecification:
        """Combine with OR."""
        return OrSpecification(self, other)

    def __invert__(self) -> NotSpecification:
        """Negate specification."""
        return NotSpecification(self)


class AndSpecification(Specification):
    """AND combination of two specifications."""

    def __init__(self, left: Specification, right: Specification):
        self._left = left
        self._right = right

    def to_expression(self, model: type) -> ColumnElement[bool]:
        return and_(self._left.to_expression(model), self._right.to_expression(model))


class OrSpecification(Specification):
    """OR combination of two specifications."""

    def __init__(self, left: Specification, right: Specification):
        self._left = left
        self._right = right

    def to_expression(self, model: type) -> ColumnElement[bool]:
        return or_(self._left.to_expression(model), self._right.to_expression(model))


class NotSpecification(Specification):
    """Negation of a specification."""

    def __init__(self, spec: Specification):
        self._spec = spec

    def to_expression(self, model: type) -> ColumnElement[bool]:
        return not_(self._spec.to_expression(model))


class EqualsSpecification(Specification):
    """attribute == value. Used to scope children to their parent."""

    def __init__(self, attribute: str, value: Any):
        self.attribute = attribute
        self.value = value

    def to_expression(self, model: type) -> ColumnElement[bool]:
        return model_column(model, self.attribute) == self.value


class IdentitySpecification(Specification):
    """Primary key == identity (single or composite)."""

    def __init__(self, identity: Any):
        self.identity = identity

    def to_expression(self, model: type) -> ColumnElement[bool]:
        columns = inspect(model).primary_key
        values = _identity_tuple(self.identity, len(columns))
        return and_(*(column == value for column, value in zip(columns, values)))


def model_column(model: type, attribute: str) -> Any:
    """
    Resolve a mapped attribute by name.

    Raises:
        ValueError: If the model has no such column attribute.
    """
    mapper = inspect(model)
    if attribute not in mapper.column_attrs:
        raise ValueError(f"{model.__name__} has no column attribute '{attribute}'")
    return getattr(model, attribute)


def _identity_tuple(identity: Any, width: int) -> tuple[Any, ...]:
    if width == 1:
        return (identity,)
    values = tuple(identity)
    if len(values) != width:
        raise ValueError(f"Composite identity needs {width} values, got {len(values)}")
    return values


# =============================================================================
# Repository contract
# =============================================================================


@runtime_checkable
class Repository(Protocol[ModelT, IdT]):
    """
    Storage contract consumed by the services.

    Errors raised by an implementation are opaque to the services, which
    let them propagate unchanged.
    """

    def find_by_id(self, entity_id: IdT, *, for_update: bool = False) -> ModelT | None: ...

    def exists_by_id(self, entity_id: IdT) -> bool: ...

    def find_all(self, spec: Specification | None = None) -> Sequence[ModelT]: ...

    def find_one(self, spec: Specification, *, for_update: bool = False) -> ModelT | None: ...

    def find_page(self, page_request: PageRequest, spec: Specification | None = None) -> Page[ModelT]: ...

    def find_all_by_ids(self, entity_ids: Sequence[IdT]) -> Sequence[ModelT]: ...

    def save(self, entity: ModelT) -> ModelT: ...

    def delete(self, entity: ModelT) -> None: ...

    def identity_of(self, entity: ModelT) -> IdT: ...

    def transaction(self) -> AbstractContextManager[Any]: ...


# =============================================================================
# SQLAlchemy implementation
# =============================================================================


class SqlAlchemyRepository(Generic[ModelT, IdT]):
    """
    Repository over a SQLAlchemy Session.

    Supports single-column and composite primary keys; composite
    identities are tuples in primary-key column order.
    """

    def __init__(self, model: type[ModelT], session: Session):
        self._model = model
        self._session = session
        self._pk_columns = tuple(inspect(model).primary_key)

    @property
    def model(self) -> type[ModelT]:
        """The SQLAlchemy model class."""
        return self._model

    @property
    def session(self) -> Session:
        """The database session."""
        return self._session

    def _base_query(self) -> Select:
        """Create base select query."""
        return select(self._model)

    def _apply_spec(self, query: Select, spec: Specification | None) -> Select:
        if spec is not None:
            query = query.where(spec.to_expression(self._model))
        return query

    def _order_clauses(self, page_request: PageRequest) -> list[Any]:
        if not page_request.sort:
            return [column.asc() for column in self._pk_columns]

        clauses = []
        for sort in page_request.sort:
            try:
                column = model_column(self._model, sort.field)
            except ValueError as e:
                raise InvalidArgumentError(f"Cannot sort by '{sort.field}'") from e
            clauses.append(column.desc() if sort.direction == "desc" else column.asc())
        return clauses

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def find_by_id(self, entity_id: IdT, *, for_update: bool = False) -> ModelT | None:
        """
        Find entity by primary key.

        Args:
            entity_id: Primary key value, or a tuple for composite keys.
            for_update: Lock the row until the surrounding transaction ends.

        Returns:
            Entity or None if not found.
        """
        return self._session.get(self._model, entity_id, with_for_update=for_update or None)

    def exists_by_id(self, entity_id: IdT) -> bool:
        """Check if entity exists by primary key."""
        query = select(sql_exists().where(IdentitySpecification(entity_id).to_expression(self._model)))
        return bool(self._session.scalar(query))

    def find_all(self, spec: Specification | None = None) -> Sequence[ModelT]:
        """
        Find all entities, optionally restricted by a specification.

        Results are ordered by primary key.
        """
        query = self._apply_spec(self._base_query(), spec)
        query = query.order_by(*(column.asc() for column in self._pk_columns))
        return self._session.scalars(query).all()

    def find_one(self, spec: Specification, *, for_update: bool = False) -> ModelT | None:
        """Find the single entity matching a specification, or None."""
        query = self._apply_spec(self._base_query(), spec)
        if for_update:
            query = query.with_for_update()
        return self._session.scalars(query).one_or_none()

    def find_page(self, page_request: PageRequest, spec: Specification | None = None) -> Page[ModelT]:
        """
        Find one page of entities.

        Args:
            page_request: Zero-based page, size and sort. Without sort the
                page is ordered by primary key ascending.
            spec: Optional restriction.

        Returns:
            Page with the slice and the total element count.
        """
        total = self.count(spec)

        query = self._apply_spec(self._base_query(), spec)
        query = (
            query.order_by(*self._order_clauses(page_request))
            .offset(page_request.offset)
            .limit(page_request.size)
        )
        items = self._session.scalars(query).all()
        return Page(items=items, total_elements=total, page_request=page_request)

    def find_all_by_ids(self, entity_ids: Sequence[IdT]) -> Sequence[ModelT]:
        """
        Find entities by primary keys.

        Ids with no matching row are skipped, so the result may be shorter
        than the input.
        """
        if not entity_ids:
            return []

        if len(self._pk_columns) == 1:
            condition = self._pk_columns[0].in_(list(entity_ids))
        else:
            condition = tuple_(*self._pk_columns).in_([tuple(i) for i in entity_ids])

        query = self._base_query().where(condition)
        return self._session.scalars(query).all()

    def count(self, spec: Specification | None = None) -> int:
        """Count entities, optionally restricted by a specification."""
        query = self._apply_spec(select(func.count()).select_from(self._model), spec)
        return self._session.scalar(query) or 0

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def save(self, entity: ModelT) -> ModelT:
        """
        Insert or replace entity.

        Returns the persistent instance, which may be a different object
        than the one passed in when a row with the same key already exists.
        """
        merged = self._session.merge(entity)
        self._session.flush()
        return merged

    def delete(self, entity: ModelT) -> None:
        """Delete entity (flushed, not committed)."""
        self._session.delete(entity)
        self._session.flush()

    def identity_of(self, entity: ModelT) -> IdT:
        """Primary key of a persistent entity; a tuple for composite keys."""
        values = tuple(inspect(self._model).primary_key_from_instance(entity))
        return values[0] if len(values) == 1 else values  # type: ignore[return-value]

    def transaction(self) -> AbstractContextManager[Session]:
        """Unit of work on this repository's session."""
        return unit_of_work(self._session)
