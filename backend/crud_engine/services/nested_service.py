"""
Generic CRUD service for resources that live under a parent.

Every read first proves the parent exists, and child lookups are scoped
to the parent in the query itself, so a child is never reachable through
another parent's id.

Usage:
    chapters = NestedCrudService(
        SqlAlchemyRepository(Chapter, db),
        SqlAlchemyRepository(Book, db),
        "Chapter",
        "Book",
        parent_key="book_id",
        derive_id=lambda book_id, number: (book_id, int(number)),
        hooks=NestedHooks(after_create=bump_chapter_count),
    )

    chapter_id = chapters.resolve_id(book_id, "3")
    chapter = chapters.get(book_id, chapter_id)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Sequence, TypeVar

from crud_engine.services.crud.identifiers import derive_composite_id
from crud_engine.services.crud.operation_check import NestedOperationChecks
from crud_engine.services.crud.repository import (
    EqualsSpecification,
    IdentitySpecification,
    Repository,
)
from crud_shared.config.logging import get_logger
from crud_shared.utils.exceptions import InvalidArgumentError, NotFoundError

logger = get_logger(__name__)

ParentT = TypeVar("ParentT")
ModelT = TypeVar("ModelT")
ParentIdT = TypeVar("ParentIdT")
IdT = TypeVar("IdT")
TokenT = TypeVar("TokenT")


def _noop(*_args: Any) -> None:
    return None


@dataclass(frozen=True)
class NestedHooks(Generic[ModelT]):
    """
    Lifecycle hooks for parent-scoped resources. All default to no-op.

    before_update(incoming, existing) may copy forward fields the client
    must not overwrite, or strip stale derived data from the existing row.
    Errors raised by any hook roll the whole operation back.
    """

    after_create: Callable[[ModelT], None] = _noop
    before_update: Callable[[ModelT, ModelT], None] = _noop
    after_update: Callable[[ModelT], None] = _noop
    before_delete: Callable[[ModelT], None] = _noop


class NestedCrudService(Generic[ParentT, ModelT, ParentIdT, IdT]):
    """
    Service for a child resource reachable only through its parent.

    Parent scoping comes from either parent_key (the child attribute that
    holds the parent's id) or explicit find_by_parent /
    find_by_id_and_parent queries. derive_id, when given, turns a
    (parent id, local token) pair into the child's identifier.
    """

    def __init__(
        self,
        repository: Repository[ModelT, IdT],
        parent_repository: Repository[ParentT, ParentIdT],
        resource_type: str,
        parent_resource_type: str,
        *,
        parent_key: str | None = None,
        find_by_parent: Callable[[ParentT], Sequence[ModelT]] | None = None,
        find_by_id_and_parent: Callable[[IdT, ParentT], ModelT | None] | None = None,
        derive_id: Callable[[ParentIdT, Any], IdT] | None = None,
        checks: NestedOperationChecks[ModelT, IdT] | None = None,
        hooks: NestedHooks[ModelT] | None = None,
    ):
        if parent_key is None and (find_by_parent is None or find_by_id_and_parent is None):
            raise ValueError(
                "Either parent_key or both find_by_parent and find_by_id_and_parent are required"
            )

        self._repository = repository
        self._parent_repository = parent_repository
        self._resource_type = resource_type
        self._parent_resource_type = parent_resource_type
        self._parent_key = parent_key
        self._find_by_parent = find_by_parent or self._children_of
        self._find_by_id_and_parent = find_by_id_and_parent or self._child_of
        self._locks_scoped_lookup = find_by_id_and_parent is None
        self._derive_id = derive_id
        self._checks = checks or NestedOperationChecks()
        self._hooks = hooks or NestedHooks()

    @property
    def resource_type(self) -> str:
        return self._resource_type

    @property
    def parent_resource_type(self) -> str:
        return self._parent_resource_type

    @property
    def uses_composite_id(self) -> bool:
        return self._derive_id is not None

    # =========================================================================
    # Default parent-scoped queries
    # =========================================================================

    def _parent_scope(self, parent: ParentT) -> EqualsSpecification:
        return EqualsSpecification(self._parent_key, self._parent_repository.identity_of(parent))

    def _children_of(self, parent: ParentT) -> Sequence[ModelT]:
        return self._repository.find_all(self._parent_scope(parent))

    def _child_of(self, entity_id: IdT, parent: ParentT, *, for_update: bool = False) -> ModelT | None:
        return self._repository.find_one(
            IdentitySpecification(entity_id) & self._parent_scope(parent),
            for_update=for_update,
        )

    # =========================================================================
    # Identifiers
    # =========================================================================

    def resolve_id(self, parent_id: ParentIdT, token: Any) -> IdT:
        """
        Child identifier for a (parent id, local token) pair.

        Without derive_id the token already is the identifier.

        Raises:
            InvalidArgumentError: If derive_id rejects the token.
        """
        if self._derive_id is None:
            return token
        return derive_composite_id(self._derive_id, parent_id, token)

    def _check_derived_key(self, parent_id: ParentIdT, resource: ModelT) -> None:
        # The local token is the last component of the key.
        key = self._repository.identity_of(resource)
        token = key[-1] if isinstance(key, tuple) else key
        if self.resolve_id(parent_id, token) != key:
            raise InvalidArgumentError(
                f"{self._resource_type} key does not belong to parent '{parent_id}'",
                resource_id=str(key),
            )

    # =========================================================================
    # Read Operations
    # =========================================================================

    def _require_parent(self, parent_id: ParentIdT) -> ParentT:
        parent = self._parent_repository.find_by_id(parent_id)
        if parent is None:
            raise NotFoundError(self._parent_resource_type, parent_id)
        return parent

    def list_by_parent(self, parent_id: ParentIdT) -> Sequence[ModelT]:
        """
        List the children of a parent.

        Raises:
            NotFoundError: If the parent does not exist.
        """
        parent = self._require_parent(parent_id)
        return self._find_by_parent(parent)

    def get(self, parent_id: ParentIdT, entity_id: IdT) -> ModelT:
        """
        Get a child of a parent.

        Raises:
            NotFoundError: For the parent type if the parent does not exist,
                for the child type if the child does not exist or belongs
                to another parent.
        """
        return self._get(parent_id, entity_id)

    def _get(self, parent_id: ParentIdT, entity_id: IdT, *, for_update: bool = False) -> ModelT:
        parent = self._require_parent(parent_id)
        if for_update and self._locks_scoped_lookup:
            entity = self._child_of(entity_id, parent, for_update=True)
        else:
            entity = self._find_by_id_and_parent(entity_id, parent)
        if entity is None:
            raise NotFoundError(self._resource_type, entity_id, parent_id=str(parent_id))
        return entity

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(self, resource: ModelT, *, parent_id: ParentIdT | None = None) -> ModelT:
        """
        Create a child, then run after_create inside the same transaction.

        With parent_id the parent is resolved first, and a derived key is
        checked against derive_id before anything is written.

        Raises:
            InvalidArgumentError: If derive_id rejects the resource's key or
                derives a different one for this parent.
            NotFoundError: If the given parent does not exist.
            ConflictError: If is_creatable denies it.
        """
        with self._repository.transaction():
            if parent_id is not None:
                self._require_parent(parent_id)
                if self._derive_id is not None:
                    self._check_derived_key(parent_id, resource)
            self._checks.is_creatable(resource).raise_if_denied(
                "Failed to create resource.", resource_type=self._resource_type
            )
            saved = self._repository.save(resource)
            self._hooks.after_create(saved)

        logger.info("Nested resource created", resource_type=self._resource_type)
        return saved

    def update(self, entity_id: IdT, resource: ModelT, *, parent_id: ParentIdT | None = None) -> ModelT:
        """
        Replace a child.

        With parent_id the existing child is resolved through the parent
        (as get() does); without it, by id alone. Either way the stored
        row is locked until the write commits, except when a custom
        find_by_id_and_parent does the scoped lookup.

        Raises:
            InvalidArgumentError: If the resource's own key does not match
                entity_id, which happens when a composite-key request body
                names a different local token than the path.
            NotFoundError: If the child (or given parent) does not exist.
            ConflictError: If is_editable denies it.
        """
        if self._derive_id is not None and self._repository.identity_of(resource) != entity_id:
            raise InvalidArgumentError(
                f"{self._resource_type} key in the body does not match the path",
                resource_id=str(entity_id),
            )

        with self._repository.transaction():
            if parent_id is not None:
                existing = self._get(parent_id, entity_id, for_update=True)
            else:
                existing = self._repository.find_by_id(entity_id, for_update=True)
                if existing is None:
                    raise NotFoundError(self._resource_type, entity_id)

            self._checks.is_editable(entity_id, resource).raise_if_denied(
                "Failed to edit resource.", resource_type=self._resource_type
            )
            self._hooks.before_update(resource, existing)
            saved = self._repository.save(resource)
            self._hooks.after_update(saved)

        logger.info("Nested resource updated", resource_type=self._resource_type, resource_id=str(entity_id))
        return saved

    def delete(self, parent_id: ParentIdT, entity_id: IdT) -> None:
        """
        Delete a child of a parent.

        Raises:
            NotFoundError: If the parent or the scoped child does not exist.
            ConflictError: If is_deletable denies it. Nothing is removed.
        """
        with self._repository.transaction():
            entity = self._get(parent_id, entity_id, for_update=True)

            self._checks.is_deletable(entity).raise_if_denied(
                "Failed to delete resource.", resource_type=self._resource_type
            )
            self._hooks.before_delete(entity)
            self._repository.delete(entity)

        logger.info("Nested resource deleted", resource_type=self._resource_type, resource_id=str(entity_id))
