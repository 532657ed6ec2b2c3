"""
Generic CRUD service for single-level resources.

A service is composed once per resource type from a repository, the
resource's display name, and optional filter criteria, operation checks,
lifecycle hooks and patch engine. It keeps no per-request state.

Architecture:
    Router (thin) -> Service (sequencing, checks, hooks) -> Repository -> Model

Usage:
    from crud_engine.services.base_service import CrudService, CrudHooks

    def book_service(db: Session) -> CrudService[Book, int]:
        return CrudService(
            SqlAlchemyRepository(Book, db),
            "Book",
            filter_criteria=FilterCriteria.single("title"),
            checks=OperationChecks(is_deletable=book_not_on_loan),
            hooks=CrudHooks(before_create=stamp_isbn),
            patch_engine=PatchEngine.for_schema(BookRequest),
        )

    books = book_service(db).list("dune")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, Sequence, TypeVar

from crud_engine.services.crud.filters import FilterCriteria, build_filter_specification
from crud_engine.services.crud.operation_check import OperationChecks
from crud_engine.services.crud.paging import Page, PageRequest
from crud_engine.services.crud.patch import PatchEngine
from crud_engine.services.crud.repository import Repository, Specification
from crud_shared.config.logging import get_logger
from crud_shared.utils.exceptions import MethodNotAllowedError, NotFoundError

logger = get_logger(__name__)

ModelT = TypeVar("ModelT")
IdT = TypeVar("IdT")


def _noop(*_args: Any) -> None:
    return None


@dataclass(frozen=True)
class CrudHooks(Generic[ModelT]):
    """Lifecycle hooks for single-level resources. All default to no-op."""

    before_create: Callable[[ModelT], None] = _noop
    before_delete: Callable[[ModelT], None] = _noop


class CrudService(Generic[ModelT, IdT]):
    """
    Service for a resource with list/page/get/create/update/delete/patch.

    Mutations run in one repository transaction each, so the existence
    and permission checks commit or roll back together with the write.
    """

    def __init__(
        self,
        repository: Repository[ModelT, IdT],
        resource_type: str,
        *,
        filter_criteria: FilterCriteria | None = None,
        checks: OperationChecks[ModelT] | None = None,
        hooks: CrudHooks[ModelT] | None = None,
        patch_engine: PatchEngine | None = None,
    ):
        self._repository = repository
        self._resource_type = resource_type
        self._filter_criteria = filter_criteria
        self._checks = checks or OperationChecks()
        self._hooks = hooks or CrudHooks()
        self._patch_engine = patch_engine

    @property
    def resource_type(self) -> str:
        """Human-readable resource name for messages."""
        return self._resource_type

    @property
    def repository(self) -> Repository[ModelT, IdT]:
        return self._repository

    @property
    def filter_criteria(self) -> FilterCriteria | None:
        return self._filter_criteria

    @property
    def patch_engine(self) -> PatchEngine | None:
        return self._patch_engine

    # =========================================================================
    # Read Operations
    # =========================================================================

    def _search_spec(self, search: str | None) -> Specification | None:
        """Predicate for a search term, or None when nothing to filter on."""
        if not search or self._filter_criteria is None:
            return None
        return build_filter_specification(self._filter_criteria, search)

    def list(self, search: str | None = None) -> Sequence[ModelT]:
        """
        List all resources, filtered by search when the resource declares
        filter criteria. Resources without criteria ignore the term.
        """
        spec = self._search_spec(search)
        logger.debug("Listing resources", resource_type=self._resource_type, filtered=spec is not None)
        return self._repository.find_all(spec)

    def page(self, page_request: PageRequest, search: str | None = None) -> Page[ModelT]:
        """Same filtering as list(), one page at a time."""
        spec = self._search_spec(search)
        return self._repository.find_page(page_request, spec)

    def get(self, entity_id: IdT) -> ModelT:
        """
        Get resource by id.

        Raises:
            NotFoundError: If no resource has that id.
        """
        entity = self._repository.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(self._resource_type, entity_id)
        return entity

    def get_by_ids(self, entity_ids: Sequence[IdT]) -> Sequence[ModelT]:
        """
        Bulk fetch. Unlike get(), unknown ids are skipped rather than
        raising; order follows the repository.
        """
        return self._repository.find_all_by_ids(entity_ids)

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(self, resource: ModelT) -> ModelT:
        """
        Create a resource.

        Raises:
            ConflictError: If is_creatable denies it.
        """
        with self._repository.transaction():
            self._checks.is_creatable(resource).raise_if_denied(
                resource_type=self._resource_type, operation="create"
            )
            self._hooks.before_create(resource)
            saved = self._repository.save(resource)

        logger.info("Resource created", resource_type=self._resource_type)
        return saved

    def update(self, entity_id: IdT, resource: ModelT) -> ModelT:
        """
        Replace a resource as a whole. The stored row is locked until the
        write commits.

        Raises:
            NotFoundError: If no resource has that id. Neither the edit
                check nor the repository write runs in that case.
            ConflictError: If is_editable denies it.
        """
        with self._repository.transaction():
            self._load_for_update(entity_id)
            saved = self._save_edit(resource)

        logger.info("Resource updated", resource_type=self._resource_type, resource_id=entity_id)
        return saved

    def _load_for_update(self, entity_id: IdT) -> ModelT:
        """Load and lock the stored resource, or raise NotFoundError."""
        entity = self._repository.find_by_id(entity_id, for_update=True)
        if entity is None:
            raise NotFoundError(self._resource_type, entity_id)
        return entity

    def _save_edit(self, resource: ModelT) -> ModelT:
        self._checks.is_editable(resource).raise_if_denied(
            resource_type=self._resource_type, operation="update"
        )
        return self._repository.save(resource)

    def patch(self, entity_id: IdT, payload: Mapping[str, Any]) -> ModelT:
        """
        Merge an allowlisted partial payload into the stored resource and
        save it through the update path.

        Raises:
            MethodNotAllowedError: If the resource declares no patchable fields.
            NotFoundError: If no resource has that id.
            PatchError: If a value cannot be converted. Nothing is saved.
            ConflictError: If is_editable denies the patched resource.
        """
        if self._patch_engine is None or not self._patch_engine.supports_patch:
            raise MethodNotAllowedError("PATCH", resource_type=self._resource_type)

        with self._repository.transaction():
            entity = self._load_for_update(entity_id)
            self._patch_engine.apply(entity, payload)
            saved = self._save_edit(entity)

        logger.info(
            "Resource patched",
            resource_type=self._resource_type,
            resource_id=entity_id,
            fields=sorted(self._patch_engine.allowed_fields & set(payload)),
        )
        return saved

    def delete(self, entity_id: IdT) -> None:
        """
        Delete a resource.

        The entity is loaded (and locked) first so the deletability check
        sees its full state.

        Raises:
            NotFoundError: If no resource has that id.
            ConflictError: If is_deletable denies it. Nothing is removed.
        """
        with self._repository.transaction():
            entity = self._load_for_update(entity_id)

            self._checks.is_deletable(entity).raise_if_denied(
                resource_type=self._resource_type, operation="delete"
            )
            self._hooks.before_delete(entity)
            self._repository.delete(entity)

        logger.info("Resource deleted", resource_type=self._resource_type, resource_id=entity_id)
