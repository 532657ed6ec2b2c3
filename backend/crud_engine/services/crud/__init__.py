"""
Building blocks for the generic services.
"""

from crud_engine.services.crud.filters import (
    FilterableFields,
    FilterCriteria,
    FilterOperation,
    FilterSpecification,
    MatchingStrategy,
    build_filter_specification,
)
from crud_engine.services.crud.identifiers import convert_identifier, derive_composite_id
from crud_engine.services.crud.mapper import (
    CompositeKeySchemaMapper,
    NestedSchemaMapper,
    SchemaMapper,
)
from crud_engine.services.crud.operation_check import (
    NestedOperationChecks,
    OperationCheck,
    OperationChecks,
)
from crud_engine.services.crud.paging import Page, PageDto, PageRequest, Sort
from crud_engine.services.crud.patch import Patchable, PatchEngine, PatchField, patch
from crud_engine.services.crud.repository import (
    EqualsSpecification,
    IdentitySpecification,
    Repository,
    Specification,
    SqlAlchemyRepository,
)

__all__ = [
    # Filters
    "FilterableFields",
    "FilterCriteria",
    "FilterOperation",
    "FilterSpecification",
    "MatchingStrategy",
    "build_filter_specification",
    # Identifiers
    "convert_identifier",
    "derive_composite_id",
    # Mapping
    "CompositeKeySchemaMapper",
    "NestedSchemaMapper",
    "SchemaMapper",
    # Operation checks
    "NestedOperationChecks",
    "OperationCheck",
    "OperationChecks",
    # Paging
    "Page",
    "PageDto",
    "PageRequest",
    "Sort",
    # Patch
    "Patchable",
    "PatchEngine",
    "PatchField",
    "patch",
    # Repository
    "EqualsSpecification",
    "IdentitySpecification",
    "Repository",
    "Specification",
    "SqlAlchemyRepository",
]
