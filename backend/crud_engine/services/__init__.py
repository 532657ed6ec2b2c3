"""
Services module for resource lifecycles.

- base_service: CrudService for single-level resources
- nested_service: NestedCrudService for parent-scoped resources
- crud/: repository, filters, patch engine, operation checks, paging, mapping

Usage:
    from crud_engine.services import CrudService, NestedCrudService
    from crud_engine.services.crud import FilterCriteria, SqlAlchemyRepository
"""

from crud_engine.services.base_service import CrudHooks, CrudService
from crud_engine.services.nested_service import NestedCrudService, NestedHooks

__all__ = [
    "CrudHooks",
    "CrudService",
    "NestedCrudService",
    "NestedHooks",
]
