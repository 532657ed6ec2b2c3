"""
Entity <-> DTO mapping contracts.

The services only deal in entities; the transport layer uses a mapper to
turn request schemas into entities and entities into response schemas.
SchemaMapper and NestedSchemaMapper cover the common case where both
sides share field names:

    mapper = SchemaMapper(Book, BookRequest, BookOutput)
    book = mapper.to_entity(BookRequest(title="Dune", pages=412))
    dto = mapper.to_dto(book)
"""

from __future__ import annotations

from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel
from sqlalchemy import inspect

ModelT = TypeVar("ModelT")
RequestT = TypeVar("RequestT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
IdT = TypeVar("IdT")
ParentIdT = TypeVar("ParentIdT")


class ResourceMapper(Protocol[ModelT, RequestT, OutputT, IdT]):
    """Mapping for a single-level resource."""

    def to_dto(self, entity: ModelT) -> OutputT: ...

    def to_entity(self, request: RequestT) -> ModelT: ...

    def update_entity(self, entity_id: IdT, request: RequestT) -> ModelT: ...


class NestedResourceMapper(Protocol[ModelT, RequestT, OutputT, ParentIdT, IdT]):
    """Mapping for a resource that lives under a parent."""

    def to_dto(self, entity: ModelT) -> OutputT: ...

    def to_entity(self, parent_id: ParentIdT, request: RequestT) -> ModelT: ...

    def update_entity(self, entity_id: IdT, parent_id: ParentIdT, request: RequestT) -> ModelT: ...


class CompositeKeyResourceMapper(Protocol[ModelT, RequestT, OutputT, ParentIdT]):
    """
    Mapping for a child whose key is derived from the parent id and a
    field of the request, so updates need no separate id.
    """

    def to_dto(self, entity: ModelT) -> OutputT: ...

    def to_entity(self, parent_id: ParentIdT, request: RequestT) -> ModelT: ...

    def update_entity(self, parent_id: ParentIdT, request: RequestT) -> ModelT: ...


def _single_pk_attribute(model: type) -> str:
    mapper = inspect(model)
    columns = mapper.primary_key
    if len(columns) != 1:
        raise ValueError(f"{model.__name__} has a composite key; pass id_attribute explicitly")
    return mapper.get_property_by_column(columns[0]).key


class SchemaMapper(Generic[ModelT, RequestT, OutputT, IdT]):
    """
    Pydantic-based ResourceMapper.

    to_entity builds the model from the request's fields; update_entity
    does the same and then overwrites the id.
    """

    def __init__(
        self,
        model: type[ModelT],
        request_schema: type[RequestT],
        output_schema: type[OutputT],
        *,
        id_attribute: str | None = None,
        exclude: set[str] | None = None,
    ):
        self.model = model
        self.request_schema = request_schema
        self.output_schema = output_schema
        self._id_attribute = id_attribute or _single_pk_attribute(model)
        self._exclude = exclude or set()

    def _entity_data(self, request: RequestT) -> dict[str, Any]:
        return request.model_dump(exclude=self._exclude)

    def to_dto(self, entity: ModelT) -> OutputT:
        return self.output_schema.model_validate(entity, from_attributes=True)

    def to_entity(self, request: RequestT) -> ModelT:
        return self.model(**self._entity_data(request))

    def update_entity(self, entity_id: IdT, request: RequestT) -> ModelT:
        entity = self.to_entity(request)
        setattr(entity, self._id_attribute, entity_id)
        return entity


class NestedSchemaMapper(Generic[ModelT, RequestT, OutputT, ParentIdT, IdT]):
    """
    Pydantic-based mapper for parent-scoped resources.

    parent_key is the entity attribute holding the parent's id.
    """

    def __init__(
        self,
        model: type[ModelT],
        request_schema: type[RequestT],
        output_schema: type[OutputT],
        parent_key: str,
        *,
        id_attribute: str | None = None,
        exclude: set[str] | None = None,
    ):
        self.model = model
        self.request_schema = request_schema
        self.output_schema = output_schema
        self.parent_key = parent_key
        self._id_attribute = id_attribute
        self._exclude = exclude or set()

    def to_dto(self, entity: ModelT) -> OutputT:
        return self.output_schema.model_validate(entity, from_attributes=True)

    def to_entity(self, parent_id: ParentIdT, request: RequestT) -> ModelT:
        data = request.model_dump(exclude=self._exclude)
        data[self.parent_key] = parent_id
        return self.model(**data)

    def update_entity(self, entity_id: IdT, parent_id: ParentIdT, request: RequestT) -> ModelT:
        entity = self.to_entity(parent_id, request)
        setattr(entity, self._id_attribute or _single_pk_attribute(self.model), entity_id)
        return entity


class CompositeKeySchemaMapper(NestedSchemaMapper[ModelT, RequestT, OutputT, ParentIdT, Any]):
    """
    Mapper for children keyed by (parent id, local token).

    The request carries the local token, so the mapped entity already has
    its full key and updating is the same as mapping.
    """

    def update_entity(self, parent_id: ParentIdT, request: RequestT) -> ModelT:  # type: ignore[override]
        return self.to_entity(parent_id, request)
