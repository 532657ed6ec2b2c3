"""
Generic routers for parent-scoped resources.

The prefix must carry the parent's path variable as {parent_id}:

    router = build_nested_router(
        "/api/authors/{parent_id}/books",
        author_books_service,
        NestedSchemaMapper(Book, BookRequest, BookOutput, parent_key="author_id"),
        BookRequest,
        BookOutput,
    )

build_composite_key_router() is the variant for children whose key is
(parent id, local token): the {resource_id} path segment is the local
token, and the service's derive_id turns it into the real key.

Nested routes are not paged.
"""

from typing import Any, Callable

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from crud_engine.services.crud.identifiers import convert_identifier
from crud_engine.services.crud.mapper import CompositeKeyResourceMapper, NestedResourceMapper
from crud_engine.services.nested_service import NestedCrudService
from crud_shared.infrastructure.db import get_db

PARENT_PATH_VARIABLE = "{parent_id}"


def _check_prefix(prefix: str) -> None:
    if PARENT_PATH_VARIABLE not in prefix:
        raise ValueError(f"Nested router prefix must contain {PARENT_PATH_VARIABLE}: {prefix!r}")


def build_nested_router(
    prefix: str,
    service_factory: Callable[[Session], NestedCrudService[Any, Any, Any, Any]],
    mapper: NestedResourceMapper,
    request_schema: type[BaseModel],
    output_schema: type[BaseModel],
    *,
    parent_id_type: type = int,
    id_type: type = int,
    tags: list[str] | None = None,
    get_session: Callable[..., Any] = get_db,
) -> APIRouter:
    """
    Build an APIRouter exposing a NestedCrudService.

    Endpoints (relative to prefix):
        GET    ""              children of the parent
        GET    /{resource_id}  one child
        POST   ""              create under the parent (201)
        PUT    /{resource_id}  replace
        DELETE /{resource_id}  delete (204)
    """
    _check_prefix(prefix)
    router = APIRouter(prefix=prefix, tags=tags or [])

    def get_service(db: Session = Depends(get_session)) -> NestedCrudService[Any, Any, Any, Any]:
        return service_factory(db)

    @router.get("", response_model=list[output_schema])
    def list_by_parent(
        parent_id: str,
        service: NestedCrudService[Any, Any, Any, Any] = Depends(get_service),
    ) -> list[Any]:
        owner_id = convert_identifier(parent_id, parent_id_type)
        return [mapper.to_dto(entity) for entity in service.list_by_parent(owner_id)]

    @router.get("/{resource_id}", response_model=output_schema)
    def get_one(
        parent_id: str,
        resource_id: str,
        service: NestedCrudService[Any, Any, Any, Any] = Depends(get_service),
    ) -> Any:
        owner_id = convert_identifier(parent_id, parent_id_type)
        entity_id = convert_identifier(resource_id, id_type)
        return mapper.to_dto(service.get(owner_id, entity_id))

    @router.post("", response_model=output_schema, status_code=status.HTTP_201_CREATED)
    def create(
        parent_id: str,
        body: request_schema,
        service: NestedCrudService[Any, Any, Any, Any] = Depends(get_service),
    ) -> Any:
        owner_id = convert_identifier(parent_id, parent_id_type)
        entity = mapper.to_entity(owner_id, body)
        return mapper.to_dto(service.create(entity, parent_id=owner_id))

    @router.put("/{resource_id}", response_model=output_schema)
    def update(
        parent_id: str,
        resource_id: str,
        body: request_schema,
        service: NestedCrudService[Any, Any, Any, Any] = Depends(get_service),
    ) -> Any:
        owner_id = convert_identifier(parent_id, parent_id_type)
        entity_id = convert_identifier(resource_id, id_type)
        entity = mapper.update_entity(entity_id, owner_id, body)
        return mapper.to_dto(service.update(entity_id, entity, parent_id=owner_id))

    @router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
    def delete(
        parent_id: str,
        resource_id: str,
        service: NestedCrudService[Any, Any, Any, Any] = Depends(get_service),
    ) -> Response:
        owner_id = convert_identifier(parent_id, parent_id_type)
        service.delete(owner_id, convert_identifier(resource_id, id_type))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


def build_composite_key_router(
    prefix: str,
    service_factory: Callable[[Session], NestedCrudService[Any, Any, Any, Any]],
    mapper: CompositeKeyResourceMapper,
    request_schema: type[BaseModel],
    output_schema: type[BaseModel],
    *,
    parent_id_type: type = int,
    token_type: type = str,
    tags: list[str] | None = None,
    get_session: Callable[..., Any] = get_db,
) -> APIRouter:
    """
    Build an APIRouter for a child keyed by (parent id, local token).

    Same endpoints as build_nested_router(). {resource_id} is converted to
    token_type and passed through the service's resolve_id() before any
    lookup; the body of a PUT must name the same token as the path. A POST
    body's key goes through derive_id too, so a token it rejects is a 400.
    """
    _check_prefix(prefix)
    router = APIRouter(prefix=prefix, tags=tags or [])

    def get_service(db: Session = Depends(get_session)) -> NestedCrudService[Any, Any, Any, Any]:
        service = service_factory(db)
        if not service.uses_composite_id:
            raise ValueError(f"{service.resource_type} service has no derive_id")
        return service

    def resolve(service: NestedCrudService[Any, Any, Any, Any], parent_id: str, resource_id: str) -> tuple[Any, Any]:
        owner_id = convert_identifier(parent_id, parent_id_type)
        token = convert_identifier(resource_id, token_type)
        return owner_id, service.resolve_id(owner_id, token)

    @router.get("", response_model=list[output_schema])
    def list_by_parent(
        parent_id: str,
        service: NestedCrudService[Any, Any, Any, Any] = Depends(get_service),
    ) -> list[Any]:
        owner_id = convert_identifier(parent_id, parent_id_type)
        return [mapper.to_dto(entity) for entity in service.list_by_parent(owner_id)]

    @router.get("/{resource_id}", response_model=output_schema)
    def get_one(
        parent_id: str,
        resource_id: str,
        service: NestedCrudService[Any, Any, Any, Any] = Depends(get_service),
    ) -> Any:
        owner_id, entity_id = resolve(service, parent_id, resource_id)
        return mapper.to_dto(service.get(owner_id, entity_id))

    @router.post("", response_model=output_schema, status_code=status.HTTP_201_CREATED)
    def create(
        parent_id: str,
        body: request_schema,
        service: NestedCrudService[Any, Any, Any, Any] = Depends(get_service),
    ) -> Any:
        owner_id = convert_identifier(parent_id, parent_id_type)
        entity = mapper.to_entity(owner_id, body)
        return mapper.to_dto(service.create(entity, parent_id=owner_id))

    @router.put("/{resource_id}", response_model=output_schema)
    def update(
        parent_id: str,
        resource_id: str,
        body: request_schema,
        service: NestedCrudService[Any, Any, Any, Any] = Depends(get_service),
    ) -> Any:
        owner_id, entity_id = resolve(service, parent_id, resource_id)
        entity = mapper.update_entity(owner_id, body)
        return mapper.to_dto(service.update(entity_id, entity, parent_id=owner_id))

    @router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
    def delete(
        parent_id: str,
        resource_id: str,
        service: NestedCrudService[Any, Any, Any, Any] = Depends(get_service),
    ) -> Response:
        owner_id, entity_id = resolve(service, parent_id, resource_id)
        service.delete(owner_id, entity_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
