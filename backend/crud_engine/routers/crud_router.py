"""
Generic router for single-level resources.

build_crud_router() binds a CrudService factory and a mapper to the
usual set of endpoints, so a resource needs no hand-written router:

    router = build_crud_router(
        "/api/books",
        book_service,
        SchemaMapper(Book, BookRequest, BookOutput),
        BookRequest,
        BookOutput,
        tags=["books"],
    )

Endpoints:
    GET    /all            list, optional ?search=
    GET    ""              page (?page, ?size, ?sort), optional ?search=
    GET    /{resource_id}  one resource
    POST   ""              create (201)
    PUT    /{resource_id}  replace
    PATCH  /{resource_id}  partial update from a JSON object
    DELETE /{resource_id}  delete (204)
"""

from typing import Any, Callable

from fastapi import APIRouter, Body, Depends, Query, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from crud_engine.routers._common.pagination import get_page_request
from crud_engine.services.base_service import CrudService
from crud_engine.services.crud.identifiers import convert_identifier
from crud_engine.services.crud.mapper import ResourceMapper
from crud_engine.services.crud.paging import PageDto, PageRequest
from crud_shared.config.constants import Limits
from crud_shared.infrastructure.db import get_db


def _search_query() -> Any:
    return Query(
        default=None,
        max_length=Limits.MAX_SEARCH_TERM_LENGTH,
        description="Search term matched against the resource's filter criteria",
    )


def build_crud_router(
    prefix: str,
    service_factory: Callable[[Session], CrudService[Any, Any]],
    mapper: ResourceMapper,
    request_schema: type[BaseModel],
    output_schema: type[BaseModel],
    *,
    id_type: type = int,
    tags: list[str] | None = None,
    get_session: Callable[..., Any] = get_db,
) -> APIRouter:
    """
    Build an APIRouter exposing a CrudService.

    Args:
        prefix: Route prefix, e.g. "/api/books". Must not be empty.
        service_factory: Builds the service for a request's session.
        mapper: Converts request schemas to entities and entities to output.
        request_schema: Body model for POST and PUT.
        output_schema: Response model.
        id_type: Identifier type path values are converted to.
        tags: OpenAPI tags.
        get_session: Session dependency, get_db by default.
    """
    if not prefix:
        raise ValueError("build_crud_router needs a non-empty prefix")

    router = APIRouter(prefix=prefix, tags=tags or [])

    def get_service(db: Session = Depends(get_session)) -> CrudService[Any, Any]:
        return service_factory(db)

    @router.get("/all", response_model=list[output_schema])
    def list_all(
        search: str | None = _search_query(),
        service: CrudService[Any, Any] = Depends(get_service),
    ) -> list[Any]:
        return [mapper.to_dto(entity) for entity in service.list(search)]

    @router.get("", response_model=PageDto[output_schema])
    def list_page(
        search: str | None = _search_query(),
        page_request: PageRequest = Depends(get_page_request),
        service: CrudService[Any, Any] = Depends(get_service),
    ) -> Any:
        page = service.page(page_request, search)
        return PageDto[output_schema].of(page, mapper.to_dto)

    @router.get("/{resource_id}", response_model=output_schema)
    def get_one(
        resource_id: str,
        service: CrudService[Any, Any] = Depends(get_service),
    ) -> Any:
        return mapper.to_dto(service.get(convert_identifier(resource_id, id_type)))

    @router.post("", response_model=output_schema, status_code=status.HTTP_201_CREATED)
    def create(
        body: request_schema,
        service: CrudService[Any, Any] = Depends(get_service),
    ) -> Any:
        return mapper.to_dto(service.create(mapper.to_entity(body)))

    @router.put("/{resource_id}", response_model=output_schema)
    def update(
        resource_id: str,
        body: request_schema,
        service: CrudService[Any, Any] = Depends(get_service),
    ) -> Any:
        entity_id = convert_identifier(resource_id, id_type)
        return mapper.to_dto(service.update(entity_id, mapper.update_entity(entity_id, body)))

    @router.patch("/{resource_id}", response_model=output_schema)
    def patch(
        resource_id: str,
        payload: dict[str, Any] = Body(...),
        service: CrudService[Any, Any] = Depends(get_service),
    ) -> Any:
        entity_id = convert_identifier(resource_id, id_type)
        return mapper.to_dto(service.patch(entity_id, payload))

    @router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
    def delete(
        resource_id: str,
        service: CrudService[Any, Any] = Depends(get_service),
    ) -> Response:
        service.delete(convert_identifier(resource_id, id_type))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
