"""
Paging query parameters for the generic routers.

Usage:
    @router.get("")
    def list_page(page_request: PageRequest = Depends(get_page_request)):
        ...

    GET /books?page=0&size=20&sort=title,desc&sort=id
"""

from fastapi import Query

from crud_engine.services.crud.paging import PageRequest, Sort
from crud_shared.config.constants import Limits
from crud_shared.config.settings import settings
from crud_shared.utils.exceptions import InvalidArgumentError


def get_page_request(
    page: int = Query(
        default=Limits.DEFAULT_PAGE,
        ge=0,
        description="Zero-based page index",
    ),
    size: int = Query(
        default=settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Maximum number of items per page",
    ),
    sort: list[str] = Query(
        default=[],
        description="Sort as field[,asc|desc]; repeatable. Defaults to id ascending.",
    ),
) -> PageRequest:
    """FastAPI dependency building a PageRequest from query parameters."""
    try:
        orders = tuple(Sort.parse(raw) for raw in sort if raw)
    except ValueError as e:
        raise InvalidArgumentError(str(e)) from e
    return PageRequest(page=page, size=size, sort=orders)
