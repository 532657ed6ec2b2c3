"""
Paging value types.

PageRequest and Page use zero-based page numbers, the way storage sees them.
PageDto is the client-facing shape and reports the page number one-based.

Usage:
    page = repo.find_page(PageRequest(page=0, size=10))
    dto = PageDto.of(page, mapper.to_dto)
    dto.current_page  # 1
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Literal, Sequence, TypeVar

from pydantic import BaseModel

from crud_shared.config.constants import Limits

T = TypeVar("T")
D = TypeVar("D")

SortDirection = Literal["asc", "desc"]


@dataclass(frozen=True, slots=True)
class Sort:
    """Order by a single attribute."""

    field: str
    direction: SortDirection = "asc"

    @classmethod
    def parse(cls, raw: str) -> Sort:
        """
        Parse "field" or "field,asc|desc".

        Raises:
            ValueError: If the direction is not asc or desc.
        """
        name, _, direction = raw.partition(",")
        direction = (direction or "asc").strip().lower()
        if direction not in ("asc", "desc"):
            raise ValueError(f"Invalid sort direction '{direction}' for field '{name}'")
        return cls(field=name.strip(), direction=direction)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class PageRequest:
    """
    Which slice of a result set to fetch.

    An empty sort means "ascending by identifier".
    """

    page: int = Limits.DEFAULT_PAGE
    size: int = Limits.DEFAULT_PAGE_SIZE
    sort: tuple[Sort, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError("Page index must not be less than zero")
        if self.size < 1:
            raise ValueError("Page size must not be less than one")

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    """A slice of a result set plus the totals needed to navigate it."""

    items: Sequence[T]
    total_elements: int
    page_request: PageRequest

    @property
    def number(self) -> int:
        """Zero-based page number."""
        return self.page_request.page

    @property
    def size(self) -> int:
        return self.page_request.size

    @property
    def total_pages(self) -> int:
        return (self.total_elements + self.size - 1) // self.size

    @property
    def is_last(self) -> bool:
        return self.number + 1 >= self.total_pages

    def map(self, fn: Callable[[T], D]) -> Page[D]:
        return Page(
            items=[fn(item) for item in self.items],
            total_elements=self.total_elements,
            page_request=self.page_request,
        )


class PageDto(BaseModel, Generic[D]):
    """Client-facing page of results."""

    items: list[D]
    total_pages: int
    current_page: int
    total_elements: int
    is_last_page: bool

    @classmethod
    def of(cls, page: Page[Any], to_dto: Callable[[Any], D] | None = None) -> PageDto[D]:
        items = [to_dto(item) for item in page.items] if to_dto else list(page.items)
        return cls(
            items=items,
            total_pages=page.total_pages,
            current_page=page.number + 1,
            total_elements=page.total_elements,
            is_last_page=page.is_last,
        )
