"""
Pagination and sorting primitives.

Usage:
    from reptile_api.services.crud.pagination import PageRequest, Sort

    request = PageRequest.of(0, 20, Sort.parse(["name,desc", "id"]))
    page = repository.find_page(request)
    page.total_elements, page.total_pages
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Sequence, TypeVar

from pydantic import BaseModel
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.sql import Select

from shared.config.settings import settings
from shared.utils.exceptions import InvalidArgumentError

T = TypeVar("T")
R = TypeVar("R")


class Direction(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Order:
    property: str
    direction: Direction = Direction.ASC


@dataclass(frozen=True)
class Sort:
    """Ordered list of sort properties, applied in declaration order."""

    orders: tuple[Order, ...] = ()

    @classmethod
    def unsorted(cls) -> Sort:
        return cls()

    @classmethod
    def by(cls, *properties: str, direction: Direction = Direction.ASC) -> Sort:
        return cls(tuple(Order(p, direction) for p in properties))

    @classmethod
    def parse(cls, specs: Sequence[str] | None) -> Sort:
        """
        Parse ``property[,asc|desc]`` strings as sent in ``?sort=`` parameters.

        Raises:
            InvalidArgumentError: If a direction is not ``asc`` or ``desc``.
        """
        if not specs:
            return cls()

        orders: list[Order] = []
        for spec in specs:
            name, _, raw_direction = spec.partition(",")
            name = name.strip()
            if not name:
                raise InvalidArgumentError("Sort property must not be empty", sort=spec)
            raw_direction = raw_direction.strip().lower() or Direction.ASC.value
            try:
                direction = Direction(raw_direction)
            except ValueError:
                raise InvalidArgumentError(
                    f"Invalid sort direction '{raw_direction}'", sort=spec
                ) from None
            orders.append(Order(name, direction))
        return cls(tuple(orders))

    @property
    def is_sorted(self) -> bool:
        return bool(self.orders)

    def apply(self, query: Select, model: type[Any]) -> Select:
        """
        Add ORDER BY clauses for ``model`` to ``query``.

        The primary key is always appended last so that paging is stable.

        Raises:
            InvalidArgumentError: If a property is not a column of ``model``.
        """
        columns = {attr.key for attr in sa_inspect(model).column_attrs}
        clauses = []
        for order in self.orders:
            if order.property not in columns:
                raise InvalidArgumentError(
                    f"Unknown sort property '{order.property}' for {model.__name__}",
                    field=order.property,
                )
            column = getattr(model, order.property)
            clauses.append(column.desc() if order.direction is Direction.DESC else column.asc())

        if "id" not in {o.property for o in self.orders}:
            clauses.append(model.id.asc())
        return query.order_by(*clauses)


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page number, page size and sort."""

    page: int = 0
    size: int = field(default_factory=lambda: settings.default_page_size)
    sort: Sort = field(default_factory=Sort)

    def __post_init__(self) -> None:
        if self.page < 0:
            raise InvalidArgumentError("Page index must not be less than zero", page=self.page)
        if self.size < 1 or self.size > settings.max_page_size:
            raise InvalidArgumentError(
                f"Page size must be between 1 and {settings.max_page_size}",
                size=self.size,
            )

    @classmethod
    def of(cls, page: int = 0, size: int | None = None, sort: Sort | None = None) -> PageRequest:
        return cls(
            page=page,
            size=size if size is not None else settings.default_page_size,
            sort=sort or Sort(),
        )

    @property
    def offset(self) -> int:
        return self.page * self.size

    def with_default_sort(self, default: Sort) -> PageRequest:
        """Return this request, or a copy sorted by ``default`` when unsorted."""
        if self.sort.is_sorted:
            return self
        return PageRequest(page=self.page, size=self.size, sort=default)


class Page(BaseModel, Generic[T]):
    """One page of results plus the totals needed to render paging controls."""

    content: list[T]
    page: int
    size: int
    total_elements: int
    total_pages: int

    @classmethod
    def build(cls, content: Sequence[T], request: PageRequest, total: int) -> Page[T]:
        return cls(
            content=list(content),
            page=request.page,
            size=request.size,
            total_elements=total,
            total_pages=math.ceil(total / request.size) if total else 0,
        )

    def map(self, fn: Callable[[T], R]) -> Page[R]:
        return Page(
            content=[fn(item) for item in self.content],
            page=self.page,
            size=self.size,
            total_elements=self.total_elements,
            total_pages=self.total_pages,
        )
