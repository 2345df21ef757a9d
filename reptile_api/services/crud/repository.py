"""
Repository Pattern for database access.

Provides the storage operations the persistence services are built on. All
reads start from ``_base_query()``; the scoped subclasses narrow that query
so that lookups, pages and counts are filtered in SQL.

Usage:
    from reptile_api.services.crud.repository import (
        Repository,
        OwnerScopedRepository,
        ParentScopedRepository,
    )

    enclosure_repo = OwnerScopedRepository(Enclosure, db, owner_id=7)
    enclosure_repo.find_by_id(3)        # None unless owned by 7
    enclosure_repo.count()              # only owner 7's enclosures

    feeding_repo = ParentScopedRepository(
        FeedingLog, db, parent=Reptile, parent_key="reptile_id", owner_id=7
    )
    feeding_repo.find_page(PageRequest.of(0, 20))
"""

from __future__ import annotations

from typing import Any, Generic, Iterable, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from reptile_api.models.base import Base
from reptile_api.services.crud.example import Example
from reptile_api.services.crud.pagination import Page, PageRequest

ModelT = TypeVar("ModelT", bound=Base)
IdT = TypeVar("IdT")


class Repository(Generic[ModelT, IdT]):
    """
    Repository for one record type.

    Write methods flush but never commit; the calling service owns the
    unit of work.
    """

    def __init__(self, model: type[ModelT], session: Session):
        self._model = model
        self._session = session

    @property
    def model(self) -> type[ModelT]:
        """The SQLAlchemy model class."""
        return self._model

    @property
    def session(self) -> Session:
        """The database session."""
        return self._session

    def _base_query(self) -> Select:
        """Create base select query. Scoped repositories narrow it."""
        return select(self._model)

    def _apply_options(self, query: Select, options: list[Any] | None) -> Select:
        """Apply eager loading options."""
        if options:
            query = query.options(*options)
        return query

    def _count(self, query: Select) -> int:
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
        return self._session.scalar(count_query) or 0

    def _page(self, query: Select, request: PageRequest) -> Page[ModelT]:
        total = self._count(query)
        paged = request.sort.apply(query, self._model).offset(request.offset).limit(request.size)
        content = self._session.scalars(paged).all()
        return Page.build(content, request, total)

    # =========================================================================
    # Reads
    # =========================================================================

    def find_by_id(self, entity_id: IdT, *, options: list[Any] | None = None) -> ModelT | None:
        """
        Find entity by primary key.

        Returns:
            Entity or None if not found (or outside the repository's scope).
        """
        query = self._base_query().where(self._model.id == entity_id)
        query = self._apply_options(query, options)
        return self._session.scalar(query)

    def exists(self, entity_id: IdT) -> bool:
        """Check if entity exists by ID."""
        query = self._base_query().where(self._model.id == entity_id)
        return bool(self._session.scalar(select(query.exists())))

    def find_all(
        self,
        *,
        options: list[Any] | None = None,
        limit: int | None = None,
        offset: int | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelT]:
        """
        Find all entities.

        Args:
            options: SQLAlchemy loader options.
            limit: Maximum number of results.
            offset: Number of results to skip.
            order_by: Column, expression or tuple of them.
        """
        query = self._apply_options(self._base_query(), options)

        if order_by is not None:
            clauses = order_by if isinstance(order_by, (tuple, list)) else (order_by,)
            query = query.order_by(*clauses)
        if offset is not None:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        return self._session.scalars(query).all()

    def find_where(self, *criteria: Any, order_by: Any | None = None) -> Sequence[ModelT]:
        """Find entities matching extra criteria within the repository's scope."""
        query = self._base_query().where(*criteria)
        if order_by is not None:
            clauses = order_by if isinstance(order_by, (tuple, list)) else (order_by,)
            query = query.order_by(*clauses)
        return self._session.scalars(query).all()

    def find_first_where(self, *criteria: Any, order_by: Any) -> ModelT | None:
        clauses = order_by if isinstance(order_by, (tuple, list)) else (order_by,)
        query = self._base_query().where(*criteria).order_by(*clauses).limit(1)
        return self._session.scalar(query)

    def count_where(self, *criteria: Any) -> int:
        return self._count(self._base_query().where(*criteria))

    def find_page(self, request: PageRequest) -> Page[ModelT]:
        """Find one page of entities. Out-of-range pages are empty."""
        return self._page(self._base_query(), request)

    def find_all_by_ids(self, entity_ids: Iterable[IdT]) -> Sequence[ModelT]:
        """
        Find multiple entities by IDs.

        Returns:
            Found entities in storage order (may be fewer than requested).
        """
        ids = list(entity_ids)
        if not ids:
            return []
        query = self._base_query().where(self._model.id.in_(ids)).order_by(self._model.id)
        return self._session.scalars(query).all()

    def find_page_by_example(self, example: Example, request: PageRequest) -> Page[ModelT]:
        query = self._base_query().where(*example.criteria(self._model))
        return self._page(query, request)

    def count(self) -> int:
        """Count all entities."""
        return self._count(self._base_query())

    # =========================================================================
    # Writes
    # =========================================================================

    def save(self, entity: ModelT) -> ModelT:
        """Add or update entity and flush so its identity is assigned."""
        self._session.add(entity)
        self._session.flush()
        return entity

    def save_all(self, entities: Sequence[ModelT]) -> list[ModelT]:
        self._session.add_all(entities)
        self._session.flush()
        return list(entities)

    def delete(self, entity: ModelT) -> None:
        self._session.delete(entity)
        self._session.flush()

    def delete_by_id(self, entity_id: IdT) -> bool:
        """
        Delete entity by ID.

        Returns:
            True if a row was removed, False if no such entity exists.
        """
        entity = self.find_by_id(entity_id)
        if entity is None:
            return False
        self.delete(entity)
        return True

    def delete_all(self) -> int:
        """Delete every entity in scope. Returns the number removed."""
        entities = self._session.scalars(self._base_query()).all()
        for entity in entities:
            self._session.delete(entity)
        self._session.flush()
        return len(entities)


class OwnerScopedRepository(Repository[ModelT, IdT]):
    """
    Repository restricted to one owner's records.

    The model must have the owner column (``owner_id`` by default).
    """

    def __init__(
        self,
        model: type[ModelT],
        session: Session,
        owner_id: Any,
        *,
        owner_field: str = "owner_id",
    ):
        if not hasattr(model, owner_field):
            raise AttributeError(
                f"Model {model.__name__} does not have {owner_field} column. "
                "Use Repository instead."
            )
        super().__init__(model, session)
        self._owner_id = owner_id
        self._owner_field = owner_field

    @property
    def owner_id(self) -> Any:
        return self._owner_id

    @property
    def owner_field(self) -> str:
        return self._owner_field

    def _base_query(self) -> Select:
        """Create owner-filtered base query."""
        owner_column = getattr(self._model, self._owner_field)
        return select(self._model).where(owner_column == self._owner_id)


class ParentScopedRepository(Repository[ModelT, IdT]):
    """
    Repository for child records visible through an owned parent.

    Every query joins the parent and keeps only rows whose parent belongs to
    the owner, e.g. ``FeedingLog.reptile_id -> Reptile.owner_id``.
    """

    def __init__(
        self,
        model: type[ModelT],
        session: Session,
        *,
        parent: type[Base],
        parent_key: str,
        owner_id: Any,
        owner_field: str = "owner_id",
    ):
        super().__init__(model, session)
        self._parent = parent
        self._parent_key = parent_key
        self._owner_id = owner_id
        self._owner_field = owner_field

    @property
    def parent(self) -> type[Base]:
        return self._parent

    @property
    def parent_key(self) -> str:
        return self._parent_key

    @property
    def owner_id(self) -> Any:
        return self._owner_id

    def _base_query(self) -> Select:
        parent_column = getattr(self._model, self._parent_key)
        owner_column = getattr(self._parent, self._owner_field)
        return (
            select(self._model)
            .join(self._parent, parent_column == self._parent.id)
            .where(owner_column == self._owner_id)
        )

    def find_for_parent(self, parent_id: Any, *, order_by: Any | None = None) -> Sequence[ModelT]:
        return self.find_where(getattr(self._model, self._parent_key) == parent_id, order_by=order_by)
