"""
Ownership-scoped services.

Wrappers that narrow a ``CrudService`` to the records of one owner. The
wrapped service's repository is already owner-filtered in SQL, so every
lookup, page and count only sees the owner's rows; the wrapper adds the
rules that filtering alone cannot express:

- create and update force the owner field to the caller's owner id
- by-id operations on a foreign or missing id raise NotFoundError
- ``verify_ownership`` raises AccessDeniedError, for custom operations
  outside the generic surface

``ParentScopedService`` applies the same rules to child records (care logs,
images, cleanings) that inherit visibility from an owned parent.

Usage:
    crud = CrudService(OwnerScopedRepository(Enclosure, db, owner_id), mapper, context)
    enclosures = OwnerScopedService(crud, owner_id)
    enclosures.create(EnclosureDto(name="Tank-1", type=EnclosureType.TERRARIUM))
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, Iterable, Sequence, TypeVar

from pydantic import BaseModel

from reptile_api.models.base import Base, as_utc
from reptile_api.services.base_service import CrudService, SortSpec
from reptile_api.services.crud.example import Example
from reptile_api.services.crud.mapper import Conditions
from reptile_api.services.crud.pagination import Direction, Page
from reptile_api.services.crud.repository import OwnerScopedRepository, ParentScopedRepository
from shared.config.logging import get_logger
from shared.utils.exceptions import AccessDeniedError, InvalidArgumentError, NotFoundError

logger = get_logger(__name__)

IdT = TypeVar("IdT")
ModelT = TypeVar("ModelT", bound=Base)
DtoT = TypeVar("DtoT", bound=BaseModel)


class _ScopedService(Generic[IdT, ModelT, DtoT]):
    """Operations shared by owner- and parent-scoped services."""

    def __init__(self, crud: CrudService[IdT, ModelT, DtoT]):
        self._crud = crud

    @property
    def crud(self) -> CrudService[IdT, ModelT, DtoT]:
        """The wrapped, already scoped, CRUD service."""
        return self._crud

    @property
    def entity_name(self) -> str:
        return self._crud.entity_name

    def find_by_id(self, entity_id: IdT, conditions: Conditions | None = None) -> DtoT:
        """
        Raises:
            NotFoundError: If the record is missing or not visible to the owner.
        """
        return self._crud.find_by_id(entity_id, conditions)

    def find_all(
        self,
        page: int = 0,
        size: int | None = None,
        sort: SortSpec = None,
        conditions: Conditions | None = None,
    ) -> Page[DtoT]:
        return self._crud.find_all(page, size, sort, conditions)

    def find_all_by_ids(
        self, entity_ids: Iterable[IdT | None] | None, conditions: Conditions | None = None
    ) -> list[DtoT]:
        return self._crud.find_all_by_ids(entity_ids, conditions)

    def find_by_example(
        self,
        example: Example | Any,
        page: int = 0,
        size: int | None = None,
        sort: SortSpec = None,
        conditions: Conditions | None = None,
    ) -> Page[DtoT]:
        return self._crud.find_by_example(example, page, size, sort, conditions)

    def count(self) -> int:
        return self._crud.count()

    def exists(self, entity_id: IdT) -> bool:
        """True if the record exists and is visible to the owner."""
        return self._crud.exists(entity_id)

    def delete_by_id(self, entity_id: IdT) -> None:
        """
        Delete a visible record.

        Unlike the unscoped delete this is not idempotent: a missing id and a
        foreign id both raise NotFoundError, so existence is never revealed.
        """
        if entity_id is None:
            raise InvalidArgumentError(
                f"Entity deletion '{self.entity_name}' with 'null' id is not allowed"
            )
        if not self._crud.delete_by_id(entity_id):
            raise NotFoundError(self.entity_name, entity_id)

    def delete(self, dto: DtoT) -> None:
        if dto is None:
            raise InvalidArgumentError(
                f"Entity deletion '{self.entity_name}' with 'null' object is not allowed"
            )
        self.delete_by_id(dto.id)

    def to_dto(self, entity: ModelT, conditions: Conditions | None = None) -> DtoT:
        return self._crud.to_dto(entity, conditions)


class OwnerScopedService(_ScopedService[IdT, ModelT, DtoT]):
    """
    CRUD restricted to the records of one owner.

    Args:
        crud: Service whose repository is an ``OwnerScopedRepository`` for
            the same owner.
        owner_id: The caller's resolved owner id.
        owner_field: Owner attribute on the record and the DTO.
    """

    def __init__(
        self,
        crud: CrudService[IdT, ModelT, DtoT],
        owner_id: Any,
        *,
        owner_field: str = "owner_id",
    ):
        repository = crud.repository
        if not isinstance(repository, OwnerScopedRepository) or repository.owner_id != owner_id:
            raise ValueError(
                f"{crud.entity_name} service must use a repository scoped to owner {owner_id}"
            )
        super().__init__(crud)
        self._owner_id = owner_id
        self._owner_field = owner_field

    @property
    def owner_id(self) -> Any:
        return self._owner_id

    def create(self, dto: DtoT, conditions: Conditions | None = None) -> DtoT:
        """Create a record owned by the caller, whatever owner the DTO names."""
        return self._crud.create(self._owned(dto), conditions)

    def create_all(self, dtos: Sequence[DtoT], conditions: Conditions | None = None) -> list[DtoT]:
        if dtos is None:
            return self._crud.create_all(dtos, conditions)
        return self._crud.create_all([self._owned(dto) for dto in dtos], conditions)

    def update(self, dto: DtoT, conditions: Conditions | None = None) -> DtoT:
        """
        Raises:
            InvalidArgumentError: If ``dto`` or its id is None.
            NotFoundError: If the record is missing or owned by someone else.
        """
        return self._crud.update(self._owned(dto), conditions)

    def find_all_by_owner(
        self, order_by: Any | None = None, conditions: Conditions | None = None
    ) -> list[DtoT]:
        """All of the owner's records, filtered in SQL."""
        if order_by is None:
            order_by = self._default_order_by()
        return self._crud.find_where(order_by=order_by, conditions=conditions)

    def verify_ownership(self, entity_id: IdT) -> None:
        """
        Explicit ownership check for operations outside the generic CRUD surface.

        Raises:
            AccessDeniedError: If the record is missing or owned by someone else.
        """
        if entity_id is None or not self._crud.exists(entity_id):
            raise AccessDeniedError(
                f"{self.entity_name} does not belong to the current user",
                entity_id=entity_id,
                owner_id=self._owner_id,
            )

    def _owned(self, dto: DtoT | None) -> DtoT | None:
        if dto is None:
            return None
        supplied = getattr(dto, self._owner_field, None)
        if supplied is not None and supplied != self._owner_id:
            logger.warning(
                "Ignoring foreign owner on DTO",
                entity=self.entity_name,
                supplied_owner=supplied,
                owner_id=self._owner_id,
            )
        return dto.model_copy(update={self._owner_field: self._owner_id})

    def _default_order_by(self) -> list[Any]:
        model = self._crud.model
        clauses = []
        for order in self._crud.default_sort.orders:
            column = getattr(model, order.property)
            clauses.append(column.desc() if order.direction is Direction.DESC else column.asc())
        clauses.append(model.id.asc())
        return clauses


class ParentScopedService(_ScopedService[IdT, ModelT, DtoT]):
    """
    CRUD for child records visible through an owned parent.

    Args:
        crud: Service whose repository is a ``ParentScopedRepository``.
        parent: Owner-scoped service of the parent record type.
        date_field: Column used for date ranges and "latest" queries.
    """

    def __init__(
        self,
        crud: CrudService[IdT, ModelT, DtoT],
        parent: OwnerScopedService[Any, Any, Any],
        *,
        date_field: str,
    ):
        repository = crud.repository
        if not isinstance(repository, ParentScopedRepository):
            raise ValueError(f"{crud.entity_name} service must use a parent-scoped repository")
        if repository.parent is not parent.crud.model or repository.owner_id != parent.owner_id:
            raise ValueError(
                f"{crud.entity_name} repository and parent service disagree on scope"
            )
        super().__init__(crud)
        self._parent = parent
        self._parent_key = repository.parent_key
        self._date_field = date_field

    @property
    def parent(self) -> OwnerScopedService[Any, Any, Any]:
        return self._parent

    @property
    def parent_key(self) -> str:
        return self._parent_key

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(self, dto: DtoT, conditions: Conditions | None = None) -> DtoT:
        """
        Raises:
            InvalidArgumentError: If the DTO is invalid for creation.
            NotFoundError: If the referenced parent is not visible.
        """
        self._crud.check_create_validity([dto])
        self._require_parent(getattr(dto, self._parent_key))
        return self._crud.create(dto, conditions)

    def create_all(self, dtos: Sequence[DtoT], conditions: Conditions | None = None) -> list[DtoT]:
        self._crud.check_create_validity(dtos)
        for parent_id in {getattr(dto, self._parent_key) for dto in dtos}:
            self._require_parent(parent_id)
        return self._crud.create_all(dtos, conditions)

    def update(self, dto: DtoT, conditions: Conditions | None = None) -> DtoT:
        """
        Raises:
            NotFoundError: If the record, or a newly referenced parent, is not
                visible.
        """
        self._crud.check_update_validity(dto)
        parent_id = getattr(dto, self._parent_key)
        if parent_id is not None:
            self._require_parent(parent_id)
        return self._crud.update(dto, conditions)

    def verify_child_of(self, entity_id: IdT, parent_id: Any) -> None:
        """
        Check that a visible record belongs to ``parent_id``. Not audited.

        Raises:
            NotFoundError: If the record is not visible or has another parent.
        """
        entity = None if entity_id is None else self._crud.repository.find_by_id(entity_id)
        if entity is None or getattr(entity, self._parent_key) != parent_id:
            raise NotFoundError(self.entity_name, entity_id, **{self._parent_key: parent_id})

    # =========================================================================
    # Parent-keyed Queries
    # =========================================================================

    def list_for_parent(
        self, parent_id: Any, *, newest_first: bool = True, conditions: Conditions | None = None
    ) -> list[DtoT]:
        """
        Raises:
            AccessDeniedError: If the parent is not owned by the caller.
        """
        self._parent.verify_ownership(parent_id)
        return self._crud.find_where(
            self._parent_column() == parent_id,
            order_by=self._date_order(newest_first),
            conditions=conditions,
        )

    def list_in_range(
        self, parent_id: Any, start: datetime, end: datetime, conditions: Conditions | None = None
    ) -> list[DtoT]:
        """Records of the parent dated within ``[start, end]``, newest first."""
        self._parent.verify_ownership(parent_id)
        start, end = as_utc(start), as_utc(end)
        if start is None or end is None or start > end:
            raise InvalidArgumentError("Date range requires start <= end", start=start, end=end)
        date_column = getattr(self._crud.model, self._date_field)
        return self._crud.find_where(
            self._parent_column() == parent_id,
            date_column.between(start, end),
            order_by=self._date_order(True),
            conditions=conditions,
        )

    def latest(self, parent_id: Any, conditions: Conditions | None = None) -> DtoT | None:
        """Most recent record of the parent, or None."""
        self._parent.verify_ownership(parent_id)
        return self._crud.find_first_where(
            self._parent_column() == parent_id,
            order_by=self._date_order(True),
            conditions=conditions,
        )

    def list_for_parent_where(
        self, parent_id: Any, *criteria: Any, newest_first: bool = True
    ) -> list[DtoT]:
        """Parent's records matching extra criteria (e.g. refused feedings)."""
        self._parent.verify_ownership(parent_id)
        return self._crud.find_where(
            self._parent_column() == parent_id,
            *criteria,
            order_by=self._date_order(newest_first),
        )

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _require_parent(self, parent_id: Any) -> None:
        if parent_id is None:
            raise InvalidArgumentError(
                f"{self.entity_name} requires '{self._parent_key}'", field=self._parent_key
            )
        if not self._parent.exists(parent_id):
            raise NotFoundError(self._parent.entity_name, parent_id)

    def _parent_column(self) -> Any:
        return getattr(self._crud.model, self._parent_key)

    def _date_order(self, newest_first: bool) -> list[Any]:
        model = self._crud.model
        date_column = getattr(model, self._date_field)
        if newest_first:
            return [date_column.desc(), model.id.desc()]
        return [date_column.asc(), model.id.asc()]
