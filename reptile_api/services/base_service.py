"""
Generic persistence services.

Provides the read and CRUD orchestration every record type reuses:
- Repository for data access (not direct queries)
- EntityMapper for record <-> DTO translation
- AuditRecorder for one audit event per audited operation
- Validation and relationship hooks for entity-specific rules

Architecture:
    Router (thin) -> Service (orchestration) -> Repository (data access) -> Model

Usage:
    from reptile_api.services.base_service import CrudService

    service = CrudService(
        Repository(Enclosure, db),
        ENCLOSURE_MAPPER,
        context,
        default_sort=Sort.by("name"),
    )
    created = service.create(EnclosureDto(name="Tank-1", type=EnclosureType.TERRARIUM))
    service.update(created.model_copy(update={"name": "Tank-1-renamed"}))
    service.delete_by_id(created.id)
"""

from __future__ import annotations

from typing import Any, Generic, Iterable, Sequence, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from reptile_api.models.base import Base
from reptile_api.services.audit import AuditAction, AuditOperationType, serialize_model
from reptile_api.services.context import ServiceContext
from reptile_api.services.crud.example import Example
from reptile_api.services.crud.mapper import Conditions, EntityMapper
from reptile_api.services.crud.pagination import Page, PageRequest, Sort
from reptile_api.services.crud.repository import Repository
from reptile_api.services.resource_types import ResourceType
from shared.config.logging import crud_logger as logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import DatabaseError, InvalidArgumentError, NotFoundError

IdT = TypeVar("IdT")
ModelT = TypeVar("ModelT", bound=Base)
DtoT = TypeVar("DtoT", bound=BaseModel)

SortSpec = Sort | Sequence[str] | None


class ReadService(Generic[IdT, ModelT, DtoT]):
    """
    Read-only access to one record type.

    Every successful read emits ACCESS audit events: one per record for
    lookups by id, one page-level event for collection queries.
    """

    def __init__(
        self,
        repository: Repository[ModelT, IdT],
        mapper: EntityMapper[ModelT, DtoT],
        context: ServiceContext,
        *,
        default_sort: Sort | None = None,
    ):
        if mapper.model is not repository.model:
            raise ValueError(
                f"Mapper for {mapper.model.__name__} cannot serve "
                f"{repository.model.__name__} repository"
            )
        self._repo = repository
        self._mapper = mapper
        self._context = context
        self._default_sort = default_sort or Sort()
        self._resource = context.resources.resolve(repository.model)

    @property
    def repository(self) -> Repository[ModelT, IdT]:
        """Repository for data access."""
        return self._repo

    @property
    def mapper(self) -> EntityMapper[ModelT, DtoT]:
        return self._mapper

    @property
    def context(self) -> ServiceContext:
        return self._context

    @property
    def db(self) -> Session:
        """Database session."""
        return self._repo.session

    @property
    def model(self) -> type[ModelT]:
        return self._repo.model

    @property
    def resource(self) -> ResourceType:
        return self._resource

    @property
    def entity_name(self) -> str:
        """Type name used in log lines and error messages."""
        return self._repo.model.__name__

    @property
    def default_sort(self) -> Sort:
        return self._default_sort

    # =========================================================================
    # Read Operations
    # =========================================================================

    def find_by_id(self, entity_id: IdT, conditions: Conditions | None = None) -> DtoT:
        """
        Get entity by ID.

        Raises:
            InvalidArgumentError: If ``entity_id`` is None.
            NotFoundError: If no entity with that ID is visible.
        """
        entity = self.find_entity_by_id(entity_id)
        return self.to_dto(entity, conditions)

    def find_entity_by_id(self, entity_id: IdT) -> ModelT:
        """Get raw entity (for internal use). Audited like ``find_by_id``."""
        if entity_id is None:
            logger.info(f"'{self._context.actor}' tried lookup '{self.entity_name}' with id 'null'")
            raise InvalidArgumentError(
                f"Entity lookup '{self.entity_name}' with 'null' id is not allowed"
            )

        entity = self._repo.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(self.entity_name, entity_id)

        self._record(AuditOperationType.ACCESS, AuditAction.ACCESS, entity_id)
        return entity

    def exists(self, entity_id: IdT) -> bool:
        """Check if entity exists. Not audited."""
        return entity_id is not None and self._repo.exists(entity_id)

    def find_all(
        self,
        page: int = 0,
        size: int | None = None,
        sort: SortSpec = None,
        conditions: Conditions | None = None,
    ) -> Page[DtoT]:
        """
        One page of entities, sorted by ``sort`` or the default sort.

        Out-of-range pages are empty, never an error.
        """
        request = self._page_request(page, size, sort)
        result = self._repo.find_page(request)
        self._record_page_access()
        return result.map(lambda entity: self.to_dto(entity, conditions))

    def find_all_by_ids(
        self,
        entity_ids: Iterable[IdT | None] | None,
        conditions: Conditions | None = None,
    ) -> list[DtoT]:
        """
        Entities for the given IDs, in storage order.

        None or empty input yields an empty list; None entries are skipped.
        """
        if not entity_ids:
            return []

        ids = [entity_id for entity_id in entity_ids if entity_id is not None]
        if not ids:
            return []

        entities = self._repo.find_all_by_ids(ids)
        for entity in entities:
            self._record(AuditOperationType.ACCESS, AuditAction.ACCESS, entity.id)
        return [self.to_dto(entity, conditions) for entity in entities]

    def find_by_example(
        self,
        example: Example | Any,
        page: int = 0,
        size: int | None = None,
        sort: SortSpec = None,
        conditions: Conditions | None = None,
    ) -> Page[DtoT]:
        """
        One page of entities matching ``example``.

        A plain sample (DTO or unsaved record) is matched with the default
        matcher: None fields are ignored, strings compared exactly.
        """
        if example is None:
            raise InvalidArgumentError(f"Example for '{self.entity_name}' must not be null")
        if not isinstance(example, Example):
            example = Example.of(example)

        request = self._page_request(page, size, sort)
        result = self._repo.find_page_by_example(example, request)
        self._record_page_access()
        return result.map(lambda entity: self.to_dto(entity, conditions))

    def find_where(
        self,
        *criteria: Any,
        order_by: Any | None = None,
        conditions: Conditions | None = None,
    ) -> list[DtoT]:
        """Unpaged filtered query for domain services. Audited as one page read."""
        entities = self._repo.find_where(*criteria, order_by=order_by)
        self._record_page_access()
        return [self.to_dto(entity, conditions) for entity in entities]

    def find_first_where(
        self,
        *criteria: Any,
        order_by: Any,
        conditions: Conditions | None = None,
    ) -> DtoT | None:
        entity = self._repo.find_first_where(*criteria, order_by=order_by)
        if entity is None:
            return None
        self._record(AuditOperationType.ACCESS, AuditAction.ACCESS, entity.id)
        return self.to_dto(entity, conditions)

    def count(self) -> int:
        """Count visible entities. Not audited."""
        return self._repo.count()

    # =========================================================================
    # Transformation
    # =========================================================================

    def to_dto(self, entity: ModelT, conditions: Conditions | None = None) -> DtoT:
        """
        Convert entity to DTO.

        Override this method for custom transformation logic.
        """
        return self._mapper.to_dto(entity, conditions)

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _page_request(self, page: int, size: int | None, sort: SortSpec) -> PageRequest:
        if sort is not None and not isinstance(sort, Sort):
            sort = Sort.parse(sort)
        return PageRequest.of(page, size, sort).with_default_sort(self._default_sort)

    def _action(self, suffix: str) -> str:
        return AuditAction.of(self._resource.base_action, suffix)

    def _record(
        self,
        operation: AuditOperationType,
        suffix: str,
        subject: Any = None,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        self._context.audit.record(
            self._context.actor,
            operation,
            self._resource.resource_type,
            self._action(suffix),
            subject,
            details=details,
        )

    def _record_page_access(self) -> None:
        self._record(AuditOperationType.ACCESS, AuditAction.ACCESS + AuditAction.PAGE)


class CrudService(ReadService[IdT, ModelT, DtoT]):
    """
    Validated create, update and delete on top of ``ReadService``.

    Each write call is one unit of work: validation happens before anything
    is written, changes are flushed, committed once, and audit events are
    emitted after the commit succeeded.

    Responsibilities:
    - Reject DTOs with a chosen identity on create, without one on update
    - Stamp audit fields (never taken from the DTO)
    - Apply updates onto the loaded record, preserving unrelated state
    - Idempotent delete by ID
    """

    # =========================================================================
    # Create
    # =========================================================================

    def create(self, dto: DtoT, conditions: Conditions | None = None) -> DtoT:
        """
        Create one entity.

        Raises:
            InvalidArgumentError: If ``dto`` is None, carries an id, or lacks
                a required field.
        """
        return self.create_all([dto], conditions)[0]

    def create_all(
        self, dtos: Sequence[DtoT], conditions: Conditions | None = None
    ) -> list[DtoT]:
        """Create several entities in one unit of work; one CREATE event each."""
        self.check_create_validity(dtos)
        for dto in dtos:
            self._validate_create(dto)

        actor = self._context.actor
        now = self._context.clock()
        entities = self._mapper.to_entities(dtos, conditions)
        for entity in entities:
            if hasattr(entity, "stamp_created"):
                entity.stamp_created(actor, now)

        try:
            self._repo.save_all(entities)
            self._after_create(entities)
            ids = [entity.id for entity in entities]
            snapshots = [serialize_model(entity) for entity in entities]
            result = [self.to_dto(entity, conditions) for entity in entities]
        except Exception:
            self.db.rollback()
            raise
        self._commit()

        logger.info(f"'{actor}' created '{self.entity_name}' {ids}")
        for entity_id, snapshot in zip(ids, snapshots):
            self._record(
                AuditOperationType.CREATE, AuditAction.CREATE, entity_id, details=snapshot
            )
        return result

    def check_create_validity(self, dtos: Sequence[DtoT | None]) -> None:
        """
        Raises:
            InvalidArgumentError: If any DTO is None, carries an id, or lacks
                a required field.
        """
        if dtos is None:
            raise InvalidArgumentError(
                f"Entity creation '{self.entity_name}' with 'null' object is not allowed"
            )
        for dto in dtos:
            if dto is None:
                logger.info(f"'{self._context.actor}' tried create '{self.entity_name}' with 'null' object")
                raise InvalidArgumentError(
                    f"Entity creation '{self.entity_name}' with 'null' object is not allowed"
                )
            if dto.id is not None:
                logger.info(
                    f"'{self._context.actor}' tried create '{self.entity_name}' with id '{dto.id}'"
                )
                raise InvalidArgumentError(
                    f"Entity creation '{self.entity_name}' with id is not allowed"
                )
            missing = self._mapper.missing_required(dto)
            if missing:
                raise InvalidArgumentError(
                    f"Entity creation '{self.entity_name}' is missing required fields: "
                    f"{', '.join(missing)}",
                    fields=missing,
                )

    # =========================================================================
    # Update
    # =========================================================================

    def update(self, dto: DtoT, conditions: Conditions | None = None) -> DtoT:
        """
        Update an existing entity from ``dto``.

        Raises:
            InvalidArgumentError: If ``dto`` or its id is None.
            NotFoundError: If no entity with that id is visible.
        """
        self.check_update_validity(dto)

        # Reload: the entity may have vanished since the validity check
        entity = self._repo.find_by_id(dto.id)
        if entity is None:
            raise NotFoundError(self.entity_name, dto.id)

        actor = self._context.actor
        try:
            self._validate_update(entity, dto)
            self._mapper.apply_update(dto, entity)
            self._handle_relationships(entity, dto, conditions)
            if hasattr(entity, "stamp_updated"):
                entity.stamp_updated(actor, self._context.clock())
            self._repo.save(entity)
            snapshot = serialize_model(entity)
            result = self.to_dto(entity, conditions)
        except Exception:
            self.db.rollback()
            raise
        self._commit()

        logger.info(f"'{actor}' updated '{self.entity_name}' '{dto.id}'")
        self._record(AuditOperationType.MODIFY, AuditAction.UPDATE, dto.id, details=snapshot)
        return result

    def check_update_validity(self, dto: DtoT | None) -> None:
        """
        Raises:
            InvalidArgumentError: If ``dto`` or its id is None.
            NotFoundError: If no entity with that id is visible.
        """
        actor = self._context.actor
        if dto is None:
            logger.info(f"'{actor}' tried update '{self.entity_name}' with 'null' object")
            raise InvalidArgumentError(
                f"Entity update '{self.entity_name}' with 'null' object is not allowed"
            )
        if dto.id is None:
            logger.info(f"'{actor}' tried update '{self.entity_name}' with id 'null'")
            raise InvalidArgumentError(
                f"Entity update '{self.entity_name}' with 'null' id is not allowed"
            )
        if not self._repo.exists(dto.id):
            logger.info(
                f"'{actor}' tried update '{self.entity_name}' with id '{dto.id}' that does not exist"
            )
            raise NotFoundError(self.entity_name, dto.id)

    # =========================================================================
    # Delete
    # =========================================================================

    def delete_by_id(self, entity_id: IdT) -> bool:
        """
        Delete entity by ID. Deleting an absent ID is not an error.

        Returns:
            True if an entity was removed. A REMOVE event is emitted only then.
        """
        return bool(self.delete_all_by_id([entity_id]))

    def delete_all_by_id(self, entity_ids: Iterable[IdT]) -> list[IdT]:
        """
        Delete several entities by ID in one unit of work.

        Returns:
            The IDs that were actually removed.
        """
        ids = list(entity_ids or [])
        if any(entity_id is None for entity_id in ids):
            raise InvalidArgumentError(
                f"Entity deletion '{self.entity_name}' with 'null' id is not allowed"
            )
        if not ids:
            return []

        try:
            removed = []
            for entity_id in ids:
                entity = self._repo.find_by_id(entity_id)
                if entity is None:
                    continue
                self._validate_delete(entity)
                self._before_delete(entity)
                self._repo.delete(entity)
                removed.append(entity_id)
        except Exception:
            self.db.rollback()
            raise
        self._commit()

        actor = self._context.actor
        missing = [entity_id for entity_id in ids if entity_id not in removed]
        if missing:
            logger.info(f"'{actor}' tried delete '{self.entity_name}' {missing} that does not exist")
        if removed:
            logger.info(f"'{actor}' deleted '{self.entity_name}' {removed}")
        for entity_id in removed:
            self._record(AuditOperationType.REMOVE, AuditAction.DELETE, entity_id)
        return removed

    def delete(self, dto: DtoT) -> bool:
        """Delete the entity identified by ``dto``."""
        return bool(self.delete_all([dto]))

    def delete_all(self, dtos: Sequence[DtoT]) -> list[IdT]:
        """Delete the entities identified by ``dtos``."""
        for dto in dtos:
            if dto is None:
                raise InvalidArgumentError(
                    f"Entity deletion '{self.entity_name}' with 'null' object is not allowed"
                )
        return self.delete_all_by_id([dto.id for dto in dtos])

    def _commit(self) -> None:
        """
        Commit the unit of work.

        Raises:
            IntegrityError: Unchanged, after rollback (conflicting data).
            DatabaseError: For any other storage failure.
        """
        try:
            safe_commit(self.db)
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to commit {self.entity_name}", error=str(e))
            raise DatabaseError(f"commit of {self.entity_name.lower()}") from e

    # =========================================================================
    # Hooks (override in subclasses)
    # =========================================================================

    def _validate_create(self, dto: DtoT) -> None:
        """
        Validate one DTO before create. Runs before anything is written.

        Raises:
            AppException subclass: If the DTO is not acceptable.
        """

    def _validate_update(self, entity: ModelT, dto: DtoT) -> None:
        """Validate before the update is applied to ``entity``."""

    def _validate_delete(self, entity: ModelT) -> None:
        """Validate before ``entity`` is deleted."""

    def _before_delete(self, entity: ModelT) -> None:
        """Hook called inside the unit of work, right before ``entity`` is deleted."""

    def _handle_relationships(
        self, entity: ModelT, dto: DtoT, conditions: Conditions | None
    ) -> None:
        """
        Maintain entity relationships after the field update, before the
        entity is persisted. Default implementation does nothing.
        """

    def _after_create(self, entities: list[ModelT]) -> None:
        """Hook called after the new entities were flushed (ids assigned)."""
