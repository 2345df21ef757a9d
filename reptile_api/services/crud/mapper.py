"""
Record <-> DTO mapping.

Adapted from the field-iteration approach of the output builders: DTO
fields are matched to record attributes by name. The mapper adds the
rules the persistence services rely on:

- ``to_dto`` copies every DTO field, audit fields included.
- ``to_entity`` copies business fields only. Audit fields are always left
  unset; the CRUD service stamps them.
- ``apply_update`` copies the configured business fields onto a loaded
  record. ``required_fields`` are copied only when the incoming value is
  not None, ``optional_fields`` are copied unconditionally. Identity and
  audit fields are never touched.

Usage:
    mapper = EntityMapper(
        Enclosure,
        EnclosureDto,
        required_fields=("name", "type"),
        optional_fields=("dimensions", "notes"),
    )
    dto = mapper.to_dto(enclosure)
    mapper.apply_update(dto, enclosure)
"""

from __future__ import annotations

from typing import Any, Generic, Iterable, Mapping, TypeVar

from pydantic import BaseModel
from sqlalchemy import inspect as sa_inspect

from reptile_api.models.base import AUDIT_FIELDS, Base

ModelT = TypeVar("ModelT", bound=Base)
DtoT = TypeVar("DtoT", bound=BaseModel)

Conditions = Mapping[str, bool]

IDENTITY_FIELD = "id"


class EntityMapper(Generic[ModelT, DtoT]):
    """
    Bidirectional mapper for one record type and its DTO.

    Args:
        model: SQLAlchemy model class.
        dto: Pydantic DTO class.
        required_fields: Business fields never nulled by an update.
        optional_fields: Business fields overwritten as sent, None included.
        exclude: DTO fields left out of ``to_dto`` unless a subclass adds
            them back through ``_conditional_values``.
    """

    def __init__(
        self,
        model: type[ModelT],
        dto: type[DtoT],
        *,
        required_fields: Iterable[str] = (),
        optional_fields: Iterable[str] = (),
        exclude: Iterable[str] = (),
    ):
        self._model = model
        self._dto = dto
        self._required_fields = tuple(required_fields)
        self._optional_fields = tuple(optional_fields)
        self._exclude = frozenset(exclude)

        columns = {attr.key for attr in sa_inspect(model).column_attrs}
        dto_fields = set(dto.model_fields)

        update_fields = set(self._required_fields) | set(self._optional_fields)
        protected = update_fields & (AUDIT_FIELDS | {IDENTITY_FIELD})
        if protected:
            raise ValueError(
                f"{model.__name__} update fields must not include identity or audit "
                f"fields: {sorted(protected)}"
            )
        overlap = set(self._required_fields) & set(self._optional_fields)
        if overlap:
            raise ValueError(
                f"{model.__name__} fields are both required and optional: {sorted(overlap)}"
            )
        unknown = update_fields - (columns & dto_fields)
        if unknown:
            raise ValueError(
                f"{model.__name__} update fields are not shared by record and DTO: "
                f"{sorted(unknown)}"
            )

        self._dto_fields = [name for name in dto.model_fields if name not in self._exclude]
        self._entity_fields = [
            name
            for name in dto.model_fields
            if name in columns and name not in AUDIT_FIELDS
        ]

    @property
    def model(self) -> type[ModelT]:
        return self._model

    @property
    def dto(self) -> type[DtoT]:
        return self._dto

    @property
    def required_fields(self) -> tuple[str, ...]:
        return self._required_fields

    @property
    def optional_fields(self) -> tuple[str, ...]:
        return self._optional_fields

    # =========================================================================
    # Record -> DTO
    # =========================================================================

    def to_dto(self, entity: ModelT, conditions: Conditions | None = None) -> DtoT:
        data = {
            name: getattr(entity, name)
            for name in self._dto_fields
            if hasattr(entity, name)
        }
        if conditions:
            data.update(self._conditional_values(entity, conditions))
        return self._dto.model_validate(data)

    def to_dtos(
        self, entities: Iterable[ModelT], conditions: Conditions | None = None
    ) -> list[DtoT]:
        return [self.to_dto(entity, conditions) for entity in entities]

    def _conditional_values(self, entity: ModelT, conditions: Conditions) -> dict[str, Any]:
        """
        Extra DTO values that depend on mapping conditions.

        Override in subclasses (e.g. to include a lazily loaded payload).
        Only called when ``conditions`` is non-empty.
        """
        return {}

    # =========================================================================
    # DTO -> Record
    # =========================================================================

    def to_entity(self, dto: DtoT, conditions: Conditions | None = None) -> ModelT:
        """
        Build a new, unsaved record from ``dto``.

        None values are not assigned, so column defaults still apply.
        """
        entity = self._model()
        for name in self._entity_fields:
            value = getattr(dto, name, None)
            if value is not None:
                setattr(entity, name, value)
        return entity

    def to_entities(
        self, dtos: Iterable[DtoT], conditions: Conditions | None = None
    ) -> list[ModelT]:
        return [self.to_entity(dto, conditions) for dto in dtos]

    def apply_update(self, dto: DtoT, entity: ModelT) -> ModelT:
        """Copy business fields from ``dto`` onto the loaded ``entity`` in place."""
        for name in self._required_fields:
            value = getattr(dto, name)
            if value is not None:
                setattr(entity, name, value)
        for name in self._optional_fields:
            setattr(entity, name, getattr(dto, name))
        return entity

    def missing_required(self, dto: DtoT) -> list[str]:
        """
        Required fields that are None on ``dto`` and have no column default.

        Used to reject a create before anything is written.
        """
        columns = self._model.__table__.columns
        return [
            name
            for name in self._required_fields
            if getattr(dto, name) is None
            and columns[name].default is None
            and columns[name].server_default is None
        ]
