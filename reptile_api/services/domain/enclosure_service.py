"""
Enclosure Service.

Handles all enclosure-related business logic. Every operation is scoped to
the enclosures of the calling user.

Usage:
    from reptile_api.services.domain import EnclosureService

    service = EnclosureService(db, context)
    enclosure = service.create(EnclosureDto(name="Tank-1", type=EnclosureType.TERRARIUM))
    service.empty_enclosures()
"""

from __future__ import annotations

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session

from reptile_api.models import Enclosure, EnclosureType, Reptile
from reptile_api.schemas import EnclosureDto, EnclosureStatistics
from reptile_api.services.base_service import CrudService
from reptile_api.services.context import ServiceContext
from reptile_api.services.crud.mapper import EntityMapper
from reptile_api.services.crud.pagination import Sort
from reptile_api.services.crud.repository import OwnerScopedRepository
from reptile_api.services.owner_scoped import OwnerScopedService
from reptile_api.services.statistics import enclosure_statistics

ENCLOSURE_MAPPER = EntityMapper(
    Enclosure,
    EnclosureDto,
    required_fields=("name", "type"),
    optional_fields=(
        "dimensions",
        "substrate",
        "heating",
        "lighting",
        "humidity",
        "temperature",
        "notes",
    ),
)


class EnclosureService(OwnerScopedService[int, Enclosure, EnclosureDto]):
    """
    Service for enclosure management.

    Business rules:
    - Enclosures belong to the user who created them
    - An enclosure is occupied while at least one reptile lives in it
    - Deleting an enclosure unassigns its reptiles
    """

    def __init__(self, db: Session, context: ServiceContext):
        owner_id = context.principal.resolve_owner_id()
        super().__init__(
            CrudService(
                OwnerScopedRepository(Enclosure, db, owner_id),
                ENCLOSURE_MAPPER,
                context,
                default_sort=Sort.by("name"),
            ),
            owner_id,
        )
        self._db = db

    # =========================================================================
    # Query Methods
    # =========================================================================

    def list_by_type(self, enclosure_type: EnclosureType) -> list[EnclosureDto]:
        return self.crud.find_where(Enclosure.type == enclosure_type, order_by=Enclosure.name)

    def search_by_name(self, name: str) -> list[EnclosureDto]:
        """Enclosures whose name contains ``name``, ignoring case."""
        return self.crud.find_where(
            func.lower(Enclosure.name).contains(name.lower(), autoescape=True),
            order_by=Enclosure.name,
        )

    def occupied_enclosure_ids(self) -> list[int]:
        """IDs of the user's enclosures that house at least one reptile."""
        query = (
            select(Enclosure.id)
            .where(
                Enclosure.owner_id == self.owner_id,
                exists().where(Reptile.enclosure_id == Enclosure.id),
            )
            .order_by(Enclosure.id)
        )
        return list(self._db.scalars(query).all())

    def empty_enclosures(self) -> list[EnclosureDto]:
        return self.crud.find_where(
            ~exists().where(Reptile.enclosure_id == Enclosure.id),
            order_by=Enclosure.name,
        )

    def can_delete(self, enclosure_id: int) -> bool:
        """
        True if the enclosure houses no reptile.

        Raises:
            AccessDeniedError: If the enclosure is not owned by the caller.
        """
        self.verify_ownership(enclosure_id)
        return enclosure_id not in self.occupied_enclosure_ids()

    def get_statistics(self) -> EnclosureStatistics:
        return enclosure_statistics(self.find_all_by_owner(), set(self.occupied_enclosure_ids()))
