"""
Enclosure Cleaning Service.

Cleanings are visible through the enclosure they belong to.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from reptile_api.models import Enclosure, EnclosureCleaning
from reptile_api.schemas import CleaningStatistics, EnclosureCleaningDto
from reptile_api.services.base_service import CrudService
from reptile_api.services.context import ServiceContext
from reptile_api.services.crud.mapper import EntityMapper
from reptile_api.services.crud.pagination import Direction, Sort
from reptile_api.services.crud.repository import ParentScopedRepository
from reptile_api.services.domain.enclosure_service import EnclosureService
from reptile_api.services.owner_scoped import ParentScopedService
from reptile_api.services.statistics import cleaning_statistics

ENCLOSURE_CLEANING_MAPPER = EntityMapper(
    EnclosureCleaning,
    EnclosureCleaningDto,
    required_fields=(
        "enclosure_id",
        "cleaning_date",
        "cleaning_type",
        "substrate_changed",
        "disinfected",
    ),
    optional_fields=("notes",),
)


class EnclosureCleaningService(ParentScopedService[int, EnclosureCleaning, EnclosureCleaningDto]):
    def __init__(
        self,
        db: Session,
        context: ServiceContext,
        enclosures: EnclosureService | None = None,
    ):
        enclosures = enclosures or EnclosureService(db, context)
        repository = ParentScopedRepository(
            EnclosureCleaning,
            db,
            parent=Enclosure,
            parent_key="enclosure_id",
            owner_id=enclosures.owner_id,
        )
        super().__init__(
            CrudService(
                repository,
                ENCLOSURE_CLEANING_MAPPER,
                context,
                default_sort=Sort.by("cleaning_date", direction=Direction.DESC),
            ),
            enclosures,
            date_field="cleaning_date",
        )

    def disinfections(self, enclosure_id: int) -> list[EnclosureCleaningDto]:
        return self.list_for_parent_where(enclosure_id, EnclosureCleaning.disinfected.is_(True))

    def substrate_changes(self, enclosure_id: int) -> list[EnclosureCleaningDto]:
        return self.list_for_parent_where(
            enclosure_id, EnclosureCleaning.substrate_changed.is_(True)
        )

    def get_statistics(self, enclosure_id: int) -> CleaningStatistics:
        return cleaning_statistics(self.list_for_parent(enclosure_id))
