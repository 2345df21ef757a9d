"""
Poop Log Service.

Droppings observations, mainly used to spot parasites early.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from reptile_api.models import PoopLog, Reptile
from reptile_api.schemas import PoopLogDto, PoopStatistics
from reptile_api.services.base_service import CrudService
from reptile_api.services.context import ServiceContext
from reptile_api.services.crud.mapper import EntityMapper
from reptile_api.services.crud.pagination import Direction, Sort
from reptile_api.services.crud.repository import ParentScopedRepository
from reptile_api.services.domain.reptile_service import ReptileService
from reptile_api.services.owner_scoped import ParentScopedService
from reptile_api.services.statistics import poop_statistics

POOP_LOG_MAPPER = EntityMapper(
    PoopLog,
    PoopLogDto,
    required_fields=("reptile_id", "poop_date", "consistency", "parasites_present"),
    optional_fields=("color", "notes"),
)


class PoopLogService(ParentScopedService[int, PoopLog, PoopLogDto]):
    def __init__(
        self,
        db: Session,
        context: ServiceContext,
        reptiles: ReptileService | None = None,
    ):
        reptiles = reptiles or ReptileService(db, context)
        repository = ParentScopedRepository(
            PoopLog, db, parent=Reptile, parent_key="reptile_id", owner_id=reptiles.owner_id
        )
        super().__init__(
            CrudService(
                repository,
                POOP_LOG_MAPPER,
                context,
                default_sort=Sort.by("poop_date", direction=Direction.DESC),
            ),
            reptiles,
            date_field="poop_date",
        )

    def parasite_logs(self, reptile_id: int) -> list[PoopLogDto]:
        return self.list_for_parent_where(reptile_id, PoopLog.parasites_present.is_(True))

    def get_statistics(self, reptile_id: int) -> PoopStatistics:
        return poop_statistics(self.list_for_parent(reptile_id))
