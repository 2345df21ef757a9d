"""
Shedding Log Service.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from reptile_api.models import Reptile, SheddingLog
from reptile_api.schemas import SheddingLogDto, SheddingStatistics
from reptile_api.services.base_service import CrudService
from reptile_api.services.context import ServiceContext
from reptile_api.services.crud.mapper import EntityMapper
from reptile_api.services.crud.pagination import Direction, Sort
from reptile_api.services.crud.repository import ParentScopedRepository
from reptile_api.services.domain.reptile_service import ReptileService
from reptile_api.services.owner_scoped import ParentScopedService
from reptile_api.services.statistics import shedding_statistics

SHEDDING_LOG_MAPPER = EntityMapper(
    SheddingLog,
    SheddingLogDto,
    required_fields=("reptile_id", "shedding_date", "shed_quality"),
    optional_fields=("ate_shed", "notes"),
)


class SheddingLogService(ParentScopedService[int, SheddingLog, SheddingLogDto]):
    def __init__(
        self,
        db: Session,
        context: ServiceContext,
        reptiles: ReptileService | None = None,
    ):
        reptiles = reptiles or ReptileService(db, context)
        repository = ParentScopedRepository(
            SheddingLog, db, parent=Reptile, parent_key="reptile_id", owner_id=reptiles.owner_id
        )
        super().__init__(
            CrudService(
                repository,
                SHEDDING_LOG_MAPPER,
                context,
                default_sort=Sort.by("shedding_date", direction=Direction.DESC),
            ),
            reptiles,
            date_field="shedding_date",
        )

    def ate_shed_logs(self, reptile_id: int) -> list[SheddingLogDto]:
        return self.list_for_parent_where(reptile_id, SheddingLog.ate_shed.is_(True))

    def get_statistics(self, reptile_id: int) -> SheddingStatistics:
        return shedding_statistics(self.list_for_parent(reptile_id))
