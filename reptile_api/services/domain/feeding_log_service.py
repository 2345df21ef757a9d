"""
Feeding Log Service.

Feeding logs are visible through the reptile they belong to.

Usage:
    service = FeedingLogService(db, context)
    service.create(FeedingLogDto(reptile_id=3, feeding_date=now, food_type="Mouse", quantity="1", ate=True))
    service.get_statistics(3).feeding_success_rate
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from reptile_api.models import FeedingLog, Reptile
from reptile_api.schemas import FeedingLogDto, FeedingStatistics
from reptile_api.services.base_service import CrudService
from reptile_api.services.context import ServiceContext
from reptile_api.services.crud.mapper import EntityMapper
from reptile_api.services.crud.pagination import Direction, Sort
from reptile_api.services.crud.repository import ParentScopedRepository
from reptile_api.services.domain.reptile_service import ReptileService
from reptile_api.services.owner_scoped import ParentScopedService
from reptile_api.services.statistics import feeding_statistics

FEEDING_LOG_MAPPER = EntityMapper(
    FeedingLog,
    FeedingLogDto,
    required_fields=("reptile_id", "feeding_date", "food_type", "quantity", "ate"),
    optional_fields=("notes",),
)


class FeedingLogService(ParentScopedService[int, FeedingLog, FeedingLogDto]):
    def __init__(
        self,
        db: Session,
        context: ServiceContext,
        reptiles: ReptileService | None = None,
    ):
        reptiles = reptiles or ReptileService(db, context)
        repository = ParentScopedRepository(
            FeedingLog, db, parent=Reptile, parent_key="reptile_id", owner_id=reptiles.owner_id
        )
        super().__init__(
            CrudService(
                repository,
                FEEDING_LOG_MAPPER,
                context,
                default_sort=Sort.by("feeding_date", direction=Direction.DESC),
            ),
            reptiles,
            date_field="feeding_date",
        )

    def missed_feedings(self, reptile_id: int) -> list[FeedingLogDto]:
        """Feedings the reptile refused."""
        return self.list_for_parent_where(reptile_id, FeedingLog.ate.is_(False))

    def get_statistics(self, reptile_id: int) -> FeedingStatistics:
        return feeding_statistics(self.list_for_parent(reptile_id))
