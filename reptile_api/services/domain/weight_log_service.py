"""
Weight Log Service.

Usage:
    service = WeightLogService(db, context)
    service.current_weight(3)      # Decimal("412.50") or None
    service.weight_history(3)      # oldest first
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from reptile_api.models import Reptile, WeightLog
from reptile_api.schemas import WeightLogDto, WeightStatistics
from reptile_api.services.base_service import CrudService
from reptile_api.services.context import ServiceContext
from reptile_api.services.crud.mapper import EntityMapper
from reptile_api.services.crud.pagination import Direction, Sort
from reptile_api.services.crud.repository import ParentScopedRepository
from reptile_api.services.domain.reptile_service import ReptileService
from reptile_api.services.owner_scoped import ParentScopedService
from reptile_api.services.statistics import weight_statistics

WEIGHT_LOG_MAPPER = EntityMapper(
    WeightLog,
    WeightLogDto,
    required_fields=("reptile_id", "measurement_date", "weight_grams"),
    optional_fields=("notes",),
)


class WeightLogService(ParentScopedService[int, WeightLog, WeightLogDto]):
    def __init__(
        self,
        db: Session,
        context: ServiceContext,
        reptiles: ReptileService | None = None,
    ):
        reptiles = reptiles or ReptileService(db, context)
        repository = ParentScopedRepository(
            WeightLog, db, parent=Reptile, parent_key="reptile_id", owner_id=reptiles.owner_id
        )
        super().__init__(
            CrudService(
                repository,
                WEIGHT_LOG_MAPPER,
                context,
                default_sort=Sort.by("measurement_date", direction=Direction.DESC),
            ),
            reptiles,
            date_field="measurement_date",
        )

    def current_weight(self, reptile_id: int) -> Decimal | None:
        latest = self.latest(reptile_id)
        return latest.weight_grams if latest else None

    def weight_history(self, reptile_id: int) -> list[Decimal]:
        """Measured weights in chronological order."""
        logs = self.list_for_parent(reptile_id, newest_first=False)
        return [log.weight_grams for log in logs]

    def get_statistics(self, reptile_id: int) -> WeightStatistics:
        return weight_statistics(self.weight_history(reptile_id))
