"""
Reptile Service.

Handles all reptile-related business logic. Every operation is scoped to
the reptiles of the calling user.

Usage:
    from reptile_api.services.domain import ReptileService

    service = ReptileService(db, context)
    reptile = service.create(ReptileDto(name="Monty", species="Python regius", ...))
    service.move_to_enclosure(reptile.id, enclosure_id)
"""

from __future__ import annotations

from sqlalchemy import exists, func, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session

from reptile_api.models import Enclosure, Reptile, ReptileImage, ReptileStatus
from reptile_api.schemas import ReptileDto, ReptileStatistics
from reptile_api.services.base_service import CrudService
from reptile_api.services.context import ServiceContext
from reptile_api.services.crud.mapper import Conditions, EntityMapper
from reptile_api.services.crud.pagination import Sort
from reptile_api.services.crud.repository import OwnerScopedRepository
from reptile_api.services.owner_scoped import OwnerScopedService
from reptile_api.services.statistics import reptile_statistics
from shared.config.logging import get_logger
from shared.utils.exceptions import InvalidArgumentError, NotFoundError

logger = get_logger(__name__)

REPTILE_MAPPER = EntityMapper(
    Reptile,
    ReptileDto,
    required_fields=("name", "species", "gender", "acquisition_date", "status"),
    optional_fields=(
        "subspecies",
        "birth_date",
        "enclosure_id",
        "notes",
        "highlight_image_id",
    ),
)


class _ReptileCrudService(CrudService[int, Reptile, ReptileDto]):
    """CRUD with the reptile's relationship rules."""

    def __init__(self, repository: OwnerScopedRepository[Reptile, int], context: ServiceContext):
        super().__init__(repository, REPTILE_MAPPER, context, default_sort=Sort.by("name"))
        self._owner_id = repository.owner_id

    def _validate_create(self, dto: ReptileDto) -> None:
        self._check_enclosure(dto.enclosure_id)
        if dto.highlight_image_id is not None:
            raise InvalidArgumentError(
                "A new reptile cannot have a highlight image", field="highlight_image_id"
            )

    def _handle_relationships(
        self, entity: Reptile, dto: ReptileDto, conditions: Conditions | None
    ) -> None:
        self._check_enclosure(entity.enclosure_id)
        highlight = sa_inspect(entity).attrs.highlight_image_id.history
        if highlight.has_changes() and entity.highlight_image_id is not None:
            belongs = self.db.scalar(
                select(
                    exists().where(
                        ReptileImage.id == entity.highlight_image_id,
                        ReptileImage.reptile_id == entity.id,
                    )
                )
            )
            if not belongs:
                logger.info(
                    "Image does not belong to reptile",
                    image_id=entity.highlight_image_id,
                    reptile_id=entity.id,
                )
                raise InvalidArgumentError(
                    f"Image '{entity.highlight_image_id}' does not belong to reptile '{entity.id}'",
                    field="highlight_image_id",
                )

    def _check_enclosure(self, enclosure_id: int | None) -> None:
        """The enclosure must exist and belong to the same owner."""
        if enclosure_id is None:
            return
        owned = self.db.scalar(
            select(
                exists().where(
                    Enclosure.id == enclosure_id,
                    Enclosure.owner_id == self._owner_id,
                )
            )
        )
        if not owned:
            raise NotFoundError("Enclosure", enclosure_id, owner_id=self._owner_id)


class ReptileService(OwnerScopedService[int, Reptile, ReptileDto]):
    """
    Service for reptile management.

    Business rules:
    - Reptiles belong to the user who created them
    - A reptile can only live in an enclosure of the same user
    - The highlight image must be one of the reptile's own images
    """

    def __init__(self, db: Session, context: ServiceContext):
        owner_id = context.principal.resolve_owner_id()
        super().__init__(
            _ReptileCrudService(OwnerScopedRepository(Reptile, db, owner_id), context),
            owner_id,
        )

    # =========================================================================
    # Query Methods
    # =========================================================================

    def list_active(self) -> list[ReptileDto]:
        return self.crud.find_where(Reptile.status == ReptileStatus.ACTIVE, order_by=Reptile.name)

    def search_by_species(self, species: str) -> list[ReptileDto]:
        """Reptiles whose species contains ``species``, ignoring case."""
        return self.crud.find_where(
            func.lower(Reptile.species).contains(species.lower(), autoescape=True),
            order_by=Reptile.name,
        )

    def search_by_name(self, name: str) -> list[ReptileDto]:
        return self.crud.find_where(
            func.lower(Reptile.name).contains(name.lower(), autoescape=True),
            order_by=Reptile.name,
        )

    def list_by_enclosure(self, enclosure_id: int) -> list[ReptileDto]:
        return self.crud.find_where(Reptile.enclosure_id == enclosure_id, order_by=Reptile.name)

    def get_statistics(self) -> ReptileStatistics:
        return reptile_statistics(self.find_all_by_owner())

    # =========================================================================
    # Command Methods
    # =========================================================================

    def move_to_enclosure(self, reptile_id: int, enclosure_id: int | None) -> ReptileDto:
        """
        Move a reptile into one of the caller's enclosures (None to unassign).

        Raises:
            NotFoundError: If the reptile or the enclosure is not the caller's.
        """
        return self._patch(reptile_id, enclosure_id=enclosure_id)

    def update_status(self, reptile_id: int, status: ReptileStatus) -> ReptileDto:
        if status is None:
            raise InvalidArgumentError("Reptile status must not be null", field="status")
        return self._patch(reptile_id, status=status)

    def set_highlight_image(self, reptile_id: int, image_id: int) -> ReptileDto:
        """
        Raises:
            InvalidArgumentError: If the image is not one of the reptile's images.
        """
        if image_id is None:
            raise InvalidArgumentError("Image id must not be null", field="image_id")
        return self._patch(reptile_id, highlight_image_id=image_id)

    def remove_highlight_image(self, reptile_id: int) -> ReptileDto:
        return self._patch(reptile_id, highlight_image_id=None)

    def _patch(self, reptile_id: int, **changes) -> ReptileDto:
        """Update selected fields, keeping every other stored value."""
        current = self.find_by_id(reptile_id)
        return self.update(current.model_copy(update=changes))
