"""
Reptile Image Service.

Images are stored in the database next to their metadata. Listings return
metadata only; the binary payload is mapped when the ``include_data``
condition is set.

Business rules:
- Only common raster formats up to 10 MB are accepted
- The first image of a reptile becomes its highlight image, also within a batch
- Deleting the highlight image, or moving it to another reptile, clears
  the old reptile's highlight
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session

from reptile_api.models import Reptile, ReptileImage
from reptile_api.schemas import ReptileImageDto
from reptile_api.services.base_service import CrudService
from reptile_api.services.context import ServiceContext
from reptile_api.services.crud.mapper import Conditions, EntityMapper
from reptile_api.services.crud.pagination import Direction, Sort
from reptile_api.services.crud.repository import ParentScopedRepository
from reptile_api.services.domain.reptile_service import ReptileService
from reptile_api.services.owner_scoped import ParentScopedService
from shared.config.logging import get_logger
from shared.utils.exceptions import InvalidArgumentError

logger = get_logger(__name__)

SUPPORTED_CONTENT_TYPES = frozenset(
    {"image/jpeg", "image/png", "image/gif", "image/webp", "image/bmp"}
)
MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10 MB

INCLUDE_DATA = "include_data"


class ReptileImageMapper(EntityMapper[ReptileImage, ReptileImageDto]):
    """Leaves the deferred payload unloaded unless ``include_data`` is set."""

    def __init__(self) -> None:
        super().__init__(
            ReptileImage,
            ReptileImageDto,
            required_fields=("reptile_id", "filename", "content_type", "size"),
            optional_fields=("description",),
            exclude=("image_data",),
        )

    def _conditional_values(self, entity: ReptileImage, conditions: Conditions) -> dict[str, Any]:
        if conditions.get(INCLUDE_DATA):
            return {"image_data": entity.image_data}
        return {}


REPTILE_IMAGE_MAPPER = ReptileImageMapper()


class _ReptileImageCrudService(CrudService[int, ReptileImage, ReptileImageDto]):
    def __init__(self, repository: ParentScopedRepository[ReptileImage, int], context: ServiceContext):
        super().__init__(
            repository,
            REPTILE_IMAGE_MAPPER,
            context,
            default_sort=Sort.by("created_at", direction=Direction.DESC),
        )

    def _validate_create(self, dto: ReptileImageDto) -> None:
        if not dto.image_data:
            raise InvalidArgumentError("File is empty", field="image_data")
        if len(dto.image_data) > MAX_IMAGE_SIZE:
            raise InvalidArgumentError(
                "File size exceeds maximum limit of 10 MB", size=len(dto.image_data)
            )
        if (dto.content_type or "").lower() not in SUPPORTED_CONTENT_TYPES:
            raise InvalidArgumentError(
                f"Unsupported file type: {dto.content_type}. "
                "Supported types: JPEG, PNG, GIF, WebP, BMP",
                field="content_type",
            )

    def _after_create(self, entities: list[ReptileImage]) -> None:
        """The first new image of a reptile that had none becomes its highlight."""
        new_ids = [image.id for image in entities]
        actor = self.context.actor
        now = self.context.clock()
        for reptile_id in dict.fromkeys(image.reptile_id for image in entities):
            earlier = self.db.scalar(
                select(func.count())
                .select_from(ReptileImage)
                .where(ReptileImage.reptile_id == reptile_id, ReptileImage.id.not_in(new_ids))
            )
            if earlier:
                continue
            first = next(image for image in entities if image.reptile_id == reptile_id)
            reptile = self.db.get(Reptile, reptile_id)
            reptile.highlight_image_id = first.id
            reptile.stamp_updated(actor, now)
            logger.info("Auto-set highlight image", image_id=first.id, reptile_id=reptile_id)
        self.db.flush()

    def _handle_relationships(
        self, entity: ReptileImage, dto: ReptileImageDto, conditions: Conditions | None
    ) -> None:
        """An image moved to another reptile stops being its old reptile's highlight."""
        for previous_id in sa_inspect(entity).attrs.reptile_id.history.deleted:
            self._clear_highlight(previous_id, entity.id)

    def _before_delete(self, entity: ReptileImage) -> None:
        self._clear_highlight(entity.reptile_id, entity.id)

    def _clear_highlight(self, reptile_id: int, image_id: int) -> None:
        reptile = self.db.get(Reptile, reptile_id)
        if reptile is not None and reptile.highlight_image_id == image_id:
            reptile.highlight_image_id = None
            reptile.stamp_updated(self.context.actor, self.context.clock())
            logger.info("Cleared highlight image reference", reptile_id=reptile.id, image_id=image_id)


class ReptileImageService(ParentScopedService[int, ReptileImage, ReptileImageDto]):
    def __init__(
        self,
        db: Session,
        context: ServiceContext,
        reptiles: ReptileService | None = None,
    ):
        reptiles = reptiles or ReptileService(db, context)
        repository = ParentScopedRepository(
            ReptileImage, db, parent=Reptile, parent_key="reptile_id", owner_id=reptiles.owner_id
        )
        super().__init__(
            _ReptileImageCrudService(repository, context),
            reptiles,
            date_field="created_at",
        )

    def upload(
        self,
        reptile_id: int,
        filename: str,
        content_type: str,
        data: bytes,
        description: str | None = None,
    ) -> ReptileImageDto:
        """Store a new image for one of the caller's reptiles."""
        logger.info("Uploading image", reptile_id=reptile_id, filename=filename)
        return self.create(
            ReptileImageDto(
                reptile_id=reptile_id,
                filename=filename,
                content_type=content_type,
                image_data=data,
                description=description,
                size=len(data or b""),
            )
        )

    def get_with_data(self, image_id: int) -> ReptileImageDto:
        """Image metadata plus the binary payload."""
        return self.find_by_id(image_id, {INCLUDE_DATA: True})

    def count_for_parent(self, reptile_id: int) -> int:
        self.parent.verify_ownership(reptile_id)
        return self.crud.repository.count_where(ReptileImage.reptile_id == reptile_id)

    def delete_for_parent(self, reptile_id: int) -> int:
        """Delete every image of the reptile. Returns the number deleted."""
        images = self.list_for_parent(reptile_id)
        removed = self.crud.delete_all_by_id([image.id for image in images])
        return len(removed)
