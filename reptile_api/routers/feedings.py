"""
Feeding log endpoints, nested under the reptile they belong to.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Response, status

from reptile_api.dependencies import get_feeding_log_service
from reptile_api.schemas import FeedingLogDto, FeedingStatistics
from reptile_api.services.domain import FeedingLogService
from shared.utils.exceptions import NotFoundError

router = APIRouter(prefix="/api/reptiles/{reptile_id}/feedings", tags=["feedings"])


def _get_for_reptile(service: FeedingLogService, reptile_id: int, feeding_id: int) -> FeedingLogDto:
    feeding = service.find_by_id(feeding_id)
    if feeding.reptile_id != reptile_id:
        raise NotFoundError(service.entity_name, feeding_id, reptile_id=reptile_id)
    return feeding


@router.get("", response_model=list[FeedingLogDto])
def list_feedings(
    reptile_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
    service: FeedingLogService = Depends(get_feeding_log_service),
) -> list[FeedingLogDto]:
    """Feedings of the reptile, newest first, optionally limited to ``[start, end]``."""
    if start is not None or end is not None:
        return service.list_in_range(reptile_id, start, end)
    return service.list_for_parent(reptile_id)


@router.get("/latest", response_model=FeedingLogDto | None)
def get_latest_feeding(
    reptile_id: int,
    service: FeedingLogService = Depends(get_feeding_log_service),
) -> FeedingLogDto | None:
    return service.latest(reptile_id)


@router.get("/missed", response_model=list[FeedingLogDto])
def list_missed_feedings(
    reptile_id: int,
    service: FeedingLogService = Depends(get_feeding_log_service),
) -> list[FeedingLogDto]:
    return service.missed_feedings(reptile_id)


@router.get("/statistics", response_model=FeedingStatistics)
def get_feeding_statistics(
    reptile_id: int,
    service: FeedingLogService = Depends(get_feeding_log_service),
) -> FeedingStatistics:
    return service.get_statistics(reptile_id)


@router.get("/{feeding_id}", response_model=FeedingLogDto)
def get_feeding(
    reptile_id: int,
    feeding_id: int,
    service: FeedingLogService = Depends(get_feeding_log_service),
) -> FeedingLogDto:
    return _get_for_reptile(service, reptile_id, feeding_id)


@router.post("", response_model=FeedingLogDto, status_code=status.HTTP_201_CREATED)
def create_feeding(
    reptile_id: int,
    body: FeedingLogDto,
    service: FeedingLogService = Depends(get_feeding_log_service),
) -> FeedingLogDto:
    return service.create(body.model_copy(update={"reptile_id": reptile_id}))


@router.put("/{feeding_id}", response_model=FeedingLogDto)
def update_feeding(
    reptile_id: int,
    feeding_id: int,
    body: FeedingLogDto,
    service: FeedingLogService = Depends(get_feeding_log_service),
) -> FeedingLogDto:
    service.verify_child_of(feeding_id, reptile_id)
    return service.update(body.model_copy(update={"id": feeding_id, "reptile_id": reptile_id}))


@router.delete("/{feeding_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_feeding(
    reptile_id: int,
    feeding_id: int,
    service: FeedingLogService = Depends(get_feeding_log_service),
) -> Response:
    service.verify_child_of(feeding_id, reptile_id)
    service.delete_by_id(feeding_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
