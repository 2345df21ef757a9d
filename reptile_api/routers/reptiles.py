"""
Reptile endpoints.
"""

from fastapi import APIRouter, Depends, Query, Response, status

from reptile_api.dependencies import get_reptile_service
from reptile_api.models import ReptileStatus
from reptile_api.schemas import ReptileDto, ReptileStatistics
from reptile_api.services.crud.pagination import Page
from reptile_api.services.domain import ReptileService

router = APIRouter(prefix="/api/reptiles", tags=["reptiles"])


@router.get("", response_model=Page[ReptileDto])
def list_reptiles(
    page: int = 0,
    size: int | None = None,
    sort: list[str] | None = Query(default=None),
    service: ReptileService = Depends(get_reptile_service),
) -> Page[ReptileDto]:
    """List the caller's reptiles, one page at a time."""
    return service.find_all(page, size, sort)


@router.get("/active", response_model=list[ReptileDto])
def list_active_reptiles(
    service: ReptileService = Depends(get_reptile_service),
) -> list[ReptileDto]:
    return service.list_active()


@router.get("/search", response_model=list[ReptileDto])
def search_reptiles(
    name: str | None = None,
    species: str | None = None,
    enclosure_id: int | None = None,
    service: ReptileService = Depends(get_reptile_service),
) -> list[ReptileDto]:
    if enclosure_id is not None:
        return service.list_by_enclosure(enclosure_id)
    if species:
        return service.search_by_species(species)
    if name:
        return service.search_by_name(name)
    return service.find_all_by_owner()


@router.get("/statistics", response_model=ReptileStatistics)
def get_reptile_statistics(
    service: ReptileService = Depends(get_reptile_service),
) -> ReptileStatistics:
    return service.get_statistics()


@router.get("/{reptile_id}", response_model=ReptileDto)
def get_reptile(
    reptile_id: int,
    service: ReptileService = Depends(get_reptile_service),
) -> ReptileDto:
    return service.find_by_id(reptile_id)


@router.post("", response_model=ReptileDto, status_code=status.HTTP_201_CREATED)
def create_reptile(
    body: ReptileDto,
    service: ReptileService = Depends(get_reptile_service),
) -> ReptileDto:
    return service.create(body)


@router.put("/{reptile_id}", response_model=ReptileDto)
def update_reptile(
    reptile_id: int,
    body: ReptileDto,
    service: ReptileService = Depends(get_reptile_service),
) -> ReptileDto:
    return service.update(body.model_copy(update={"id": reptile_id}))


@router.patch("/{reptile_id}/status", response_model=ReptileDto)
def update_reptile_status(
    reptile_id: int,
    value: ReptileStatus = Query(alias="status"),
    service: ReptileService = Depends(get_reptile_service),
) -> ReptileDto:
    return service.update_status(reptile_id, value)


@router.patch("/{reptile_id}/enclosure", response_model=ReptileDto)
def move_reptile(
    reptile_id: int,
    enclosure_id: int | None = None,
    service: ReptileService = Depends(get_reptile_service),
) -> ReptileDto:
    """Move the reptile to another enclosure; omit ``enclosure_id`` to unassign it."""
    return service.move_to_enclosure(reptile_id, enclosure_id)


@router.put("/{reptile_id}/highlight-image/{image_id}", response_model=ReptileDto)
def set_highlight_image(
    reptile_id: int,
    image_id: int,
    service: ReptileService = Depends(get_reptile_service),
) -> ReptileDto:
    return service.set_highlight_image(reptile_id, image_id)


@router.delete("/{reptile_id}/highlight-image", response_model=ReptileDto)
def remove_highlight_image(
    reptile_id: int,
    service: ReptileService = Depends(get_reptile_service),
) -> ReptileDto:
    return service.remove_highlight_image(reptile_id)


@router.delete("/{reptile_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reptile(
    reptile_id: int,
    service: ReptileService = Depends(get_reptile_service),
) -> Response:
    service.delete_by_id(reptile_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
