"""
Enclosure endpoints.
"""

from fastapi import APIRouter, Depends, Query, Response, status

from reptile_api.dependencies import get_enclosure_service
from reptile_api.models import EnclosureType
from reptile_api.schemas import EnclosureDto, EnclosureStatistics
from reptile_api.services.crud.pagination import Page
from reptile_api.services.domain import EnclosureService

router = APIRouter(prefix="/api/enclosures", tags=["enclosures"])


@router.get("", response_model=Page[EnclosureDto])
def list_enclosures(
    page: int = 0,
    size: int | None = None,
    sort: list[str] | None = Query(default=None),
    service: EnclosureService = Depends(get_enclosure_service),
) -> Page[EnclosureDto]:
    """List the caller's enclosures, one page at a time."""
    return service.find_all(page, size, sort)


@router.get("/search", response_model=list[EnclosureDto])
def search_enclosures(
    name: str | None = None,
    type: EnclosureType | None = None,
    service: EnclosureService = Depends(get_enclosure_service),
) -> list[EnclosureDto]:
    if type is not None:
        return service.list_by_type(type)
    if name:
        return service.search_by_name(name)
    return service.find_all_by_owner()


@router.get("/empty", response_model=list[EnclosureDto])
def list_empty_enclosures(
    service: EnclosureService = Depends(get_enclosure_service),
) -> list[EnclosureDto]:
    return service.empty_enclosures()


@router.get("/statistics", response_model=EnclosureStatistics)
def get_enclosure_statistics(
    service: EnclosureService = Depends(get_enclosure_service),
) -> EnclosureStatistics:
    return service.get_statistics()


@router.get("/{enclosure_id}", response_model=EnclosureDto)
def get_enclosure(
    enclosure_id: int,
    service: EnclosureService = Depends(get_enclosure_service),
) -> EnclosureDto:
    return service.find_by_id(enclosure_id)


@router.post("", response_model=EnclosureDto, status_code=status.HTTP_201_CREATED)
def create_enclosure(
    body: EnclosureDto,
    service: EnclosureService = Depends(get_enclosure_service),
) -> EnclosureDto:
    return service.create(body)


@router.put("/{enclosure_id}", response_model=EnclosureDto)
def update_enclosure(
    enclosure_id: int,
    body: EnclosureDto,
    service: EnclosureService = Depends(get_enclosure_service),
) -> EnclosureDto:
    """Replace the enclosure's fields. Optional fields missing from the body are cleared."""
    return service.update(body.model_copy(update={"id": enclosure_id}))


@router.delete("/{enclosure_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_enclosure(
    enclosure_id: int,
    service: EnclosureService = Depends(get_enclosure_service),
) -> Response:
    service.delete_by_id(enclosure_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
