"""
Reptile and image DTOs.
"""

from __future__ import annotations

from datetime import date

from pydantic import ConfigDict, Field

from reptile_api.models.reptile import ReptileGender, ReptileStatus
from .base import BaseDto


class ReptileDto(BaseDto):
    """Reptile as exposed to callers. ``owner_id`` is always set by the service."""

    owner_id: int | None = None
    name: str | None = Field(default=None, max_length=255)
    species: str | None = Field(default=None, max_length=255)
    subspecies: str | None = Field(default=None, max_length=255)
    gender: ReptileGender | None = None
    birth_date: date | None = None
    acquisition_date: date | None = None
    enclosure_id: int | None = None
    status: ReptileStatus | None = None
    notes: str | None = None
    highlight_image_id: int | None = None


class ReptileImageDto(BaseDto):
    """
    Image metadata. ``image_data`` is only filled when the caller asks for
    the binary payload (``include_data`` mapping condition).
    """

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    reptile_id: int | None = None
    filename: str | None = Field(default=None, max_length=255)
    content_type: str | None = Field(default=None, max_length=100)
    image_data: bytes | None = None
    description: str | None = Field(default=None, max_length=500)
    size: int | None = None
