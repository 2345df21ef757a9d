"""
Enclosure and cleaning DTOs.
"""

from __future__ import annotations

from pydantic import Field

from reptile_api.models.enclosure import CleaningType, EnclosureType
from .base import BaseDto, UtcDatetime


class EnclosureDto(BaseDto):
    """Enclosure as exposed to callers. ``owner_id`` is always set by the service."""

    owner_id: int | None = None
    name: str | None = Field(default=None, max_length=255)
    type: EnclosureType | None = None
    dimensions: str | None = Field(default=None, max_length=255)
    substrate: str | None = Field(default=None, max_length=255)
    heating: str | None = Field(default=None, max_length=255)
    lighting: str | None = Field(default=None, max_length=255)
    humidity: str | None = Field(default=None, max_length=100)
    temperature: str | None = Field(default=None, max_length=100)
    notes: str | None = None


class EnclosureCleaningDto(BaseDto):
    enclosure_id: int | None = None
    cleaning_date: UtcDatetime | None = None
    cleaning_type: CleaningType | None = None
    substrate_changed: bool | None = None
    disinfected: bool | None = None
    notes: str | None = Field(default=None, max_length=500)
