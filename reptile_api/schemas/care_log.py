"""
Care log DTOs.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import Field

from reptile_api.models.care_log import Consistency
from .base import BaseDto, UtcDatetime


class FeedingLogDto(BaseDto):
    reptile_id: int | None = None
    feeding_date: UtcDatetime | None = None
    food_type: str | None = Field(default=None, max_length=255)
    quantity: str | None = Field(default=None, max_length=100)
    ate: bool | None = None
    notes: str | None = Field(default=None, max_length=500)


class WeightLogDto(BaseDto):
    reptile_id: int | None = None
    measurement_date: UtcDatetime | None = None
    weight_grams: Decimal | None = Field(default=None, ge=0, max_digits=8, decimal_places=2)
    notes: str | None = Field(default=None, max_length=500)


class SheddingLogDto(BaseDto):
    reptile_id: int | None = None
    shedding_date: UtcDatetime | None = None
    shed_quality: str | None = Field(default=None, max_length=100)
    ate_shed: bool | None = None
    notes: str | None = Field(default=None, max_length=500)


class PoopLogDto(BaseDto):
    reptile_id: int | None = None
    poop_date: UtcDatetime | None = None
    consistency: Consistency | None = None
    color: str | None = Field(default=None, max_length=100)
    parasites_present: bool | None = None
    notes: str | None = Field(default=None, max_length=500)
