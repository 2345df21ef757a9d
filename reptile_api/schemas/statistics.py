"""
Statistics output schemas.

Counts are recomputed on every request from the caller's own records.
Rates are percentages in the range 0-100 and are 0.0 for empty sets.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class _Statistics(BaseModel):
    model_config = ConfigDict(frozen=True)


class EnclosureStatistics(_Statistics):
    total: int = 0
    terrariums: int = 0
    vivariums: int = 0
    occupied: int = 0
    empty: int = 0
    occupancy_rate: float = 0.0


class ReptileStatistics(_Statistics):
    total: int = 0
    active: int = 0
    quarantine: int = 0
    deceased: int = 0


class FeedingStatistics(_Statistics):
    total_feedings: int = 0
    missed_feedings: int = 0
    feeding_success_rate: float = 0.0


class SheddingStatistics(_Statistics):
    total_sheddings: int = 0
    ate_shed_count: int = 0
    ate_shed_percentage: float = 0.0


class CleaningStatistics(_Statistics):
    total_cleanings: int = 0
    disinfections: int = 0
    substrate_changes: int = 0
    disinfection_rate: float = 0.0
    substrate_change_rate: float = 0.0


class PoopStatistics(_Statistics):
    total_logs: int = 0
    parasite_count: int = 0
    parasite_rate: float = 0.0


class WeightStatistics(_Statistics):
    current_weight: Decimal = Decimal("0")
    initial_weight: Decimal = Decimal("0")
    weight_gain: Decimal = Decimal("0")
    measurement_count: int = 0
