"""
Statistics over a caller's records.

Each statistic is a small pure function over an already materialized,
owner- or parent-scoped list. Nothing is cached; services recompute on
every call.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Collection, Iterable, Sequence

from reptile_api.models.enclosure import EnclosureType
from reptile_api.models.reptile import ReptileStatus
from reptile_api.schemas.statistics import (
    CleaningStatistics,
    EnclosureStatistics,
    FeedingStatistics,
    PoopStatistics,
    ReptileStatistics,
    SheddingStatistics,
    WeightStatistics,
)


def percentage(part: int, total: int) -> float:
    """``part`` as a percentage of ``total``; 0.0 when ``total`` is 0."""
    if total <= 0:
        return 0.0
    return part / total * 100


def _count(items: Iterable[Any], predicate) -> int:
    return sum(1 for item in items if predicate(item))


def enclosure_statistics(
    enclosures: Sequence[Any], occupied_ids: Collection[int]
) -> EnclosureStatistics:
    total = len(enclosures)
    occupied = _count(enclosures, lambda e: e.id in occupied_ids)
    return EnclosureStatistics(
        total=total,
        terrariums=_count(enclosures, lambda e: e.type == EnclosureType.TERRARIUM),
        vivariums=_count(enclosures, lambda e: e.type == EnclosureType.VIVARIUM),
        occupied=occupied,
        empty=total - occupied,
        occupancy_rate=percentage(occupied, total),
    )


def reptile_statistics(reptiles: Sequence[Any]) -> ReptileStatistics:
    return ReptileStatistics(
        total=len(reptiles),
        active=_count(reptiles, lambda r: r.status == ReptileStatus.ACTIVE),
        quarantine=_count(reptiles, lambda r: r.status == ReptileStatus.QUARANTINE),
        deceased=_count(reptiles, lambda r: r.status == ReptileStatus.DECEASED),
    )


def feeding_statistics(feedings: Sequence[Any]) -> FeedingStatistics:
    total = len(feedings)
    missed = _count(feedings, lambda f: f.ate is False)
    return FeedingStatistics(
        total_feedings=total,
        missed_feedings=missed,
        feeding_success_rate=percentage(total - missed, total),
    )


def shedding_statistics(sheddings: Sequence[Any]) -> SheddingStatistics:
    total = len(sheddings)
    ate_shed = _count(sheddings, lambda s: s.ate_shed is True)
    return SheddingStatistics(
        total_sheddings=total,
        ate_shed_count=ate_shed,
        ate_shed_percentage=percentage(ate_shed, total),
    )


def cleaning_statistics(cleanings: Sequence[Any]) -> CleaningStatistics:
    total = len(cleanings)
    disinfections = _count(cleanings, lambda c: c.disinfected is True)
    substrate_changes = _count(cleanings, lambda c: c.substrate_changed is True)
    return CleaningStatistics(
        total_cleanings=total,
        disinfections=disinfections,
        substrate_changes=substrate_changes,
        disinfection_rate=percentage(disinfections, total),
        substrate_change_rate=percentage(substrate_changes, total),
    )


def poop_statistics(logs: Sequence[Any]) -> PoopStatistics:
    total = len(logs)
    parasites = _count(logs, lambda p: p.parasites_present is True)
    return PoopStatistics(
        total_logs=total,
        parasite_count=parasites,
        parasite_rate=percentage(parasites, total),
    )


def weight_statistics(weights: Sequence[Decimal]) -> WeightStatistics:
    """
    Args:
        weights: Measurements in chronological order.
    """
    if not weights:
        return WeightStatistics()
    initial, current = weights[0], weights[-1]
    return WeightStatistics(
        current_weight=current,
        initial_weight=initial,
        weight_gain=current - initial,
        measurement_count=len(weights),
    )
