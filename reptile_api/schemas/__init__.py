"""
Pydantic Transfer Objects (DTOs) and statistics schemas.
"""

from .base import BaseDto
from .enclosure import EnclosureDto, EnclosureCleaningDto
from .reptile import ReptileDto, ReptileImageDto
from .care_log import FeedingLogDto, WeightLogDto, SheddingLogDto, PoopLogDto
from .statistics import (
    EnclosureStatistics,
    ReptileStatistics,
    FeedingStatistics,
    SheddingStatistics,
    CleaningStatistics,
    PoopStatistics,
    WeightStatistics,
)

__all__ = [
    "BaseDto",
    "EnclosureDto",
    "EnclosureCleaningDto",
    "ReptileDto",
    "ReptileImageDto",
    "FeedingLogDto",
    "WeightLogDto",
    "SheddingLogDto",
    "PoopLogDto",
    "EnclosureStatistics",
    "ReptileStatistics",
    "FeedingStatistics",
    "SheddingStatistics",
    "CleaningStatistics",
    "PoopStatistics",
    "WeightStatistics",
]
