"""
Domain Services Package.

One service per aggregate, built on the generic persistence services.
Enclosures and reptiles are owner-scoped; logs, cleanings and images are
scoped through their parent.
"""

from .enclosure_service import EnclosureService
from .reptile_service import ReptileService
from .feeding_log_service import FeedingLogService
from .weight_log_service import WeightLogService
from .shedding_log_service import SheddingLogService
from .poop_log_service import PoopLogService
from .enclosure_cleaning_service import EnclosureCleaningService
from .reptile_image_service import ReptileImageService

__all__ = [
    "EnclosureService",
    "ReptileService",
    "FeedingLogService",
    "WeightLogService",
    "SheddingLogService",
    "PoopLogService",
    "EnclosureCleaningService",
    "ReptileImageService",
]
