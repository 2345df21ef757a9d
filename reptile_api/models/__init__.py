"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class, AuditMixin, AUDIT_FIELDS
- user: User
- enclosure: Enclosure, EnclosureCleaning
- reptile: Reptile, ReptileImage
- care_log: FeedingLog, WeightLog, SheddingLog, PoopLog
- audit: AuditLog
"""

# Base classes
from .base import Base, AuditMixin, AUDIT_FIELDS

# Users
from .user import User

# Enclosures and cleanings
from .enclosure import Enclosure, EnclosureCleaning, EnclosureType, CleaningType

# Reptiles and images
from .reptile import Reptile, ReptileImage, ReptileGender, ReptileStatus

# Care logs
from .care_log import FeedingLog, WeightLog, SheddingLog, PoopLog, Consistency

# Audit
from .audit import AuditLog

__all__ = [
    # Base
    "Base",
    "AuditMixin",
    "AUDIT_FIELDS",
    # Users
    "User",
    # Enclosures
    "Enclosure",
    "EnclosureCleaning",
    "EnclosureType",
    "CleaningType",
    # Reptiles
    "Reptile",
    "ReptileImage",
    "ReptileGender",
    "ReptileStatus",
    # Care logs
    "FeedingLog",
    "WeightLog",
    "SheddingLog",
    "PoopLog",
    "Consistency",
    # Audit
    "AuditLog",
]
