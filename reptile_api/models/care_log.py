"""
Care Log Models: FeedingLog, WeightLog, SheddingLog, PoopLog.

All logs belong to a reptile and inherit visibility from the reptile's owner.
"""

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Enum, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base, IdType, UTCDateTime


class Consistency(str, enum.Enum):
    NORMAL = "NORMAL"
    RUNNY = "RUNNY"
    HARD = "HARD"
    WATERY = "WATERY"


class FeedingLog(AuditMixin, Base):
    """Feeding attempt; ``ate`` is False for refused meals."""

    __tablename__ = "feeding_log"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    reptile_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("reptile.id", ondelete="CASCADE"), nullable=False, index=True
    )
    feeding_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    food_type: Mapped[str] = mapped_column(String(255), nullable=False)  # "Cricket", "Mouse"
    quantity: Mapped[str] = mapped_column(String(100), nullable=False)
    ate: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(500))


class WeightLog(AuditMixin, Base):
    """Weight measurement in grams."""

    __tablename__ = "weight_log"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    reptile_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("reptile.id", ondelete="CASCADE"), nullable=False, index=True
    )
    measurement_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    weight_grams: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(500))


class SheddingLog(AuditMixin, Base):
    """Shed event and its quality."""

    __tablename__ = "shedding_log"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    reptile_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("reptile.id", ondelete="CASCADE"), nullable=False, index=True
    )
    shedding_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    shed_quality: Mapped[str] = mapped_column(String(100), nullable=False)  # "complete", "stuck shed"
    ate_shed: Mapped[Optional[bool]] = mapped_column(Boolean)
    notes: Mapped[Optional[str]] = mapped_column(String(500))


class PoopLog(AuditMixin, Base):
    """Droppings observation, used to spot parasites early."""

    __tablename__ = "poop_log"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    reptile_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("reptile.id", ondelete="CASCADE"), nullable=False, index=True
    )
    poop_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    consistency: Mapped[Consistency] = mapped_column(
        Enum(Consistency, native_enum=False, length=10), nullable=False
    )
    color: Mapped[Optional[str]] = mapped_column(String(100))
    parasites_present: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(500))
