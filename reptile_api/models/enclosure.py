"""
Enclosure Models: Enclosure, EnclosureCleaning.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base, IdType, UTCDateTime


class EnclosureType(str, enum.Enum):
    TERRARIUM = "TERRARIUM"
    VIVARIUM = "VIVARIUM"
    PALUDARIUM = "PALUDARIUM"
    AQUATERRARIUM = "AQUATERRARIUM"
    CUSTOM = "CUSTOM"


class CleaningType(str, enum.Enum):
    SPOT_CLEAN = "SPOT_CLEAN"
    FULL_CLEAN = "FULL_CLEAN"
    WATER_CHANGE = "WATER_CHANGE"
    DEEP_CLEAN = "DEEP_CLEAN"


class Enclosure(AuditMixin, Base):
    """
    Terrarium or other housing owned by one user.
    Inherits: created_at, created_by, updated_at, updated_by from AuditMixin.
    """

    __tablename__ = "enclosure"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    owner_id: Mapped[Optional[int]] = mapped_column(
        IdType, ForeignKey("app_user.id"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[EnclosureType] = mapped_column(
        Enum(EnclosureType, native_enum=False, length=20), nullable=False
    )
    dimensions: Mapped[Optional[str]] = mapped_column(String(255))  # "120x60x60 cm"
    substrate: Mapped[Optional[str]] = mapped_column(String(255))
    heating: Mapped[Optional[str]] = mapped_column(String(255))
    lighting: Mapped[Optional[str]] = mapped_column(String(255))
    humidity: Mapped[Optional[str]] = mapped_column(String(100))
    temperature: Mapped[Optional[str]] = mapped_column(String(100))
    notes: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        Index("ix_enclosure_owner_type", "owner_id", "type"),
    )


class EnclosureCleaning(AuditMixin, Base):
    """
    Cleaning performed on an enclosure. Visible through the enclosure's owner.
    """

    __tablename__ = "enclosure_cleaning"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    enclosure_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("enclosure.id", ondelete="CASCADE"), nullable=False, index=True
    )
    cleaning_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    cleaning_type: Mapped[CleaningType] = mapped_column(
        Enum(CleaningType, native_enum=False, length=20), nullable=False
    )
    substrate_changed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    disinfected: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(500))
