"""
Reptile Models: Reptile, ReptileImage.
"""

from __future__ import annotations

import enum
from datetime import date
from typing import Optional

from sqlalchemy import Date, Enum, ForeignKey, Index, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base, IdType


class ReptileGender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    UNKNOWN = "UNKNOWN"


class ReptileStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    QUARANTINE = "QUARANTINE"
    DECEASED = "DECEASED"
    SOLD = "SOLD"


class Reptile(AuditMixin, Base):
    """
    Animal owned by one user, optionally housed in one of that user's enclosures.
    Inherits: created_at, created_by, updated_at, updated_by from AuditMixin.
    """

    __tablename__ = "reptile"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    owner_id: Mapped[Optional[int]] = mapped_column(
        IdType, ForeignKey("app_user.id"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    species: Mapped[str] = mapped_column(String(255), nullable=False)
    subspecies: Mapped[Optional[str]] = mapped_column(String(255))
    gender: Mapped[ReptileGender] = mapped_column(
        Enum(ReptileGender, native_enum=False, length=10), nullable=False
    )
    birth_date: Mapped[Optional[date]] = mapped_column(Date)
    acquisition_date: Mapped[date] = mapped_column(Date, nullable=False)
    enclosure_id: Mapped[Optional[int]] = mapped_column(
        IdType, ForeignKey("enclosure.id", ondelete="SET NULL"), nullable=True, index=True
    )
    status: Mapped[ReptileStatus] = mapped_column(
        Enum(ReptileStatus, native_enum=False, length=20),
        default=ReptileStatus.ACTIVE,
        nullable=False,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text)
    # No FK: reptile_image already references reptile
    highlight_image_id: Mapped[Optional[int]] = mapped_column(IdType, nullable=True)

    __table_args__ = (
        Index("ix_reptile_owner_status", "owner_id", "status"),
    )


class ReptileImage(AuditMixin, Base):
    """
    Photo of a reptile. The binary payload is loaded only when accessed.
    """

    __tablename__ = "reptile_image"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    reptile_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("reptile.id", ondelete="CASCADE"), nullable=False, index=True
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    image_data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False, deferred=True)
    description: Mapped[Optional[str]] = mapped_column(String(500))
    size: Mapped[int] = mapped_column(IdType, nullable=False)
