"""
Audit Log Model.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, IdType, UTCDateTime


class AuditLog(Base):
    """
    Durable copy of one audit event: who did what to which resource, and when.
    Rows are append-only; nothing in the application updates or deletes them.
    """

    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)

    # Who
    actor: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # What
    operation: Mapped[str] = mapped_column(String(20), nullable=False)  # CREATE, MODIFY, REMOVE, ACCESS
    resource_type: Mapped[str] = mapped_column(String(100), nullable=False)
    action: Mapped[str] = mapped_column(String(150), nullable=False)  # "reptile.update"
    subject_id: Mapped[Optional[str]] = mapped_column(String(100))

    # Snapshot of the record for CREATE/MODIFY (JSON)
    details: Mapped[Optional[str]] = mapped_column(Text)

    # When
    occurred_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    __table_args__ = (
        Index("ix_audit_log_resource_subject", "resource_type", "subject_id"),
    )
