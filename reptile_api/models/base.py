"""
Base class and AuditMixin for all SQLAlchemy ORM models.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Final, Optional

from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

# BigInteger primary keys do not auto-increment on SQLite, Integer does
IdType = BigInteger().with_variant(Integer(), "sqlite")


def as_utc(value: datetime | None) -> datetime | None:
    """Aware UTC datetime; a naive value is taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timestamp column stored in UTC and always read back timezone-aware.

    SQLite keeps no offset and returns naive values; they are stamped UTC
    on load so stored and freshly created records compare equal.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        return as_utc(value)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        return as_utc(value)


AUDIT_FIELDS: Final[frozenset[str]] = frozenset(
    {"created_at", "created_by", "updated_at", "updated_by"}
)


class Base(DeclarativeBase):
    """
    Base class for all models.

    Records compare by identity: two instances are equal when they are of
    the same type and share a non-null id. A record without an id is only
    equal to itself.
    """

    def __eq__(self, other: Any) -> bool:
        if self is other:
            return True
        if other is None or type(self) is not type(other):
            return False
        own_id = getattr(self, "id", None)
        other_id = getattr(other, "id", None)
        if own_id is None or other_id is None:
            return False
        return own_id == other_id

    def __hash__(self) -> int:
        own_id = getattr(self, "id", None)
        if own_id is None:
            return object.__hash__(self)
        return hash((type(self).__name__, own_id))


class AuditMixin:
    """
    Mixin providing the audit trail fields shared by every business record.

    Fields added:
    - created_at, created_by: set once when the record is created
    - updated_at, updated_by: set on creation and on every mutation

    The fields are stamped by the CRUD service, never copied from a DTO.
    """

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    updated_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def stamp_created(self, actor: str, now: datetime) -> None:
        """Set creation and first modification fields on a new record."""
        self.created_at = now
        self.created_by = actor
        self.updated_at = now
        self.updated_by = actor

    def stamp_updated(self, actor: str, now: datetime) -> None:
        """Set modification fields on an existing record."""
        self.updated_at = now
        self.updated_by = actor

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        id_val = getattr(self, "id", None)
        return f"<{class_name}(id={id_val})>"
