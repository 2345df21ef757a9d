"""
Audit recording.

Every read and write of the persistence services produces an ``AuditEvent``
describing who did what to which resource. Events are handed to a sink
(log, memory or database). Recording is best-effort: a failing sink is
logged and ignored, never raised into the business operation.

Usage:
    recorder = AuditRecorder(MemoryAuditSink())
    event = recorder.record(
        "alice", AuditOperationType.CREATE, "reptile", "reptile.create", 12
    )
"""

from __future__ import annotations

import enum
import json
from collections import deque
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Protocol, Sequence

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session, sessionmaker

from reptile_api.models import AuditLog
from shared.config.logging import get_logger
from shared.config.settings import Settings
from shared.infrastructure.db import get_session_factory

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuditOperationType(str, enum.Enum):
    CREATE = "CREATE"
    MODIFY = "MODIFY"
    REMOVE = "REMOVE"
    ACCESS = "ACCESS"


class AuditAction:
    """Suffixes appended to a resource's base action."""

    CREATE = ".create"
    UPDATE = ".update"
    DELETE = ".delete"
    ACCESS = ".access"
    PAGE = ".page"

    @staticmethod
    def of(base_action: str, suffix: str) -> str:
        return f"{base_action}{suffix}"


@dataclass(frozen=True)
class AuditEvent:
    actor: str
    operation: AuditOperationType
    resource_type: str
    action: str
    subject_id: str | None
    timestamp: datetime
    details: dict[str, Any] | None = field(default=None, compare=False)


# =============================================================================
# Snapshots
# =============================================================================


def _json_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, bytes):
        return f"<{len(value)} bytes>"
    return value


def serialize_model(obj: Any, exclude: Sequence[str] = ()) -> dict[str, Any]:
    """
    Serialize a record's loaded columns to a JSON-safe dict for audit details.

    Deferred columns that were never loaded are skipped.
    """
    state = sa_inspect(obj)
    result = {}
    for attr in state.mapper.column_attrs:
        if attr.key in exclude:
            continue
        if attr.deferred and attr.key not in state.dict:
            continue
        result[attr.key] = _json_value(getattr(obj, attr.key))
    return result


# =============================================================================
# Sinks
# =============================================================================


class AuditSink(Protocol):
    def write(self, event: AuditEvent) -> None: ...


class LoggingAuditSink:
    """Writes events to the application log at DEBUG level."""

    def __init__(self, logger_name: str = "reptile_api.audit"):
        self._logger = get_logger(logger_name)

    def write(self, event: AuditEvent) -> None:
        self._logger.debug(
            "Audit event",
            actor=event.actor,
            operation=event.operation.value,
            action=event.action,
            subject_id=event.subject_id,
        )


class MemoryAuditSink:
    """
    Keeps the most recent events in process, for callers that want them as
    values. Older events are dropped once ``max_events`` is reached.
    """

    def __init__(self, max_events: int | None = 10_000) -> None:
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    def write(self, event: AuditEvent) -> None:
        self._events.append(event)

    def of_operation(self, operation: AuditOperationType) -> list[AuditEvent]:
        return [e for e in self._events if e.operation is operation]

    def clear(self) -> None:
        self._events.clear()


class DatabaseAuditSink:
    """
    Persists events as ``AuditLog`` rows.

    Uses its own short-lived session so audit rows are independent of the
    business unit of work that produced them.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._session_factory = session_factory

    def write(self, event: AuditEvent) -> None:
        factory = self._session_factory or get_session_factory()
        with factory() as db:
            db.add(
                AuditLog(
                    actor=event.actor,
                    operation=event.operation.value,
                    resource_type=event.resource_type,
                    action=event.action,
                    subject_id=event.subject_id,
                    details=json.dumps(event.details) if event.details else None,
                    occurred_at=event.timestamp,
                )
            )
            db.commit()


# =============================================================================
# Recorder
# =============================================================================


class AuditRecorder:
    """Builds audit events and dispatches them to a sink without ever raising."""

    def __init__(self, sink: AuditSink, clock: Clock = utc_now):
        self._sink = sink
        self._clock = clock

    @property
    def sink(self) -> AuditSink:
        return self._sink

    def record(
        self,
        actor: str,
        operation: AuditOperationType,
        resource_type: str,
        action: str,
        subject: Any = None,
        *,
        details: dict[str, Any] | None = None,
    ) -> AuditEvent | None:
        """
        Record one event.

        ``subject`` may be an identifier or an object with an ``id``; it is
        stored in string form.

        Returns:
            The recorded event, or None when the sink failed.
        """
        try:
            event = AuditEvent(
                actor=actor,
                operation=operation,
                resource_type=resource_type,
                action=action,
                subject_id=_subject_id(subject),
                timestamp=self._clock(),
                details=details,
            )
            self._sink.write(event)
        except Exception:
            logger.error(
                "Failed to record audit event",
                action=action,
                actor=actor,
                exc_info=True,
            )
            return None
        return event


def _subject_id(subject: Any) -> str | None:
    if subject is None:
        return None
    subject_id = getattr(subject, "id", subject)
    return None if subject_id is None else str(subject_id)


def build_audit_recorder(settings: Settings) -> AuditRecorder:
    """Choose the audit sink from configuration."""
    if settings.audit_sink == "database":
        sink: AuditSink = DatabaseAuditSink()
    elif settings.audit_sink == "memory":
        sink = MemoryAuditSink(settings.audit_memory_max_events)
    else:
        sink = LoggingAuditSink()
    logger.info("Audit recorder configured", sink=type(sink).__name__)
    return AuditRecorder(sink)
