"""
Tests for audit recording and its sinks.
"""

import json
from datetime import datetime, timezone

from sqlalchemy import select

from reptile_api.models import AuditLog, Enclosure, EnclosureType
from reptile_api.services.audit import (
    AuditOperationType,
    AuditRecorder,
    DatabaseAuditSink,
    LoggingAuditSink,
    MemoryAuditSink,
    build_audit_recorder,
    serialize_model,
)
from reptile_api.services.base_service import CrudService
from reptile_api.services.crud.repository import Repository
from reptile_api.services.domain.enclosure_service import ENCLOSURE_MAPPER
from shared.config.settings import Settings
from tests.conftest import enclosure_dto


class BrokenSink:
    def write(self, event):
        raise RuntimeError("audit store unavailable")


FIXED = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestAuditRecorder:
    def test_records_event_with_string_subject(self):
        sink = MemoryAuditSink()
        recorder = AuditRecorder(sink, clock=lambda: FIXED)

        event = recorder.record(
            "alice", AuditOperationType.CREATE, "reptile", "reptile.create", 12
        )

        assert sink.events == [event]
        assert event.subject_id == "12"
        assert event.timestamp == FIXED
        assert event.action == "reptile.create"

    def test_subject_may_be_an_object_with_id(self):
        sink = MemoryAuditSink()
        AuditRecorder(sink).record(
            "alice", AuditOperationType.ACCESS, "enclosure", "enclosure.access",
            Enclosure(id=5),
        )
        assert sink.events[0].subject_id == "5"

    def test_page_access_has_no_subject(self):
        sink = MemoryAuditSink()
        AuditRecorder(sink).record(
            "alice", AuditOperationType.ACCESS, "enclosure", "enclosure.access.page"
        )
        assert sink.events[0].subject_id is None

    def test_sink_failure_is_swallowed(self):
        recorder = AuditRecorder(BrokenSink())

        result = recorder.record("alice", AuditOperationType.REMOVE, "reptile", "reptile.delete", 1)

        assert result is None

    def test_sink_failure_does_not_fail_the_business_operation(self, db_session, make_context):
        context = make_context(recorder=AuditRecorder(BrokenSink()))
        service = CrudService(Repository(Enclosure, db_session), ENCLOSURE_MAPPER, context)

        created = service.create(enclosure_dto())

        assert created.id is not None
        assert db_session.get(Enclosure, created.id) is not None


class TestSinks:
    def test_memory_sink_filters_by_operation(self):
        sink = MemoryAuditSink()
        recorder = AuditRecorder(sink)
        recorder.record("a", AuditOperationType.CREATE, "reptile", "reptile.create", 1)
        recorder.record("a", AuditOperationType.ACCESS, "reptile", "reptile.access", 1)

        assert len(sink.of_operation(AuditOperationType.CREATE)) == 1
        sink.clear()
        assert sink.events == []

    def test_logging_sink_accepts_events(self):
        event = AuditRecorder(LoggingAuditSink()).record(
            "alice", AuditOperationType.ACCESS, "reptile", "reptile.access", 1
        )
        assert event is not None

    def test_database_sink_writes_audit_rows(self, db_session, session_factory):
        recorder = AuditRecorder(DatabaseAuditSink(session_factory), clock=lambda: FIXED)

        recorder.record(
            "alice",
            AuditOperationType.MODIFY,
            "enclosure",
            "enclosure.update",
            3,
            details={"name": "Tank-2"},
        )

        row = db_session.scalars(select(AuditLog)).one()
        assert row.actor == "alice"
        assert row.operation == "MODIFY"
        assert row.subject_id == "3"
        assert json.loads(row.details) == {"name": "Tank-2"}

    def test_builder_picks_sink_from_settings(self):
        assert isinstance(build_audit_recorder(Settings(audit_sink="memory")).sink, MemoryAuditSink)
        assert isinstance(build_audit_recorder(Settings(audit_sink="database")).sink, DatabaseAuditSink)
        assert isinstance(build_audit_recorder(Settings(audit_sink="log")).sink, LoggingAuditSink)

    def test_memory_sink_keeps_only_recent_events(self):
        sink = MemoryAuditSink(max_events=3)
        recorder = AuditRecorder(sink)
        for reptile_id in range(1, 6):
            recorder.record("a", AuditOperationType.ACCESS, "reptile", "reptile.access", reptile_id)

        assert [e.subject_id for e in sink.events] == ["3", "4", "5"]

    def test_builder_bounds_memory_sink(self):
        recorder = build_audit_recorder(Settings(audit_sink="memory", audit_memory_max_events=2))
        for reptile_id in range(4):
            recorder.record("a", AuditOperationType.ACCESS, "reptile", "reptile.access", reptile_id)

        assert len(recorder.sink.events) == 2

    def test_memory_sink_is_rejected_in_production(self):
        errors = Settings(
            environment="production",
            debug=False,
            database_url="postgresql+psycopg://db/reptiles",
            audit_sink="memory",
        ).validate_production_settings()

        assert any("AUDIT_SINK=memory" in error for error in errors)


class TestSerializeModel:
    def test_produces_json_safe_values(self):
        enclosure = Enclosure(id=1, name="Tank-1", type=EnclosureType.VIVARIUM, created_at=FIXED)

        snapshot = serialize_model(enclosure)

        assert snapshot["name"] == "Tank-1"
        assert snapshot["type"] == "VIVARIUM"
        assert snapshot["created_at"] == FIXED.isoformat()
        json.dumps(snapshot)

    def test_excluded_columns_are_left_out(self):
        snapshot = serialize_model(Enclosure(id=1, name="Tank-1"), exclude=("notes",))
        assert "notes" not in snapshot
