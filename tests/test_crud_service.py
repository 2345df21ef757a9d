"""
Tests for the generic read and CRUD services.

Uses an unscoped enclosure repository so the generic semantics are tested
without ownership rules.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError

from reptile_api.models import Enclosure, EnclosureType, FeedingLog, Reptile
from reptile_api.schemas import EnclosureDto, FeedingLogDto
from reptile_api.services.audit import AuditOperationType
from reptile_api.services.base_service import CrudService
from reptile_api.services.crud.example import Example, ExampleMatcher, StringMatcher
from reptile_api.services.crud.pagination import Sort
from reptile_api.services.crud.repository import ParentScopedRepository, Repository
from reptile_api.services.domain import FeedingLogService
from reptile_api.services.domain.enclosure_service import ENCLOSURE_MAPPER
from shared.infrastructure.db import get_db_context
from shared.utils.exceptions import DatabaseError, InvalidArgumentError, NotFoundError
from tests.conftest import ALICE, ALICE_ID, BOB, enclosure_dto, reptile_dto


@pytest.fixture
def crud(db_session, make_context):
    return CrudService(
        Repository(Enclosure, db_session),
        ENCLOSURE_MAPPER,
        make_context(ALICE),
        default_sort=Sort.by("name"),
    )


@pytest.fixture
def five_tanks(crud, audit_sink):
    created = crud.create_all(
        [
            enclosure_dto("Delta", EnclosureType.VIVARIUM),
            enclosure_dto("Alpha"),
            enclosure_dto("Echo", EnclosureType.VIVARIUM),
            enclosure_dto("Charlie"),
            enclosure_dto("Bravo", EnclosureType.PALUDARIUM),
        ]
    )
    audit_sink.clear()
    return created


# =============================================================================
# Create
# =============================================================================


class TestCreate:
    def test_assigns_identity_and_stamps_audit_fields(self, crud, audit_sink):
        created = crud.create(enclosure_dto(notes="Corner"))

        assert created.id is not None
        assert created.created_by == ALICE
        assert created.updated_by == ALICE
        assert created.created_at is not None
        assert created.notes == "Corner"

        events = audit_sink.of_operation(AuditOperationType.CREATE)
        assert len(events) == 1
        assert events[0].action == "enclosure.create"
        assert events[0].subject_id == str(created.id)
        assert events[0].details["name"] == "Tank-1"

    def test_dto_with_identity_is_rejected_without_writing(self, crud, audit_sink):
        with pytest.raises(InvalidArgumentError):
            crud.create(enclosure_dto(id=42))

        assert crud.count() == 0
        assert audit_sink.events == []

    def test_null_dto_is_rejected(self, crud):
        with pytest.raises(InvalidArgumentError):
            crud.create(None)

    def test_missing_required_field_is_rejected(self, crud):
        with pytest.raises(InvalidArgumentError, match="type"):
            crud.create(EnclosureDto(name="No type"))
        assert crud.count() == 0

    def test_batch_emits_one_event_per_record(self, crud, audit_sink):
        created = crud.create_all([enclosure_dto("A"), enclosure_dto("B"), enclosure_dto("C")])

        assert len({dto.id for dto in created}) == 3
        events = audit_sink.of_operation(AuditOperationType.CREATE)
        assert [e.subject_id for e in events] == [str(dto.id) for dto in created]

    def test_batch_with_one_invalid_dto_writes_nothing(self, crud):
        with pytest.raises(InvalidArgumentError):
            crud.create_all([enclosure_dto("A"), enclosure_dto("B", id=5)])
        assert crud.count() == 0


class TestTimestamps:
    def test_reloaded_record_keeps_aware_timestamps(self, crud, db_session):
        created = crud.create(enclosure_dto())
        db_session.expire_all()

        reloaded = crud.find_by_id(created.id)

        assert reloaded.created_at == created.created_at
        assert reloaded.created_at.tzinfo == timezone.utc
        assert reloaded.updated_at.tzinfo == timezone.utc

    def test_dto_dates_are_normalised_to_utc(self):
        naive = FeedingLogDto(feeding_date=datetime(2024, 1, 1, 18, 0))
        offset = FeedingLogDto(
            feeding_date=datetime(2024, 1, 1, 20, 0, tzinfo=timezone(timedelta(hours=2)))
        )

        assert naive.feeding_date == datetime(2024, 1, 1, 18, 0, tzinfo=timezone.utc)
        assert offset.feeding_date == naive.feeding_date
        assert offset.feeding_date.tzinfo == timezone.utc


# =============================================================================
# Read
# =============================================================================


class TestRead:
    def test_find_by_id_emits_one_access_event(self, crud, five_tanks, audit_sink):
        found = crud.find_by_id(five_tanks[0].id)

        assert found.name == "Delta"
        assert [e.action for e in audit_sink.events] == ["enclosure.access"]
        assert audit_sink.events[0].subject_id == str(five_tanks[0].id)

    def test_find_by_missing_id_fails(self, crud, audit_sink):
        with pytest.raises(NotFoundError):
            crud.find_by_id(999)
        assert audit_sink.events == []

    def test_find_by_null_id_fails(self, crud):
        with pytest.raises(InvalidArgumentError):
            crud.find_by_id(None)

    @pytest.mark.parametrize("ids", [None, [], [None]])
    def test_find_all_by_ids_with_nothing_to_find(self, crud, five_tanks, audit_sink, ids):
        assert crud.find_all_by_ids(ids) == []
        assert audit_sink.events == []

    def test_find_all_by_ids_skips_unknown_and_null_ids(self, crud, five_tanks, audit_sink):
        found = crud.find_all_by_ids([five_tanks[1].id, None, 999])

        assert [dto.name for dto in found] == ["Alpha"]
        assert len(audit_sink.of_operation(AuditOperationType.ACCESS)) == 1

    def test_exists_and_count_are_not_audited(self, crud, five_tanks, audit_sink):
        assert crud.exists(five_tanks[0].id)
        assert not crud.exists(999)
        assert not crud.exists(None)
        assert crud.count() == 5
        assert audit_sink.events == []


class TestPaging:
    def test_page_uses_default_sort(self, crud, five_tanks, audit_sink):
        page = crud.find_all(page=0, size=2)

        assert [dto.name for dto in page.content] == ["Alpha", "Bravo"]
        assert page.total_elements == 5
        assert page.total_pages == 3
        assert [e.action for e in audit_sink.events] == ["enclosure.access.page"]
        assert audit_sink.events[0].subject_id is None

    def test_last_page_is_partial(self, crud, five_tanks):
        page = crud.find_all(page=2, size=2)
        assert [dto.name for dto in page.content] == ["Echo"]

    def test_out_of_range_page_is_empty(self, crud, five_tanks):
        page = crud.find_all(page=10, size=2)
        assert page.content == []
        assert page.total_elements == 5

    def test_explicit_sort(self, crud, five_tanks):
        page = crud.find_all(sort=["type,desc", "name"])
        assert [dto.name for dto in page.content] == ["Delta", "Echo", "Alpha", "Charlie", "Bravo"]

    def test_unknown_sort_property_is_invalid(self, crud, five_tanks):
        with pytest.raises(InvalidArgumentError):
            crud.find_all(sort=["colour"])

    def test_bad_sort_direction_is_invalid(self, crud):
        with pytest.raises(InvalidArgumentError):
            crud.find_all(sort=["name,sideways"])

    @pytest.mark.parametrize("page,size", [(-1, 10), (0, 0), (0, 1000)])
    def test_invalid_page_request(self, crud, page, size):
        with pytest.raises(InvalidArgumentError):
            crud.find_all(page=page, size=size)


class TestFindByExample:
    def test_sample_matches_non_null_fields(self, crud, five_tanks):
        page = crud.find_by_example(EnclosureDto(type=EnclosureType.VIVARIUM))
        assert [dto.name for dto in page.content] == ["Delta", "Echo"]

    def test_containing_ignore_case(self, crud, five_tanks):
        matcher = (
            ExampleMatcher.matching()
            .with_string_matcher(StringMatcher.CONTAINING)
            .with_ignore_case()
        )
        page = crud.find_by_example(Example.of(EnclosureDto(name="HA"), matcher))
        assert [dto.name for dto in page.content] == ["Alpha", "Charlie"]

    def test_ignored_paths(self, crud, five_tanks):
        matcher = ExampleMatcher.matching().with_ignore_paths("name")
        page = crud.find_by_example(
            Example.of(EnclosureDto(name="Nope", type=EnclosureType.PALUDARIUM), matcher)
        )
        assert [dto.name for dto in page.content] == ["Bravo"]

    def test_null_example_is_invalid(self, crud):
        with pytest.raises(InvalidArgumentError):
            crud.find_by_example(None)


# =============================================================================
# Update
# =============================================================================


class TestUpdate:
    def test_applies_fields_and_stamps_modification(self, crud, audit_sink):
        created = crud.create(enclosure_dto(notes="Corner", substrate="Sand"))
        audit_sink.clear()

        updated = crud.update(EnclosureDto(id=created.id, name=None, substrate="Bark"))

        assert updated.name == "Tank-1"
        assert updated.substrate == "Bark"
        assert updated.notes is None
        assert updated.created_by == ALICE
        assert updated.updated_at > created.updated_at

        events = audit_sink.of_operation(AuditOperationType.MODIFY)
        assert len(events) == 1
        assert events[0].action == "enclosure.update"
        assert events[0].details["substrate"] == "Bark"

    def test_missing_identity_fails(self, crud, audit_sink):
        with pytest.raises(NotFoundError):
            crud.update(EnclosureDto(id=999, name="Ghost"))
        assert audit_sink.events == []

    def test_null_identity_fails(self, crud):
        with pytest.raises(InvalidArgumentError):
            crud.update(EnclosureDto(name="No id"))

    def test_null_dto_fails(self, crud):
        with pytest.raises(InvalidArgumentError):
            crud.update(None)


# =============================================================================
# Delete
# =============================================================================


class TestDelete:
    def test_delete_is_idempotent(self, crud, audit_sink):
        created = crud.create(enclosure_dto())
        audit_sink.clear()

        assert crud.delete_by_id(created.id) is True
        assert crud.delete_by_id(created.id) is False

        removes = audit_sink.of_operation(AuditOperationType.REMOVE)
        assert len(removes) == 1
        assert removes[0].action == "enclosure.delete"
        assert not crud.exists(created.id)

    def test_delete_all_by_id_returns_removed_ids(self, crud, five_tanks):
        removed = crud.delete_all_by_id([five_tanks[0].id, 999, five_tanks[1].id])
        assert removed == [five_tanks[0].id, five_tanks[1].id]
        assert crud.count() == 3

    def test_delete_with_null_id_fails(self, crud):
        with pytest.raises(InvalidArgumentError):
            crud.delete_all_by_id([None])

    def test_delete_by_dto(self, crud, five_tanks):
        assert crud.delete(five_tanks[2]) is True
        assert crud.delete_all(five_tanks[3:]) == [five_tanks[3].id, five_tanks[4].id]
        assert crud.count() == 2


# =============================================================================
# Unit of work
# =============================================================================


class TestCommitFailures:
    def test_storage_failure_is_database_error(self, crud, db_session, audit_sink, monkeypatch):
        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db_session, "commit", failing_commit)

        with pytest.raises(DatabaseError) as exc:
            crud.create(enclosure_dto())

        assert exc.value.status_code == 500
        assert audit_sink.events == []

    def test_integrity_violation_is_reraised_unchanged(self, crud, db_session, monkeypatch):
        def conflicting_commit():
            raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        monkeypatch.setattr(db_session, "commit", conflicting_commit)

        with pytest.raises(IntegrityError):
            crud.create(enclosure_dto())

    def test_session_context_outside_requests(self):
        with get_db_context() as db:
            assert db.scalar(select(1)) == 1


# =============================================================================
# Repository
# =============================================================================


class TestRepository:
    @pytest.fixture
    def repo(self, db_session):
        return Repository(Enclosure, db_session)

    def test_find_all_with_order_and_window(self, repo, five_tanks):
        found = repo.find_all(order_by=Enclosure.name.desc(), offset=1, limit=2)
        assert [e.name for e in found] == ["Delta", "Charlie"]

    def test_delete_by_id_reports_removal(self, repo, five_tanks):
        assert repo.delete_by_id(five_tanks[0].id) is True
        assert repo.delete_by_id(five_tanks[0].id) is False
        assert repo.count() == 4

    def test_delete_all_empties_scope(self, repo, five_tanks):
        assert repo.delete_all() == 5
        assert repo.count() == 0

    def test_parent_scoped_repository_filters_by_owner(self, db_session, make_context, alice_reptiles, bob_reptiles):
        monty = alice_reptiles.create(reptile_dto("Monty"))
        spike = bob_reptiles.create(reptile_dto("Spike"))
        for username, reptile_id, food in ((ALICE, monty.id, "Mouse"), (BOB, spike.id, "Cricket")):
            FeedingLogService(db_session, make_context(username)).create(
                FeedingLogDto(reptile_id=reptile_id, feeding_date=datetime(2024, 1, 1), food_type=food, quantity="1")
            )

        alice_logs = ParentScopedRepository(
            FeedingLog, db_session, parent=Reptile, parent_key="reptile_id", owner_id=ALICE_ID
        )

        assert alice_logs.count() == 1
        assert [log.food_type for log in alice_logs.find_for_parent(monty.id)] == ["Mouse"]
        assert alice_logs.find_for_parent(spike.id) == []
