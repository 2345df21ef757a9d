"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Settings are read at import time; keep the app off the local database file
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUDIT_SINK", "memory")

from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from reptile_api.main import app
from reptile_api.models import (
    Base, User, EnclosureType, ReptileGender,
)
from reptile_api.schemas import EnclosureDto, ReptileDto
from reptile_api.services.audit import AuditRecorder, MemoryAuditSink
from reptile_api.services.context import ServiceContext
from reptile_api.services.domain import EnclosureService, ReptileService
from reptile_api.services.principal import SessionPrincipal
from reptile_api.services.resource_types import build_resource_registry
from shared.infrastructure.db import enable_sqlite_foreign_keys, get_db

ALICE = "alice"
BOB = "bob"
ALICE_ID = 7
BOB_ID = 8


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class StepClock:
    """Deterministic clock: every call returns a time one second later."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self._now = start
        self._step = step

    def __call__(self) -> datetime:
        current = self._now
        self._now += self._step
        return current


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db_session):
    """Factory for independent sessions on the test database."""
    return TestingSessionLocal


@pytest.fixture
def seed_users(db_session):
    """Two users with fixed ids: alice (7) and bob (8)."""
    alice = User(id=ALICE_ID, username=ALICE, email="alice@test.com")
    bob = User(id=BOB_ID, username=BOB, email="bob@test.com")
    db_session.add_all([alice, bob])
    db_session.commit()
    return alice, bob


@pytest.fixture
def clock():
    return StepClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def audit_sink():
    return MemoryAuditSink()


@pytest.fixture
def audit(audit_sink, clock):
    return AuditRecorder(audit_sink, clock)


@pytest.fixture
def resources():
    return build_resource_registry()


@pytest.fixture
def make_context(db_session, seed_users, audit, resources, clock):
    """Build a service context acting as the given username."""

    def _make(username: str | None = ALICE, recorder: AuditRecorder | None = None) -> ServiceContext:
        return ServiceContext(
            audit=recorder or audit,
            resources=resources,
            principal=SessionPrincipal(db_session, username),
            clock=clock,
        )

    return _make


@pytest.fixture
def alice_enclosures(db_session, make_context):
    return EnclosureService(db_session, make_context(ALICE))


@pytest.fixture
def bob_enclosures(db_session, make_context):
    return EnclosureService(db_session, make_context(BOB))


@pytest.fixture
def alice_reptiles(db_session, make_context):
    return ReptileService(db_session, make_context(ALICE))


@pytest.fixture
def bob_reptiles(db_session, make_context):
    return ReptileService(db_session, make_context(BOB))


def enclosure_dto(name: str = "Tank-1", type: EnclosureType = EnclosureType.TERRARIUM, **fields) -> EnclosureDto:
    return EnclosureDto(name=name, type=type, **fields)


def reptile_dto(name: str = "Monty", species: str = "Python regius", **fields) -> ReptileDto:
    fields.setdefault("gender", ReptileGender.MALE)
    fields.setdefault("acquisition_date", date(2023, 5, 1))
    return ReptileDto(name=name, species=species, **fields)


@pytest.fixture
def client(db_session, seed_users, audit, resources):
    """
    Create a test client with database session override.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.state.resources = resources
    app.state.audit = audit

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    app.state.resources = None
    app.state.audit = None


@pytest.fixture
def alice_headers():
    return {"X-Authenticated-User": ALICE}


@pytest.fixture
def bob_headers():
    return {"X-Authenticated-User": BOB}
