import os

# Settings must be in place before the app modules read them
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["DEFAULT_PERIMETER_LAT"] = "37.7749"
os.environ["DEFAULT_PERIMETER_LNG"] = "-122.4194"
os.environ["DEFAULT_PERIMETER_RADIUS_KM"] = "2"
os.environ["MANAGER_ROLES"] = "manager"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import models  # noqa: F401
from core.deps import get_current_user
from db.session import get_session
from models.clock_event import ClockEvent, ClockEventType
from services import session_registry
from services.ledger import ClockEventLedger

WORKER = {"id": "worker-1", "name": "Pat Worker", "email": "pat@example.com", "role": "worker"}
MANAGER = {"id": "manager-1", "name": "Morgan Manager", "email": "morgan@example.com", "role": "manager"}

T0 = datetime(2025, 3, 3, 8, 0, tzinfo=timezone.utc)


def make_event(event_id, event_type, minutes, worker_id="worker-1"):
    """Build an unsaved event ``minutes`` after T0 at the site center."""
    return ClockEvent(
        id=event_id,
        worker_id=worker_id,
        event_type=ClockEventType(event_type),
        timestamp=T0 + timedelta(minutes=minutes),
        latitude=37.7749,
        longitude=-122.4194,
    )


@pytest.fixture(autouse=True)
def clear_session_registry():
    session_registry.reset()
    yield
    session_registry.reset()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def file_engine(tmp_path):
    """File-backed database; each thread gets its own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'clock.db'}",
        connect_args={"check_same_thread": False},
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def ledger(session):
    return ClockEventLedger(session, WORKER["id"])


@pytest.fixture
def current_user():
    """Mutable identity returned by the auth dependency; tests may swap it."""
    return dict(WORKER)


@pytest.fixture
def login(current_user):
    def _login(user):
        current_user.clear()
        current_user.update(user)

    return _login


@pytest.fixture
def client(engine, current_user):
    from main import app

    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_current_user] = lambda: current_user

    yield TestClient(app)

    app.dependency_overrides.clear()
