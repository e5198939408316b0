"""Pytest fixtures — a fresh SQLite database per test, with the policy engine and API on top."""
import uuid
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from classbook.database import Base, get_db
from classbook.dependencies import get_notification_sink
from classbook.errors import CollaboratorUnavailableError
from classbook.main import app
from classbook.models.classroom import Classroom, ClassroomPermission
from classbook.models.user import User, UserRole
from classbook.repositories.settings_repository import SettingsRepository
from classbook.services.booking_service import BookingPolicyEngine
from classbook.services.time_slots import parse_time

# Import all models so they register with Base.metadata
import classbook.models  # noqa: F401

SQLITE_URL = "sqlite:///./test.db"
DAY = "2026-03-02"


class RecordingNotificationSink:
    """Keeps every published event for assertions."""

    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)

    def of_type(self, event_cls):
        return [e for e in self.events if isinstance(e, event_cls)]


class FailingNotificationSink:
    def publish(self, event):
        raise CollaboratorUnavailableError("Mail relay is down")


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session, closed after the test."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifications():
    return RecordingNotificationSink()


@pytest.fixture
def engine(db, notifications):
    """Policy engine wired to the test session and a recording sink."""
    return BookingPolicyEngine.from_session(db, notifications)


@pytest.fixture(scope="function")
def client(db_engine, notifications):
    """FastAPI TestClient with the database and notification sink overridden."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_notification_sink] = lambda: notifications
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: direct database setup for engine-level tests
# ---------------------------------------------------------------------------
def make_user(db, name: str = "Student", role: UserRole = UserRole.student,
              assigned_classrooms: list = None) -> User:
    user = User(
        display_name=name,
        email=f"{name.lower().replace(' ', '.')}.{uuid.uuid4().hex[:6]}@school.test",
        role=role,
        assigned_classrooms=assigned_classrooms or [],
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_classroom(db, name: str = "Room R", **config) -> Classroom:
    classroom = Classroom(
        name=name,
        permission=config.pop("permission", ClassroomPermission.student),
        requires_approval=config.pop("requires_approval", False),
        daily_cap_minutes=config.pop("daily_cap_minutes", 0),
        is_active=config.pop("is_active", True),
        assigned_admins=config.pop("assigned_admins", []),
        **config,
    )
    db.add(classroom)
    db.commit()
    db.refresh(classroom)
    return classroom


def configure_policy(db, start: str = "08:00", end: str = "18:00", cap: int = 60, granularity: int = 15):
    """Pin the global operating policy so tests never depend on the environment."""
    return SettingsRepository(db).update_global({
        "operating_start_minute": parse_time(start),
        "operating_end_minute": parse_time(end),
        "default_daily_cap_minutes": cap,
        "slot_granularity_minutes": granularity,
    })


# ---------------------------------------------------------------------------
# Helpers: API setup
# ---------------------------------------------------------------------------
def create_test_user(client: TestClient, name: str = "Test User", role: str = "student",
                     assigned_classrooms: list = None) -> dict:
    """Helper — POST /api/users and return response JSON."""
    resp = client.post("/api/users/", json={
        "display_name": name,
        "email": f"{name.lower().replace(' ', '.')}.{uuid.uuid4().hex[:6]}@school.test",
        "role": role,
        "assigned_classrooms": assigned_classrooms or [],
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_classroom(client: TestClient, admin_id: str, name: str = "Room R", **config) -> dict:
    """Helper — POST /api/classrooms as an admin and return response JSON."""
    payload = {"name": name, "assigned_admins": [admin_id], **config}
    resp = client.post(f"/api/classrooms/?actor_user_id={admin_id}", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def configure_policy_via_api(client: TestClient, super_admin_id: str, **changes) -> dict:
    payload = {
        "operating_start": "08:00",
        "operating_end": "18:00",
        "default_daily_cap_minutes": 60,
        "slot_granularity_minutes": 15,
        **changes,
    }
    resp = client.put(f"/api/settings/?actor_user_id={super_admin_id}", json=payload)
    assert resp.status_code == 200, resp.text
    return resp.json()


def book(client: TestClient, actor_id: str, classroom_id: str, start: str, end: str, date: str = DAY):
    """Helper — POST /api/bookings, returns the raw response."""
    return client.post(f"/api/bookings/?actor_user_id={actor_id}", json={
        "classroom_id": classroom_id,
        "date": date,
        "start_time": start,
        "end_time": end,
    })
