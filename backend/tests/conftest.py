import os

# The app module builds its engine at import time; keep it off the real database.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import uuid  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # gives you a fake http client that calls FastAPI routes without a server  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from academic_scheduler.api.deps import get_db  # noqa: E402
from academic_scheduler.db.base import Base  # noqa: E402
from academic_scheduler.db.session import enable_sqlite_foreign_keys  # noqa: E402
from academic_scheduler.main import app  # noqa: E402
from academic_scheduler.models import CourseAssignment, Schedule, ScheduleEntry, SessionType, WeekDay  # noqa: E402
from academic_scheduler.services.availability import SESSION_TO_TIME_SLOT  # noqa: E402
from academic_scheduler.services.time_slots import time_slot_catalog  # noqa: E402


@pytest.fixture()
def engine():
    engine = create_engine(  # isolated in-memory DB per test
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    time_slot_catalog.clear()
    session = session_factory()
    time_slot_catalog.ensure_seeded(session)
    try:
        yield session
    finally:
        session.close()
        time_slot_catalog.clear()


@pytest.fixture()
def slot_ids(db):
    """Session token -> time slot id in the seeded catalog."""
    return {
        session: time_slot_catalog.resolve(db, label).id
        for session, label in SESSION_TO_TIME_SLOT.items()
    }


@pytest.fixture()
def make_assignment(db):
    def _make(
        *,
        course: str = "Course A",
        lecturer: str | None = "Lecturer L",
        group: str = "Group 1",
        availability: str | None = None,
    ) -> CourseAssignment:
        assignment = CourseAssignment(
            id=str(uuid.uuid4()),
            course_id=f"course-{course}",
            course_name=course,
            lecturer_id=f"lecturer-{lecturer}" if lecturer else None,
            lecturer_name=lecturer,
            group_id=f"group-{group}",
            group_name=group,
            academic_year="2026-2027",
            term="Term 1",
            availability=availability,
        )
        db.add(assignment)
        db.commit()
        return assignment

    return _make


@pytest.fixture()
def make_schedule(db):
    def _make(group: str = "Group 1") -> Schedule:
        schedule = Schedule(name=f"Timetable {group}", group_id=f"group-{group}", term="Term 1")
        db.add(schedule)
        db.commit()
        return schedule

    return _make


@pytest.fixture()
def make_entry(db):
    def _make(
        schedule: Schedule,
        assignment: CourseAssignment,
        *,
        time_slot_id: int,
        day: WeekDay = WeekDay.monday,
        room: str = "Room 101",
        session_type: SessionType = SessionType.theory,
    ) -> ScheduleEntry:
        entry = ScheduleEntry(
            schedule_id=schedule.id,
            course_assignment_id=assignment.id,
            day_of_week=day,
            time_slot_id=time_slot_id,
            room=room,
            session_type=session_type,
        )
        db.add(entry)
        db.commit()
        return entry

    return _make


@pytest.fixture()
def client(db, session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        # Startup seeded the app engine's catalog; point the cache back at the test DB.
        time_slot_catalog.clear()
        yield test_client

    app.dependency_overrides.clear()
    time_slot_catalog.clear()
