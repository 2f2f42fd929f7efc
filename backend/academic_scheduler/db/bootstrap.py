from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

import academic_scheduler.models  # noqa: F401
from academic_scheduler.db.base import Base
from academic_scheduler.services.time_slots import TimeSlotCatalog, time_slot_catalog

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "time_slots": {"id", "label", "order_index"},
    "course_assignments": {"id", "course_id", "lecturer_id", "group_id", "availability"},
    "schedules": {"id", "name", "group_id"},
    "schedule_entries": {
        "id",
        "schedule_id",
        "course_assignment_id",
        "day_of_week",
        "time_slot_id",
        "room",
        "session_type",
    },
}


def _assert_required_columns(engine: Engine) -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def _seed_time_slots(engine: Engine, catalog: TimeSlotCatalog) -> None:
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = session_factory()
    try:
        catalog.ensure_seeded(db)
    finally:
        db.close()


def ensure_runtime_schema(
    engine: Engine,
    *,
    seed_time_slots: bool = True,
    catalog: TimeSlotCatalog = time_slot_catalog,
) -> None:
    try:
        Base.metadata.create_all(bind=engine)
        _assert_required_columns(engine)
        if seed_time_slots:
            _seed_time_slots(engine, catalog)
    except Exception as exc:
        logger.exception("Runtime schema bootstrap failed")
        raise RuntimeError("Runtime schema bootstrap failed") from exc
