from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from academic_scheduler.core.exceptions import ResourceNotFoundError, ScheduleValidationError
from academic_scheduler.models.schedule import Schedule
from academic_scheduler.schemas.schedule import ScheduleCreate, ScheduleUpdate
from academic_scheduler.services.schedule_entries import commit_or_raise
from academic_scheduler.services.schedule_store import find_schedule, find_schedule_for_group


def list_schedules(db: Session) -> list[Schedule]:
    return list(db.execute(select(Schedule).order_by(Schedule.name)).scalars())


def get_schedule(db: Session, schedule_id: str) -> Schedule:
    schedule = find_schedule(db, schedule_id)
    if schedule is None:
        raise ResourceNotFoundError("Schedule", schedule_id)
    return schedule


def create_schedule(db: Session, payload: ScheduleCreate) -> Schedule:
    existing = find_schedule_for_group(db, payload.group_id)
    if existing is not None:
        raise ScheduleValidationError(
            "A schedule already exists for this group",
            details={"group_id": payload.group_id, "existing_schedule_id": existing.id},
        )
    schedule = Schedule(**payload.model_dump())
    db.add(schedule)
    commit_or_raise(db, "create schedule")
    db.refresh(schedule)
    return schedule


def update_schedule(db: Session, schedule_id: str, payload: ScheduleUpdate) -> Schedule:
    schedule = get_schedule(db, schedule_id)
    # Only the fields sent are changed; the group stays fixed.
    values = payload.model_dump(exclude_unset=True)
    if "name" in values and values["name"] is None:
        raise ScheduleValidationError("Schedule name must not be empty", details={"field": "name"})
    for key, value in values.items():
        setattr(schedule, key, value)
    commit_or_raise(db, "update schedule")
    db.refresh(schedule)
    return schedule


def delete_schedule(db: Session, schedule_id: str) -> None:
    schedule = get_schedule(db, schedule_id)
    # Entries go with the container.
    db.delete(schedule)
    commit_or_raise(db, "delete schedule")
