from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from academic_scheduler.models.course_assignment import CourseAssignment
from academic_scheduler.models.schedule import Schedule, ScheduleEntry, WeekDay
from academic_scheduler.models.time_slot import TimeSlot


def find_assignment(db: Session, assignment_id: str) -> CourseAssignment | None:
    return db.get(CourseAssignment, assignment_id)


def find_assignments(db: Session, assignment_ids: Iterable[str]) -> dict[str, CourseAssignment]:
    ids = sorted(set(assignment_ids))
    if not ids:
        return {}
    query = select(CourseAssignment).where(CourseAssignment.id.in_(ids))
    return {item.id: item for item in db.execute(query).scalars()}


def find_schedule(db: Session, schedule_id: str, *, lock: bool = False) -> Schedule | None:
    if lock:
        query = select(Schedule).where(Schedule.id == schedule_id).with_for_update()
        return db.execute(query).scalar_one_or_none()
    return db.get(Schedule, schedule_id)


def find_schedule_for_group(db: Session, group_id: str) -> Schedule | None:
    return db.execute(select(Schedule).where(Schedule.group_id == group_id)).scalar_one_or_none()


def find_entries(
    db: Session,
    *,
    schedule_id: str | None = None,
    day: WeekDay | None = None,
    time_slot_id: int | None = None,
    exclude_entry_id: str | None = None,
) -> list[ScheduleEntry]:
    query = select(ScheduleEntry)
    if schedule_id is not None:
        query = query.where(ScheduleEntry.schedule_id == schedule_id)
    if day is not None:
        query = query.where(ScheduleEntry.day_of_week == day)
    if time_slot_id is not None:
        query = query.where(ScheduleEntry.time_slot_id == time_slot_id)
    if exclude_entry_id is not None:
        query = query.where(ScheduleEntry.id != exclude_entry_id)
    return list(db.execute(query).scalars())


def find_entries_in_slots(
    db: Session,
    slots: Iterable[tuple[WeekDay, int]],
) -> list[ScheduleEntry]:
    """Every persisted entry, in any schedule, occupying one of ``slots``."""
    keys = set(slots)
    if not keys:
        return []
    days = sorted({day for day, _ in keys}, key=lambda day: day.value)
    slot_ids = sorted({slot_id for _, slot_id in keys})
    query = select(ScheduleEntry).where(
        ScheduleEntry.day_of_week.in_(days),
        ScheduleEntry.time_slot_id.in_(slot_ids),
    )
    # The two IN filters over-select across day/slot combinations.
    return [
        entry
        for entry in db.execute(query).scalars()
        if (entry.day_of_week, entry.time_slot_id) in keys
    ]


def list_entries_ordered(db: Session, *, schedule_id: str | None = None) -> list[ScheduleEntry]:
    day_order = {day: index for index, day in enumerate(WeekDay)}
    entries = find_entries(db, schedule_id=schedule_id)
    return sorted(
        entries,
        key=lambda entry: (day_order[entry.day_of_week], entry.time_slot.order_index, entry.room),
    )


def find_all_time_slots(db: Session) -> list[TimeSlot]:
    return list(db.execute(select(TimeSlot).order_by(TimeSlot.order_index)).scalars())


def find_or_create_time_slot(db: Session, *, label: str, order_index: int) -> tuple[TimeSlot, bool]:
    existing = db.execute(select(TimeSlot).where(TimeSlot.label == label)).scalar_one_or_none()
    if existing is not None:
        return existing, False
    slot = TimeSlot(label=label, order_index=order_index)
    db.add(slot)
    db.flush()
    return slot, True
