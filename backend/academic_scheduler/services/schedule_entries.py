from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from academic_scheduler.core.exceptions import (
    AvailabilityViolationError,
    DuplicateSlotError,
    PersistenceError,
    ResourceNotFoundError,
)
from academic_scheduler.models.course_assignment import CourseAssignment
from academic_scheduler.models.schedule import Schedule, ScheduleEntry, WeekDay
from academic_scheduler.schemas.schedule import ScheduleEntryCreate, ScheduleEntryUpdate
from academic_scheduler.services.availability import format_availability, parse_availability, resolve_slot_ids
from academic_scheduler.services.conflicts import ConflictDetector
from academic_scheduler.services.schedule_store import (
    find_assignment,
    find_entries,
    find_schedule,
    list_entries_ordered,
)
from academic_scheduler.services.time_slots import TimeSlotCatalog, TimeSlotRef, time_slot_catalog

logger = logging.getLogger(__name__)

AVAILABILITY_HINT = "The schedule must match one of the sessions defined in the course assignment availability."


def commit_or_raise(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to %s", action)
        raise PersistenceError(
            f"Could not {action}",
            details={"reason": exc.__class__.__name__},
        ) from exc


def availability_violation(
    db: Session,
    assignment: CourseAssignment,
    day: WeekDay,
    slot: TimeSlotRef,
    catalog: TimeSlotCatalog = time_slot_catalog,
) -> AvailabilityViolationError | None:
    spec = parse_availability(assignment.availability)
    if spec.is_unconstrained:
        return None
    if (day, slot.id) in resolve_slot_ids(db, spec, catalog):
        return None
    return AvailabilityViolationError(
        f"Invalid schedule: {day.value} at {slot.label} is not in the course availability.",
        details={
            "availability": assignment.availability,
            "allowed": format_availability(spec),
            "requested": {"day": day.value, "time_slot": slot.label, "time_slot_id": slot.id},
            "hint": AVAILABILITY_HINT,
        },
    )


def duplicate_slot(
    db: Session,
    schedule_id: str,
    day: WeekDay,
    slot: TimeSlotRef,
    *,
    exclude_entry_id: str | None = None,
) -> DuplicateSlotError | None:
    existing = find_entries(
        db,
        schedule_id=schedule_id,
        day=day,
        time_slot_id=slot.id,
        exclude_entry_id=exclude_entry_id,
    )
    if not existing:
        return None
    return DuplicateSlotError(
        f"A schedule entry already exists for {day.value} at {slot.label} in this schedule.",
        details={"existing_entry_id": existing[0].id, "day": day.value, "time_slot": slot.label},
    )


class ScheduleEntryValidator:
    """Runs every placement rule for a single entry, raising the first violation."""

    def __init__(self, db: Session, catalog: TimeSlotCatalog = time_slot_catalog) -> None:
        self.db = db
        self.catalog = catalog
        self.detector = ConflictDetector(db, catalog)

    def require_schedule(self, schedule_id: str) -> Schedule:
        schedule = find_schedule(self.db, schedule_id)
        if schedule is None:
            raise ResourceNotFoundError("Schedule", schedule_id)
        return schedule

    def require_assignment(self, assignment_id: str) -> CourseAssignment:
        assignment = find_assignment(self.db, assignment_id)
        if assignment is None:
            raise ResourceNotFoundError("Course assignment", assignment_id)
        return assignment

    def require_time_slot(self, time_slot_id: int) -> TimeSlotRef:
        slot = self.catalog.resolve_id(self.db, time_slot_id)
        if slot is None:
            raise ResourceNotFoundError("Time slot", time_slot_id)
        return slot

    def validate(
        self,
        *,
        schedule: Schedule,
        assignment: CourseAssignment,
        day: WeekDay,
        slot: TimeSlotRef,
        room: str,
        existing_entry_id: str | None = None,
    ) -> None:
        violation = availability_violation(self.db, assignment, day, slot, self.catalog)
        if violation is not None:
            raise violation

        violation = duplicate_slot(self.db, schedule.id, day, slot, exclude_entry_id=existing_entry_id)
        if violation is not None:
            raise violation

        result = self.detector.check_conflict(
            assignment,
            day,
            slot.id,
            room,
            exclude_entry_id=existing_entry_id,
        )
        result.raise_for_conflict()


def list_entries(db: Session, *, schedule_id: str | None = None) -> list[ScheduleEntry]:
    return list_entries_ordered(db, schedule_id=schedule_id)


def get_entry(db: Session, entry_id: str) -> ScheduleEntry:
    entry = db.get(ScheduleEntry, entry_id)
    if entry is None:
        raise ResourceNotFoundError("Schedule entry", entry_id)
    return entry


def create_entry(
    db: Session,
    payload: ScheduleEntryCreate,
    *,
    catalog: TimeSlotCatalog = time_slot_catalog,
) -> ScheduleEntry:
    validator = ScheduleEntryValidator(db, catalog)
    schedule = validator.require_schedule(payload.schedule_id)
    assignment = validator.require_assignment(payload.course_assignment_id)
    slot = validator.require_time_slot(payload.time_slot_id)

    validator.validate(
        schedule=schedule,
        assignment=assignment,
        day=payload.day_of_week,
        slot=slot,
        room=payload.room,
    )

    entry = ScheduleEntry(
        schedule_id=schedule.id,
        course_assignment_id=assignment.id,
        day_of_week=payload.day_of_week,
        time_slot_id=slot.id,
        room=payload.room,
        session_type=payload.session_type,
    )
    db.add(entry)
    commit_or_raise(db, "create schedule entry")
    db.refresh(entry)
    logger.info(
        "Scheduled %s for %s on %s at %s in %s",
        assignment.course_name,
        assignment.group_name,
        payload.day_of_week.value,
        slot.label,
        payload.room,
    )
    return entry


def update_entry(
    db: Session,
    entry_id: str,
    payload: ScheduleEntryUpdate,
    *,
    catalog: TimeSlotCatalog = time_slot_catalog,
) -> ScheduleEntry:
    entry = get_entry(db, entry_id)
    validator = ScheduleEntryValidator(db, catalog)
    schedule = validator.require_schedule(entry.schedule_id)
    assignment = validator.require_assignment(payload.course_assignment_id or entry.course_assignment_id)
    slot = validator.require_time_slot(payload.time_slot_id or entry.time_slot_id)

    validator.validate(
        schedule=schedule,
        assignment=assignment,
        day=payload.day_of_week,
        slot=slot,
        room=payload.room,
        existing_entry_id=entry.id,
    )

    entry.course_assignment_id = assignment.id
    entry.time_slot_id = slot.id
    entry.day_of_week = payload.day_of_week
    entry.room = payload.room
    entry.session_type = payload.session_type
    commit_or_raise(db, "update schedule entry")
    db.refresh(entry)
    return entry


def delete_entry(db: Session, entry_id: str) -> None:
    entry = get_entry(db, entry_id)
    db.delete(entry)
    commit_or_raise(db, "delete schedule entry")
