from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academic_scheduler.api.deps import get_db
from academic_scheduler.core.exceptions import ResourceNotFoundError
from academic_scheduler.schemas.schedule import (
    AssignmentAvailabilityOut,
    AvailabilityWindowOut,
    TimeSlotOut,
)
from academic_scheduler.services.availability import format_availability, parse_availability
from academic_scheduler.services.schedule_store import find_assignment
from academic_scheduler.services.time_slots import time_slot_catalog

router = APIRouter()


@router.get("/time-slots", response_model=list[TimeSlotOut])
def list_time_slots(db: Session = Depends(get_db)) -> list[TimeSlotOut]:
    return [
        TimeSlotOut(id=slot.id, label=slot.label, order_index=slot.order_index)
        for slot in time_slot_catalog.all(db)
    ]


@router.get("/course-assignments/{assignment_id}/availability", response_model=AssignmentAvailabilityOut)
def get_assignment_availability(assignment_id: str, db: Session = Depends(get_db)) -> AssignmentAvailabilityOut:
    assignment = find_assignment(db, assignment_id)
    if assignment is None:
        raise ResourceNotFoundError("Course assignment", assignment_id)

    spec = parse_availability(assignment.availability)
    windows = []
    for window in spec:
        slot = time_slot_catalog.resolve(db, window.time_slot_label)
        windows.append(
            AvailabilityWindowOut(
                day=window.day,
                session=window.session,
                time_slot_label=window.time_slot_label,
                time_slot_id=slot.id if slot is not None else None,
            )
        )
    return AssignmentAvailabilityOut(
        course_assignment_id=assignment.id,
        availability=assignment.availability,
        normalized=format_availability(spec),
        constrained=not spec.is_unconstrained,
        windows=windows,
    )
