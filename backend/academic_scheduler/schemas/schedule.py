from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from academic_scheduler.models.schedule import SessionType, WeekDay


def _strip_room(value: str) -> str:
    room = value.strip()
    if not room:
        raise ValueError("room must not be blank")
    return room


class TimeSlotOut(BaseModel):
    id: int
    label: str
    order_index: int

    model_config = {"from_attributes": True}


class ScheduleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    group_id: str = Field(min_length=1, max_length=36)
    academic_year: str | None = Field(default=None, max_length=20)
    term: str | None = Field(default=None, max_length=50)
    notes: str | None = None


class ScheduleUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    academic_year: str | None = Field(default=None, max_length=20)
    term: str | None = Field(default=None, max_length=50)
    notes: str | None = None


class ScheduleOut(ScheduleCreate):
    id: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class ScheduleEntryCandidate(BaseModel):
    """One placement inside a bulk request; the schedule comes from the request."""

    course_assignment_id: str = Field(min_length=1, max_length=36)
    day_of_week: WeekDay
    time_slot_id: int = Field(ge=1)
    room: str = Field(min_length=1, max_length=100)
    session_type: SessionType

    @field_validator("room")
    @classmethod
    def validate_room(cls, value: str) -> str:
        return _strip_room(value)


class ScheduleEntryCreate(ScheduleEntryCandidate):
    schedule_id: str = Field(min_length=1, max_length=36)


class ScheduleEntryUpdate(BaseModel):
    course_assignment_id: str | None = Field(default=None, min_length=1, max_length=36)
    time_slot_id: int | None = Field(default=None, ge=1)
    day_of_week: WeekDay
    room: str = Field(min_length=1, max_length=100)
    session_type: SessionType

    @field_validator("room")
    @classmethod
    def validate_room(cls, value: str) -> str:
        return _strip_room(value)


class ScheduleEntryOut(BaseModel):
    id: str
    schedule_id: str
    course_assignment_id: str
    day_of_week: WeekDay
    time_slot_id: int
    time_slot_label: str | None = None
    room: str
    session_type: SessionType
    course_name: str | None = None
    lecturer_name: str | None = None
    group_name: str | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class BulkScheduleRequest(BaseModel):
    schedule_id: str = Field(min_length=1, max_length=36)
    # Items stay loosely typed here so each one is validated on its own and
    # every malformed candidate is reported with its position.
    entries: list[Any] = Field(default_factory=list)


class BulkScheduleOut(BaseModel):
    message: str
    count: int
    entries: list[ScheduleEntryOut]


class AvailabilityWindowOut(BaseModel):
    day: WeekDay
    session: str
    time_slot_label: str
    time_slot_id: int | None = None


class AssignmentAvailabilityOut(BaseModel):
    course_assignment_id: str
    availability: str | None
    normalized: str
    constrained: bool
    windows: list[AvailabilityWindowOut]
