from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from academic_scheduler.db.base import Base
from academic_scheduler.models.course_assignment import CourseAssignment
from academic_scheduler.models.time_slot import TimeSlot


class WeekDay(str, Enum):
    monday = "Monday"
    tuesday = "Tuesday"
    wednesday = "Wednesday"
    thursday = "Thursday"
    friday = "Friday"


class SessionType(str, Enum):
    theory = "Theory"
    lab = "Lab"
    combined = "Combined"


class Schedule(Base):
    __tablename__ = "schedules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    group_id: Mapped[str] = mapped_column(String(36), unique=True, index=True, nullable=False)
    academic_year: Mapped[str | None] = mapped_column(String(20), nullable=True)
    term: Mapped[str | None] = mapped_column(String(50), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    entries: Mapped[list[ScheduleEntry]] = relationship(
        back_populates="schedule",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class ScheduleEntry(Base):
    __tablename__ = "schedule_entries"
    __table_args__ = (
        UniqueConstraint(
            "schedule_id",
            "day_of_week",
            "time_slot_id",
            name="uq_schedule_entries_schedule_day_slot",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    schedule_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    course_assignment_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("course_assignments.id"),
        nullable=False,
        index=True,
    )
    day_of_week: Mapped[WeekDay] = mapped_column(SAEnum(WeekDay, name="week_day"), nullable=False)
    time_slot_id: Mapped[int] = mapped_column(Integer, ForeignKey("time_slots.id"), nullable=False)
    room: Mapped[str] = mapped_column(String(100), nullable=False)
    session_type: Mapped[SessionType] = mapped_column(
        SAEnum(SessionType, name="session_type"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    schedule: Mapped[Schedule] = relationship(back_populates="entries")
    course_assignment: Mapped[CourseAssignment] = relationship(lazy="joined")
    time_slot: Mapped[TimeSlot] = relationship(lazy="joined")

    @property
    def time_slot_label(self) -> str | None:
        return self.time_slot.label if self.time_slot is not None else None

    @property
    def course_name(self) -> str | None:
        return self.course_assignment.course_name if self.course_assignment is not None else None

    @property
    def lecturer_name(self) -> str | None:
        return self.course_assignment.lecturer_name if self.course_assignment is not None else None

    @property
    def group_name(self) -> str | None:
        return self.course_assignment.group_name if self.course_assignment is not None else None
