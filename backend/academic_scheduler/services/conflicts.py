"""Lecturer and room conflict rules for timetable placements.

Every placement that shares a (day, time slot) with the proposed one is judged
on its own:

* same course, lecturer and room for a different group is a combined session
  and never conflicts;
* the same lecturer teaching a different course is a lecturer conflict;
* the same room used by a different course or lecturer is a room conflict.

The rules run against a :class:`PlacementIndex`, which the single-entry path
fills from storage and the bulk path fills from storage plus the candidates of
the batch that were checked before the current one.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy.orm import Session

from academic_scheduler.core.exceptions import (
    LecturerConflictError,
    ResourceNotFoundError,
    RoomConflictError,
)
from academic_scheduler.models.course_assignment import CourseAssignment
from academic_scheduler.models.schedule import ScheduleEntry, WeekDay
from academic_scheduler.services.schedule_store import find_assignment, find_entries
from academic_scheduler.services.time_slots import TimeSlotCatalog, time_slot_catalog


class ConflictKind(str, Enum):
    none = "NoConflict"
    lecturer = "LecturerConflict"
    room = "RoomConflict"
    not_found = "NotFound"


def normalize_room(room: str) -> str:
    return " ".join(room.split()).casefold()


@dataclass(frozen=True)
class Placement:
    course_id: str
    lecturer_id: str | None
    group_id: str
    room: str
    day: WeekDay
    time_slot_id: int
    course_name: str | None = None
    lecturer_name: str | None = None
    group_name: str | None = None
    entry_id: str | None = None
    candidate_index: int | None = None

    @classmethod
    def for_assignment(
        cls,
        assignment: CourseAssignment,
        *,
        day: WeekDay,
        time_slot_id: int,
        room: str,
        entry_id: str | None = None,
        candidate_index: int | None = None,
    ) -> Placement:
        return cls(
            course_id=assignment.course_id,
            lecturer_id=assignment.lecturer_id,
            group_id=assignment.group_id,
            room=room,
            day=day,
            time_slot_id=time_slot_id,
            course_name=assignment.course_name,
            lecturer_name=assignment.lecturer_name,
            group_name=assignment.group_name,
            entry_id=entry_id,
            candidate_index=candidate_index,
        )

    @classmethod
    def from_entry(cls, entry: ScheduleEntry) -> Placement:
        return cls.for_assignment(
            entry.course_assignment,
            day=entry.day_of_week,
            time_slot_id=entry.time_slot_id,
            room=entry.room,
            entry_id=entry.id,
        )

    @property
    def slot_key(self) -> tuple[WeekDay, int]:
        return (self.day, self.time_slot_id)


def same_course(a: Placement, b: Placement) -> bool:
    return a.course_id == b.course_id


def same_lecturer(a: Placement, b: Placement) -> bool:
    # An unassigned lecturer is nobody in particular, so it never collides.
    return a.lecturer_id is not None and a.lecturer_id == b.lecturer_id


def same_room(a: Placement, b: Placement) -> bool:
    return normalize_room(a.room) == normalize_room(b.room)


def is_combined_session(a: Placement, b: Placement) -> bool:
    """One lecture delivered jointly to two groups."""
    return same_course(a, b) and same_lecturer(a, b) and same_room(a, b) and a.group_id != b.group_id


def classify_pair(proposed: Placement, existing: Placement) -> ConflictKind:
    if is_combined_session(proposed, existing):
        return ConflictKind.none
    if same_lecturer(proposed, existing) and not same_course(proposed, existing):
        return ConflictKind.lecturer
    if same_room(proposed, existing) and not (
        same_course(proposed, existing) and same_lecturer(proposed, existing)
    ):
        return ConflictKind.room
    return ConflictKind.none


class PlacementIndex:
    """Placements bucketed by (day, time slot)."""

    def __init__(self, placements: Iterable[Placement] = ()) -> None:
        self._buckets: dict[tuple[WeekDay, int], list[Placement]] = defaultdict(list)
        for placement in placements:
            self.add(placement)

    @classmethod
    def from_entries(cls, entries: Iterable[ScheduleEntry]) -> PlacementIndex:
        return cls(Placement.from_entry(entry) for entry in entries)

    def add(self, placement: Placement) -> None:
        self._buckets[placement.slot_key].append(placement)

    def at(
        self,
        day: WeekDay,
        time_slot_id: int,
        *,
        exclude_entry_id: str | None = None,
        persisted_only: bool = False,
    ) -> list[Placement]:
        bucket = self._buckets.get((day, time_slot_id), [])
        return [
            item
            for item in bucket
            if (exclude_entry_id is None or item.entry_id != exclude_entry_id)
            and not (persisted_only and item.entry_id is None)
        ]

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())


@dataclass(frozen=True)
class ConflictResult:
    kind: ConflictKind
    message: str = ""
    detail: dict = field(default_factory=dict)

    @property
    def has_conflict(self) -> bool:
        return self.kind is not ConflictKind.none

    def raise_for_conflict(self) -> None:
        if self.kind is ConflictKind.lecturer:
            raise LecturerConflictError(self.message, details=self.detail)
        if self.kind is ConflictKind.room:
            raise RoomConflictError(self.message, details=self.detail)
        if self.kind is ConflictKind.not_found:
            raise ResourceNotFoundError(
                "Course assignment",
                self.detail.get("course_assignment_id"),
            )


NO_CONFLICT = ConflictResult(kind=ConflictKind.none)


def find_conflict(proposed: Placement, existing: Iterable[Placement]) -> tuple[ConflictKind, Placement | None]:
    for candidate in existing:
        kind = classify_pair(proposed, candidate)
        if kind is not ConflictKind.none:
            return kind, candidate
    return ConflictKind.none, None


class ConflictDetector:
    def __init__(self, db: Session, catalog: TimeSlotCatalog = time_slot_catalog) -> None:
        self.db = db
        self.catalog = catalog

    def check_conflict(
        self,
        assignment: CourseAssignment | str,
        day: WeekDay,
        time_slot_id: int,
        room: str,
        exclude_entry_id: str | None = None,
    ) -> ConflictResult:
        if isinstance(assignment, str):
            assignment_id = assignment
            assignment = find_assignment(self.db, assignment_id)
            if assignment is None:
                return ConflictResult(
                    kind=ConflictKind.not_found,
                    message=f"Course assignment {assignment_id} not found",
                    detail={"course_assignment_id": assignment_id},
                )

        entries = find_entries(
            self.db,
            day=day,
            time_slot_id=time_slot_id,
            exclude_entry_id=exclude_entry_id,
        )
        proposed = Placement.for_assignment(
            assignment, day=day, time_slot_id=time_slot_id, room=room, entry_id=exclude_entry_id
        )
        return self.check_against(proposed, PlacementIndex.from_entries(entries))

    def check_against(
        self,
        proposed: Placement,
        index: PlacementIndex,
        *,
        persisted_only: bool = False,
    ) -> ConflictResult:
        existing = index.at(
            proposed.day,
            proposed.time_slot_id,
            exclude_entry_id=proposed.entry_id,
            persisted_only=persisted_only,
        )
        kind, other = find_conflict(proposed, existing)
        if other is None:
            return NO_CONFLICT
        return ConflictResult(
            kind=kind,
            message=self._describe(kind, proposed, other),
            detail=self._detail(other),
        )

    def _slot_label(self, time_slot_id: int) -> str:
        slot = self.catalog.resolve_id(self.db, time_slot_id)
        return slot.label if slot is not None else str(time_slot_id)

    def _describe(self, kind: ConflictKind, proposed: Placement, other: Placement) -> str:
        when = f"{other.day.value} at {self._slot_label(other.time_slot_id)}"
        course = other.course_name or other.course_id
        group = other.group_name or other.group_id
        if kind is ConflictKind.lecturer:
            lecturer = other.lecturer_name or other.lecturer_id
            return f"Lecturer {lecturer} already teaches {course} for {group} on {when} in {other.room}"
        return f"Room {other.room} is already used by {course} for {group} on {when}"

    def _detail(self, other: Placement) -> dict:
        detail = {
            "day": other.day.value,
            "time_slot_id": other.time_slot_id,
            "time_slot": self._slot_label(other.time_slot_id),
            "room": other.room,
            "course_id": other.course_id,
            "course_name": other.course_name,
            "lecturer_id": other.lecturer_id,
            "lecturer_name": other.lecturer_name,
            "group_id": other.group_id,
            "group_name": other.group_name,
        }
        if other.entry_id is not None:
            detail["conflicting_entry_id"] = other.entry_id
        if other.candidate_index is not None:
            detail["conflicting_index"] = other.candidate_index
        return detail
