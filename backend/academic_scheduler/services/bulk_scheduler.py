"""All-or-nothing creation of many schedule entries.

Every candidate goes through every check and all problems are collected before
anything is written, so a caller gets the complete list in one response. The
container row is locked for the duration of validate + insert so concurrent
batches for the same schedule cannot interleave.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session

from academic_scheduler.core.config import get_settings
from academic_scheduler.core.exceptions import (
    BatchErrors,
    ErrorKind,
    ResourceNotFoundError,
    ScheduleError,
    ScheduleValidationError,
)
from academic_scheduler.models.course_assignment import CourseAssignment
from academic_scheduler.models.schedule import ScheduleEntry
from academic_scheduler.schemas.schedule import ScheduleEntryCandidate
from academic_scheduler.services.conflicts import ConflictDetector, Placement, PlacementIndex
from academic_scheduler.services.schedule_entries import availability_violation, commit_or_raise
from academic_scheduler.services.schedule_store import (
    find_assignments,
    find_entries,
    find_entries_in_slots,
    find_schedule,
)
from academic_scheduler.services.time_slots import TimeSlotCatalog, TimeSlotRef, time_slot_catalog

logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    errors: list[dict] = field(default_factory=list)

    def add(self, index: int, kind: ErrorKind, message: str, details: dict | None = None, **extra: Any) -> None:
        item = {"index": index, "kind": kind.value, "message": message, "details": details or {}}
        item.update(extra)
        self.errors.append(item)

    def add_error(self, index: int, error: ScheduleError) -> None:
        self.add(index, error.kind, error.message, error.details)

    def grouped(self) -> list[dict]:
        return sorted(self.errors, key=lambda item: (item["index"], item["kind"]))

    def __bool__(self) -> bool:
        return bool(self.errors)


def _format_validation_error(exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return messages


class BulkScheduler:
    def __init__(
        self,
        db: Session,
        catalog: TimeSlotCatalog = time_slot_catalog,
        *,
        max_entries: int | None = None,
    ) -> None:
        self.db = db
        self.catalog = catalog
        self.detector = ConflictDetector(db, catalog)
        self.max_entries = max_entries if max_entries is not None else get_settings().bulk_max_entries

    def create_bulk(self, schedule_id: str, candidates: list[Any]) -> list[ScheduleEntry]:
        if not candidates:
            raise ScheduleValidationError("Required entries array with at least one entry")
        if len(candidates) > self.max_entries:
            raise ScheduleValidationError(
                f"A bulk request may contain at most {self.max_entries} entries",
                details={"count": len(candidates), "max_entries": self.max_entries},
            )

        schedule = find_schedule(self.db, schedule_id, lock=True)
        if schedule is None:
            self.db.rollback()
            raise ResourceNotFoundError("Schedule", schedule_id)

        report = BatchReport()
        parsed = self._validate_structure(candidates, report)
        slots = self._resolve_slots(parsed, report)
        duplicates = self._check_duplicates_in_request(parsed, slots, report)
        self._check_existing_in_schedule(schedule.id, parsed, slots, report)
        assignments = self._resolve_assignments(parsed, report)
        self._check_availability(parsed, slots, assignments, report)
        self._check_conflicts(parsed, slots, assignments, duplicates, report)

        if report:
            # Release the container lock without writing anything.
            self.db.rollback()
            logger.info(
                "Rejected bulk schedule for %s: %d problem(s) across %d candidate(s)",
                schedule_id,
                len(report.errors),
                len(candidates),
            )
            raise BatchErrors(
                f"{len(report.errors)} problem(s) found; no entries were created",
                errors=report.grouped(),
            )

        entries = [
            ScheduleEntry(
                schedule_id=schedule.id,
                course_assignment_id=candidate.course_assignment_id,
                day_of_week=candidate.day_of_week,
                time_slot_id=candidate.time_slot_id,
                room=candidate.room,
                session_type=candidate.session_type,
            )
            for _, candidate in sorted(parsed.items())
        ]
        self.db.add_all(entries)
        commit_or_raise(self.db, "create bulk schedule entries")
        for entry in entries:
            self.db.refresh(entry)
        logger.info("Created %d schedule entries for schedule %s", len(entries), schedule.id)
        return entries

    def _validate_structure(
        self,
        candidates: list[Any],
        report: BatchReport,
    ) -> dict[int, ScheduleEntryCandidate]:
        parsed: dict[int, ScheduleEntryCandidate] = {}
        for index, raw in enumerate(candidates):
            try:
                parsed[index] = ScheduleEntryCandidate.model_validate(raw)
            except ValidationError as exc:
                report.add(
                    index,
                    ErrorKind.validation_error,
                    "Candidate is malformed",
                    {"errors": _format_validation_error(exc)},
                )
        return parsed

    def _resolve_slots(
        self,
        parsed: dict[int, ScheduleEntryCandidate],
        report: BatchReport,
    ) -> dict[int, TimeSlotRef]:
        slots: dict[int, TimeSlotRef] = {}
        for index, candidate in parsed.items():
            slot = self.catalog.resolve_id(self.db, candidate.time_slot_id)
            if slot is None:
                report.add_error(index, ResourceNotFoundError("Time slot", candidate.time_slot_id))
                continue
            slots[index] = slot
        return slots

    def _check_duplicates_in_request(
        self,
        parsed: dict[int, ScheduleEntryCandidate],
        slots: dict[int, TimeSlotRef],
        report: BatchReport,
    ) -> set[int]:
        by_key: dict[tuple, list[int]] = defaultdict(list)
        for index in sorted(slots):
            by_key[(parsed[index].day_of_week, slots[index].id)].append(index)

        duplicates: set[int] = set()
        for (day, _), indices in by_key.items():
            label = slots[indices[0]].label
            first = indices[0]
            for other in indices[1:]:
                duplicates.add(other)
                report.add(
                    other,
                    ErrorKind.duplicate_slot,
                    f"Candidates {first} and {other} both target {day.value} at {label}",
                    {"day": day.value, "time_slot": label},
                    indices=[first, other],
                )
        return duplicates

    def _check_existing_in_schedule(
        self,
        schedule_id: str,
        parsed: dict[int, ScheduleEntryCandidate],
        slots: dict[int, TimeSlotRef],
        report: BatchReport,
    ) -> None:
        existing = {
            (entry.day_of_week, entry.time_slot_id): entry.id
            for entry in find_entries(self.db, schedule_id=schedule_id)
        }
        for index, slot in sorted(slots.items()):
            day = parsed[index].day_of_week
            existing_id = existing.get((day, slot.id))
            if existing_id is None:
                continue
            report.add(
                index,
                ErrorKind.duplicate_slot,
                f"A schedule entry already exists for {day.value} at {slot.label} in this schedule.",
                {"existing_entry_id": existing_id, "day": day.value, "time_slot": slot.label},
            )

    def _resolve_assignments(
        self,
        parsed: dict[int, ScheduleEntryCandidate],
        report: BatchReport,
    ) -> dict[str, CourseAssignment]:
        assignments = find_assignments(self.db, (item.course_assignment_id for item in parsed.values()))
        for index, candidate in sorted(parsed.items()):
            if candidate.course_assignment_id not in assignments:
                report.add_error(index, ResourceNotFoundError("Course assignment", candidate.course_assignment_id))
        return assignments

    def _check_availability(
        self,
        parsed: dict[int, ScheduleEntryCandidate],
        slots: dict[int, TimeSlotRef],
        assignments: dict[str, CourseAssignment],
        report: BatchReport,
    ) -> None:
        for index, slot in sorted(slots.items()):
            candidate = parsed[index]
            assignment = assignments.get(candidate.course_assignment_id)
            if assignment is None:
                continue
            violation = availability_violation(self.db, assignment, candidate.day_of_week, slot, self.catalog)
            if violation is not None:
                report.add_error(index, violation)

    def _check_conflicts(
        self,
        parsed: dict[int, ScheduleEntryCandidate],
        slots: dict[int, TimeSlotRef],
        assignments: dict[str, CourseAssignment],
        duplicates: set[int],
        report: BatchReport,
    ) -> None:
        keys = {(parsed[index].day_of_week, slot.id) for index, slot in slots.items()}
        # One read for every persisted entry in the touched slots; earlier
        # candidates are layered on top as they are checked. All candidates
        # share one schedule, so an overlay hit is always an intra-batch
        # duplicate, which is already reported and skips the overlay.
        index = PlacementIndex.from_entries(find_entries_in_slots(self.db, keys))

        for position, slot in sorted(slots.items()):
            candidate = parsed[position]
            assignment = assignments.get(candidate.course_assignment_id)
            if assignment is None:
                continue
            proposed = Placement.for_assignment(
                assignment,
                day=candidate.day_of_week,
                time_slot_id=slot.id,
                room=candidate.room,
                candidate_index=position,
            )
            # A candidate already reported as sharing its slot with an earlier
            # one is only compared with persisted entries.
            result = self.detector.check_against(proposed, index, persisted_only=position in duplicates)
            if result.has_conflict:
                report.add(position, ErrorKind(result.kind.value), result.message, result.detail)
            index.add(proposed)


def create_bulk(
    db: Session,
    schedule_id: str,
    candidates: list[Any],
    *,
    catalog: TimeSlotCatalog = time_slot_catalog,
) -> list[ScheduleEntry]:
    return BulkScheduler(db, catalog).create_bulk(schedule_id, candidates)
