"""Availability strings attached to course assignments.

Staff type availability as free text of the form::

    Monday: S1, S2; Wednesday: S3, S4, S5; Friday: S4, S5

Each ``Sx`` is one of the five daily teaching sessions. Parsing is lenient:
unknown days or session tokens are dropped with a warning instead of rejecting
the whole string. An empty result means the assignment has no availability
constraint at all.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy.orm import Session

from academic_scheduler.models.schedule import WeekDay
from academic_scheduler.services.time_slots import TimeSlotCatalog

logger = logging.getLogger(__name__)

SESSION_TO_TIME_SLOT: dict[str, str] = {
    "S1": "08h:00-09h:30",
    "S2": "09h:50-11h:30",
    "S3": "12h:10-13h:40",
    "S4": "13h:50-15h:20",
    "S5": "15h:30-17h:00",
}

WEEKDAY_NAMES: dict[str, WeekDay] = {day.value: day for day in WeekDay}


@dataclass(frozen=True)
class AvailabilityWindow:
    day: WeekDay
    session: str
    time_slot_label: str


@dataclass(frozen=True)
class AvailabilitySpec:
    """Parsed, ordered and duplicate-free availability windows."""

    windows: tuple[AvailabilityWindow, ...] = ()

    def __iter__(self) -> Iterator[AvailabilityWindow]:
        return iter(self.windows)

    def __len__(self) -> int:
        return len(self.windows)

    @property
    def is_unconstrained(self) -> bool:
        return not self.windows


def _normalize_day(raw: str) -> str:
    return raw[:1].upper() + raw[1:].lower()


@lru_cache(maxsize=1024)
def parse_availability(text: str | None) -> AvailabilitySpec:
    if not text or not isinstance(text, str):
        return AvailabilitySpec()

    windows: list[AvailabilityWindow] = []
    seen: set[tuple[WeekDay, str]] = set()

    for block in text.split(";"):
        block = block.strip()
        if not block:
            continue
        day_part, separator, sessions_part = block.partition(":")
        day_part = day_part.strip()
        sessions_part = sessions_part.strip()
        if not separator or not day_part or not sessions_part:
            logger.warning("Skipping malformed availability block %r", block)
            continue

        day = WEEKDAY_NAMES.get(_normalize_day(day_part))
        if day is None:
            logger.warning("Skipping invalid availability day %r", day_part)
            continue

        for token in sessions_part.split(","):
            session = token.strip().upper()
            if not session:
                continue
            label = SESSION_TO_TIME_SLOT.get(session)
            if label is None:
                logger.warning("Skipping invalid availability session %r for %s", session, day.value)
                continue
            if (day, session) in seen:
                continue
            seen.add((day, session))
            windows.append(AvailabilityWindow(day=day, session=session, time_slot_label=label))

    return AvailabilitySpec(windows=tuple(windows))


def resolve_slot_ids(
    db: Session,
    spec: AvailabilitySpec,
    catalog: TimeSlotCatalog,
) -> frozenset[tuple[WeekDay, int]]:
    """Map parsed windows onto catalog ids; labels missing from the catalog are dropped."""
    resolved: set[tuple[WeekDay, int]] = set()
    for window in spec:
        slot = catalog.resolve(db, window.time_slot_label)
        if slot is None:
            logger.warning("Time slot %s not found in catalog", window.time_slot_label)
            continue
        resolved.add((window.day, slot.id))
    return frozenset(resolved)


def format_availability(spec: AvailabilitySpec) -> str:
    grouped: dict[WeekDay, list[str]] = {}
    for window in spec:
        grouped.setdefault(window.day, []).append(window.session)
    return "; ".join(f"{day.value}: {', '.join(sessions)}" for day, sessions in grouped.items())
