from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import Lock

from sqlalchemy.orm import Session

from academic_scheduler.services.schedule_store import find_all_time_slots, find_or_create_time_slot

logger = logging.getLogger(__name__)

# National anthem, five teaching sessions and the breaks between them.
DEFAULT_TIME_SLOTS: tuple[tuple[str, int], ...] = (
    ("07h:45-08h:00", 0),
    ("08h:00-09h:30", 1),
    ("09h:30-09h:50", 2),
    ("09h:50-11h:30", 3),
    ("11h:30-12h:10", 4),
    ("12h:10-13h:40", 5),
    ("13h:40-13h:50", 6),
    ("13h:50-15h:20", 7),
    ("15h:20-15h:30", 8),
    ("15h:30-17h:00", 9),
)


@dataclass(frozen=True)
class TimeSlotRef:
    id: int
    label: str
    order_index: int


@dataclass(frozen=True)
class SeedSummary:
    created: int
    existing: int

    @property
    def total(self) -> int:
        return self.created + self.existing


@dataclass(frozen=True)
class _CatalogSnapshot:
    ordered: tuple[TimeSlotRef, ...] = ()
    by_label: dict[str, TimeSlotRef] = field(default_factory=dict)
    by_id: dict[int, TimeSlotRef] = field(default_factory=dict)

    @classmethod
    def of(cls, refs: list[TimeSlotRef]) -> _CatalogSnapshot:
        return cls(
            ordered=tuple(refs),
            by_label={ref.label: ref for ref in refs},
            by_id={ref.id: ref for ref in refs},
        )


class TimeSlotCatalog:
    """Process-wide cache of the fixed daily time windows.

    The rows are reference data, so they are loaded once and served from memory
    afterwards. Call ``clear`` after reseeding or when switching databases.
    Readers always see one complete snapshot; loading and clearing replace it
    with a single assignment.
    """

    def __init__(self, slots: tuple[tuple[str, int], ...] = DEFAULT_TIME_SLOTS) -> None:
        self._seed = slots
        self._lock = Lock()
        self._snapshot: _CatalogSnapshot | None = None

    def ensure_seeded(self, db: Session) -> SeedSummary:
        created = 0
        existing = 0
        for label, order_index in self._seed:
            _, was_created = find_or_create_time_slot(db, label=label, order_index=order_index)
            if was_created:
                logger.debug("Created time slot %s (order %d)", label, order_index)
                created += 1
            else:
                existing += 1
        db.commit()
        self.clear()
        logger.info("Time slot catalog ready: %d created, %d existing", created, existing)
        return SeedSummary(created=created, existing=existing)

    def all(self, db: Session) -> list[TimeSlotRef]:
        return list(self._load(db).ordered)

    def resolve(self, db: Session, label: str) -> TimeSlotRef | None:
        return self._load(db).by_label.get(label)

    def resolve_id(self, db: Session, time_slot_id: int) -> TimeSlotRef | None:
        return self._load(db).by_id.get(time_slot_id)

    def clear(self) -> None:
        with self._lock:
            self._snapshot = None

    def _load(self, db: Session) -> _CatalogSnapshot:
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        with self._lock:
            if self._snapshot is not None:
                return self._snapshot
            snapshot = _CatalogSnapshot.of(
                [
                    TimeSlotRef(id=row.id, label=row.label, order_index=row.order_index)
                    for row in find_all_time_slots(db)
                ]
            )
            # An unseeded table is not cached so a later seed is picked up.
            if snapshot.ordered:
                self._snapshot = snapshot
            return snapshot


time_slot_catalog = TimeSlotCatalog()
