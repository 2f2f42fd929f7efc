import threading

from academic_scheduler.services.availability import SESSION_TO_TIME_SLOT
from academic_scheduler.services.time_slots import DEFAULT_TIME_SLOTS, TimeSlotCatalog, time_slot_catalog


def test_seeding_is_idempotent(db):
    # The db fixture already seeded once.
    summary = time_slot_catalog.ensure_seeded(db)

    assert summary.created == 0
    assert summary.existing == len(DEFAULT_TIME_SLOTS) == 10
    assert summary.total == 10
    assert len(time_slot_catalog.all(db)) == 10


def test_catalog_is_ordered_by_order_index(db):
    labels = [slot.label for slot in time_slot_catalog.all(db)]

    assert labels == [label for label, _ in DEFAULT_TIME_SLOTS]
    assert labels[0] == "07h:45-08h:00"
    assert labels[-1] == "15h:30-17h:00"


def test_every_session_maps_to_a_catalog_slot(db):
    for label in SESSION_TO_TIME_SLOT.values():
        slot = time_slot_catalog.resolve(db, label)
        assert slot is not None
        assert time_slot_catalog.resolve_id(db, slot.id) == slot


def test_unknown_lookups_return_none(db):
    assert time_slot_catalog.resolve(db, "18h:00-19h:00") is None
    assert time_slot_catalog.resolve_id(db, 9999) is None


def test_empty_table_is_not_cached(session_factory):
    catalog = TimeSlotCatalog()
    session = session_factory()
    try:
        assert catalog.all(session) == []

        summary = catalog.ensure_seeded(session)
        assert summary.created == 10
        assert len(catalog.all(session)) == 10
    finally:
        session.close()


def test_cleared_cache_never_serves_a_partial_view(db, slot_ids):
    snapshot = time_slot_catalog._load(db)
    time_slot_catalog.clear()

    assert len(snapshot.ordered) == 10
    assert snapshot.by_id[slot_ids["S1"]].label == "08h:00-09h:30"


def test_lookups_stay_valid_while_another_thread_clears(db, slot_ids):
    stop = threading.Event()

    def keep_clearing():
        while not stop.is_set():
            time_slot_catalog.clear()

    worker = threading.Thread(target=keep_clearing)
    worker.start()
    try:
        misses = [
            attempt
            for attempt in range(300)
            if time_slot_catalog.resolve_id(db, slot_ids["S2"]) is None
        ]
    finally:
        stop.set()
        worker.join()

    assert misses == []
