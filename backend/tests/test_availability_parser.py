import logging

from academic_scheduler.models.schedule import WeekDay
from academic_scheduler.services.availability import (
    AvailabilitySpec,
    SESSION_TO_TIME_SLOT,
    format_availability,
    parse_availability,
    resolve_slot_ids,
)
from academic_scheduler.services.time_slots import time_slot_catalog


def test_parses_days_and_sessions_into_windows():
    spec = parse_availability("Monday: S1, S2; Wednesday: S3")

    assert [(w.day, w.session, w.time_slot_label) for w in spec] == [
        (WeekDay.monday, "S1", "08h:00-09h:30"),
        (WeekDay.monday, "S2", "09h:50-11h:30"),
        (WeekDay.wednesday, "S3", "12h:10-13h:40"),
    ]
    assert len(spec) == 3


def test_parsing_is_deterministic_and_duplicate_free():
    text = "monday: s1, S1 ,s2; MONDAY: S2; Friday: S5"

    first = parse_availability(text)
    second = parse_availability(text)

    assert first == second
    assert list(first) == list(second)
    assert len({(window.day, window.session) for window in first}) == len(first) == 3


def test_normalizes_case_and_whitespace():
    spec = parse_availability("  tuesday :  s4 ,s5  ;  ")

    assert [(window.day, window.session, window.time_slot_label) for window in spec] == [
        (WeekDay.tuesday, "S4", SESSION_TO_TIME_SLOT["S4"]),
        (WeekDay.tuesday, "S5", SESSION_TO_TIME_SLOT["S5"]),
    ]


def test_invalid_tokens_are_skipped_with_warning(caplog):
    # A different string than elsewhere so the memoized result is not reused.
    text = "Funday: S1; Monday: S1, S9, , X; Saturday: S2; Thursday S3; Friday: S2"

    with caplog.at_level(logging.WARNING, logger="academic_scheduler.services.availability"):
        spec = parse_availability(text)

    assert [(w.day, w.session) for w in spec] == [
        (WeekDay.monday, "S1"),
        (WeekDay.friday, "S2"),
    ]
    messages = " ".join(record.getMessage() for record in caplog.records)
    assert "Funday" in messages
    assert "S9" in messages
    assert "Saturday" in messages


def test_empty_input_means_unconstrained():
    for value in (None, "", "   ", ";;"):
        spec = parse_availability(value)
        assert spec == AvailabilitySpec()
        assert spec.is_unconstrained


def test_only_the_first_colon_separates_day_and_sessions():
    spec = parse_availability("Monday: S1: S2")

    # "S1: S2" is a single unknown token once split on commas.
    assert spec.is_unconstrained


def test_format_round_trips_to_canonical_form():
    spec = parse_availability("wednesday: s3,s4; monday: s1")

    assert format_availability(spec) == "Wednesday: S3, S4; Monday: S1"


def test_resolve_slot_ids_uses_the_catalog(db, slot_ids):
    spec = parse_availability("Monday: S1; Thursday: S5")

    resolved = resolve_slot_ids(db, spec, time_slot_catalog)

    assert resolved == frozenset({(WeekDay.monday, slot_ids["S1"]), (WeekDay.thursday, slot_ids["S5"])})
