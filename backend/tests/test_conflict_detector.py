import pytest

from academic_scheduler.core.exceptions import LecturerConflictError, ResourceNotFoundError, RoomConflictError
from academic_scheduler.models.schedule import WeekDay
from academic_scheduler.services.conflicts import (
    ConflictDetector,
    ConflictKind,
    Placement,
    PlacementIndex,
    classify_pair,
    is_combined_session,
    normalize_room,
)


def _placement(**overrides) -> Placement:
    values = {
        "course_id": "c1",
        "lecturer_id": "l1",
        "group_id": "g1",
        "room": "Room 101",
        "day": WeekDay.monday,
        "time_slot_id": 2,
    }
    values.update(overrides)
    return Placement(**values)


def test_combined_session_needs_same_course_lecturer_room_and_other_group():
    base = _placement()

    assert is_combined_session(base, _placement(group_id="g2"))
    assert not is_combined_session(base, _placement())
    assert not is_combined_session(base, _placement(group_id="g2", room="Room 202"))
    assert not is_combined_session(base, _placement(group_id="g2", lecturer_id="l2"))
    assert not is_combined_session(base, _placement(group_id="g2", course_id="c2"))


def test_classify_pair_rules():
    base = _placement()

    assert classify_pair(base, _placement(group_id="g2")) is ConflictKind.none
    assert classify_pair(base, _placement(course_id="c2", room="Room 202")) is ConflictKind.lecturer
    assert classify_pair(base, _placement(course_id="c2", lecturer_id="l2")) is ConflictKind.room
    assert classify_pair(base, _placement(lecturer_id="l2", group_id="g2")) is ConflictKind.room
    assert classify_pair(base, _placement(course_id="c2", lecturer_id="l2", room="Room 202")) is ConflictKind.none


def test_lecturer_conflict_takes_precedence_over_room():
    assert classify_pair(_placement(), _placement(course_id="c2")) is ConflictKind.lecturer


def test_missing_lecturer_never_matches():
    proposed = _placement(lecturer_id=None, room="Room 202")
    other = _placement(lecturer_id=None, course_id="c2")

    assert classify_pair(proposed, other) is ConflictKind.none
    assert not is_combined_session(_placement(lecturer_id=None), _placement(lecturer_id=None, group_id="g2"))


def test_room_names_compare_case_and_space_insensitively():
    assert normalize_room("  room   101 ") == normalize_room("Room 101")
    assert classify_pair(_placement(room="ROOM  101"), _placement(course_id="c2", lecturer_id="l2")) is ConflictKind.room


def test_placement_index_filters():
    persisted = _placement(entry_id="e1")
    pending = _placement(candidate_index=0, course_id="c2")
    index = PlacementIndex([persisted, pending, _placement(day=WeekDay.tuesday)])

    assert len(index) == 3
    assert index.at(WeekDay.monday, 2) == [persisted, pending]
    assert index.at(WeekDay.monday, 2, exclude_entry_id="e1") == [pending]
    assert index.at(WeekDay.monday, 2, persisted_only=True) == [persisted]
    assert index.at(WeekDay.friday, 2) == []


def test_detects_lecturer_conflict_regardless_of_room(db, slot_ids, make_assignment, make_schedule, make_entry):
    first = make_assignment(course="Algebra", lecturer="Dr Smith", group="Group 1")
    second = make_assignment(course="Geometry", lecturer="Dr Smith", group="Group 2")
    entry = make_entry(make_schedule("Group 1"), first, time_slot_id=slot_ids["S1"], room="Room 101")

    result = ConflictDetector(db).check_conflict(second, WeekDay.monday, slot_ids["S1"], "Room 909")

    assert result.kind is ConflictKind.lecturer
    assert result.has_conflict
    assert "Dr Smith" in result.message
    assert "Algebra" in result.message
    assert "08h:00-09h:30" in result.message
    assert result.detail["conflicting_entry_id"] == entry.id
    assert result.detail["group_name"] == "Group 1"
    with pytest.raises(LecturerConflictError):
        result.raise_for_conflict()


def test_detects_room_conflict(db, slot_ids, make_assignment, make_schedule, make_entry):
    first = make_assignment(course="Algebra", lecturer="Dr Smith", group="Group 1")
    second = make_assignment(course="Biology", lecturer="Dr Jones", group="Group 2")
    make_entry(make_schedule("Group 1"), first, time_slot_id=slot_ids["S2"], room="Room 101")

    result = ConflictDetector(db).check_conflict(second, WeekDay.monday, slot_ids["S2"], "ROOM  101 ")

    assert result.kind is ConflictKind.room
    assert result.message.startswith("Room Room 101 is already used by Algebra for Group 1")
    with pytest.raises(RoomConflictError):
        result.raise_for_conflict()


def test_combined_session_is_not_a_conflict(db, slot_ids, make_assignment, make_schedule, make_entry):
    first = make_assignment(course="Algebra", lecturer="Dr Smith", group="Group 1")
    second = make_assignment(course="Algebra", lecturer="Dr Smith", group="Group 2")
    make_entry(make_schedule("Group 1"), first, time_slot_id=slot_ids["S3"], room="Amphi A")

    result = ConflictDetector(db).check_conflict(second.id, WeekDay.monday, slot_ids["S3"], "Amphi A")

    assert result.kind is ConflictKind.none
    assert not result.has_conflict
    result.raise_for_conflict()


def test_other_days_and_slots_do_not_conflict(db, slot_ids, make_assignment, make_schedule, make_entry):
    first = make_assignment(course="Algebra", lecturer="Dr Smith", group="Group 1")
    second = make_assignment(course="Geometry", lecturer="Dr Smith", group="Group 2")
    make_entry(make_schedule("Group 1"), first, time_slot_id=slot_ids["S1"], room="Room 101")
    detector = ConflictDetector(db)

    assert detector.check_conflict(second, WeekDay.tuesday, slot_ids["S1"], "Room 101").kind is ConflictKind.none
    assert detector.check_conflict(second, WeekDay.monday, slot_ids["S2"], "Room 101").kind is ConflictKind.none


def test_unknown_assignment_reports_not_found(db, slot_ids):
    result = ConflictDetector(db).check_conflict("missing-id", WeekDay.monday, slot_ids["S1"], "Room 101")

    assert result.kind is ConflictKind.not_found
    with pytest.raises(ResourceNotFoundError):
        result.raise_for_conflict()


def test_excluded_entry_is_ignored(db, slot_ids, make_assignment, make_schedule, make_entry):
    assignment = make_assignment(course="Algebra", lecturer="Dr Smith")
    entry = make_entry(make_schedule(), assignment, time_slot_id=slot_ids["S4"], room="Room 101")

    result = ConflictDetector(db).check_conflict(
        assignment,
        WeekDay.monday,
        slot_ids["S4"],
        "Room 303",
        exclude_entry_id=entry.id,
    )

    assert result.kind is ConflictKind.none
