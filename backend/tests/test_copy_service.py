from datetime import date

import pytest

from tutorgrid.core.exceptions import InvalidRequestError
from tutorgrid.schemas.assignment import AssignmentCreate, StudentRef, TeacherRef
from tutorgrid.services import assignments
from tutorgrid.services.copy_service import copy_day, copy_week
from tutorgrid.services.directory import students, teachers

MONDAY = date(2024, 1, 1)
TUESDAY = date(2024, 1, 2)
WEDNESDAY = date(2024, 1, 3)


def _book(db, teacher_ids=(), student_ids=(), on_date=MONDAY, slot=3, **extra):
    return assignments.create(
        db,
        AssignmentCreate(
            date=on_date,
            time_slot_id=slot,
            teachers=[TeacherRef(teacher_id=item) for item in teacher_ids],
            students=[StudentRef(student_id=item) for item in student_ids],
            **extra,
        ),
    )


def test_copy_day_clones_people_and_remaps_assignments(db, make_teacher, make_student):
    teacher = make_teacher("Emma", color_keyword="blue")
    student = make_student("김민준", english_name="Minjun", weakness_level="B1")
    source = _book(db, [teacher.id], [student.id], subject="Reading", notes="chapter 3", color_keyword="blue")

    summary = copy_day(db, MONDAY, TUESDAY)

    assert summary.assignments_copied == 1
    assert summary.teachers_copied == 1
    assert summary.students_copied == 1
    assert summary.failed == []
    assert summary.dropped_references == []

    copied = assignments.get_by_date(db, TUESDAY)
    assert len(copied) == 1
    clone = copied[0]
    assert clone.id != source.id
    assert (clone.time_slot_id, clone.subject, clone.notes, clone.color_keyword) == (3, "Reading", "chapter 3", "blue")

    new_teacher = teachers.get_all(db, TUESDAY)[0]
    new_student = students.get_all(db, TUESDAY)[0]
    assert clone.teacher_ids == [new_teacher.id] != [teacher.id]
    assert clone.student_ids == [new_student.id] != [student.id]
    assert new_teacher.color_keyword == "blue"
    assert (new_student.english_name, new_student.weakness_level) == ("Minjun", "B1")
    # the source day is untouched
    assert [row.id for row in assignments.get_by_date(db, MONDAY)] == [source.id]


def test_copy_day_clears_target_and_reports_deleted_count(db, make_teacher, make_student):
    teacher = make_teacher("Emma")
    _book(db, [teacher.id])
    stale_teacher = make_teacher("Old", on_date=TUESDAY)
    stale_student = make_student("Gone", on_date=TUESDAY)
    _book(db, [stale_teacher.id], [stale_student.id], on_date=TUESDAY, slot=5)
    _book(db, [stale_teacher.id], on_date=TUESDAY, slot=6)
    pre_copy_count = len(assignments.get_by_date(db, TUESDAY))

    summary = copy_day(db, MONDAY, TUESDAY)

    assert summary.deleted_count == pre_copy_count == 2
    assert summary.deleted_teachers_count == 1
    assert summary.deleted_students_count == 1
    assert [row.name for row in teachers.get_all(db, TUESDAY)] == ["Emma"]
    assert students.get_all(db, TUESDAY) == []
    assert [row.time_slot_id for row in assignments.get_by_date(db, TUESDAY)] == [3]


def test_copy_day_twice_gives_the_same_result(db, make_teacher, make_student):
    emma = make_teacher("Emma")
    daniel = make_teacher("Daniel")
    minjun = make_student("Minjun")
    seoyeon = make_student("Seoyeon")
    _book(db, [emma.id], [minjun.id])
    _book(db, [daniel.id], [seoyeon.id], slot=4)

    first = copy_day(db, MONDAY, TUESDAY)
    counts_after_first = (
        len(assignments.get_by_date(db, TUESDAY)),
        len(teachers.get_all(db, TUESDAY)),
        len(students.get_all(db, TUESDAY)),
    )
    second = copy_day(db, MONDAY, TUESDAY)
    counts_after_second = (
        len(assignments.get_by_date(db, TUESDAY)),
        len(teachers.get_all(db, TUESDAY)),
        len(students.get_all(db, TUESDAY)),
    )

    assert counts_after_first == counts_after_second == (2, 2, 2)
    assert second.deleted_count == first.assignments_copied == 2
    assert second.assignments_copied == first.assignments_copied


def test_copy_day_rejects_same_source_and_target(db):
    with pytest.raises(InvalidRequestError):
        copy_day(db, MONDAY, MONDAY)


def test_copy_reports_dropped_references_and_skips_empty_assignments(db, make_teacher, make_student):
    kept = make_teacher("Emma")
    leaving = make_teacher("Daniel")
    student = make_student("Minjun")
    partial = _book(db, [leaving.id], [student.id])
    empty = _book(db, [leaving.id], slot=4)
    _book(db, [kept.id], slot=5)
    teachers.delete(db, leaving.id)

    summary = copy_day(db, MONDAY, TUESDAY)

    assert summary.assignments_copied == 2
    assert summary.skipped == 1
    dropped = {item.source_assignment_id: item for item in summary.dropped_references}
    assert set(dropped) == {partial.id, empty.id}
    assert dropped[partial.id].teacher_ids == [leaving.id]
    assert dropped[partial.id].student_ids == []
    slots = sorted(row.time_slot_id for row in assignments.get_by_date(db, TUESDAY))
    assert slots == [3, 5]


def test_copy_week_shifts_dates_and_uses_new_ids(db, make_teacher, make_student):
    teacher = make_teacher("Emma", on_date=WEDNESDAY)
    student = make_student("Minjun", on_date=WEDNESDAY)
    source = _book(db, [teacher.id], [student.id], on_date=WEDNESDAY, subject="Grammar")
    monday_teacher = make_teacher("Emma")
    _book(db, [monday_teacher.id], slot=10)

    summary = copy_week(db, MONDAY, date(2024, 2, 5))

    assert summary.days == 7
    assert summary.assignments_copied == 2
    assert summary.teachers_copied == 2
    assert summary.students_copied == 1

    copied = assignments.get_by_date(db, date(2024, 2, 7))
    assert len(copied) == 1
    clone = copied[0]
    assert clone.id != source.id
    assert clone.subject == "Grammar"
    assert clone.teacher_ids != [teacher.id]
    assert clone.student_ids != [student.id]
    new_teacher = teachers.get_by_id(db, clone.teacher_ids[0])
    assert (new_teacher.name, new_teacher.date) == ("Emma", date(2024, 2, 7))
    assert [row.time_slot_id for row in assignments.get_by_date(db, date(2024, 2, 5))] == [10]
    assert assignments.get_by_date(db, WEDNESDAY)[0].id == source.id


def test_copy_week_clears_the_whole_target_window(db, make_teacher):
    make_teacher("Emma")
    stale = make_teacher("Old", on_date=date(2024, 2, 10))
    _book(db, [stale.id], on_date=date(2024, 2, 10))

    summary = copy_week(db, MONDAY, date(2024, 2, 5))

    assert summary.deleted_count == 1
    assert summary.deleted_teachers_count == 1
    assert assignments.get_by_date(db, date(2024, 2, 10)) == []


@pytest.mark.parametrize("target", [MONDAY, date(2024, 1, 4), date(2023, 12, 28)])
def test_copy_week_rejects_overlapping_windows(db, target):
    with pytest.raises(InvalidRequestError):
        copy_week(db, MONDAY, target)
