from datetime import date

from tutorgrid.schemas.assignment import AssignmentCandidate, AssignmentCreate, StudentRef, TeacherRef
from tutorgrid.services import assignments
from tutorgrid.services.conflict_service import ConflictService, validate_assignment

MONDAY = date(2024, 1, 1)
TUESDAY = date(2024, 1, 2)


def _book(db, teacher_ids=(), student_ids=(), on_date=MONDAY, slot=3, subject=None):
    return assignments.create(
        db,
        AssignmentCreate(
            date=on_date,
            time_slot_id=slot,
            teachers=[TeacherRef(teacher_id=item) for item in teacher_ids],
            students=[StudentRef(student_id=item) for item in student_ids],
            subject=subject,
        ),
    )


def test_empty_candidate_is_valid(db):
    result = ConflictService(db).validate(AssignmentCandidate(date=MONDAY, time_slot_id=3))
    assert result.valid is True
    assert result.errors == []


def test_teacher_conflict_names_the_booked_student(db, make_teacher, make_student):
    teacher = make_teacher("Emma")
    first = make_student("Minjun")
    second = make_student("Seoyeon")
    _book(db, [teacher.id], [first.id])

    result = validate_assignment(
        db,
        AssignmentCandidate(
            date=MONDAY,
            time_slot_id=3,
            teachers=[TeacherRef(teacher_id=teacher.id)],
            students=[StudentRef(student_id=second.id)],
        ),
    )

    assert result.valid is False
    assert result.errors == ["Teacher Emma is already scheduled with student(s): Minjun at this time"]


def test_student_conflict_names_the_booked_teacher(db, make_teacher, make_student):
    emma = make_teacher("Emma")
    daniel = make_teacher("Daniel")
    student = make_student("Minjun")
    _book(db, [emma.id], [student.id])

    result = ConflictService(db).validate(
        AssignmentCandidate(
            date=MONDAY,
            time_slot_id=3,
            teachers=[TeacherRef(teacher_id=daniel.id)],
            students=[StudentRef(student_id=student.id)],
        )
    )

    assert result.valid is False
    assert result.errors == ["Student Minjun is already scheduled with teacher(s): Emma at this time"]


def test_validator_excludes_the_assignment_being_updated(db, make_teacher, make_student):
    teacher = make_teacher("Emma")
    student = make_student("Minjun")
    booked = _book(db, [teacher.id], [student.id])

    result = ConflictService(db).validate(
        AssignmentCandidate(
            id=booked.id,
            date=MONDAY,
            time_slot_id=3,
            teachers=[TeacherRef(teacher_id=teacher.id)],
            students=[StudentRef(student_id=student.id)],
        )
    )

    assert result.valid is True


def test_soft_deleted_assignment_does_not_block_the_slot(db, make_teacher, make_student):
    teacher = make_teacher("Emma")
    student = make_student("Minjun")
    booked = _book(db, [teacher.id], [student.id])
    assignments.delete(db, booked.id)

    result = ConflictService(db).validate(
        AssignmentCandidate(date=MONDAY, time_slot_id=3, teachers=[TeacherRef(teacher_id=teacher.id)])
    )

    assert result.valid is True


def test_other_slot_or_date_does_not_conflict(db, make_teacher, make_student):
    teacher = make_teacher("Emma")
    student = make_student("Minjun")
    _book(db, [teacher.id], [student.id])
    service = ConflictService(db)

    other_slot = AssignmentCandidate(date=MONDAY, time_slot_id=4, teachers=[TeacherRef(teacher_id=teacher.id)])
    other_day = AssignmentCandidate(date=TUESDAY, time_slot_id=3, students=[StudentRef(student_id=student.id)])

    assert service.validate(other_slot).valid is True
    assert service.validate(other_day).valid is True


def test_each_person_gets_its_own_error(db, make_teacher, make_student):
    teacher = make_teacher("Emma")
    student = make_student("Minjun")
    _book(db, [teacher.id], [student.id])

    result = ConflictService(db).validate(
        AssignmentCandidate(
            date=MONDAY,
            time_slot_id=3,
            teachers=[TeacherRef(teacher_id=teacher.id)],
            students=[StudentRef(student_id=student.id)],
        )
    )

    assert len(result.errors) == 2
    assert result.errors[0].startswith("Teacher Emma")
    assert result.errors[1].startswith("Student Minjun")


def test_teacher_only_booking_reports_without_student_list(db, make_teacher):
    teacher = make_teacher("Emma")
    _book(db, [teacher.id])

    result = ConflictService(db).validate(
        AssignmentCandidate(date=MONDAY, time_slot_id=3, teachers=[TeacherRef(teacher_id=teacher.id)])
    )

    assert result.errors == ["Teacher Emma is already scheduled at this time"]
