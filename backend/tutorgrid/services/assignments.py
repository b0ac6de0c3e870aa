"""Assignment lifecycle: reads, create/update/delete/restore and bulk clean-up.

Every write keeps the junction rows' ``date``/``time_slot_id``/``is_booked``
columns in step with the owning assignment so the partial unique indexes on
the junction tables reject double bookings the conflict check cannot see.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from tutorgrid.core.exceptions import (
    AssignmentValidationError,
    ConstraintViolationError,
    InvalidRequestError,
)
from tutorgrid.models.assignment import Assignment, AssignmentStudent, AssignmentTeacher
from tutorgrid.models.student import Student
from tutorgrid.models.teacher import Teacher
from tutorgrid.models.time_slot import TimeSlot
from tutorgrid.schemas.assignment import (
    AssignmentCandidate,
    AssignmentCreate,
    AssignmentPatch,
    DuplicateGroup,
    RemoveDuplicatesResult,
    StudentRef,
    TeacherRef,
)
from tutorgrid.services.audit import log_activity
from tutorgrid.services.backup import backup_before_delete
from tutorgrid.services.conflict_service import validate_assignment

logger = logging.getLogger(__name__)


def _with_links(query):
    return query.options(
        selectinload(Assignment.teacher_links).selectinload(AssignmentTeacher.teacher),
        selectinload(Assignment.student_links).selectinload(AssignmentStudent.student),
    )


# Reads


def get_by_date(db: Session, on_date: date) -> list[Assignment]:
    query = _with_links(
        select(Assignment)
        .where(Assignment.date == on_date, Assignment.is_active.is_(True))
        .order_by(Assignment.time_slot_id, Assignment.id)
    )
    return list(db.execute(query).scalars())


def get_by_id(db: Session, assignment_id: int, *, include_inactive: bool = False) -> Assignment | None:
    query = _with_links(select(Assignment).where(Assignment.id == assignment_id))
    if not include_inactive:
        query = query.where(Assignment.is_active.is_(True))
    return db.execute(query).scalar_one_or_none()


def get_by_date_range(db: Session, start: date, days: int) -> list[Assignment]:
    end = start + timedelta(days=days)
    query = _with_links(
        select(Assignment)
        .where(Assignment.date >= start, Assignment.date < end, Assignment.is_active.is_(True))
        .order_by(Assignment.date, Assignment.time_slot_id, Assignment.id)
    )
    return list(db.execute(query).scalars())


def get_by_student_id(db: Session, student_id: int) -> list[Assignment]:
    query = _with_links(
        select(Assignment)
        .join(AssignmentStudent, AssignmentStudent.assignment_id == Assignment.id)
        .where(AssignmentStudent.student_id == student_id, Assignment.is_active.is_(True))
        .order_by(Assignment.date, Assignment.time_slot_id, Assignment.id)
    )
    return list(db.execute(query).scalars().unique())


def check_duplicate(db: Session, data: AssignmentCreate) -> Assignment | None:
    """Active assignment identical to ``data`` (slot, subject, people), if any."""
    if not data.students:
        return None
    teacher_ids = sorted({ref.teacher_id for ref in data.teachers})
    student_ids = sorted({ref.student_id for ref in data.students})
    query = _with_links(
        select(Assignment).where(
            Assignment.date == data.date,
            Assignment.time_slot_id == data.time_slot_id,
            func.coalesce(Assignment.subject, "") == (data.subject or ""),
            Assignment.is_active.is_(True),
        )
    )
    for existing in db.execute(query).scalars():
        if existing.teacher_ids == teacher_ids and existing.student_ids == student_ids:
            return existing
    return None


# Writes


def _dedupe_teachers(refs: list[TeacherRef]) -> list[TeacherRef]:
    unique: dict[int, TeacherRef] = {}
    for ref in refs:
        unique.setdefault(ref.teacher_id, ref)
    return list(unique.values())


def _dedupe_students(refs: list[StudentRef]) -> list[StudentRef]:
    unique: dict[int, StudentRef] = {}
    for ref in refs:
        unique.setdefault(ref.student_id, ref)
    return list(unique.values())


def _check_references(db: Session, time_slot_id: int, teachers: list[TeacherRef], students: list[StudentRef]) -> None:
    if db.get(TimeSlot, time_slot_id) is None:
        raise InvalidRequestError(f"Unknown time slot {time_slot_id}")
    teacher_ids = {ref.teacher_id for ref in teachers}
    if teacher_ids:
        found = set(db.execute(select(Teacher.id).where(Teacher.id.in_(teacher_ids))).scalars())
        missing = sorted(teacher_ids - found)
        if missing:
            raise InvalidRequestError("Unknown teacher id(s)", details={"teacher_ids": missing})
    student_ids = {ref.student_id for ref in students}
    if student_ids:
        found = set(db.execute(select(Student.id).where(Student.id.in_(student_ids))).scalars())
        missing = sorted(student_ids - found)
        if missing:
            raise InvalidRequestError("Unknown student id(s)", details={"student_ids": missing})


def _teacher_link(assignment: Assignment, ref: TeacherRef) -> AssignmentTeacher:
    return AssignmentTeacher(
        teacher_id=ref.teacher_id,
        is_substitute=ref.is_substitute,
        date=assignment.date,
        time_slot_id=assignment.time_slot_id,
        is_booked=True,
    )


def _student_link(assignment: Assignment, ref: StudentRef) -> AssignmentStudent:
    return AssignmentStudent(
        student_id=ref.student_id,
        submission_id=ref.submission_id,
        date=assignment.date,
        time_slot_id=assignment.time_slot_id,
        is_booked=True,
    )


def _flush_booking(db: Session, on_date: date, time_slot_id: int) -> None:
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Booking constraint rejected a write on %s slot %s", on_date, time_slot_id)
        raise ConstraintViolationError(
            "A teacher or student is already booked at this time",
            details={"date": on_date.isoformat(), "time_slot_id": time_slot_id},
        ) from exc


def create(db: Session, data: AssignmentCreate) -> Assignment:
    """Insert an assignment with its links after re-running the conflict check.

    An identical active assignment is returned as-is instead of inserting a copy.
    Raises ``AssignmentValidationError`` on a detected conflict and
    ``ConstraintViolationError`` when the booking indexes reject the insert.
    """
    existing = check_duplicate(db, data)
    if existing is not None:
        logger.info("Assignment %s already matches %s slot %s", existing.id, data.date, data.time_slot_id)
        return existing

    teachers = _dedupe_teachers(data.teachers)
    students = _dedupe_students(data.students)
    _check_references(db, data.time_slot_id, teachers, students)

    result = validate_assignment(db, data.candidate(teachers=teachers, students=students))
    if not result.valid:
        raise AssignmentValidationError(result.errors)

    assignment = Assignment(
        date=data.date,
        time_slot_id=data.time_slot_id,
        room_id=None,
        notes=data.notes,
        subject=data.subject,
        color_keyword=data.color_keyword,
        is_active=True,
    )
    assignment.teacher_links = [_teacher_link(assignment, ref) for ref in teachers]
    assignment.student_links = [_student_link(assignment, ref) for ref in students]
    db.add(assignment)
    _flush_booking(db, data.date, data.time_slot_id)

    log_activity(
        db,
        action="assignment.create",
        entity_type="assignment",
        entity_id=assignment.id,
        details={
            "date": data.date.isoformat(),
            "time_slot_id": data.time_slot_id,
            "teacher_ids": [ref.teacher_id for ref in teachers],
            "student_ids": [ref.student_id for ref in students],
        },
    )
    db.commit()
    logger.info("Created assignment %s on %s slot %s", assignment.id, data.date, data.time_slot_id)
    return get_by_id(db, assignment.id)


def candidate_for_update(assignment: Assignment, patch: AssignmentPatch) -> AssignmentCandidate:
    """Merge ``patch`` over the current row into the shape the conflict check takes."""
    values = patch.column_values()
    if patch.replaces_teachers():
        teachers = patch.teachers
    else:
        teachers = [TeacherRef(teacher_id=link.teacher_id, is_substitute=link.is_substitute) for link in assignment.teacher_links]
    if patch.replaces_students():
        students = patch.students
    else:
        students = [StudentRef(student_id=link.student_id, submission_id=link.submission_id) for link in assignment.student_links]
    return AssignmentCandidate(
        id=assignment.id,
        date=values.get("date", assignment.date),
        time_slot_id=values.get("time_slot_id", assignment.time_slot_id),
        teachers=teachers,
        students=students,
    )


def update(db: Session, assignment_id: int, patch: AssignmentPatch) -> Assignment | None:
    """Apply ``patch`` to an active assignment; supplied link lists replace the old ones.

    Does not run the conflict check. The booking indexes still apply.
    """
    assignment = get_by_id(db, assignment_id)
    if assignment is None:
        return None

    values = patch.column_values()
    teachers = _dedupe_teachers(patch.teachers) if patch.replaces_teachers() else None
    students = _dedupe_students(patch.students) if patch.replaces_students() else None
    _check_references(db, values.get("time_slot_id", assignment.time_slot_id), teachers or [], students or [])

    moved = (
        values.get("date", assignment.date) != assignment.date
        or values.get("time_slot_id", assignment.time_slot_id) != assignment.time_slot_id
    )
    for key, value in values.items():
        setattr(assignment, key, value)
    assignment.room_id = None

    # Old links must be gone before the replacements hit the booking indexes.
    if teachers is not None:
        assignment.teacher_links.clear()
    if students is not None:
        assignment.student_links.clear()
    if teachers is not None or students is not None:
        db.flush()

    # Kept links on an unchanged slot keep their booking state; a restored
    # assignment may hold links that were left unbooked.
    if moved:
        for link in [*assignment.teacher_links, *assignment.student_links]:
            link.date = assignment.date
            link.time_slot_id = assignment.time_slot_id
            link.is_booked = True
    if teachers is not None:
        assignment.teacher_links.extend(_teacher_link(assignment, ref) for ref in teachers)
    if students is not None:
        assignment.student_links.extend(_student_link(assignment, ref) for ref in students)
    _flush_booking(db, assignment.date, assignment.time_slot_id)

    log_activity(
        db,
        action="assignment.update",
        entity_type="assignment",
        entity_id=assignment.id,
        details={
            "fields": sorted(patch.model_fields_set),
            "date": assignment.date.isoformat(),
            "time_slot_id": assignment.time_slot_id,
        },
    )
    db.commit()
    logger.info("Updated assignment %s on %s slot %s", assignment.id, assignment.date, assignment.time_slot_id)
    db.expire_all()
    return get_by_id(db, assignment_id)


def _deactivate(assignment: Assignment) -> None:
    assignment.is_active = False
    for link in [*assignment.teacher_links, *assignment.student_links]:
        link.is_booked = False


def delete(db: Session, assignment_id: int) -> Assignment | None:
    """Soft delete. Returns None when the id is unknown or already inactive."""
    assignment = get_by_id(db, assignment_id)
    if assignment is None:
        return None
    _deactivate(assignment)
    log_activity(db, action="assignment.delete", entity_type="assignment", entity_id=assignment.id)
    db.commit()
    logger.info("Deleted assignment %s on %s slot %s", assignment.id, assignment.date, assignment.time_slot_id)
    return assignment


def _slot_taken(db: Session, link_model, column, person_id: int, on_date: date, time_slot_id: int) -> bool:
    query = select(link_model.id).where(
        column == person_id,
        link_model.date == on_date,
        link_model.time_slot_id == time_slot_id,
        link_model.is_booked.is_(True),
    )
    return db.execute(query.limit(1)).first() is not None


def restore(db: Session, assignment_id: int) -> Assignment | None:
    """Reactivate a soft-deleted assignment without re-checking conflicts.

    Links whose person has been booked elsewhere in the meantime stay
    unbooked; the assignment is restored regardless.
    """
    assignment = get_by_id(db, assignment_id, include_inactive=True)
    if assignment is None:
        return None
    if assignment.is_active:
        return assignment

    assignment.is_active = True
    unbooked: dict[str, list[int]] = {"teacher_ids": [], "student_ids": []}
    for link in assignment.teacher_links:
        taken = _slot_taken(
            db, AssignmentTeacher, AssignmentTeacher.teacher_id, link.teacher_id, assignment.date, assignment.time_slot_id
        )
        link.is_booked = not taken
        if taken:
            unbooked["teacher_ids"].append(link.teacher_id)
    for link in assignment.student_links:
        taken = _slot_taken(
            db, AssignmentStudent, AssignmentStudent.student_id, link.student_id, assignment.date, assignment.time_slot_id
        )
        link.is_booked = not taken
        if taken:
            unbooked["student_ids"].append(link.student_id)

    if unbooked["teacher_ids"] or unbooked["student_ids"]:
        logger.warning(
            "Restored assignment %s overlaps existing bookings on %s slot %s: %s",
            assignment.id,
            assignment.date,
            assignment.time_slot_id,
            unbooked,
        )
    log_activity(
        db,
        action="assignment.restore",
        entity_type="assignment",
        entity_id=assignment.id,
        details={"overlapping": unbooked},
    )
    db.commit()
    logger.info("Restored assignment %s", assignment.id)
    return get_by_id(db, assignment_id)


def _delete_many(db: Session, rows: list[Assignment], *, action: str, details: dict) -> list[int]:
    for assignment in rows:
        _deactivate(assignment)
    ids = [assignment.id for assignment in rows]
    log_activity(db, action=action, entity_type="assignment", details={**details, "assignment_ids": ids})
    db.commit()
    return ids


def delete_by_date(db: Session, on_date: date) -> list[int]:
    ids = _delete_many(
        db, get_by_date(db, on_date), action="assignment.delete_by_date", details={"date": on_date.isoformat()}
    )
    logger.info("Soft-deleted %d assignment(s) on %s", len(ids), on_date)
    return ids


def delete_by_date_range(db: Session, start: date, days: int) -> list[int]:
    ids = _delete_many(
        db,
        get_by_date_range(db, start, days),
        action="assignment.delete_by_date_range",
        details={"start_date": start.isoformat(), "days": days},
    )
    logger.info("Soft-deleted %d assignment(s) from %s over %d day(s)", len(ids), start, days)
    return ids


def delete_all(db: Session, on_date: date) -> list[int]:
    """Soft-delete every active assignment on ``on_date`` after taking a backup."""
    backup_before_delete(db, f"Before deleting all assignments on {on_date.isoformat()}")
    return delete_by_date(db, on_date)


def _signature(assignment: Assignment) -> tuple:
    return (
        assignment.date,
        assignment.time_slot_id,
        assignment.subject or "",
        tuple(assignment.teacher_ids),
        tuple(assignment.student_ids),
    )


def find_duplicates(db: Session) -> list[DuplicateGroup]:
    query = _with_links(
        select(Assignment).where(Assignment.is_active.is_(True)).order_by(Assignment.id)
    )
    groups: dict[tuple, list[Assignment]] = defaultdict(list)
    for assignment in db.execute(query).scalars():
        groups[_signature(assignment)].append(assignment)

    duplicates = []
    for (on_date, time_slot_id, subject, teacher_ids, student_ids), rows in groups.items():
        if len(rows) < 2:
            continue
        duplicates.append(
            DuplicateGroup(
                date=on_date,
                time_slot_id=time_slot_id,
                subject=subject,
                teacher_ids=list(teacher_ids),
                student_ids=list(student_ids),
                assignment_ids=[row.id for row in rows],
            )
        )
    duplicates.sort(key=lambda group: (group.date, group.time_slot_id, group.assignment_ids[0]))
    return duplicates


def remove_duplicates(db: Session) -> RemoveDuplicatesResult:
    """Soft-delete every duplicate except the oldest assignment of each group."""
    groups = find_duplicates(db)
    removed_ids = [assignment_id for group in groups for assignment_id in group.assignment_ids[1:]]
    if removed_ids:
        rows = db.execute(
            _with_links(select(Assignment).where(Assignment.id.in_(removed_ids)))
        ).scalars()
        _delete_many(db, list(rows), action="assignment.remove_duplicates", details={"groups": len(groups)})
    logger.info("Removed %d duplicate assignment(s) across %d group(s)", len(removed_ids), len(groups))
    return RemoveDuplicatesResult(duplicates_found=len(groups), removed=len(removed_ids), removed_ids=removed_ids)
