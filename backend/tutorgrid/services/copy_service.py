"""Day and week schedule copies.

Teachers and students are date-scoped rows, so a copy clones the people onto
the target date first, then rebuilds each assignment against the clones.
The target window is cleared before anything is cloned, so repeating a copy
replaces the previous result instead of stacking a second one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
import logging

from sqlalchemy.orm import Session

from tutorgrid.core.exceptions import AssignmentValidationError, ConstraintViolationError, InvalidRequestError
from tutorgrid.schemas.assignment import AssignmentCreate, AssignmentOut, StudentRef, TeacherRef
from tutorgrid.schemas.copy import CopyFailure, CopySummary, DroppedReferences
from tutorgrid.services import assignments as assignment_service
from tutorgrid.services.audit import log_activity
from tutorgrid.services.backup import backup_before_delete
from tutorgrid.services.directory import students as student_directory
from tutorgrid.services.directory import teachers as teacher_directory

logger = logging.getLogger(__name__)

WEEK_DAYS = 7


@dataclass
class _SourceAssignment:
    id: int
    date: date
    time_slot_id: int
    notes: str | None
    subject: str | None
    color_keyword: str | None
    teachers: list[tuple[int, bool]]
    students: list[int]


@dataclass
class _SourceDay:
    source: date
    target: date
    teachers: list
    students: list
    assignments: list[_SourceAssignment]


def _read_day(db: Session, source: date, target: date) -> _SourceDay:
    snapshots = [
        _SourceAssignment(
            id=row.id,
            date=row.date,
            time_slot_id=row.time_slot_id,
            notes=row.notes,
            subject=row.subject,
            color_keyword=row.color_keyword,
            teachers=[(link.teacher_id, link.is_substitute) for link in row.teacher_links],
            students=[link.student_id for link in row.student_links],
        )
        for row in assignment_service.get_by_date(db, source)
    ]
    return _SourceDay(
        source=source,
        target=target,
        teachers=teacher_directory.get_all(db, source),
        students=student_directory.get_all(db, source),
        assignments=snapshots,
    )


def _clear_target(db: Session, summary: CopySummary, target: date) -> None:
    summary.deleted_count += len(assignment_service.delete_by_date(db, target))
    summary.deleted_teachers_count += len(teacher_directory.delete_by_date(db, target))
    summary.deleted_students_count += len(student_directory.delete_by_date(db, target))


def _clone_people(db: Session, summary: CopySummary, day: _SourceDay, teacher_map: dict, student_map: dict) -> None:
    for teacher in day.teachers:
        clone = teacher_directory.create(db, teacher_directory.clone_values(teacher, day.target))
        teacher_map[(day.source, teacher.id)] = clone.id
        summary.teachers_copied += 1
    for student in day.students:
        clone = student_directory.create(db, student_directory.clone_values(student, day.target))
        student_map[(day.source, student.id)] = clone.id
        summary.students_copied += 1


def _copy_assignments(
    db: Session, summary: CopySummary, day: _SourceDay, teacher_map: dict, student_map: dict, created_ids: set[int]
) -> None:
    for source in day.assignments:
        teachers: list[TeacherRef] = []
        students: list[StudentRef] = []
        dropped = DroppedReferences(source_assignment_id=source.id)
        for teacher_id, is_substitute in source.teachers:
            new_id = teacher_map.get((day.source, teacher_id))
            if new_id is None:
                dropped.teacher_ids.append(teacher_id)
            else:
                teachers.append(TeacherRef(teacher_id=new_id, is_substitute=is_substitute))
        for student_id in source.students:
            new_id = student_map.get((day.source, student_id))
            if new_id is None:
                dropped.student_ids.append(student_id)
            else:
                students.append(StudentRef(student_id=new_id))

        if dropped.teacher_ids or dropped.student_ids:
            summary.dropped_references.append(dropped)
            logger.warning(
                "Assignment %s copied without unmapped teachers %s / students %s",
                source.id,
                dropped.teacher_ids,
                dropped.student_ids,
            )
        if not teachers and not students:
            summary.skipped += 1
            continue

        data = AssignmentCreate(
            date=day.target,
            time_slot_id=source.time_slot_id,
            teachers=teachers,
            students=students,
            notes=source.notes,
            subject=source.subject,
            color_keyword=source.color_keyword,
        )
        try:
            created = assignment_service.create(db, data)
        except (AssignmentValidationError, ConstraintViolationError) as exc:
            errors = getattr(exc, "errors", None) or [exc.message]
            summary.failed.append(CopyFailure(source_assignment_id=source.id, errors=errors))
            logger.warning("Could not copy assignment %s to %s: %s", source.id, day.target, "; ".join(errors))
            continue

        if created.id in created_ids:
            summary.skipped += 1
            continue
        created_ids.add(created.id)
        summary.assignments_copied += 1
        summary.assignments.append(AssignmentOut.model_validate(created))


def _run(db: Session, summary: CopySummary, days: list[tuple[date, date]], action: str) -> CopySummary:
    sources = [_read_day(db, source, target) for source, target in days]

    backup_before_delete(db, f"Before {action} onto {summary.target_date.isoformat()}")
    for _, target in days:
        _clear_target(db, summary, target)
    logger.info(
        "Cleared target window from %s: %d assignments, %d teachers, %d students",
        summary.target_date,
        summary.deleted_count,
        summary.deleted_teachers_count,
        summary.deleted_students_count,
    )

    teacher_map: dict[tuple[date, int], int] = {}
    student_map: dict[tuple[date, int], int] = {}
    for day in sources:
        _clone_people(db, summary, day, teacher_map, student_map)
    logger.info("Cloned %d teachers and %d students", summary.teachers_copied, summary.students_copied)

    created_ids: set[int] = set()
    for day in sources:
        _copy_assignments(db, summary, day, teacher_map, student_map, created_ids)
    logger.info(
        "Copied %d assignments (%d skipped, %d failed)",
        summary.assignments_copied,
        summary.skipped,
        len(summary.failed),
    )

    log_activity(
        db,
        action=action,
        entity_type="schedule",
        entity_id=f"{summary.source_date.isoformat()}:{summary.target_date.isoformat()}",
        details={
            "days": summary.days,
            "assignments_copied": summary.assignments_copied,
            "teachers_copied": summary.teachers_copied,
            "students_copied": summary.students_copied,
            "deleted_count": summary.deleted_count,
            "failed": len(summary.failed),
        },
    )
    db.commit()
    return summary


def copy_day(db: Session, source_date: date, target_date: date) -> CopySummary:
    """Replace everything on ``target_date`` with a clone of ``source_date``."""
    if source_date == target_date:
        raise InvalidRequestError("Source and target dates must differ")
    summary = CopySummary(source_date=source_date, target_date=target_date, days=1)
    logger.info("Copying day %s to %s", source_date, target_date)
    return _run(db, summary, [(source_date, target_date)], "schedule.copy_day")


def copy_week(db: Session, source_date: date, target_date: date) -> CopySummary:
    """Replace the 7 days from ``target_date`` with a clone of the 7 days from ``source_date``.

    Each day keeps its offset from the start of the window, so an assignment on
    the third source day lands on the third target day.
    """
    offset = (target_date - source_date).days
    if abs(offset) < WEEK_DAYS:
        raise InvalidRequestError(
            "Source and target weeks must not overlap",
            details={"offset_days": offset},
        )
    summary = CopySummary(source_date=source_date, target_date=target_date, days=WEEK_DAYS)
    days = [(source_date + timedelta(days=i), target_date + timedelta(days=i)) for i in range(WEEK_DAYS)]
    logger.info("Copying week %s to %s (offset %d days)", source_date, target_date, offset)
    return _run(db, summary, days, "schedule.copy_week")
