from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from tutorgrid.models.assignment import Assignment, AssignmentStudent, AssignmentTeacher
from tutorgrid.models.student import Student
from tutorgrid.models.teacher import Teacher
from tutorgrid.schemas.assignment import AssignmentCandidate, ValidationResult

logger = logging.getLogger(__name__)


class ConflictService:
    """Checks a prospective assignment against the active assignments in its slot.

    Each teacher and each student is checked on its own so every error names
    the person it is about and who they are already booked with.
    """

    def __init__(self, db: Session):
        self.db = db

    def validate(self, candidate: AssignmentCandidate) -> ValidationResult:
        errors: list[str] = []

        for ref in candidate.teachers:
            clashes = self._clashes(candidate, AssignmentTeacher, AssignmentTeacher.teacher_id, ref.teacher_id)
            if not clashes:
                continue
            booked_with = _unique(link.name or f"#{link.student_id}" for a in clashes for link in a.student_links)
            name = self._name(Teacher, ref.teacher_id)
            if booked_with:
                errors.append(f"Teacher {name} is already scheduled with student(s): {', '.join(booked_with)} at this time")
            else:
                errors.append(f"Teacher {name} is already scheduled at this time")

        for ref in candidate.students:
            clashes = self._clashes(candidate, AssignmentStudent, AssignmentStudent.student_id, ref.student_id)
            if not clashes:
                continue
            booked_with = _unique(link.name or f"#{link.teacher_id}" for a in clashes for link in a.teacher_links)
            name = self._name(Student, ref.student_id)
            if booked_with:
                errors.append(f"Student {name} is already scheduled with teacher(s): {', '.join(booked_with)} at this time")
            else:
                errors.append(f"Student {name} is already scheduled at this time")

        return ValidationResult(valid=not errors, errors=errors)

    def _clashes(self, candidate: AssignmentCandidate, link_model, link_column, person_id: int) -> list[Assignment]:
        query = (
            select(Assignment)
            .join(link_model, link_model.assignment_id == Assignment.id)
            .where(
                link_column == person_id,
                Assignment.date == candidate.date,
                Assignment.time_slot_id == candidate.time_slot_id,
                Assignment.is_active.is_(True),
            )
            .options(
                selectinload(Assignment.teacher_links).selectinload(AssignmentTeacher.teacher),
                selectinload(Assignment.student_links).selectinload(AssignmentStudent.student),
            )
            .order_by(Assignment.id)
        )
        if candidate.id is not None:
            query = query.where(Assignment.id != candidate.id)
        return list(self.db.execute(query).scalars().unique())

    def _name(self, model, person_id: int) -> str:
        record = self.db.get(model, person_id)
        return record.name if record is not None else f"#{person_id}"


def _unique(names) -> list[str]:
    seen: list[str] = []
    for name in names:
        if name not in seen:
            seen.append(name)
    return seen


def validate_assignment(db: Session, candidate: AssignmentCandidate) -> ValidationResult:
    result = ConflictService(db).validate(candidate)
    if not result.valid:
        logger.warning(
            "Conflict on %s slot %s: %s", candidate.date, candidate.time_slot_id, "; ".join(result.errors)
        )
    return result
