"""Seed demo teachers, students and a few classes onto the template week.

Run:
  PYTHONPATH=backend python scripts/seed_template_week.py
"""

from __future__ import annotations

import os
from datetime import date, timedelta

from sqlalchemy import func, select

from tutorgrid.core.config import get_settings
from tutorgrid.core.exceptions import AssignmentValidationError, ConstraintViolationError
from tutorgrid.db.bootstrap import ensure_runtime_schema_compatibility
from tutorgrid.db.session import SessionLocal
from tutorgrid.models.assignment import Assignment
from tutorgrid.schemas.assignment import AssignmentCreate, StudentRef, TeacherRef
from tutorgrid.services import assignments
from tutorgrid.services.directory import students, teachers

SEED_DAYS = int(os.getenv("SEED_DAYS", "5"))

TEACHERS = [
    {"name": "Emma Clarke", "availability": list(range(1, 13)), "color_keyword": "blue"},
    {"name": "Daniel Park", "availability": list(range(9, 21)), "color_keyword": "green"},
    {"name": "Sofia Reyes", "availability": list(range(5, 17)), "color_keyword": "orange"},
]

STUDENTS = [
    {"name": "김민준", "english_name": "Minjun", "availability": [3, 4, 9, 10], "color_keyword": "blue", "weakness_level": "B1"},
    {"name": "이서연", "english_name": "Seoyeon", "availability": [3, 4, 11, 12], "color_keyword": "green", "weakness_level": "A2"},
    {"name": "박지호", "english_name": "Jiho", "availability": [5, 6, 13, 14], "color_keyword": "orange", "weakness_level": "B2"},
    {"name": "최하은", "english_name": "Haeun", "availability": [9, 10, 15, 16], "color_keyword": "blue", "weakness_level": "A1"},
]

# (teacher index, student indexes, slot, subject)
CLASSES = [
    (0, [0], 3, "Speaking"),
    (0, [1], 4, "Reading"),
    (1, [0], 9, "Grammar"),
    (2, [2], 5, "Writing"),
    (1, [3], 15, "Listening"),
]


def seed_day(session, on_date: date) -> tuple[int, int]:
    teacher_rows = [teachers.upsert_for_date(session, {**item, "date": on_date})[0] for item in TEACHERS]
    student_rows = [students.upsert_for_date(session, {**item, "date": on_date})[0] for item in STUDENTS]

    created = 0
    skipped = 0
    for teacher_index, student_indexes, slot, subject in CLASSES:
        payload = AssignmentCreate(
            date=on_date,
            time_slot_id=slot,
            teachers=[TeacherRef(teacher_id=teacher_rows[teacher_index].id)],
            students=[StudentRef(student_id=student_rows[index].id) for index in student_indexes],
            subject=subject,
        )
        try:
            assignments.create(session, payload)
        except (AssignmentValidationError, ConstraintViolationError) as exc:
            print(f"  skipped {subject} on {on_date} slot {slot}: {exc.message}")
            skipped += 1
            continue
        created += 1
    return created, skipped


def main() -> None:
    ensure_runtime_schema_compatibility()
    start = get_settings().template_week_start
    with SessionLocal() as session:
        for offset in range(max(1, min(SEED_DAYS, 7))):
            on_date = start + timedelta(days=offset)
            created, skipped = seed_day(session, on_date)
            print(f"{on_date}: {created} classes seeded, {skipped} skipped")

        total = session.execute(
            select(func.count(Assignment.id)).where(Assignment.is_active.is_(True))
        ).scalar_one()

    print("")
    print("Template week seeded successfully.")
    print(f"Active assignments: {total}")


if __name__ == "__main__":
    main()
