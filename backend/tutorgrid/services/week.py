from __future__ import annotations

from datetime import date, timedelta
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tutorgrid.core.config import get_settings
from tutorgrid.core.exceptions import InvalidRequestError
from tutorgrid.schemas.student import StudentOut
from tutorgrid.schemas.teacher import TeacherOut
from tutorgrid.schemas.weekly import (
    DayDirectory,
    DirectoryCopyCount,
    DirectoryCopyResult,
    WeekRange,
    WeeklyDataOut,
)
from tutorgrid.services.directory import DirectoryService
from tutorgrid.services.directory import students as student_directory
from tutorgrid.services.directory import teachers as teacher_directory

logger = logging.getLogger(__name__)

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def week_range(on_date: date) -> WeekRange:
    """Monday-to-Sunday week containing ``on_date``."""
    start = on_date - timedelta(days=on_date.weekday())
    dates = [start + timedelta(days=offset) for offset in range(7)]
    return WeekRange(start_date=start, end_date=dates[-1], dates=dates)


def template_date_for(day_name: str) -> date:
    """Resolve a weekday name (full or three-letter, any case) onto the template week."""
    key = day_name.strip().lower()
    for index, name in enumerate(DAY_NAMES):
        if key in (name.lower(), name[:3].lower()):
            start = week_range(get_settings().template_week_start).start_date
            return start + timedelta(days=index)
    raise InvalidRequestError(f"Unknown day name: {day_name}")


def weekly_data(db: Session, on_date: date) -> WeeklyDataOut:
    week = week_range(on_date)
    days = [
        DayDirectory(
            date=current,
            day_name=DAY_NAMES[index],
            teachers=[TeacherOut.model_validate(row) for row in teacher_directory.get_all(db, current)],
            students=[StudentOut.model_validate(row) for row in student_directory.get_all(db, current)],
        )
        for index, current in enumerate(week.dates)
    ]
    return WeeklyDataOut(week_range=week, days=days)


def _upsert_all(
    db: Session, directory: DirectoryService, from_date: date, to_date: date, outcome: DirectoryCopyCount
) -> None:
    for record in directory.get_all(db, from_date):
        try:
            directory.upsert_for_date(db, directory.clone_values(record, to_date))
        except (SQLAlchemyError, ValueError) as exc:
            db.rollback()
            outcome.errors.append(f"{record.name}: {exc}")
            logger.warning("Could not copy %s %s to %s: %s", directory.label.lower(), record.name, to_date, exc)
            continue
        outcome.copied += 1


def copy_directory_day(
    db: Session,
    from_date: date,
    to_date: date,
    *,
    copy_teachers: bool = True,
    copy_students: bool = True,
) -> DirectoryCopyResult:
    """Copy the people (not the assignments) from one day to another in the same week."""
    if week_range(from_date).start_date != week_range(to_date).start_date:
        raise InvalidRequestError("Dates must be in the same week")

    result = DirectoryCopyResult(from_date=from_date, to_date=to_date)
    if copy_students:
        _upsert_all(db, student_directory, from_date, to_date, result.students)
    if copy_teachers:
        _upsert_all(db, teacher_directory, from_date, to_date, result.teachers)
    logger.info(
        "Copied directory %s -> %s: %d teachers, %d students",
        from_date,
        to_date,
        result.teachers.copied,
        result.students.copied,
    )
    return result
