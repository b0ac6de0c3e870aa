import datetime as dt

from pydantic import BaseModel, Field

from tutorgrid.schemas.assignment import AssignmentOut


class CopyDayRequest(BaseModel):
    source_date: dt.date
    target_date: dt.date


class CopyWeekRequest(BaseModel):
    source_date: dt.date
    target_date: dt.date


class CopyFailure(BaseModel):
    source_assignment_id: int
    errors: list[str]


class DroppedReferences(BaseModel):
    """People on a source assignment that had no clone on the target date."""

    source_assignment_id: int
    teacher_ids: list[int] = Field(default_factory=list)
    student_ids: list[int] = Field(default_factory=list)


class CopySummary(BaseModel):
    source_date: dt.date
    target_date: dt.date
    days: int = 1
    assignments_copied: int = 0
    teachers_copied: int = 0
    students_copied: int = 0
    deleted_count: int = 0
    deleted_teachers_count: int = 0
    deleted_students_count: int = 0
    skipped: int = 0
    failed: list[CopyFailure] = Field(default_factory=list)
    dropped_references: list[DroppedReferences] = Field(default_factory=list)
    assignments: list[AssignmentOut] = Field(default_factory=list)
