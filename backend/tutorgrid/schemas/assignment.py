import datetime as dt

from pydantic import BaseModel, Field, model_validator


class TeacherRef(BaseModel):
    teacher_id: int = Field(ge=1)
    is_substitute: bool = False


class StudentRef(BaseModel):
    student_id: int = Field(ge=1)
    submission_id: str | None = Field(default=None, max_length=100)


class AssignmentCandidate(BaseModel):
    """Shape the conflict validator checks; ``id`` is set when validating an update."""

    id: int | None = None
    date: dt.date
    time_slot_id: int = Field(ge=1)
    teachers: list[TeacherRef] = Field(default_factory=list)
    students: list[StudentRef] = Field(default_factory=list)


class AssignmentCreate(BaseModel):
    date: dt.date
    time_slot_id: int = Field(ge=1)
    teachers: list[TeacherRef] = Field(default_factory=list, max_length=20)
    students: list[StudentRef] = Field(default_factory=list, max_length=50)
    notes: str | None = Field(default=None, max_length=5000)
    subject: str | None = Field(default=None, max_length=200)
    color_keyword: str | None = Field(default=None, max_length=50)

    @model_validator(mode="after")
    def require_participant(self) -> "AssignmentCreate":
        if not self.teachers and not self.students:
            raise ValueError("An assignment needs at least one teacher or one student")
        return self

    def candidate(
        self,
        *,
        teachers: list[TeacherRef] | None = None,
        students: list[StudentRef] | None = None,
    ) -> AssignmentCandidate:
        return AssignmentCandidate(
            date=self.date,
            time_slot_id=self.time_slot_id,
            teachers=self.teachers if teachers is None else teachers,
            students=self.students if students is None else students,
        )


class AssignmentPatch(BaseModel):
    """Updatable assignment fields; each one is applied only when present in the request."""

    date: dt.date | None = None
    time_slot_id: int | None = Field(default=None, ge=1)
    notes: str | None = Field(default=None, max_length=5000)
    subject: str | None = Field(default=None, max_length=200)
    color_keyword: str | None = Field(default=None, max_length=50)
    teachers: list[TeacherRef] | None = Field(default=None, max_length=20)
    students: list[StudentRef] | None = Field(default=None, max_length=50)

    def column_values(self) -> dict:
        data = self.model_dump(exclude_unset=True, exclude={"teachers", "students"})
        # date and time_slot_id are non-nullable; an explicit null means "leave as is".
        for key in ("date", "time_slot_id"):
            if key in data and data[key] is None:
                data.pop(key)
        return data

    def replaces_teachers(self) -> bool:
        return "teachers" in self.model_fields_set and self.teachers is not None

    def replaces_students(self) -> bool:
        return "students" in self.model_fields_set and self.students is not None


class AssignmentTeacherOut(BaseModel):
    teacher_id: int
    name: str | None
    color_keyword: str | None
    is_substitute: bool

    model_config = {"from_attributes": True}


class AssignmentStudentOut(BaseModel):
    student_id: int
    name: str | None
    english_name: str | None
    color_keyword: str | None
    weakness_level: str | None
    submission_id: str | None

    model_config = {"from_attributes": True}


class AssignmentOut(BaseModel):
    id: int
    date: dt.date
    time_slot_id: int
    room_id: int | None
    notes: str | None
    subject: str | None
    color_keyword: str | None
    is_active: bool
    teachers: list[AssignmentTeacherOut]
    students: list[AssignmentStudentOut]
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

    model_config = {"from_attributes": True}


class ValidationResult(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


class BulkDeleteRequest(BaseModel):
    date: dt.date


class BulkDeleteResult(BaseModel):
    count: int
    ids: list[int] = Field(default_factory=list)


class DuplicateGroup(BaseModel):
    date: dt.date
    time_slot_id: int
    subject: str
    teacher_ids: list[int]
    student_ids: list[int]
    assignment_ids: list[int]


class RemoveDuplicatesResult(BaseModel):
    duplicates_found: int
    removed: int
    removed_ids: list[int] = Field(default_factory=list)
