import datetime as dt

from pydantic import BaseModel, Field

from tutorgrid.schemas.student import StudentOut
from tutorgrid.schemas.teacher import TeacherOut


class WeekRange(BaseModel):
    start_date: dt.date
    end_date: dt.date
    dates: list[dt.date]


class DayDirectory(BaseModel):
    date: dt.date
    day_name: str
    teachers: list[TeacherOut] = Field(default_factory=list)
    students: list[StudentOut] = Field(default_factory=list)


class WeeklyDataOut(BaseModel):
    week_range: WeekRange
    days: list[DayDirectory]


class DirectoryCopyRequest(BaseModel):
    from_date: dt.date
    to_date: dt.date
    copy_teachers: bool = True
    copy_students: bool = True


class DirectoryCopyCount(BaseModel):
    copied: int = 0
    errors: list[str] = Field(default_factory=list)


class DirectoryCopyResult(BaseModel):
    from_date: dt.date
    to_date: dt.date
    teachers: DirectoryCopyCount = Field(default_factory=DirectoryCopyCount)
    students: DirectoryCopyCount = Field(default_factory=DirectoryCopyCount)
