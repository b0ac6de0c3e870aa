import datetime as dt

from pydantic import BaseModel, Field, field_validator

from tutorgrid.schemas.time_slot import normalize_slot_ids


class StudentBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    english_name: str | None = Field(default=None, max_length=200)
    availability: list[int] = Field(default_factory=list, max_length=96)
    color_keyword: str | None = Field(default=None, max_length=50)
    weakness_level: str | None = Field(default=None, max_length=100)
    teacher_notes: str | None = Field(default=None, max_length=5000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("Name cannot be blank")
        return name

    @field_validator("english_name")
    @classmethod
    def strip_english_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("availability")
    @classmethod
    def normalize_availability(cls, value: list[int]) -> list[int]:
        return normalize_slot_ids(value)


class StudentCreate(StudentBase):
    date: dt.date


class StudentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    english_name: str | None = Field(default=None, max_length=200)
    availability: list[int] | None = Field(default=None, max_length=96)
    color_keyword: str | None = Field(default=None, max_length=50)
    weakness_level: str | None = Field(default=None, max_length=100)
    teacher_notes: str | None = Field(default=None, max_length=5000)

    @field_validator("availability")
    @classmethod
    def normalize_optional_availability(cls, value: list[int] | None) -> list[int] | None:
        if value is None:
            return None
        return normalize_slot_ids(value)


class StudentOut(StudentBase):
    id: int
    date: dt.date
    is_active: bool
    created_at: dt.datetime | None = None

    model_config = {"from_attributes": True}
