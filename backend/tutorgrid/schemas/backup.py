from datetime import datetime

from pydantic import BaseModel, Field


class BackupCreate(BaseModel):
    description: str | None = Field(default=None, max_length=500)


class BackupOut(BaseModel):
    id: str
    filename: str
    description: str | None
    teachers_count: int
    students_count: int
    assignments_count: int
    size_bytes: int
    created_at: datetime

    model_config = {"from_attributes": True}
