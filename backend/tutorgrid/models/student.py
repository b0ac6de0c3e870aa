import datetime as dt

from sqlalchemy import Boolean, Date, DateTime, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from tutorgrid.db.base import Base


class Student(Base):
    __tablename__ = "students"
    __table_args__ = (Index("ix_students_date_active", "date", "is_active"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    english_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    availability: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    color_keyword: Mapped[str | None] = mapped_column(String(50), nullable=True)
    weakness_level: Mapped[str | None] = mapped_column(String(100), nullable=True)
    teacher_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
