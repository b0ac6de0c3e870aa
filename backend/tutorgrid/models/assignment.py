import datetime as dt

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from tutorgrid.db.base import Base
from tutorgrid.models.student import Student
from tutorgrid.models.teacher import Teacher
from tutorgrid.models.time_slot import TimeSlot


class Assignment(Base):
    __tablename__ = "assignments"
    __table_args__ = (Index("ix_assignments_date_slot_active", "date", "time_slot_id", "is_active"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time_slot_id: Mapped[int] = mapped_column(ForeignKey("time_slots.id"), nullable=False)
    # Kept for schema compatibility; classes are online and never bound to a room.
    room_id: Mapped[int | None] = mapped_column(Integer, nullable=True, default=None)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    subject: Mapped[str | None] = mapped_column(String(200), nullable=True)
    color_keyword: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    time_slot: Mapped[TimeSlot] = relationship()
    teacher_links: Mapped[list["AssignmentTeacher"]] = relationship(
        back_populates="assignment",
        cascade="all, delete-orphan",
        order_by="AssignmentTeacher.id",
    )
    student_links: Mapped[list["AssignmentStudent"]] = relationship(
        back_populates="assignment",
        cascade="all, delete-orphan",
        order_by="AssignmentStudent.id",
    )

    @property
    def teachers(self) -> list["AssignmentTeacher"]:
        return list(self.teacher_links)

    @property
    def students(self) -> list["AssignmentStudent"]:
        return list(self.student_links)

    @property
    def teacher_ids(self) -> list[int]:
        return sorted(link.teacher_id for link in self.teacher_links)

    @property
    def student_ids(self) -> list[int]:
        return sorted(link.student_id for link in self.student_links)


class AssignmentTeacher(Base):
    """Teacher side of an assignment.

    ``date`` and ``time_slot_id`` mirror the owning assignment and ``is_booked``
    is true while the link holds its slot, so the partial unique index below
    rejects a second active booking of the same teacher at the same time.
    """

    __tablename__ = "assignment_teachers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assignment_id: Mapped[int] = mapped_column(
        ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    teacher_id: Mapped[int] = mapped_column(ForeignKey("teachers.id"), nullable=False, index=True)
    is_substitute: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time_slot_id: Mapped[int] = mapped_column(Integer, nullable=False)
    is_booked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    assignment: Mapped[Assignment] = relationship(back_populates="teacher_links")
    teacher: Mapped[Teacher] = relationship()

    __table_args__ = (
        Index(
            "uq_assignment_teachers_booking",
            "date",
            "time_slot_id",
            "teacher_id",
            unique=True,
            postgresql_where=text("is_booked"),
            sqlite_where=text("is_booked = 1"),
        ),
    )

    @property
    def name(self) -> str | None:
        return self.teacher.name if self.teacher is not None else None

    @property
    def color_keyword(self) -> str | None:
        return self.teacher.color_keyword if self.teacher is not None else None


class AssignmentStudent(Base):
    __tablename__ = "assignment_students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assignment_id: Mapped[int] = mapped_column(
        ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id: Mapped[int] = mapped_column(ForeignKey("students.id"), nullable=False, index=True)
    submission_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time_slot_id: Mapped[int] = mapped_column(Integer, nullable=False)
    is_booked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    assignment: Mapped[Assignment] = relationship(back_populates="student_links")
    student: Mapped[Student] = relationship()

    __table_args__ = (
        Index(
            "uq_assignment_students_booking",
            "date",
            "time_slot_id",
            "student_id",
            unique=True,
            postgresql_where=text("is_booked"),
            sqlite_where=text("is_booked = 1"),
        ),
    )

    @property
    def name(self) -> str | None:
        return self.student.name if self.student is not None else None

    @property
    def english_name(self) -> str | None:
        return self.student.english_name if self.student is not None else None

    @property
    def color_keyword(self) -> str | None:
        return self.student.color_keyword if self.student is not None else None

    @property
    def weakness_level(self) -> str | None:
        return self.student.weakness_level if self.student is not None else None
