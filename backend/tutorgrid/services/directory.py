"""Teacher and student directory operations.

Teachers and students are date-scoped rows: the same person has one row per
date they appear on, tied together only by a case-insensitive name match.
Both kinds share one implementation, parameterised by model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
import logging

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from tutorgrid.models.assignment import Assignment, AssignmentStudent, AssignmentTeacher
from tutorgrid.models.student import Student
from tutorgrid.models.teacher import Teacher

logger = logging.getLogger(__name__)

SUGGESTION_LIMIT = 3
LISTED_NAMES_LIMIT = 10


@dataclass
class FindOrCreateResult:
    found: bool
    record: Teacher | Student | None = None
    created: bool = False
    error: str | None = None


@dataclass
class AvailabilityCheck:
    available: bool
    reason: str | None = None

    def as_dict(self) -> dict:
        payload: dict = {"available": self.available}
        if self.reason:
            payload["reason"] = self.reason
        return payload


@dataclass
class DirectoryService:
    model: type
    label: str
    link_model: type
    link_column: str
    clone_fields: tuple[str, ...]
    search_fields: tuple[str, ...] = ("name",)
    _link_fk: object = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._link_fk = getattr(self.link_model, self.link_column)

    # Reads

    def get_all(self, db: Session, on_date: date) -> list:
        query = (
            select(self.model)
            .where(self.model.date == on_date, self.model.is_active.is_(True))
            .order_by(self.model.name, self.model.id)
        )
        return list(db.execute(query).scalars())

    def get_by_id(self, db: Session, record_id: int):
        return db.get(self.model, record_id)

    def find_by_name(self, db: Session, name: str, on_date: date):
        """Exact, case-insensitive lookup on one date, inactive rows included."""
        query = (
            select(self.model)
            .where(func.lower(self.model.name) == name.strip().lower(), self.model.date == on_date)
            .order_by(self.model.is_active.desc(), self.model.id)
            .limit(1)
        )
        return db.execute(query).scalar_one_or_none()

    def available_for_time_slot(self, db: Session, time_slot_id: int, on_date: date) -> list:
        return [row for row in self.get_all(db, on_date) if time_slot_id in (row.availability or [])]

    def check_availability(self, db: Session, record_id: int, on_date: date, time_slot_id: int) -> AvailabilityCheck:
        record = db.get(self.model, record_id)
        if record is None or not record.is_active or time_slot_id not in (record.availability or []):
            return AvailabilityCheck(False, f"{self.label} not available at this time slot")

        conflict = db.execute(
            select(Assignment.id)
            .join(self.link_model, self.link_model.assignment_id == Assignment.id)
            .where(
                self._link_fk == record_id,
                Assignment.date == on_date,
                Assignment.time_slot_id == time_slot_id,
                Assignment.is_active.is_(True),
            )
            .limit(1)
        ).scalar_one_or_none()
        if conflict is not None:
            return AvailabilityCheck(False, f"{self.label} already assigned at this time")
        return AvailabilityCheck(True)

    # Writes

    def create(self, db: Session, values: dict):
        if not values.get("date"):
            raise ValueError("Date is required")
        data = dict(values)
        data["name"] = data["name"].strip()
        data.setdefault("availability", [])
        record = self.model(**data)
        db.add(record)
        db.commit()
        db.refresh(record)
        logger.info("Created %s %s (%s) on %s", self.label.lower(), record.id, record.name, record.date)
        return record

    def update(self, db: Session, record_id: int, values: dict):
        record = db.get(self.model, record_id)
        if record is None:
            return None
        self._apply(record, values)
        db.commit()
        db.refresh(record)
        return record

    def reactivate(self, db: Session, record_id: int, values: dict):
        record = db.get(self.model, record_id)
        if record is None:
            return None
        self._apply(record, values)
        record.is_active = True
        db.commit()
        db.refresh(record)
        logger.info("Reactivated %s %s (%s) on %s", self.label.lower(), record.id, record.name, record.date)
        return record

    def upsert_for_date(self, db: Session, values: dict) -> tuple[object, bool]:
        """Reactivate the row with the same name on the same date, or create one."""
        existing = self.find_by_name(db, values["name"], values["date"])
        if existing is not None:
            return self.reactivate(db, existing.id, values), False
        return self.create(db, values), True

    def delete(self, db: Session, record_id: int):
        record = db.get(self.model, record_id)
        if record is None:
            return None
        record.is_active = False
        db.commit()
        db.refresh(record)
        return record

    def delete_by_date(self, db: Session, on_date: date) -> list[int]:
        ids = [row.id for row in self.get_all(db, on_date)]
        if ids:
            db.execute(update(self.model).where(self.model.id.in_(ids)).values(is_active=False))
            db.commit()
            db.expire_all()
        logger.info("Soft-deleted %d %s row(s) on %s", len(ids), self.label.lower(), on_date)
        return ids

    def clone_values(self, record, on_date: date) -> dict:
        values = {name: getattr(record, name) for name in self.clone_fields}
        values["availability"] = list(record.availability or [])
        values["date"] = on_date
        return values

    def find_or_create_for_date(self, db: Session, name: str, on_date: date) -> FindOrCreateResult:
        """Resolve a loosely typed name to a row on ``on_date``, cloning the latest match if needed."""
        term = name.strip().lower()
        pattern = f"%{term}%"
        conditions = [func.lower(getattr(self.model, column)).like(pattern) for column in self.search_fields]
        source = db.execute(
            select(self.model)
            .where(or_(*conditions), self.model.is_active.is_(True))
            .order_by(self.model.date.desc(), self.model.id.desc())
            .limit(1)
        ).scalar_one_or_none()

        if source is None:
            return FindOrCreateResult(found=False, error=self._not_found_message(db, name))

        existing = db.execute(
            select(self.model).where(
                func.lower(self.model.name) == source.name.lower(),
                self.model.date == on_date,
                self.model.is_active.is_(True),
            )
        ).scalars().first()
        if existing is not None:
            return FindOrCreateResult(found=True, record=existing)

        record = self.create(db, self.clone_values(source, on_date))
        return FindOrCreateResult(found=True, record=record, created=True)

    def _not_found_message(self, db: Session, name: str) -> str:
        term = name.strip().lower()
        names: list[str] = []
        seen: set[str] = set()
        rows = db.execute(
            select(self.model).where(self.model.is_active.is_(True)).order_by(self.model.date.desc())
        ).scalars()
        for row in rows:
            key = row.name.lower()
            if key in seen:
                continue
            seen.add(key)
            names.append(row.name)

        similar = [
            item
            for item in names
            if term in item.lower()
            or item.lower() in term
            or (len(term) >= 2 and item.lower().startswith(term[:2]))
        ]
        message = f'No {self.label.lower()} found matching "{name}".'
        if similar:
            return f"{message} Did you mean: {', '.join(similar[:SUGGESTION_LIMIT])}?"
        if names:
            listed = ", ".join(names[:LISTED_NAMES_LIMIT])
            more = "..." if len(names) > LISTED_NAMES_LIMIT else ""
            return f"{message} Available {self.label.lower()}s: {listed}{more}"
        return message

    @staticmethod
    def _apply(record, values: dict) -> None:
        for key, value in values.items():
            if key == "name" and value is not None:
                value = value.strip()
            if key in {"name", "availability"} and value is None:
                continue
            setattr(record, key, value)


teachers = DirectoryService(
    model=Teacher,
    label="Teacher",
    link_model=AssignmentTeacher,
    link_column="teacher_id",
    clone_fields=("name", "color_keyword"),
)

students = DirectoryService(
    model=Student,
    label="Student",
    link_model=AssignmentStudent,
    link_column="student_id",
    clone_fields=("name", "english_name", "color_keyword", "weakness_level", "teacher_notes"),
    search_fields=("name", "english_name"),
)


def students_by_color(db: Session, color: str, on_date: date) -> list[Student]:
    return [row for row in students.get_all(db, on_date) if row.color_keyword == color]


def unique_students(db: Session) -> list[Student]:
    """One active row per lower-cased name, preferring the oldest row."""
    rows = db.execute(
        select(Student).where(Student.is_active.is_(True)).order_by(func.lower(Student.name), Student.id)
    ).scalars()
    unique: dict[str, Student] = {}
    for row in rows:
        unique.setdefault(row.name.lower(), row)
    return list(unique.values())
