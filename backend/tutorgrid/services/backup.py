from __future__ import annotations

from datetime import datetime, timezone
import json
import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tutorgrid.core.config import get_settings
from tutorgrid.models.assignment import Assignment, AssignmentStudent, AssignmentTeacher
from tutorgrid.models.backup import BackupSnapshot
from tutorgrid.models.student import Student
from tutorgrid.models.teacher import Teacher

logger = logging.getLogger(__name__)

_COLUMNS = {
    "teachers": (Teacher, ("id", "name", "availability", "color_keyword", "date", "is_active")),
    "students": (
        Student,
        ("id", "name", "english_name", "availability", "color_keyword", "weakness_level", "teacher_notes", "date", "is_active"),
    ),
    "assignments": (
        Assignment,
        ("id", "date", "time_slot_id", "notes", "subject", "color_keyword", "is_active"),
    ),
    "assignment_teachers": (AssignmentTeacher, ("id", "assignment_id", "teacher_id", "is_substitute", "is_booked")),
    "assignment_students": (AssignmentStudent, ("id", "assignment_id", "student_id", "submission_id", "is_booked")),
}


def _serialize(value):
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def _dump(db: Session, model, columns: tuple[str, ...]) -> list[dict]:
    rows = db.execute(select(model).order_by(model.id)).scalars()
    return [{column: _serialize(getattr(row, column)) for column in columns} for row in rows]


def _active_count(db: Session, model) -> int:
    return db.execute(select(func.count()).select_from(model).where(model.is_active.is_(True))).scalar_one()


def create_backup(db: Session, description: str | None = None) -> BackupSnapshot:
    """Snapshot the scheduling tables into ``backup_snapshots`` and prune old ones."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {"timestamp": now.isoformat()}
    for key, (model, columns) in _COLUMNS.items():
        payload[key] = _dump(db, model, columns)

    snapshot = BackupSnapshot(
        filename=f"tutorgrid-backup-{now.strftime('%Y%m%dT%H%M%S%fZ')}.json",
        description=description,
        teachers_count=_active_count(db, Teacher),
        students_count=_active_count(db, Student),
        assignments_count=_active_count(db, Assignment),
        size_bytes=len(json.dumps(payload).encode("utf-8")),
        payload=payload,
    )
    db.add(snapshot)
    db.flush()

    stale = db.execute(
        select(BackupSnapshot)
        .order_by(BackupSnapshot.created_at.desc(), BackupSnapshot.filename.desc())
        .offset(settings.backup_keep_count)
    ).scalars()
    pruned = 0
    for old in stale:
        db.delete(old)
        pruned += 1
    db.commit()
    db.refresh(snapshot)
    logger.info("Created backup %s (%d pruned)", snapshot.filename, pruned)
    return snapshot


def backup_before_delete(db: Session, description: str) -> BackupSnapshot | None:
    """Best-effort backup ahead of a bulk delete; a failure never blocks the delete."""
    try:
        return create_backup(db, description)
    except Exception:
        db.rollback()
        logger.exception("Backup before bulk delete failed: %s", description)
        return None


def list_backups(db: Session) -> list[BackupSnapshot]:
    query = select(BackupSnapshot).order_by(BackupSnapshot.created_at.desc(), BackupSnapshot.filename.desc())
    return list(db.execute(query).scalars())
