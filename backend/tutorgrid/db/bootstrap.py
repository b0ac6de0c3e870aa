from __future__ import annotations

import logging

from sqlalchemy import inspect, text

from tutorgrid.core.config import get_settings
from tutorgrid.db.base import Base
from tutorgrid.db.session import SessionLocal, engine
from tutorgrid.services.time_grid import seed_time_slots

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "time_slots": {"id", "start_time", "end_time", "display_order"},
    "teachers": {"id", "name", "availability", "date", "is_active"},
    "students": {"id", "name", "english_name", "availability", "date", "is_active"},
    "assignments": {"id", "date", "time_slot_id", "room_id", "is_active"},
    "assignment_teachers": {"id", "assignment_id", "teacher_id", "date", "time_slot_id", "is_booked"},
    "assignment_students": {"id", "assignment_id", "student_id", "date", "time_slot_id", "is_booked"},
}

LINK_TABLES = {
    "assignment_teachers": "teacher_id",
    "assignment_students": "student_id",
}


def _ensure_link_booking_columns() -> None:
    """Add and backfill the booking columns on link tables created before they existed."""
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        for table_name, person_column in LINK_TABLES.items():
            if table_name not in table_names:
                continue
            column_names = {item["name"] for item in inspector.get_columns(table_name)}
            if "is_booked" in column_names:
                continue

            connection.execute(text(f"ALTER TABLE {table_name} ADD COLUMN date DATE"))
            connection.execute(text(f"ALTER TABLE {table_name} ADD COLUMN time_slot_id INTEGER"))
            connection.execute(
                text(f"ALTER TABLE {table_name} ADD COLUMN is_booked BOOLEAN NOT NULL DEFAULT FALSE")
            )
            connection.execute(
                text(
                    f"UPDATE {table_name} SET "
                    f"date = (SELECT a.date FROM assignments a WHERE a.id = {table_name}.assignment_id), "
                    f"time_slot_id = (SELECT a.time_slot_id FROM assignments a WHERE a.id = {table_name}.assignment_id), "
                    f"is_booked = (SELECT a.is_active FROM assignments a WHERE a.id = {table_name}.assignment_id)"
                )
            )
            # Existing double bookings keep only their oldest link booked.
            connection.execute(
                text(
                    f"UPDATE {table_name} SET is_booked = :unbooked "
                    f"WHERE is_booked = :booked AND id > ("
                    f"SELECT MIN(other.id) FROM {table_name} other "
                    f"WHERE other.is_booked = :booked "
                    f"AND other.date = {table_name}.date "
                    f"AND other.time_slot_id = {table_name}.time_slot_id "
                    f"AND other.{person_column} = {table_name}.{person_column})"
                ),
                {"booked": True, "unbooked": False},
            )
            for index in Base.metadata.tables[table_name].indexes:
                index.create(connection, checkfirst=True)
            logger.info("Added booking columns to %s", table_name)


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def _seed_time_grid() -> None:
    settings = get_settings()
    with SessionLocal() as db:
        seed_time_slots(
            db,
            start=settings.time_grid_start,
            end=settings.time_grid_end,
            minutes=settings.time_slot_minutes,
        )


def ensure_runtime_schema_compatibility() -> None:
    try:
        # Ensure missing tables are present before additive compatibility patches.
        Base.metadata.create_all(bind=engine)
        _ensure_link_booking_columns()
        _assert_required_columns()
        _seed_time_grid()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
