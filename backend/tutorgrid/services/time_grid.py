from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tutorgrid.models.time_slot import TimeSlot
from tutorgrid.schemas.time_slot import format_minutes, parse_time_to_minutes

logger = logging.getLogger(__name__)


def build_time_grid(start: str, end: str, minutes: int) -> list[tuple[str, str]]:
    """Split ``start``..``end`` into consecutive fixed-length slots.

    A trailing remainder shorter than ``minutes`` is not emitted.
    """
    if minutes <= 0:
        raise ValueError("Slot length must be positive")
    start_minutes = parse_time_to_minutes(start)
    end_minutes = parse_time_to_minutes(end)
    if end_minutes <= start_minutes:
        raise ValueError("Grid end must be after grid start")

    slots: list[tuple[str, str]] = []
    cursor = start_minutes
    while cursor + minutes <= end_minutes:
        slots.append((format_minutes(cursor), format_minutes(cursor + minutes)))
        cursor += minutes
    return slots


def seed_time_slots(db: Session, *, start: str, end: str, minutes: int) -> int:
    """Insert the grid when the table is empty. Returns the number of rows created."""
    existing = db.execute(select(func.count()).select_from(TimeSlot)).scalar_one()
    if existing:
        return 0
    grid = build_time_grid(start, end, minutes)
    for order, (slot_start, slot_end) in enumerate(grid, start=1):
        db.add(TimeSlot(id=order, start_time=slot_start, end_time=slot_end, display_order=order))
    db.commit()
    logger.info("Seeded %d time slots (%s-%s, %d min)", len(grid), start, end, minutes)
    return len(grid)


def list_time_slots(db: Session) -> list[TimeSlot]:
    return list(db.execute(select(TimeSlot).order_by(TimeSlot.display_order)).scalars())


def get_time_slot(db: Session, time_slot_id: int) -> TimeSlot | None:
    return db.get(TimeSlot, time_slot_id)
