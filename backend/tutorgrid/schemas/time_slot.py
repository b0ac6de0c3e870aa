from __future__ import annotations

import re

from pydantic import BaseModel

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_minutes(value: int) -> str:
    return f"{value // 60:02d}:{value % 60:02d}"


def normalize_slot_ids(value: list[int]) -> list[int]:
    """Deduplicate and sort a set of time slot ids."""
    normalized: set[int] = set()
    for item in value:
        slot_id = int(item)
        if slot_id < 1:
            raise ValueError("Time slot ids must be positive integers")
        normalized.add(slot_id)
    return sorted(normalized)


class TimeSlotOut(BaseModel):
    id: int
    start_time: str
    end_time: str
    display_order: int
    label: str

    model_config = {"from_attributes": True}
