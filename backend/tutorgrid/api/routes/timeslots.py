from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tutorgrid.api.deps import get_db
from tutorgrid.core.exceptions import ResourceNotFoundError
from tutorgrid.schemas.time_slot import TimeSlotOut
from tutorgrid.services.time_grid import get_time_slot, list_time_slots

router = APIRouter()


@router.get("/", response_model=list[TimeSlotOut])
def list_slots(db: Session = Depends(get_db)) -> list[TimeSlotOut]:
    return list_time_slots(db)


@router.get("/{time_slot_id}", response_model=TimeSlotOut)
def get_slot(time_slot_id: int, db: Session = Depends(get_db)) -> TimeSlotOut:
    slot = get_time_slot(db, time_slot_id)
    if slot is None:
        raise ResourceNotFoundError("Time slot", time_slot_id)
    return slot
