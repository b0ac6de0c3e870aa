from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tutorgrid.api.deps import get_db
from tutorgrid.core.exceptions import ResourceNotFoundError
from tutorgrid.schemas.assignment import BulkDeleteRequest, BulkDeleteResult
from tutorgrid.schemas.teacher import TeacherCreate, TeacherOut, TeacherUpdate
from tutorgrid.services.backup import backup_before_delete
from tutorgrid.services.directory import teachers

router = APIRouter()


@router.get("/", response_model=list[TeacherOut])
def list_teachers(on_date: date = Query(alias="date"), db: Session = Depends(get_db)) -> list[TeacherOut]:
    return teachers.get_all(db, on_date)


@router.get("/available", response_model=list[TeacherOut])
def list_available_teachers(
    time_slot_id: int = Query(ge=1),
    on_date: date = Query(alias="date"),
    db: Session = Depends(get_db),
) -> list[TeacherOut]:
    return teachers.available_for_time_slot(db, time_slot_id, on_date)


@router.get("/check-availability")
def check_teacher_availability(
    teacher_id: int,
    time_slot_id: int = Query(ge=1),
    on_date: date = Query(alias="date"),
    db: Session = Depends(get_db),
) -> dict:
    return teachers.check_availability(db, teacher_id, on_date, time_slot_id).as_dict()


@router.get("/{teacher_id}", response_model=TeacherOut)
def get_teacher(teacher_id: int, db: Session = Depends(get_db)) -> TeacherOut:
    teacher = teachers.get_by_id(db, teacher_id)
    if teacher is None:
        raise ResourceNotFoundError("Teacher", teacher_id)
    return teacher


@router.post("/", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
def create_teacher(payload: TeacherCreate, db: Session = Depends(get_db)) -> TeacherOut:
    teacher, _ = teachers.upsert_for_date(db, payload.model_dump())
    return teacher


@router.put("/{teacher_id}", response_model=TeacherOut)
def update_teacher(teacher_id: int, payload: TeacherUpdate, db: Session = Depends(get_db)) -> TeacherOut:
    teacher = teachers.update(db, teacher_id, payload.model_dump(exclude_unset=True))
    if teacher is None:
        raise ResourceNotFoundError("Teacher", teacher_id)
    return teacher


@router.delete("/all", response_model=BulkDeleteResult)
def delete_all_teachers(payload: BulkDeleteRequest, db: Session = Depends(get_db)) -> BulkDeleteResult:
    backup_before_delete(db, f"Before deleting all teachers on {payload.date.isoformat()}")
    ids = teachers.delete_by_date(db, payload.date)
    return BulkDeleteResult(count=len(ids), ids=ids)


@router.delete("/{teacher_id}")
def delete_teacher(teacher_id: int, db: Session = Depends(get_db)) -> dict:
    teacher = teachers.delete(db, teacher_id)
    if teacher is None:
        raise ResourceNotFoundError("Teacher", teacher_id)
    return {"success": True, "id": teacher.id}
