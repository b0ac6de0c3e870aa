from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tutorgrid.api.deps import get_db
from tutorgrid.core.exceptions import ResourceNotFoundError
from tutorgrid.schemas.assignment import BulkDeleteRequest, BulkDeleteResult
from tutorgrid.schemas.student import StudentCreate, StudentOut, StudentUpdate
from tutorgrid.services.backup import backup_before_delete
from tutorgrid.services.directory import students, students_by_color, unique_students

router = APIRouter()


@router.get("/", response_model=list[StudentOut])
def list_students(on_date: date = Query(alias="date"), db: Session = Depends(get_db)) -> list[StudentOut]:
    return students.get_all(db, on_date)


@router.get("/available", response_model=list[StudentOut])
def list_available_students(
    time_slot_id: int = Query(ge=1),
    on_date: date = Query(alias="date"),
    db: Session = Depends(get_db),
) -> list[StudentOut]:
    return students.available_for_time_slot(db, time_slot_id, on_date)


@router.get("/check-availability")
def check_student_availability(
    student_id: int,
    time_slot_id: int = Query(ge=1),
    on_date: date = Query(alias="date"),
    db: Session = Depends(get_db),
) -> dict:
    return students.check_availability(db, student_id, on_date, time_slot_id).as_dict()


@router.get("/by-color", response_model=list[StudentOut])
def list_students_by_color(
    color: str = Query(min_length=1, max_length=50),
    on_date: date = Query(alias="date"),
    db: Session = Depends(get_db),
) -> list[StudentOut]:
    return students_by_color(db, color, on_date)


@router.get("/all-unique", response_model=list[StudentOut])
def list_unique_students(db: Session = Depends(get_db)) -> list[StudentOut]:
    return unique_students(db)


@router.get("/{student_id}", response_model=StudentOut)
def get_student(student_id: int, db: Session = Depends(get_db)) -> StudentOut:
    student = students.get_by_id(db, student_id)
    if student is None:
        raise ResourceNotFoundError("Student", student_id)
    return student


@router.post("/", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(payload: StudentCreate, db: Session = Depends(get_db)) -> StudentOut:
    student, _ = students.upsert_for_date(db, payload.model_dump())
    return student


@router.put("/{student_id}", response_model=StudentOut)
def update_student(student_id: int, payload: StudentUpdate, db: Session = Depends(get_db)) -> StudentOut:
    student = students.update(db, student_id, payload.model_dump(exclude_unset=True))
    if student is None:
        raise ResourceNotFoundError("Student", student_id)
    return student


@router.delete("/all", response_model=BulkDeleteResult)
def delete_all_students(payload: BulkDeleteRequest, db: Session = Depends(get_db)) -> BulkDeleteResult:
    backup_before_delete(db, f"Before deleting all students on {payload.date.isoformat()}")
    ids = students.delete_by_date(db, payload.date)
    return BulkDeleteResult(count=len(ids), ids=ids)


@router.delete("/{student_id}")
def delete_student(student_id: int, db: Session = Depends(get_db)) -> dict:
    student = students.delete(db, student_id)
    if student is None:
        raise ResourceNotFoundError("Student", student_id)
    return {"success": True, "id": student.id}
