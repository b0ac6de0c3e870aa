from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tutorgrid.api.deps import get_db
from tutorgrid.core.exceptions import AssignmentValidationError, InvalidRequestError, ResourceNotFoundError
from tutorgrid.schemas.assignment import (
    AssignmentCandidate,
    AssignmentCreate,
    AssignmentOut,
    AssignmentPatch,
    BulkDeleteRequest,
    BulkDeleteResult,
    DuplicateGroup,
    RemoveDuplicatesResult,
    ValidationResult,
)
from tutorgrid.schemas.copy import CopyDayRequest, CopySummary, CopyWeekRequest
from tutorgrid.services import assignments as assignment_service
from tutorgrid.services.conflict_service import validate_assignment
from tutorgrid.services.copy_service import copy_day, copy_week

router = APIRouter()


@router.get("/", response_model=list[AssignmentOut])
def list_assignments(on_date: date = Query(alias="date"), db: Session = Depends(get_db)) -> list[AssignmentOut]:
    return assignment_service.get_by_date(db, on_date)


@router.get("/date-range", response_model=list[AssignmentOut])
def list_assignments_in_range(
    start_date: date,
    days: int = Query(default=7, ge=1, le=366),
    db: Session = Depends(get_db),
) -> list[AssignmentOut]:
    return assignment_service.get_by_date_range(db, start_date, days)


@router.get("/duplicates", response_model=list[DuplicateGroup])
def list_duplicate_assignments(db: Session = Depends(get_db)) -> list[DuplicateGroup]:
    return assignment_service.find_duplicates(db)


@router.post("/duplicates/remove", response_model=RemoveDuplicatesResult)
def remove_duplicate_assignments(db: Session = Depends(get_db)) -> RemoveDuplicatesResult:
    return assignment_service.remove_duplicates(db)


@router.get("/student/{student_id}", response_model=list[AssignmentOut])
def list_student_assignments(student_id: int, db: Session = Depends(get_db)) -> list[AssignmentOut]:
    return assignment_service.get_by_student_id(db, student_id)


@router.post("/validate", response_model=ValidationResult)
def validate(payload: AssignmentCandidate, db: Session = Depends(get_db)) -> ValidationResult:
    return validate_assignment(db, payload)


@router.post("/copy-day", response_model=CopySummary)
def copy_day_schedule(payload: CopyDayRequest, db: Session = Depends(get_db)) -> CopySummary:
    return copy_day(db, payload.source_date, payload.target_date)


@router.post("/copy-week", response_model=CopySummary)
def copy_week_schedule(payload: CopyWeekRequest, db: Session = Depends(get_db)) -> CopySummary:
    return copy_week(db, payload.source_date, payload.target_date)


@router.delete("/all", response_model=BulkDeleteResult)
def delete_all_assignments(payload: BulkDeleteRequest, db: Session = Depends(get_db)) -> BulkDeleteResult:
    ids = assignment_service.delete_all(db, payload.date)
    return BulkDeleteResult(count=len(ids), ids=ids)


@router.get("/{assignment_id}", response_model=AssignmentOut)
def get_assignment(
    assignment_id: int,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
) -> AssignmentOut:
    assignment = assignment_service.get_by_id(db, assignment_id, include_inactive=include_inactive)
    if assignment is None:
        raise ResourceNotFoundError("Assignment", assignment_id)
    return assignment


@router.post("/", response_model=AssignmentOut, status_code=status.HTTP_201_CREATED)
def create_assignment(payload: AssignmentCreate, db: Session = Depends(get_db)) -> AssignmentOut:
    return assignment_service.create(db, payload)


@router.put("/{assignment_id}", response_model=AssignmentOut)
def update_assignment(assignment_id: int, payload: AssignmentPatch, db: Session = Depends(get_db)) -> AssignmentOut:
    assignment = assignment_service.get_by_id(db, assignment_id)
    if assignment is None:
        raise ResourceNotFoundError("Assignment", assignment_id)

    candidate = assignment_service.candidate_for_update(assignment, payload)
    if not candidate.teachers and not candidate.students:
        raise InvalidRequestError("An assignment needs at least one teacher or one student")

    result = validate_assignment(db, candidate)
    if not result.valid:
        raise AssignmentValidationError(result.errors)

    updated = assignment_service.update(db, assignment_id, payload)
    if updated is None:
        raise ResourceNotFoundError("Assignment", assignment_id)
    return updated


@router.delete("/{assignment_id}", response_model=AssignmentOut)
def delete_assignment(assignment_id: int, db: Session = Depends(get_db)) -> AssignmentOut:
    assignment = assignment_service.delete(db, assignment_id)
    if assignment is None:
        raise ResourceNotFoundError("Assignment", assignment_id)
    return assignment


@router.post("/{assignment_id}/restore", response_model=AssignmentOut)
def restore_assignment(assignment_id: int, db: Session = Depends(get_db)) -> AssignmentOut:
    assignment = assignment_service.restore(db, assignment_id)
    if assignment is None:
        raise ResourceNotFoundError("Assignment", assignment_id)
    return assignment
