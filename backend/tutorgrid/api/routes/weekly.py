from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tutorgrid.api.deps import get_db
from tutorgrid.schemas.weekly import DirectoryCopyRequest, DirectoryCopyResult, WeekRange, WeeklyDataOut
from tutorgrid.services.week import copy_directory_day, template_date_for, week_range, weekly_data

router = APIRouter()


@router.get("/", response_model=WeeklyDataOut)
def get_weekly_data(on_date: date = Query(alias="date"), db: Session = Depends(get_db)) -> WeeklyDataOut:
    return weekly_data(db, on_date)


@router.get("/range", response_model=WeekRange)
def get_week_range(on_date: date = Query(alias="date")) -> WeekRange:
    return week_range(on_date)


@router.get("/template-date")
def get_template_date(day: str = Query(min_length=3, max_length=20)) -> dict:
    return {"day": day, "date": template_date_for(day).isoformat()}


@router.post("/copy-day", response_model=DirectoryCopyResult)
def copy_directory(payload: DirectoryCopyRequest, db: Session = Depends(get_db)) -> DirectoryCopyResult:
    return copy_directory_day(
        db,
        payload.from_date,
        payload.to_date,
        copy_teachers=payload.copy_teachers,
        copy_students=payload.copy_students,
    )
