from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from tutorgrid.api.deps import get_db
from tutorgrid.models.activity_log import ActivityLog
from tutorgrid.schemas.activity import ActivityLogOut

router = APIRouter()


@router.get("/activity/logs", response_model=list[ActivityLogOut])
def list_activity_logs(db: Session = Depends(get_db)) -> list[ActivityLogOut]:
    query = select(ActivityLog).order_by(ActivityLog.created_at.desc()).limit(500)
    return list(db.execute(query).scalars())
