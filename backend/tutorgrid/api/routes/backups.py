from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tutorgrid.api.deps import get_db
from tutorgrid.schemas.backup import BackupCreate, BackupOut
from tutorgrid.services.backup import create_backup, list_backups

router = APIRouter()


@router.get("/", response_model=list[BackupOut])
def list_snapshots(db: Session = Depends(get_db)) -> list[BackupOut]:
    return list_backups(db)


@router.post("/", response_model=BackupOut, status_code=status.HTTP_201_CREATED)
def create_snapshot(payload: BackupCreate, db: Session = Depends(get_db)) -> BackupOut:
    return create_backup(db, payload.description or "Manual backup")
