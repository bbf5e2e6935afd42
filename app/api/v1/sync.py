"""
Sync status API endpoint
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.api.schemas import CamelModel
from app.application.sync import get_sync_status


router = APIRouter(prefix="/api/v1/sync", tags=["sync"])


class SyncStatusResponse(CamelModel):
    status: str
    last_transaction_sync_at: str | None = None
    institution_count: int


@router.get("/status", response_model=SyncStatusResponse)
def sync_status(user_id: int, db: Session = Depends(get_db)):
    return SyncStatusResponse.model_validate(get_sync_status(db, user_id))
