"""
User settings API endpoints
"""
from datetime import datetime

from fastapi import APIRouter, Body, Depends, HTTPException, Response
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.application.user_settings import (
    StoredSettings, UserSettingsNotFound,
    CreateUserSettingsUseCase, DeleteUserSettingsUseCase, UpdateUserSettingsUseCase,
    get_user_settings,
)
from app.domain.user_settings import UserSettings, UserSettingsUpdate


router = APIRouter(prefix="/api/v1/user-settings", tags=["user-settings"])


# === Response models ===

class UserSettingsResponse(UserSettings):
    id: int | None = None
    user_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DeleteSettingsResponse(BaseModel):
    message: str
    user_id: int


def _response(stored: StoredSettings) -> UserSettingsResponse:
    return UserSettingsResponse(
        **stored.settings.model_dump(),
        id=stored.id,
        user_id=stored.user_id,
        created_at=stored.created_at,
        updated_at=stored.updated_at,
    )


# === Endpoints ===

@router.get("/{user_id}", response_model=UserSettingsResponse)
def read_settings(user_id: int, db: Session = Depends(get_db)):
    """Stored settings, or the defaults (id=null) when none were saved"""
    return _response(get_user_settings(db, user_id))


@router.post("/{user_id}", response_model=UserSettingsResponse, status_code=201)
def create_settings(
    user_id: int,
    response: Response,
    req: UserSettingsUpdate | None = Body(default=None),
    db: Session = Depends(get_db),
):
    """Create settings; an existing row is returned unchanged with 200"""
    try:
        stored, created = CreateUserSettingsUseCase(db).execute(user_id, req)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not created:
        response.status_code = 200
    return _response(stored)


@router.patch("/{user_id}", response_model=UserSettingsResponse)
def update_settings(user_id: int, req: UserSettingsUpdate, db: Session = Depends(get_db)):
    try:
        stored = UpdateUserSettingsUseCase(db).execute(user_id, req)
    except UserSettingsNotFound:
        raise HTTPException(status_code=404, detail="User settings not found")
    except ValidationError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    return _response(stored)


@router.delete("/{user_id}", response_model=DeleteSettingsResponse)
def delete_settings(user_id: int, db: Session = Depends(get_db)):
    try:
        DeleteUserSettingsUseCase(db).execute(user_id)
    except UserSettingsNotFound:
        raise HTTPException(status_code=404, detail="User settings not found")
    return DeleteSettingsResponse(message="User settings deleted", user_id=user_id)
