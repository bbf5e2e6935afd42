"""
User settings persistence.

A user without a user_settings row gets the defaults of UserSettings; the row
is created explicitly (create is idempotent) and then patched.
"""
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from app.domain.user_settings import UserSettings, UserSettingsUpdate, apply_update
from app.infrastructure.db.models import UserSettingsModel


class UserSettingsNotFound(LookupError):
    def __init__(self, user_id: int):
        super().__init__(f"Settings not found for user {user_id}")
        self.user_id = user_id


@dataclass(frozen=True)
class StoredSettings:
    """Settings plus row metadata; id and created_at are None for defaults."""
    user_id: int
    settings: UserSettings
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


def _row(db: Session, user_id: int) -> UserSettingsModel | None:
    return db.query(UserSettingsModel).filter(UserSettingsModel.user_id == user_id).first()


def _stored(row: UserSettingsModel) -> StoredSettings:
    return StoredSettings(
        user_id=row.user_id,
        settings=UserSettings.model_validate(row),
        id=row.id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def load_user_settings(db: Session, user_id: int) -> UserSettings:
    row = _row(db, user_id)
    return UserSettings.model_validate(row) if row is not None else UserSettings()


def get_user_settings(db: Session, user_id: int) -> StoredSettings:
    row = _row(db, user_id)
    if row is None:
        return StoredSettings(user_id=user_id, settings=UserSettings())
    return _stored(row)


class CreateUserSettingsUseCase:
    """
    Create the row from defaults merged with `initial`.

    Returns (stored, created); an existing row is returned unchanged.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self, user_id: int, initial: UserSettingsUpdate | None = None,
    ) -> tuple[StoredSettings, bool]:
        existing = _row(self.db, user_id)
        if existing is not None:
            return _stored(existing), False

        settings = UserSettings()
        if initial is not None:
            settings = apply_update(settings, initial)
        row = UserSettingsModel(user_id=user_id, **settings.model_dump())
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return _stored(row), True


class UpdateUserSettingsUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, user_id: int, update: UserSettingsUpdate) -> StoredSettings:
        """
        Raises:
            UserSettingsNotFound: no row yet (create it first)
            pydantic.ValidationError: merged thresholds are inconsistent
        """
        row = _row(self.db, user_id)
        if row is None:
            raise UserSettingsNotFound(user_id)

        merged = apply_update(UserSettings.model_validate(row), update)
        for key in update.changes():
            setattr(row, key, getattr(merged, key))
        self.db.commit()
        self.db.refresh(row)
        return _stored(row)


class DeleteUserSettingsUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, user_id: int) -> None:
        row = _row(self.db, user_id)
        if row is None:
            raise UserSettingsNotFound(user_id)
        self.db.delete(row)
        self.db.commit()
