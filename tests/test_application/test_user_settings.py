"""
Tests for user settings persistence
"""
import pytest
from pydantic import ValidationError

from app.application.user_settings import (
    UserSettingsNotFound,
    CreateUserSettingsUseCase, DeleteUserSettingsUseCase, UpdateUserSettingsUseCase,
    get_user_settings, load_user_settings,
)
from app.domain.user_settings import UserSettingsUpdate


def test_defaults_when_no_row(db_session, sample_user_id):
    stored = get_user_settings(db_session, sample_user_id)

    assert stored.id is None
    assert stored.created_at is None
    assert stored.settings.currency_code == "USD"


def test_create_is_idempotent(db_session, sample_user_id):
    use_case = CreateUserSettingsUseCase(db_session)
    first, created = use_case.execute(sample_user_id, UserSettingsUpdate(currency_code="EUR"))
    second, created_again = use_case.execute(sample_user_id, UserSettingsUpdate(currency_code="GBP"))

    assert created is True
    assert created_again is False
    assert first.id == second.id
    assert second.settings.currency_code == "EUR"


def test_update_patches_given_fields(db_session, sample_user_id):
    CreateUserSettingsUseCase(db_session).execute(sample_user_id)

    stored = UpdateUserSettingsUseCase(db_session).execute(
        sample_user_id,
        UserSettingsUpdate(ai_personalities=["direct", "humorous"], status_on_track_max=0.7),
    )

    assert stored.settings.ai_personalities == ["direct", "humorous"]
    assert stored.settings.thresholds().on_track_max == 0.7
    assert load_user_settings(db_session, sample_user_id).ai_frugal_score == 55


def test_update_rejects_crossed_thresholds(db_session, sample_user_id):
    CreateUserSettingsUseCase(db_session).execute(sample_user_id)

    with pytest.raises(ValidationError):
        UpdateUserSettingsUseCase(db_session).execute(
            sample_user_id, UserSettingsUpdate(status_tight_max=0.5),
        )


def test_update_requires_row(db_session, sample_user_id):
    with pytest.raises(UserSettingsNotFound):
        UpdateUserSettingsUseCase(db_session).execute(sample_user_id, UserSettingsUpdate(timezone="UTC"))


def test_delete(db_session, sample_user_id):
    CreateUserSettingsUseCase(db_session).execute(sample_user_id)
    DeleteUserSettingsUseCase(db_session).execute(sample_user_id)

    assert get_user_settings(db_session, sample_user_id).id is None
    with pytest.raises(UserSettingsNotFound):
        DeleteUserSettingsUseCase(db_session).execute(sample_user_id)
