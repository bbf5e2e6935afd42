"""
User settings schema.

UserSettings holds every preference with its default; UserSettingsUpdate is
the validated partial update accepted from clients (unknown keys rejected).
Core functions never read settings directly: callers derive StatusThresholds
and AISettings from them and pass those in.
"""
from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.domain.ai_prompts import AISettings, Personality
from app.domain.budget import StatusThresholds


class UserSettings(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    timezone: str = "America/New_York"
    currency_code: str = Field(default="USD", min_length=3, max_length=3)
    week_starts_on: int = Field(default=0, ge=0, le=1)  # 0=Sunday, 1=Monday
    status_on_track_max: float = Field(default=0.85, gt=0)
    status_tight_max: float = Field(default=1.0, gt=0)
    baseline_months: int = Field(default=6, ge=1, le=24)
    include_pending_in_insights: bool = False
    insights_enabled: bool = True
    encouragement_insights_enabled: bool = True
    spike_alert_threshold_pct: float = Field(default=0.25, ge=0)
    ai_personalities: list[Personality] = Field(default_factory=lambda: ["nice"], max_length=3)
    ai_frugal_score: int = Field(default=55, ge=0, le=100)
    ai_advice_score: int = Field(default=60, ge=0, le=100)

    @model_validator(mode="after")
    def _check_thresholds(self):
        if self.status_on_track_max > self.status_tight_max:
            raise ValueError("status_on_track_max must not exceed status_tight_max")
        return self

    def thresholds(self) -> StatusThresholds:
        return StatusThresholds(
            on_track_max=self.status_on_track_max,
            tight_max=self.status_tight_max,
        )

    def ai_settings(self) -> AISettings:
        return AISettings(
            personalities=self.ai_personalities,
            frugal_score=self.ai_frugal_score,
            advice_score=self.ai_advice_score,
        )


class UserSettingsUpdate(BaseModel):
    """Partial update: only the keys present in the request are applied."""
    model_config = ConfigDict(extra="forbid")

    timezone: str | None = None
    currency_code: str | None = Field(default=None, min_length=3, max_length=3)
    week_starts_on: int | None = Field(default=None, ge=0, le=1)
    status_on_track_max: float | None = Field(default=None, gt=0)
    status_tight_max: float | None = Field(default=None, gt=0)
    baseline_months: int | None = Field(default=None, ge=1, le=24)
    include_pending_in_insights: bool | None = None
    insights_enabled: bool | None = None
    encouragement_insights_enabled: bool | None = None
    spike_alert_threshold_pct: float | None = Field(default=None, ge=0)
    ai_personalities: list[Personality] | None = Field(default=None, max_length=3)
    ai_frugal_score: int | None = Field(default=None, ge=0, le=100)
    ai_advice_score: int | None = Field(default=None, ge=0, le=100)

    @model_validator(mode="after")
    def _check_thresholds(self):
        on_track, tight = self.status_on_track_max, self.status_tight_max
        if on_track is not None and tight is not None and on_track > tight:
            raise ValueError("status_on_track_max must not exceed status_tight_max")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)


def apply_update(current: UserSettings, update: UserSettingsUpdate) -> UserSettings:
    """
    Merge an update into settings; the merged result is re-validated so a
    single threshold change cannot cross the other one.
    """
    merged = current.model_dump()
    merged.update(update.changes())
    return UserSettings.model_validate(merged)
