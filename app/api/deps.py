"""
FastAPI dependencies (DB session, data source, LLM client, query helpers)
"""
from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.application.data_source import (
    FixtureMonthlyDataSource, MonthlyDataSource, SqlMonthlyDataSource,
)
from app.application.user_settings import load_user_settings
from app.config import get_settings
from app.domain.month import is_valid_month
from app.domain.user_settings import UserSettings
from app.infrastructure.db.session import get_db as _get_db
from app.infrastructure.llm.openrouter import OpenRouterClient


# Re-export get_db
get_db = _get_db


def get_data_source(db: Session = Depends(get_db)) -> MonthlyDataSource:
    """DATA_SOURCE=fixture serves the demo month without touching the database."""
    if get_settings().DATA_SOURCE == "fixture":
        return FixtureMonthlyDataSource()
    return SqlMonthlyDataSource(db)


def get_llm_client() -> OpenRouterClient:
    return OpenRouterClient(get_settings())


def require_month(month: str | None) -> str:
    """
    Raises:
        HTTPException(400): month missing or not YYYY-MM
    """
    month = (month or "").strip()
    if not is_valid_month(month):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or missing month. Use query month=YYYY-MM (e.g. month=2026-02).",
        )
    return month


def load_request_settings(db: Session, user_id: int) -> UserSettings:
    """Stored user settings; the fixture data source runs on defaults."""
    settings = get_settings()
    if settings.DATA_SOURCE == "fixture":
        return UserSettings(currency_code=settings.DEFAULT_CURRENCY)
    return load_user_settings(db, user_id)
