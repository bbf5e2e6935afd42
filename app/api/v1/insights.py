"""
Per-category budget insights
"""
from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps import get_data_source, get_db, load_request_settings
from app.application.data_source import MonthlyDataSource
from app.application.monthly import MonthlyBudgetService
from app.domain.month import is_valid_month, month_token


router = APIRouter(prefix="/insights", tags=["insights"])


class InsightResponse(BaseModel):
    category: str
    budget: float
    spent: float
    remaining: float
    percent_used: float
    status: str


@router.get("/{user_id}", response_model=list[InsightResponse])
def get_insights(
    user_id: int,
    month: str | None = None,
    db: Session = Depends(get_db),
    source: MonthlyDataSource = Depends(get_data_source),
):
    """One row per budget line; [] when the month has no budget. month defaults to the current month."""
    month = (month or "").strip()
    if not is_valid_month(month):
        month = month_token(date.today())

    settings = load_request_settings(db, user_id)
    rows = MonthlyBudgetService(source).insights(user_id, month, settings.thresholds())
    return [InsightResponse(**vars(row)) for row in rows]
