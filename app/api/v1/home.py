"""
Monthly home API endpoint
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_data_source, get_db, load_request_settings, require_month
from app.api.schemas import CamelModel, EnrichedLineResponse
from app.application.data_source import MonthlyDataSource
from app.application.monthly import MonthlyBudgetService


router = APIRouter(prefix="/api/v1/home", tags=["home"])


# === Response models ===

class SummaryResponse(CamelModel):
    budget_total: float
    spent_total: float
    remaining: float
    spent_pct: float


class ChartSliceResponse(CamelModel):
    category_id: int
    category_name: str
    spent: float
    color: str


class SyncResponse(CamelModel):
    last_transaction_sync_at: str | None = None


class MonthlyHomeResponse(CamelModel):
    month: str
    period_start: str
    period_end: str
    currency: str
    budget_id: int | None = None
    summary: SummaryResponse
    chart: list[ChartSliceResponse]
    lines: list[EnrichedLineResponse]
    sync: SyncResponse


# === Endpoints ===

@router.get("/monthly", response_model=MonthlyHomeResponse)
def get_monthly_home(
    user_id: int,
    month: str | None = None,
    db: Session = Depends(get_db),
    source: MonthlyDataSource = Depends(get_data_source),
):
    """Everything the home screen needs for one month"""
    month = require_month(month)
    settings = load_request_settings(db, user_id)

    payload = MonthlyBudgetService(source).home(
        user_id, month, currency=settings.currency_code, thresholds=settings.thresholds(),
    )
    return MonthlyHomeResponse.model_validate(payload)
