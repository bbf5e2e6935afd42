"""
Category API endpoints
"""
from datetime import date as date_type

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db, load_request_settings, require_month
from app.api.schemas import CamelModel
from app.application.categories import CategoryDetailService, CategoryNotFound


router = APIRouter(prefix="/api/v1/categories", tags=["categories"])


# === Response models ===

class CategoryTransactionResponse(CamelModel):
    id: int
    amount: float
    direction: str
    name: str | None = None
    merchant_name: str | None = None
    transaction_date: date_type
    is_manual: bool


class DailySpendResponse(CamelModel):
    date: date_type
    spent: float


class PreviousMonthResponse(CamelModel):
    month: str
    planned: float
    spent: float
    remaining: float


class CategoryMonthlyDetailResponse(CamelModel):
    category_id: int
    category_name: str
    parent_category_name: str | None = None
    month: str
    period_start: str
    period_end: str
    planned: float
    spent: float
    remaining: float
    progress_pct: float
    status: str
    transactions: list[CategoryTransactionResponse]
    daily: list[DailySpendResponse]
    previous_month: PreviousMonthResponse | None = None
    change_vs_previous_month_pct: float | None = None


# === Endpoints ===

@router.get("/{category_id}/monthly-detail", response_model=CategoryMonthlyDetailResponse)
def get_category_monthly_detail(
    category_id: int,
    user_id: int,
    month: str | None = None,
    compare_previous: bool = Query(default=False, alias="comparePrevious"),
    db: Session = Depends(get_db),
):
    """Planned vs spent of one category, its transactions and daily breakdown"""
    month = require_month(month)
    settings = load_request_settings(db, user_id)
    try:
        detail = CategoryDetailService(db).build(
            user_id, category_id, month,
            compare_previous=compare_previous,
            thresholds=settings.thresholds(),
        )
    except CategoryNotFound:
        raise HTTPException(status_code=404, detail="Category not found")
    return CategoryMonthlyDetailResponse.model_validate(detail)
