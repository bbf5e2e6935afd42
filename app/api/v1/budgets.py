"""
Budget API endpoints
"""
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.deps import get_data_source, get_db, load_request_settings, require_month
from app.api.schemas import CamelModel, EnrichedLineResponse
from app.application.budgets import (
    BudgetNotFound, BudgetValidationError, LineInput,
    CreateBudgetUseCase, DeleteBudgetUseCase, EnsureBudgetUseCase,
    SetBudgetLineUseCase, UpdateBudgetUseCase,
    get_budget_lines, list_budget_months, list_budgets,
)
from app.application.categories import CategoryNotFound
from app.application.data_source import MonthlyDataSource
from app.application.monthly import MonthlyBudgetService
from app.domain.month import InvalidMonthFormat


router = APIRouter(prefix="/api/v1/budgets", tags=["budgets"])


# === Request/Response models ===

class BudgetLineIn(BaseModel):
    category_id: int
    planned_amount: float = Field(ge=0)


class CreateBudgetRequest(BaseModel):
    user_id: int
    period_start: date
    period_end: date
    total_budget_amount: float | None = Field(default=None, ge=0)
    lines: list[BudgetLineIn] = Field(default_factory=list)


class UpdateBudgetRequest(BaseModel):
    period_start: date | None = None
    period_end: date | None = None
    total_budget_amount: float | None = Field(default=None, ge=0)
    lines: list[BudgetLineIn] | None = None


class SetLineRequest(BaseModel):
    planned_amount: float = Field(ge=0)


class EnsureBudgetRequest(BaseModel):
    user_id: int
    month: str


class BudgetLineResponse(BaseModel):
    id: int | None = None
    category_id: int
    category_name: str | None = None
    parent_id: int | None = None
    planned_amount: float


class BudgetResponse(BaseModel):
    id: int
    user_id: int
    period_start: date
    period_end: date
    total_budget_amount: float | None
    created_at: datetime | None = None
    lines: list[BudgetLineResponse] = Field(default_factory=list)


class BudgetMonthsResponse(CamelModel):
    months: list[str]
    default_month: str


class EnsureBudgetResponse(CamelModel):
    budget_id: int
    month: str
    created: bool


class DeleteBudgetResponse(BaseModel):
    message: str
    id: int


# === Helper functions ===

def _lines(req_lines: list[BudgetLineIn] | None) -> list[LineInput] | None:
    if req_lines is None:
        return None
    return [LineInput(category_id=l.category_id, planned_amount=l.planned_amount) for l in req_lines]


def _budget_response(budget, lines: list[dict] | None = None) -> BudgetResponse:
    return BudgetResponse(
        id=budget.id,
        user_id=budget.user_id,
        period_start=budget.period_start,
        period_end=budget.period_end,
        total_budget_amount=(
            float(budget.total_budget_amount) if budget.total_budget_amount is not None else None
        ),
        created_at=budget.created_at,
        lines=[BudgetLineResponse(**line) for line in (lines or [])],
    )


def _budget_with_lines(db: Session, budget) -> BudgetResponse:
    return _budget_response(budget, get_budget_lines(db, budget.id))


# === Endpoints ===

@router.get("/months", response_model=BudgetMonthsResponse)
def get_budget_months(user_id: int, db: Session = Depends(get_db)):
    """Months that have a budget, newest first"""
    result = list_budget_months(db, user_id, date.today())
    return BudgetMonthsResponse(months=result["months"], default_month=result["default_month"])


@router.post("/ensure", response_model=EnsureBudgetResponse)
def ensure_budget(req: EnsureBudgetRequest, db: Session = Depends(get_db)):
    """Create an empty budget for the month if none exists"""
    try:
        budget, created = EnsureBudgetUseCase(db).execute(req.user_id, req.month)
    except InvalidMonthFormat as e:
        raise HTTPException(status_code=400, detail=str(e))
    return EnsureBudgetResponse(budget_id=budget.id, month=req.month, created=created)


@router.get("/{user_id}", response_model=list[BudgetResponse])
def get_budgets(user_id: int, db: Session = Depends(get_db)):
    """All budgets of a user with their lines"""
    return [_budget_response(e["budget"], e["lines"]) for e in list_budgets(db, user_id)]


@router.get("/{user_id}/lines", response_model=list[EnrichedLineResponse])
def get_enriched_lines(
    user_id: int,
    month: str | None = None,
    db: Session = Depends(get_db),
    source: MonthlyDataSource = Depends(get_data_source),
):
    """Budget lines of a month with spend, remaining, progress and status"""
    month = require_month(month)
    settings = load_request_settings(db, user_id)
    lines = MonthlyBudgetService(source).lines(user_id, month, settings.thresholds())
    return [EnrichedLineResponse.model_validate(line) for line in lines]


@router.post("/", response_model=BudgetResponse, status_code=201)
def create_budget(req: CreateBudgetRequest, db: Session = Depends(get_db)):
    """Create (or replace the header of) the budget of a period"""
    try:
        budget = CreateBudgetUseCase(db).execute(
            user_id=req.user_id,
            period_start=req.period_start,
            period_end=req.period_end,
            lines=_lines(req.lines),
            total_budget_amount=req.total_budget_amount,
        )
    except BudgetValidationError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    return _budget_with_lines(db, budget)


@router.patch("/{budget_id}", response_model=BudgetResponse)
def update_budget(budget_id: int, req: UpdateBudgetRequest, db: Session = Depends(get_db)):
    try:
        budget = UpdateBudgetUseCase(db).execute(
            budget_id,
            period_start=req.period_start,
            period_end=req.period_end,
            total_budget_amount=req.total_budget_amount,
            lines=_lines(req.lines),
        )
    except BudgetNotFound:
        db.rollback()
        raise HTTPException(status_code=404, detail="Budget not found")
    except BudgetValidationError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    return _budget_with_lines(db, budget)


@router.put("/{budget_id}/lines/{category_id}", response_model=BudgetLineResponse)
def set_budget_line(
    budget_id: int,
    category_id: int,
    req: SetLineRequest,
    db: Session = Depends(get_db),
):
    """Set the planned amount of one category"""
    try:
        line = SetBudgetLineUseCase(db).execute(budget_id, category_id, req.planned_amount)
    except BudgetNotFound:
        raise HTTPException(status_code=404, detail="Budget not found")
    except CategoryNotFound:
        raise HTTPException(status_code=404, detail="Category not found")
    except BudgetValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return BudgetLineResponse(
        id=line.id,
        category_id=line.category_id,
        planned_amount=float(line.planned_amount),
    )


@router.delete("/{budget_id}", response_model=DeleteBudgetResponse)
def delete_budget(budget_id: int, db: Session = Depends(get_db)):
    try:
        DeleteBudgetUseCase(db).execute(budget_id)
    except BudgetNotFound:
        raise HTTPException(status_code=404, detail="Budget not found")
    return DeleteBudgetResponse(message="Budget deleted", id=budget_id)
