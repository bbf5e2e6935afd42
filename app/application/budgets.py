"""
Budget use cases and query helpers.

A budget is one header per (user, calendar month) plus one line per category
with its planned amount. Spend is never stored: it is computed per request
from transactions (see app.application.data_source).
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from sqlalchemy.orm import Session

from app.application.categories import CategoryNotFound
from app.domain.month import get_month_bounds, month_token
from app.infrastructure.db.models import Budget, BudgetLine, Category


class BudgetValidationError(ValueError):
    pass


class BudgetNotFound(LookupError):
    def __init__(self, budget_id: int):
        super().__init__(f"Budget {budget_id} not found")
        self.budget_id = budget_id


@dataclass(frozen=True)
class LineInput:
    category_id: int
    planned_amount: float


def _to_amount(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))


def validate_lines(lines: Iterable[LineInput]) -> list[LineInput]:
    """Every line needs a category and a non-negative planned amount."""
    result = list(lines)
    for line in result:
        if line.category_id is None:
            raise BudgetValidationError("Each line needs a category_id")
        if line.planned_amount is None or float(line.planned_amount) < 0:
            raise BudgetValidationError(
                f"planned_amount must be >= 0 (category {line.category_id})"
            )
    return result


def _get_budget(db: Session, budget_id: int) -> Budget:
    budget = db.query(Budget).filter(Budget.id == budget_id).first()
    if budget is None:
        raise BudgetNotFound(budget_id)
    return budget


def _upsert_line(db: Session, budget_id: int, category_id: int, planned_amount) -> BudgetLine:
    line = db.query(BudgetLine).filter(
        BudgetLine.budget_id == budget_id,
        BudgetLine.category_id == category_id,
    ).first()
    if line is None:
        line = BudgetLine(budget_id=budget_id, category_id=category_id)
        db.add(line)
    line.planned_amount = _to_amount(planned_amount)
    return line


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def get_budget_lines(db: Session, budget_id: int) -> List[Dict[str, Any]]:
    rows = (
        db.query(BudgetLine, Category)
        .join(Category, Category.id == BudgetLine.category_id)
        .filter(BudgetLine.budget_id == budget_id)
        .order_by(BudgetLine.id)
        .all()
    )
    return [
        {
            "id": line.id,
            "category_id": line.category_id,
            "category_name": cat.name,
            "parent_id": cat.parent_id,
            "planned_amount": float(line.planned_amount),
        }
        for line, cat in rows
    ]


def list_budgets(db: Session, user_id: int) -> List[Dict[str, Any]]:
    """All budgets of the user, newest period first, each with its lines."""
    budgets = db.query(Budget).filter(
        Budget.user_id == user_id,
    ).order_by(Budget.period_start.desc()).all()
    return [{"budget": b, "lines": get_budget_lines(db, b.id)} for b in budgets]


def list_budget_months(db: Session, user_id: int, today: date) -> Dict[str, Any]:
    """Months that have a budget (newest first) and the month to open by default."""
    starts = db.query(Budget.period_start).filter(
        Budget.user_id == user_id,
    ).order_by(Budget.period_start.desc()).all()
    return {
        "months": [month_token(start) for (start,) in starts],
        "default_month": month_token(today),
    }


# ---------------------------------------------------------------------------
# Use cases
# ---------------------------------------------------------------------------

class CreateBudgetUseCase:
    """Create the budget of a period, or update it if (user, period_start) exists."""

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        user_id: int,
        period_start: date,
        period_end: date,
        lines: Iterable[LineInput],
        total_budget_amount: float | None = None,
    ) -> Budget:
        if period_end < period_start:
            raise BudgetValidationError("period_end must not be before period_start")
        lines = validate_lines(lines)

        budget = self.db.query(Budget).filter(
            Budget.user_id == user_id,
            Budget.period_start == period_start,
        ).first()
        if budget is None:
            budget = Budget(user_id=user_id, period_start=period_start)
            self.db.add(budget)
        budget.period_end = period_end
        budget.total_budget_amount = (
            _to_amount(total_budget_amount) if total_budget_amount is not None else None
        )
        self.db.flush()

        for line in lines:
            _upsert_line(self.db, budget.id, line.category_id, line.planned_amount)

        self.db.commit()
        self.db.refresh(budget)
        return budget


class UpdateBudgetUseCase:
    """Patch header fields and/or replace all lines."""

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        budget_id: int,
        period_start: date | None = None,
        period_end: date | None = None,
        total_budget_amount: float | None = None,
        lines: Iterable[LineInput] | None = None,
    ) -> Budget:
        if period_start is None and period_end is None and total_budget_amount is None and lines is None:
            raise BudgetValidationError("No fields to update")
        if lines is not None:
            lines = validate_lines(lines)

        budget = _get_budget(self.db, budget_id)

        if period_start is not None:
            budget.period_start = period_start
        if period_end is not None:
            budget.period_end = period_end
        if budget.period_end < budget.period_start:
            raise BudgetValidationError("period_end must not be before period_start")
        if total_budget_amount is not None:
            budget.total_budget_amount = _to_amount(total_budget_amount)

        if lines is not None:
            self.db.query(BudgetLine).filter(BudgetLine.budget_id == budget_id).delete()
            for line in lines:
                self.db.add(BudgetLine(
                    budget_id=budget_id,
                    category_id=line.category_id,
                    planned_amount=_to_amount(line.planned_amount),
                ))

        self.db.commit()
        self.db.refresh(budget)
        return budget


class DeleteBudgetUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, budget_id: int) -> None:
        budget = _get_budget(self.db, budget_id)
        self.db.query(BudgetLine).filter(BudgetLine.budget_id == budget_id).delete()
        self.db.delete(budget)
        self.db.commit()


class EnsureBudgetUseCase:
    """Idempotently ensure a budget exists for (user_id, month). Returns (budget, created)."""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, user_id: int, month: str) -> tuple[Budget, bool]:
        bounds = get_month_bounds(month)
        existing = self.db.query(Budget).filter(
            Budget.user_id == user_id,
            Budget.period_start == bounds.start_date,
        ).first()
        if existing:
            return existing, False

        budget = Budget(
            user_id=user_id,
            period_start=bounds.start_date,
            period_end=bounds.end_date,
        )
        self.db.add(budget)
        self.db.commit()
        self.db.refresh(budget)
        return budget, True


class SetBudgetLineUseCase:
    """Set the planned amount of one category (upsert)."""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, budget_id: int, category_id: int, planned_amount: float) -> BudgetLine:
        validate_lines([LineInput(category_id=category_id, planned_amount=planned_amount)])
        _get_budget(self.db, budget_id)
        if self.db.get(Category, category_id) is None:
            raise CategoryNotFound(category_id)

        line = _upsert_line(self.db, budget_id, category_id, planned_amount)
        self.db.commit()
        self.db.refresh(line)
        return line
