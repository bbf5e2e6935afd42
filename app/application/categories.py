"""
Category monthly detail: plan vs spend of one category in one month, with its
transactions, a per-day breakdown and an optional previous-month comparison.
"""
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import func
from sqlalchemy.orm import Session, aliased

from app.domain.budget import (
    StatusThresholds, DEFAULT_THRESHOLDS,
    compute_budget_status, percent_of, round2,
)
from app.domain.month import MonthBounds, get_month_bounds, previous_month
from app.infrastructure.db.models import (
    Budget, BudgetLine, Category, Transaction, TransactionCategory,
)

DIRECTION_DEBIT = "debit"


class CategoryNotFound(LookupError):
    def __init__(self, category_id: int):
        super().__init__("Category not found")
        self.category_id = category_id


@dataclass(frozen=True)
class CategoryTransaction:
    id: int
    amount: float
    direction: str
    name: str | None
    merchant_name: str | None
    transaction_date: date
    is_manual: bool


@dataclass(frozen=True)
class DailySpend:
    date: date
    spent: float


@dataclass(frozen=True)
class PreviousMonthSummary:
    month: str
    planned: float
    spent: float
    remaining: float


@dataclass(frozen=True)
class CategoryMonthlyDetail:
    category_id: int
    category_name: str
    parent_category_name: str | None
    month: str
    period_start: str
    period_end: str
    planned: float
    spent: float
    remaining: float
    progress_pct: float
    status: str
    transactions: list[CategoryTransaction] = field(default_factory=list)
    daily: list[DailySpend] = field(default_factory=list)
    previous_month: PreviousMonthSummary | None = None
    change_vs_previous_month_pct: float | None = None


def daily_breakdown(transactions: list[CategoryTransaction]) -> list[DailySpend]:
    by_day: dict[date, float] = {}
    for tx in transactions:
        by_day[tx.transaction_date] = by_day.get(tx.transaction_date, 0.0) + tx.amount
    return [DailySpend(date=d, spent=round2(s)) for d, s in sorted(by_day.items())]


class CategoryDetailService:
    def __init__(self, db: Session):
        self.db = db

    def _planned(self, user_id: int, category_id: int, bounds: MonthBounds) -> float:
        planned = (
            self.db.query(BudgetLine.planned_amount)
            .join(Budget, Budget.id == BudgetLine.budget_id)
            .filter(
                Budget.user_id == user_id,
                Budget.period_start == bounds.start_date,
                BudgetLine.category_id == category_id,
            )
            .scalar()
        )
        return float(planned) if planned is not None else 0.0

    def _debits(self, query, user_id: int, category_id: int, bounds: MonthBounds):
        return query.join(
            TransactionCategory, TransactionCategory.transaction_id == Transaction.id
        ).filter(
            Transaction.user_id == user_id,
            TransactionCategory.category_id == category_id,
            Transaction.transaction_date >= bounds.start_date,
            Transaction.transaction_date <= bounds.end_date,
            Transaction.direction == DIRECTION_DEBIT,
        )

    def _transactions(self, user_id: int, category_id: int, bounds: MonthBounds) -> list[CategoryTransaction]:
        rows = self._debits(self.db.query(Transaction), user_id, category_id, bounds).order_by(
            Transaction.transaction_date.asc(), Transaction.id.asc()
        ).all()
        return [
            CategoryTransaction(
                id=t.id,
                amount=float(t.amount),
                direction=t.direction,
                name=t.name,
                merchant_name=t.merchant_name,
                transaction_date=t.transaction_date,
                is_manual=bool(t.is_manual),
            )
            for t in rows
        ]

    def _spent(self, user_id: int, category_id: int, bounds: MonthBounds) -> float:
        query = self.db.query(func.coalesce(func.sum(Transaction.amount), 0))
        return float(self._debits(query, user_id, category_id, bounds).scalar() or 0)

    def build(
        self,
        user_id: int,
        category_id: int,
        month: str,
        compare_previous: bool = False,
        thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
    ) -> CategoryMonthlyDetail:
        """
        Raises:
            InvalidMonthFormat: month is not YYYY-MM
            CategoryNotFound: no category with this id
        """
        bounds = get_month_bounds(month)

        parent = aliased(Category)
        row = (
            self.db.query(Category, parent.name)
            .outerjoin(parent, parent.id == Category.parent_id)
            .filter(Category.id == category_id)
            .first()
        )
        if row is None:
            raise CategoryNotFound(category_id)
        category, parent_name = row

        planned = self._planned(user_id, category_id, bounds)
        transactions = self._transactions(user_id, category_id, bounds)
        spent = round2(sum((t.amount for t in transactions), 0.0))

        previous = None
        change_pct = None
        if compare_previous:
            prev_month = previous_month(month)
            prev_bounds = get_month_bounds(prev_month)
            prev_planned = self._planned(user_id, category_id, prev_bounds)
            prev_spent = round2(self._spent(user_id, category_id, prev_bounds))
            previous = PreviousMonthSummary(
                month=prev_month,
                planned=prev_planned,
                spent=prev_spent,
                remaining=round2(max(0.0, prev_planned - prev_spent)),
            )
            if prev_spent > 0:
                change_pct = round2((spent - prev_spent) / prev_spent * 100)

        return CategoryMonthlyDetail(
            category_id=category.id,
            category_name=category.name,
            parent_category_name=parent_name,
            month=month,
            period_start=bounds.period_start,
            period_end=bounds.period_end,
            planned=planned,
            spent=spent,
            remaining=round2(max(0.0, planned - spent)),
            progress_pct=percent_of(spent, planned),
            status=compute_budget_status(spent, planned, thresholds),
            transactions=transactions,
            daily=daily_breakdown(transactions),
            previous_month=previous,
            change_vs_previous_month_pct=change_pct,
        )
