"""
Monthly data sources: where the budget-vs-spend numbers of one month come from.

  - SqlMonthlyDataSource: live Postgres rows (budgets, budget_lines,
    transactions tagged via transaction_categories, plaid_items sync state)
  - FixtureMonthlyDataSource: the static demo month, for running the client
    without a database

Both return plain domain values; the aggregation itself happens in app.domain.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.orm import Session, aliased

from app.domain.budget import BudgetLine, CategorySpend
from app.domain.month import MonthBounds, get_month_bounds
from app.infrastructure.db.models import (
    Budget, Category, PlaidItem, Transaction, TransactionCategory,
    BudgetLine as BudgetLineRow,
)

DIRECTION_DEBIT = "debit"
DIRECTION_CREDIT = "credit"


@dataclass(frozen=True)
class MonthlySnapshot:
    month: str
    budget_id: int | None = None
    total_budget_amount: float | None = None
    budget_lines: list[BudgetLine] = field(default_factory=list)
    category_spend: list[CategorySpend] = field(default_factory=list)
    last_transaction_sync_at: str | None = None

    @property
    def has_budget(self) -> bool:
        return self.budget_id is not None


def to_iso_utc(value: datetime | None) -> str | None:
    """ISO-8601 UTC timestamp with a Z suffix; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class MonthlyDataSource(ABC):

    @abstractmethod
    def load_month(self, user_id: int, month: str) -> MonthlySnapshot:
        """Budget lines, spend per category and sync state for one month."""

    @abstractmethod
    def load_month_total(self, user_id: int, month: str) -> float:
        """Total debit spend of a month (all categories)."""

    def with_pending(self, include_pending: bool) -> "MonthlyDataSource":
        """Source that counts pending transactions or not; sources without pending state return self."""
        return self


class SqlMonthlyDataSource(MonthlyDataSource):

    def __init__(self, db: Session, include_pending: bool = True):
        self.db = db
        self.include_pending = include_pending

    def with_pending(self, include_pending: bool) -> "SqlMonthlyDataSource":
        return SqlMonthlyDataSource(self.db, include_pending=include_pending)

    def load_month(self, user_id: int, month: str) -> MonthlySnapshot:
        bounds = get_month_bounds(month)

        budget = self.db.query(Budget).filter(
            Budget.user_id == user_id,
            Budget.period_start == bounds.start_date,
        ).first()

        lines: list[BudgetLine] = []
        if budget is not None:
            lines = self.load_budget_lines(budget.id)

        return MonthlySnapshot(
            month=month,
            budget_id=budget.id if budget else None,
            total_budget_amount=(
                float(budget.total_budget_amount)
                if budget is not None and budget.total_budget_amount is not None else None
            ),
            budget_lines=lines,
            category_spend=self.load_category_spend(user_id, bounds),
            last_transaction_sync_at=self.load_last_sync_at(user_id),
        )

    def load_budget_lines(self, budget_id: int) -> list[BudgetLine]:
        parent = aliased(Category)
        rows = (
            self.db.query(
                BudgetLineRow.category_id,
                BudgetLineRow.planned_amount,
                Category.name,
                Category.color_hex,
                parent.name,
            )
            .join(Category, Category.id == BudgetLineRow.category_id)
            .outerjoin(parent, parent.id == Category.parent_id)
            .filter(BudgetLineRow.budget_id == budget_id)
            .order_by(BudgetLineRow.id)
            .all()
        )
        return [
            BudgetLine(
                category_id=category_id,
                category_name=name,
                planned_amount=float(planned),
                parent_category_name=parent_name,
                color_hex=color_hex,
            )
            for category_id, planned, name, color_hex, parent_name in rows
        ]

    def _debits(self, query, user_id: int, bounds: MonthBounds):
        query = query.filter(
            Transaction.user_id == user_id,
            Transaction.transaction_date >= bounds.start_date,
            Transaction.transaction_date <= bounds.end_date,
            Transaction.direction == DIRECTION_DEBIT,
        )
        if not self.include_pending:
            query = query.filter(Transaction.pending == False)
        return query

    def load_category_spend(self, user_id: int, bounds: MonthBounds) -> list[CategorySpend]:
        query = (
            self.db.query(TransactionCategory.category_id, func.sum(Transaction.amount))
            .join(Transaction, Transaction.id == TransactionCategory.transaction_id)
        )
        rows = self._debits(query, user_id, bounds).group_by(TransactionCategory.category_id).all()
        return [CategorySpend(category_id=cid, spent=float(spent or 0)) for cid, spent in rows]

    def load_month_total(self, user_id: int, month: str) -> float:
        query = self.db.query(func.coalesce(func.sum(Transaction.amount), 0))
        total = self._debits(query, user_id, get_month_bounds(month)).scalar()
        return float(total or 0)

    def load_last_sync_at(self, user_id: int) -> str | None:
        last = self.db.query(func.max(PlaidItem.last_sync_at)).filter(
            PlaidItem.user_id == user_id
        ).scalar()
        return to_iso_utc(last)


# ---------------------------------------------------------------------------
# Fixture
# ---------------------------------------------------------------------------

_FIXTURE_LINES = [
    # (category_id, name, parent, planned, spent)
    (6, "Housing", "Fixed", 1600.0, 1550.0),
    (7, "Healthcare", "Fixed", 250.0, 170.0),
    (8, "Grocery", "Everyday", 600.0, 510.5),
    (9, "Transportation", "Everyday", 300.0, 230.0),
    (10, "Restaurants", "Lifestyle", 600.0, 420.0),
    (11, "Personal Shopping", "Lifestyle", 300.0, 240.0),
    (12, "Subscriptions", "Lifestyle", 120.0, 95.99),
    (13, "Miscellaneous", "Miscellaneous", 250.0, 190.0),
]

_FIXTURE_SYNC_AT = "2026-02-07T18:20:00Z"


class FixtureMonthlyDataSource(MonthlyDataSource):
    """Same demo budget for every month and user."""

    def load_month(self, user_id: int, month: str) -> MonthlySnapshot:
        get_month_bounds(month)  # validates the token
        return MonthlySnapshot(
            month=month,
            budget_id=1,
            budget_lines=[
                BudgetLine(
                    category_id=cid,
                    category_name=name,
                    planned_amount=planned,
                    parent_category_name=parent,
                )
                for cid, name, parent, planned, _ in _FIXTURE_LINES
            ],
            category_spend=[CategorySpend(category_id=cid, spent=spent) for cid, _, _, _, spent in _FIXTURE_LINES],
            last_transaction_sync_at=_FIXTURE_SYNC_AT,
        )

    def load_month_total(self, user_id: int, month: str) -> float:
        get_month_bounds(month)
        return sum((spent for *_, spent in _FIXTURE_LINES), 0.0)
