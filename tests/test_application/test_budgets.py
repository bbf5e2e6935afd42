"""
Tests for budget use cases
"""
from datetime import date

import pytest

from app.application.budgets import (
    BudgetNotFound, BudgetValidationError, LineInput,
    CreateBudgetUseCase, DeleteBudgetUseCase, EnsureBudgetUseCase,
    SetBudgetLineUseCase, UpdateBudgetUseCase,
    get_budget_lines, list_budget_months, list_budgets,
)
from app.application.categories import CategoryNotFound
from app.domain.month import InvalidMonthFormat
from app.infrastructure.db.models import Budget, BudgetLine


def test_create_budget_with_lines(db_session, sample_user_id, categories):
    budget = CreateBudgetUseCase(db_session).execute(
        user_id=sample_user_id,
        period_start=date(2026, 3, 1),
        period_end=date(2026, 3, 31),
        lines=[LineInput(categories["Grocery"], 550), LineInput(categories["Restaurants"], 200)],
        total_budget_amount=900,
    )

    assert budget.id is not None
    assert float(budget.total_budget_amount) == 900
    lines = get_budget_lines(db_session, budget.id)
    assert [(l["category_name"], l["planned_amount"]) for l in lines] == [("Grocery", 550.0), ("Restaurants", 200.0)]


def test_create_budget_upserts_same_period(db_session, sample_user_id, categories, february_budget):
    budget = CreateBudgetUseCase(db_session).execute(
        user_id=sample_user_id,
        period_start=date(2026, 2, 1),
        period_end=date(2026, 2, 28),
        lines=[LineInput(categories["Grocery"], 700)],
    )

    assert budget.id == february_budget.id
    assert db_session.query(Budget).count() == 1
    planned = {l["category_id"]: l["planned_amount"] for l in get_budget_lines(db_session, budget.id)}
    assert planned == {categories["Grocery"]: 700.0, categories["Transportation"]: 300.0}


def test_create_budget_rejects_negative_amount(db_session, sample_user_id, categories):
    with pytest.raises(BudgetValidationError):
        CreateBudgetUseCase(db_session).execute(
            user_id=sample_user_id,
            period_start=date(2026, 3, 1),
            period_end=date(2026, 3, 31),
            lines=[LineInput(categories["Grocery"], -1)],
        )


def test_create_budget_rejects_inverted_period(db_session, sample_user_id):
    with pytest.raises(BudgetValidationError):
        CreateBudgetUseCase(db_session).execute(
            user_id=sample_user_id,
            period_start=date(2026, 3, 31),
            period_end=date(2026, 3, 1),
            lines=[],
        )


def test_update_budget_replaces_lines(db_session, categories, february_budget):
    UpdateBudgetUseCase(db_session).execute(
        february_budget.id,
        total_budget_amount=1000,
        lines=[LineInput(categories["Restaurants"], 400)],
    )

    lines = get_budget_lines(db_session, february_budget.id)
    assert [(l["category_id"], l["planned_amount"]) for l in lines] == [(categories["Restaurants"], 400.0)]
    assert float(db_session.get(Budget, february_budget.id).total_budget_amount) == 1000


def test_update_budget_requires_fields(db_session, february_budget):
    with pytest.raises(BudgetValidationError):
        UpdateBudgetUseCase(db_session).execute(february_budget.id)


def test_update_missing_budget(db_session):
    with pytest.raises(BudgetNotFound):
        UpdateBudgetUseCase(db_session).execute(999, total_budget_amount=10)


def test_delete_budget_removes_lines(db_session, february_budget):
    DeleteBudgetUseCase(db_session).execute(february_budget.id)

    assert db_session.query(Budget).count() == 0
    assert db_session.query(BudgetLine).count() == 0

    with pytest.raises(BudgetNotFound):
        DeleteBudgetUseCase(db_session).execute(february_budget.id)


def test_ensure_budget_is_idempotent(db_session, sample_user_id):
    budget, created = EnsureBudgetUseCase(db_session).execute(sample_user_id, "2026-04")
    again, created_again = EnsureBudgetUseCase(db_session).execute(sample_user_id, "2026-04")

    assert created is True
    assert created_again is False
    assert again.id == budget.id
    assert budget.period_start == date(2026, 4, 1)
    assert budget.period_end == date(2026, 4, 30)


def test_ensure_budget_bad_month(db_session, sample_user_id):
    with pytest.raises(InvalidMonthFormat):
        EnsureBudgetUseCase(db_session).execute(sample_user_id, "April")


def test_set_budget_line_upserts(db_session, categories, february_budget):
    use_case = SetBudgetLineUseCase(db_session)
    use_case.execute(february_budget.id, categories["Grocery"], 650)
    use_case.execute(february_budget.id, categories["Restaurants"], 100)

    planned = {l["category_id"]: l["planned_amount"] for l in get_budget_lines(db_session, february_budget.id)}
    assert planned[categories["Grocery"]] == 650.0
    assert planned[categories["Restaurants"]] == 100.0


def test_set_budget_line_unknown_category(db_session, february_budget):
    with pytest.raises(CategoryNotFound):
        SetBudgetLineUseCase(db_session).execute(february_budget.id, 404, 10)


def test_list_budgets_and_months(db_session, sample_user_id, february_budget):
    EnsureBudgetUseCase(db_session).execute(sample_user_id, "2026-03")

    budgets = list_budgets(db_session, sample_user_id)
    assert [b["budget"].period_start for b in budgets] == [date(2026, 3, 1), date(2026, 2, 1)]
    assert len(budgets[1]["lines"]) == 2

    months = list_budget_months(db_session, sample_user_id, today=date(2026, 2, 17))
    assert months == {"months": ["2026-03", "2026-02"], "default_month": "2026-02"}
