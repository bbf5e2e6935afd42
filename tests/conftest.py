"""
Pytest fixtures for testing
"""
from datetime import date

import pytest
from sqlalchemy import create_engine, JSON
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.pool import StaticPool

from app.infrastructure.db.session import Base
from app.infrastructure.db.models import (
    Budget, BudgetLine, Category, Transaction, TransactionCategory,
)


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared across threads (TestClient runs sync routes in a pool)."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    # SQLite has no JSONB, remap to JSON for tests
    for table in Base.metadata.tables.values():
        for col in table.columns:
            if isinstance(col.type, JSONB):
                col.type = JSON()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    """Create database session for tests"""
    SessionLocal = sessionmaker(bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def sample_user_id():
    """Sample user ID for tests"""
    return 1


@pytest.fixture
def categories(db_session):
    """Two parents with three subcategories; Grocery has a configured color."""
    rows = [
        Category(id=1, name="Everyday"),
        Category(id=2, name="Lifestyle"),
        Category(id=8, name="Grocery", parent_id=1, color_hex="#123456"),
        Category(id=9, name="Transportation", parent_id=1),
        Category(id=10, name="Restaurants", parent_id=2),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return {c.name: c.id for c in rows}


@pytest.fixture
def add_transaction(db_session, sample_user_id):
    """Insert a categorized transaction."""
    def _add(category_id, amount, tx_date, direction="debit", pending=False, user_id=None, name=None):
        tx = Transaction(
            user_id=user_id or sample_user_id,
            amount=amount,
            direction=direction,
            name=name,
            transaction_date=tx_date,
            pending=pending,
            is_manual=False,
        )
        db_session.add(tx)
        db_session.flush()
        db_session.add(TransactionCategory(transaction_id=tx.id, category_id=category_id, source="plaid"))
        db_session.commit()
        return tx
    return _add


@pytest.fixture
def february_budget(db_session, sample_user_id, categories):
    """Budget for 2026-02: Grocery 600, Transportation 300."""
    budget = Budget(
        user_id=sample_user_id,
        period_start=date(2026, 2, 1),
        period_end=date(2026, 2, 28),
    )
    db_session.add(budget)
    db_session.flush()
    db_session.add_all([
        BudgetLine(budget_id=budget.id, category_id=categories["Grocery"], planned_amount=600),
        BudgetLine(budget_id=budget.id, category_id=categories["Transportation"], planned_amount=300),
    ])
    db_session.commit()
    return budget


@pytest.fixture
def client(db_session):
    """TestClient bound to the test session"""
    from fastapi.testclient import TestClient
    from app.api.deps import get_db
    from app.main import app

    app.dependency_overrides[get_db] = lambda: db_session
    yield TestClient(app)
    app.dependency_overrides.clear()
