"""
Seed demo data for user_id=1: categories, three monthly budgets and transactions.
Run:  python seed_test_data.py
"""
import sys
from datetime import date, datetime, timezone

# ── bootstrap ────────────────────────────────────────────────────
from app.infrastructure.db.session import get_session_factory
from app.infrastructure.db.models import (
    Category, PlaidItem, Transaction, TransactionCategory, User,
)
from app.application.budgets import CreateBudgetUseCase, LineInput
from app.application.transactions import CreateManualTransactionUseCase
from app.application.user_settings import CreateUserSettingsUseCase
from app.domain.month import get_month_bounds

db = get_session_factory()()
USER_ID = 1

if db.get(User, USER_ID) is None:
    db.add(User(id=USER_ID, email="demo@spendiq.local"))
    db.commit()

if db.query(Transaction).filter_by(user_id=USER_ID).count() > 0:
    print("Demo data already exists, nothing to do")
    db.close()
    sys.exit(0)

# ═══════════════════════════════════════════════════════════════
# Categories: parent -> [(name, color, planned)]
# ═══════════════════════════════════════════════════════════════
TREE = {
    "Fixed": [("Housing", "#9FC5A8", 1600), ("Healthcare", "#F4B183", 250)],
    "Everyday": [("Grocery", "#F9CB9C", 600), ("Transportation", "#6FA8DC", 300)],
    "Lifestyle": [
        ("Restaurants", "#EA9999", 600),
        ("Personal Shopping", "#B4A7D6", 300),
        ("Subscriptions", "#A2C4C9", 120),
    ],
    "Miscellaneous": [("Miscellaneous", "#D5A6BD", 250)],
}

print("Creating categories...")
planned = {}
for parent_name, children in TREE.items():
    parent = Category(name=parent_name)
    db.add(parent)
    db.flush()
    for name, color, amount in children:
        child = Category(name=name, parent_id=parent.id, color_hex=color)
        db.add(child)
        db.flush()
        planned[name] = (child.id, amount)
db.commit()
print(f"  {len(planned)} categories created")

# ═══════════════════════════════════════════════════════════════
# Budgets for Dec 2025 / Jan 2026 / Feb 2026
# ═══════════════════════════════════════════════════════════════
print("Creating budgets...")
for month in ["2025-12", "2026-01", "2026-02"]:
    bounds = get_month_bounds(month)
    CreateBudgetUseCase(db).execute(
        user_id=USER_ID,
        period_start=bounds.start_date,
        period_end=bounds.end_date,
        lines=[LineInput(cid, amount) for cid, amount in planned.values()],
    )

# ═══════════════════════════════════════════════════════════════
# Transactions
# ═══════════════════════════════════════════════════════════════
SPEND = [
    # (category, amount, date, merchant)
    ("Housing", 1550, date(2026, 2, 1), "Oak Street Apartments"),
    ("Healthcare", 170, date(2026, 2, 4), "CVS Pharmacy"),
    ("Grocery", 310.5, date(2026, 2, 3), "Whole Foods"),
    ("Grocery", 200, date(2026, 2, 6), "Trader Joe's"),
    ("Transportation", 230, date(2026, 2, 5), "Shell"),
    ("Restaurants", 420, date(2026, 2, 6), "Nobu"),
    ("Personal Shopping", 240, date(2026, 2, 2), "Target"),
    ("Subscriptions", 95.99, date(2026, 2, 1), "Netflix"),
    ("Miscellaneous", 190, date(2026, 2, 7), "Amazon"),
    ("Housing", 1550, date(2026, 1, 1), "Oak Street Apartments"),
    ("Grocery", 540, date(2026, 1, 12), "Whole Foods"),
    ("Restaurants", 380, date(2026, 1, 20), "Nobu"),
    ("Housing", 1550, date(2025, 12, 1), "Oak Street Apartments"),
    ("Grocery", 610, date(2025, 12, 18), "Whole Foods"),
]

print("Creating transactions...")
db.add(PlaidItem(
    user_id=USER_ID,
    plaid_item_id="demo-item-1",
    institution_name="Demo Bank",
    last_sync_at=datetime(2026, 2, 7, 18, 20, tzinfo=timezone.utc),
))
db.flush()
for category, amount, tx_date, merchant in SPEND:
    tx = Transaction(
        user_id=USER_ID,
        amount=amount,
        direction="debit",
        name=merchant,
        merchant_name=merchant,
        transaction_date=tx_date,
    )
    db.add(tx)
    db.flush()
    db.add(TransactionCategory(transaction_id=tx.id, category_id=planned[category][0], source="plaid"))
db.commit()

CreateManualTransactionUseCase(db).execute(
    user_id=USER_ID,
    amount=12.5,
    direction="debit",
    transaction_date="2026-02-07",
    category_id=planned["Restaurants"][0],
    name="Coffee with Sam",
)
print(f"  {len(SPEND) + 1} transactions created")

CreateUserSettingsUseCase(db).execute(USER_ID)

# ═══════════════════════════════════════════════════════════════
db.close()
print("\nDone! Demo user_id=1, try GET /api/v1/home/monthly?user_id=1&month=2026-02")
