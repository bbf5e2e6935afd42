"""
Manual transactions: entered by the user instead of imported from Plaid.
"""
from datetime import date
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from app.application.categories import CategoryNotFound
from app.infrastructure.db.models import Category, Transaction, TransactionCategory

DIRECTIONS = ("debit", "credit")
CATEGORY_SOURCE_USER = "user"


class TransactionValidationError(ValueError):
    pass


def parse_transaction_date(value) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise TransactionValidationError(
            "transaction_date must be YYYY-MM-DD"
        ) from None


class CreateManualTransactionUseCase:
    """
    Use case: record a manual transaction and tag it with a category.

    The transaction and its transaction_categories row are committed together.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        user_id: int,
        amount,
        direction: str,
        transaction_date,
        category_id: int | None,
        name: str | None = None,
        merchant_name: str | None = None,
    ) -> Transaction:
        try:
            amount = Decimal(str(amount)).quantize(Decimal("0.01"))
        except (InvalidOperation, ValueError):
            raise TransactionValidationError("amount must be a number") from None
        if amount <= 0:
            raise TransactionValidationError("amount must be greater than 0")
        if direction not in DIRECTIONS:
            raise TransactionValidationError("direction must be 'debit' or 'credit'")
        if category_id is None:
            raise TransactionValidationError("category_id is required")
        tx_date = parse_transaction_date(transaction_date)

        if self.db.get(Category, category_id) is None:
            raise CategoryNotFound(category_id)

        tx = Transaction(
            user_id=user_id,
            amount=amount,
            direction=direction,
            name=(name or "").strip() or None,
            merchant_name=(merchant_name or "").strip() or None,
            transaction_date=tx_date,
            pending=False,
            is_manual=True,
        )
        self.db.add(tx)
        self.db.flush()

        self.db.add(TransactionCategory(
            transaction_id=tx.id,
            category_id=category_id,
            source=CATEGORY_SOURCE_USER,
        ))
        self.db.commit()
        self.db.refresh(tx)
        return tx
