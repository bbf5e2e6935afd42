"""
Transaction API endpoints
"""
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.application.categories import CategoryNotFound
from app.application.transactions import (
    CreateManualTransactionUseCase, TransactionValidationError,
)


router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])


# === Request/Response models ===

class CreateManualTransactionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int
    amount: float
    direction: str  # debit / credit
    name: str | None = None
    merchant_name: str | None = Field(default=None, alias="merchantName")
    transaction_date: str = Field(alias="transactionDate")  # YYYY-MM-DD
    category_id: int | None = Field(default=None, alias="categoryId")


class TransactionResponse(BaseModel):
    id: int
    user_id: int
    amount: float
    direction: str
    name: str | None
    merchant_name: str | None
    transaction_date: date
    is_manual: bool
    created_at: datetime | None = None


# === Endpoints ===

@router.post("/manual", response_model=TransactionResponse, status_code=201)
def create_manual_transaction(req: CreateManualTransactionRequest, db: Session = Depends(get_db)):
    """Record a transaction entered by hand"""
    try:
        tx = CreateManualTransactionUseCase(db).execute(
            user_id=req.user_id,
            amount=req.amount,
            direction=req.direction,
            transaction_date=req.transaction_date,
            category_id=req.category_id,
            name=req.name,
            merchant_name=req.merchant_name,
        )
    except TransactionValidationError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except CategoryNotFound:
        db.rollback()
        raise HTTPException(status_code=404, detail="Category not found")

    return TransactionResponse(
        id=tx.id,
        user_id=tx.user_id,
        amount=float(tx.amount),
        direction=tx.direction,
        name=tx.name,
        merchant_name=tx.merchant_name,
        transaction_date=tx.transaction_date,
        is_manual=tx.is_manual,
        created_at=tx.created_at,
    )
