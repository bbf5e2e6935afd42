"""
Bank sync status as shown in the client header.
"""
from dataclasses import dataclass
from datetime import datetime, time, timezone

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.infrastructure.db.models import PlaidItem, Transaction

PLAID_ITEM_ACTIVE = "active"


@dataclass(frozen=True)
class SyncStatus:
    status: str
    last_transaction_sync_at: str | None
    institution_count: int


def get_sync_status(db: Session, user_id: int) -> SyncStatus:
    """Latest transaction date (as UTC midnight) and number of active institutions."""
    last_date = db.query(func.max(Transaction.transaction_date)).filter(
        Transaction.user_id == user_id,
    ).scalar()

    last_sync_at = None
    if last_date is not None:
        stamp = datetime.combine(last_date, time.min, tzinfo=timezone.utc)
        last_sync_at = stamp.isoformat().replace("+00:00", "Z")

    count = db.query(func.count(func.distinct(PlaidItem.plaid_item_id))).filter(
        PlaidItem.user_id == user_id,
        PlaidItem.status == PLAID_ITEM_ACTIVE,
    ).scalar()

    return SyncStatus(
        status="ok",
        last_transaction_sync_at=last_sync_at,
        institution_count=int(count or 0),
    )
