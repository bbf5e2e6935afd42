"""
SQLAlchemy ORM models
"""
from decimal import Decimal
from datetime import date as date_type
from sqlalchemy import (
    String, DateTime, Integer, SmallInteger, Text, TIMESTAMP, Date, func, Boolean,
    Numeric, Float, UniqueConstraint, Index, ForeignKey,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import JSONB

from app.infrastructure.db.session import Base


class User(Base):
    """
    Application user (single hard-coded user in the mobile client)
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )


class Category(Base):
    """
    Spending category. Subcategories point at their parent via parent_id.
    """
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    parent_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=True, index=True
    )
    color_hex: Mapped[str | None] = mapped_column(String(7), nullable=True)  # "#9FC5A8"


class Budget(Base):
    """Budget header: one per user per calendar month"""
    __tablename__ = "budgets"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    period_start: Mapped[date_type] = mapped_column(Date, nullable=False)
    period_end: Mapped[date_type] = mapped_column(Date, nullable=False)
    total_budget_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=12, scale=2), nullable=True
    )

    created_at: Mapped[DateTime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[DateTime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint('user_id', 'period_start', name='uq_budget_user_period'),
    )


class BudgetLine(Base):
    """Planned amount for one category within one budget"""
    __tablename__ = "budget_lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    budget_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False
    )
    category_id: Mapped[int] = mapped_column(Integer, ForeignKey("categories.id"), nullable=False)
    planned_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2), nullable=False, server_default="0"
    )

    created_at: Mapped[DateTime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[DateTime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint('budget_id', 'category_id', name='uq_budget_line'),
        Index('ix_budget_line_budget', 'budget_id'),
    )


class Transaction(Base):
    """
    Bank (Plaid) or manual transaction. Amounts are positive; direction says debit/credit.
    """
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    # Plaid linkage, NULL for manual entries
    account_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    plaid_item_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    plaid_transaction_id: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
    direction: Mapped[str] = mapped_column(String(10), nullable=False)  # debit / credit
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    merchant_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    transaction_date: Mapped[date_type] = mapped_column(Date, nullable=False, index=True)
    pending: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    is_manual: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")

    created_at: Mapped[DateTime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index('ix_transactions_user_date', 'user_id', 'transaction_date'),
    )


class TransactionCategory(Base):
    """Category tag of a transaction (user-assigned or from Plaid)"""
    __tablename__ = "transaction_categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    transaction_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=False, index=True
    )
    source: Mapped[str] = mapped_column(String(20), nullable=False, default="user", server_default="user")  # user / plaid


class PlaidItem(Base):
    """Linked institution. Only the sync bookkeeping is read by this service."""
    __tablename__ = "plaid_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    plaid_item_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    institution_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="active", server_default="active")
    last_sync_at: Mapped[DateTime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)


class UserSettingsModel(Base):
    """Per-user preferences: currency, status thresholds, AI personality"""
    __tablename__ = "user_settings"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)

    timezone: Mapped[str] = mapped_column(String(64), nullable=False)
    currency_code: Mapped[str] = mapped_column(String(3), nullable=False)
    week_starts_on: Mapped[int] = mapped_column(SmallInteger, nullable=False)  # 0=Sunday, 1=Monday
    status_on_track_max: Mapped[float] = mapped_column(Float, nullable=False)
    status_tight_max: Mapped[float] = mapped_column(Float, nullable=False)
    baseline_months: Mapped[int] = mapped_column(Integer, nullable=False)
    include_pending_in_insights: Mapped[bool] = mapped_column(Boolean, nullable=False)
    insights_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False)
    encouragement_insights_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False)
    spike_alert_threshold_pct: Mapped[float] = mapped_column(Float, nullable=False)
    ai_personalities: Mapped[list] = mapped_column(JSONB, nullable=False)
    ai_frugal_score: Mapped[int] = mapped_column(Integer, nullable=False)
    ai_advice_score: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[DateTime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[DateTime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class ChatMessage(Base):
    """One turn of the AI chat conversation"""
    __tablename__ = "chat_messages"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)  # user / assistant
    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[DateTime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index('ix_chat_messages_user_created', 'user_id', 'created_at'),
    )
