"""
Monthly budget read layer: home payload, enriched lines, insights list.

Pure read-layer: loads one month through a MonthlyDataSource and hands the
rows to the aggregation functions in app.domain.
"""
from app.application.data_source import MonthlyDataSource
from app.domain.budget import (
    BudgetInsight, EnrichedLine, StatusThresholds, DEFAULT_THRESHOLDS,
    aggregate_category_spend, compute_insights, enrich_budget_lines,
)
from app.domain.home_monthly import MonthlyHomePayload, build_monthly_home_payload


class MonthlyBudgetService:
    def __init__(self, source: MonthlyDataSource):
        self.source = source

    def home(
        self,
        user_id: int,
        month: str,
        currency: str = "USD",
        thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
    ) -> MonthlyHomePayload:
        snapshot = self.source.load_month(user_id, month)
        return build_monthly_home_payload(
            month,
            snapshot.budget_lines,
            aggregate_category_spend(snapshot.category_spend),
            snapshot.last_transaction_sync_at,
            currency=currency,
            thresholds=thresholds,
            budget_id=snapshot.budget_id,
        )

    def lines(
        self,
        user_id: int,
        month: str,
        thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
    ) -> list[EnrichedLine]:
        snapshot = self.source.load_month(user_id, month)
        return enrich_budget_lines(
            snapshot.budget_lines,
            aggregate_category_spend(snapshot.category_spend),
            thresholds,
        )

    def insights(
        self,
        user_id: int,
        month: str,
        thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
    ) -> list[BudgetInsight]:
        """[] when the month has no budget."""
        snapshot = self.source.load_month(user_id, month)
        if not snapshot.has_budget:
            return []
        return compute_insights(
            snapshot.budget_lines,
            aggregate_category_spend(snapshot.category_spend),
            thresholds,
        )
