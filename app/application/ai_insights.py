"""
LLM-written insight cards for one month.
"""
import logging
from datetime import date

from app.application.data_source import MonthlyDataSource
from app.domain.ai_prompts import (
    AISettings, DEFAULT_AI_SETTINGS, InsightCard,
    build_ai_system_prompt, build_insight_prompt, build_spending_pattern,
    category_data, parse_insights, top_category,
)
from app.domain.budget import (
    StatusThresholds, DEFAULT_THRESHOLDS,
    aggregate_category_spend, enrich_budget_lines,
)
from app.domain.month import shift_month
from app.infrastructure.llm.openrouter import LLMMessage, OpenRouterClient

logger = logging.getLogger(__name__)

BASELINE_MONTHS = 3
INSIGHTS_MAX_TOKENS = 800


class AIInsightsService:
    def __init__(self, source: MonthlyDataSource, llm: OpenRouterClient, today: date | None = None):
        self.source = source
        self.llm = llm
        self.today = today or date.today()

    def build_prompt(
        self,
        user_id: int,
        month: str,
        thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
    ) -> str:
        snapshot = self.source.load_month(user_id, month)
        lines = enrich_budget_lines(
            snapshot.budget_lines,
            aggregate_category_spend(snapshot.category_spend),
            thresholds,
        )
        budget = snapshot.total_budget_amount
        if budget is None:
            budget = sum((line.planned for line in lines), 0.0)

        spending = build_spending_pattern(
            month,
            spent=self.source.load_month_total(user_id, month),
            budget=budget,
            previous_spent=self.source.load_month_total(user_id, shift_month(month, -1)),
            baseline_totals=[
                self.source.load_month_total(user_id, shift_month(month, -n))
                for n in range(1, BASELINE_MONTHS + 1)
            ],
            today=self.today,
        )
        categories = category_data(lines)
        return build_insight_prompt(month, spending, top_category(categories), categories, self.today)

    def generate(
        self,
        user_id: int,
        month: str,
        ai_settings: AISettings = DEFAULT_AI_SETTINGS,
        thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
    ) -> list[InsightCard]:
        """
        Raises:
            InvalidMonthFormat: month is not YYYY-MM
            LLMClientError: the LLM call failed
        """
        prompt = self.build_prompt(user_id, month, thresholds)
        reply = self.llm.complete(
            [
                LLMMessage(role="system", content=build_ai_system_prompt(ai_settings)),
                LLMMessage(role="user", content=prompt),
            ],
            temperature=0.7,
            max_tokens=INSIGHTS_MAX_TOKENS,
            top_p=0.9,
        )
        cards = parse_insights(reply.content)
        logger.info("generated %d insight cards for user %s month %s", len(cards), user_id, month)
        return cards
