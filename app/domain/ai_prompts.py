"""
Prompt templating for the AI assistant.

Pure string building from already aggregated numbers: the insight prompt,
the personality system prompt, and the budget context block of the chat.
The LLM call itself lives in app.infrastructure.llm.

parse_insights is the tolerant reverse step: it never raises, a reply that
cannot be parsed yields an empty list.
"""
import json
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.domain.budget import EnrichedLine, percent_of, round2
from app.domain.month import days_in_month, month_token
from app.utils.money import format_money

logger = logging.getLogger(__name__)


MAX_INSIGHTS = 4

PERSONALITIES = ("humorous", "sarcastic", "nice", "cute", "direct", "coach")

Personality = Literal["humorous", "sarcastic", "nice", "cute", "direct", "coach"]


class MalformedLLMResponse(ValueError):
    """LLM reply does not contain the expected JSON."""


class AISettings(BaseModel):
    """Assistant personality: tone words plus two 0-100 sliders."""
    model_config = ConfigDict(frozen=True)

    personalities: list[Personality] = Field(default_factory=lambda: ["nice"], max_length=3)
    frugal_score: int = Field(default=55, ge=0, le=100)  # strictness of spending advice
    advice_score: int = Field(default=60, ge=0, le=100)  # analysis (low) vs action (high)


DEFAULT_AI_SETTINGS = AISettings()


class InsightCard(BaseModel):
    kind: Literal["alert", "positive"]
    title: str = Field(min_length=1)
    body: str = Field(min_length=1)
    action: str = Field(min_length=1)


@dataclass(frozen=True)
class SpendingPattern:
    spent: float
    budget: float
    remaining: float
    percent_used: float
    compare_to_last_month_pct: float
    compare_to_average_pct: float
    pace_delta_pct: float


@dataclass(frozen=True)
class CategoryData:
    name: str
    spent: float
    planned: float
    percent_used: float
    is_over: bool


# ---------------------------------------------------------------------------
# Month progress
# ---------------------------------------------------------------------------

def _is_current_month(month: str, today: date) -> bool:
    return month_token(today) == month


def days_elapsed(month: str, today: date) -> int:
    """Days passed in the current month; past and future months count in full."""
    if _is_current_month(month, today):
        return today.day
    return days_in_month(month)


def remaining_days(month: str, today: date) -> int:
    if not _is_current_month(month, today):
        return 0
    return days_in_month(month) - today.day


def _change_pct(current: float, reference: float) -> float:
    if reference == 0:
        return 0.0
    return round2((current - reference) / reference * 100)


def build_spending_pattern(
    month: str,
    spent: float,
    budget: float,
    previous_spent: float,
    baseline_totals: Iterable[float],
    today: date,
) -> SpendingPattern:
    """
    Summarize the month against the previous month and the baseline average.

    pace_delta_pct compares actual spend with the linear share of the budget
    expected after days_elapsed days.
    """
    baseline = list(baseline_totals)
    average = sum(baseline) / len(baseline) if baseline else 0.0
    expected = budget * days_elapsed(month, today) / days_in_month(month)
    return SpendingPattern(
        spent=spent,
        budget=budget,
        remaining=max(0.0, budget - spent),
        percent_used=percent_of(spent, budget),
        compare_to_last_month_pct=_change_pct(spent, previous_spent),
        compare_to_average_pct=_change_pct(spent, average),
        pace_delta_pct=_change_pct(spent, expected),
    )


def category_data(lines: Iterable[EnrichedLine]) -> list[CategoryData]:
    return [
        CategoryData(
            name=line.category_name,
            spent=line.spent,
            planned=line.planned,
            percent_used=line.progress_pct,
            is_over=line.spent > line.planned,
        )
        for line in lines
    ]


def top_category(categories: Iterable[CategoryData]) -> CategoryData | None:
    """Category with the largest spend, None when nothing was spent."""
    best = None
    for cat in categories:
        if cat.spent > 0 and (best is None or cat.spent > best.spent):
            best = cat
    return best


# ---------------------------------------------------------------------------
# Insight prompt
# ---------------------------------------------------------------------------

def _signed(pct: float) -> str:
    return f"{'+' if pct >= 0 else ''}{pct:.1f}%"


def build_insight_prompt(
    month: str,
    spending: SpendingPattern,
    top: CategoryData | None,
    categories: list[CategoryData],
    today: date,
) -> str:
    elapsed = days_elapsed(month, today)
    projected_total = spending.spent + (spending.spent / elapsed) * remaining_days(month, today)
    overage = max(0.0, projected_total - spending.budget)
    pace_word = "faster" if spending.pace_delta_pct > 0 else "slower"
    projection = f"{format_money(overage)} over budget" if overage > 0 else "under budget"

    parts = [
        f"Generate {MAX_INSIGHTS} specific, actionable financial insights based on this budget data for {month}:\n\n",
        "CURRENT STATUS:\n",
        f"- Total spent: {format_money(spending.spent)} of {format_money(spending.budget)} "
        f"({spending.percent_used:.1f}%)\n",
        f"- Remaining: {format_money(spending.remaining)}\n",
        f"- Spending pace: {abs(spending.pace_delta_pct):.1f}% {pace_word} than usual\n",
        f"- Days elapsed: {elapsed} days\n",
        f"- If pace continues, will be {projection}\n\n",
    ]

    if top is not None:
        parts.append("TOP SPENDING CATEGORY:\n")
        parts.append(
            f"- {top.name}: {format_money(top.spent)} of {format_money(top.planned)} planned "
            f"({top.percent_used:.1f}%)\n\n"
        )

    over = [c.name for c in categories if c.is_over]
    if over:
        parts.append("OVER-BUDGET CATEGORIES:\n")
        parts.append(f"- {', '.join(over)}\n\n")

    parts += [
        "MONTH-TO-MONTH COMPARISON:\n",
        f"- vs last month: {_signed(spending.compare_to_last_month_pct)}\n",
        f"- vs 3-month average: {_signed(spending.compare_to_average_pct)}\n\n",
        f"Generate exactly {MAX_INSIGHTS} insights in JSON format:\n",
        "[\n",
        '  { "kind": "alert" | "positive", "title": "...", "body": "...", "action": "Action: ..." },\n',
        "]\n\n",
        "Requirements:\n",
        "1. One insight should focus on spending pace and budget projection\n",
        "2. One should compare current spending to previous month\n",
        "3. One should highlight the biggest spending category\n",
        "4. One should be either about category trends, savings potential, or spending patterns\n",
        "- Each insight should be 1 sentence for title, 1-2 for body, 1 for action\n",
        '- Use "alert" for concerning trends, "positive" for good behavior or opportunities\n',
        "- Actions should be specific and achievable within days (not months)\n",
        "- Be encouraging but direct about budget issues\n",
        "- Return ONLY valid JSON, no other text",
    ]
    return "".join(parts)


# ---------------------------------------------------------------------------
# Parsing the reply
# ---------------------------------------------------------------------------

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def extract_json(text: str):
    """
    Decode the JSON document of an LLM reply, unwrapping a markdown code fence.

    Raises:
        MalformedLLMResponse: nothing decodable found
    """
    text = text.strip()
    match = _FENCE_RE.search(text)
    if match:
        text = match.group(1).strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedLLMResponse(f"Reply is not valid JSON: {exc}") from exc


def parse_insights(response: str) -> list[InsightCard]:
    """Valid insight cards from the reply (at most 4); [] on any parse failure."""
    try:
        parsed = extract_json(response)
    except MalformedLLMResponse as exc:
        logger.warning("Failed to parse insights: %s", exc)
        return []

    if not isinstance(parsed, list):
        logger.warning("Failed to parse insights: expected a JSON array, got %s", type(parsed).__name__)
        return []

    cards = []
    for item in parsed:
        try:
            cards.append(InsightCard.model_validate(item))
        except ValidationError:
            continue
        if len(cards) == MAX_INSIGHTS:
            break
    return cards


# ---------------------------------------------------------------------------
# Personality system prompt
# ---------------------------------------------------------------------------

def _frugal_instruction(score: int) -> str:
    if score >= 70:
        return ("Be strict and firm about spending limits. Flag discretionary spending "
                "and emphasize budget discipline.")
    if score >= 40:
        return ("Provide balanced guidance on spending. Permit reasonable discretionary "
                "spending within budgets.")
    return ("Be generous in your interpretation of budgets. Emphasize enjoying life "
            "while staying roughly on track.")


def _advice_orientation(score: int) -> str:
    if score >= 60:
        return ("Focus on concrete actions and specific steps the user should take "
                "immediately. Be directive and prescriptive.")
    if score >= 40:
        return ("Provide a balanced mix of analysis and actionable advice. Explain the "
                "situation and suggest next steps.")
    return ("Focus on thorough analysis and diagnosis of spending patterns. Explain "
            "the 'why' before suggesting actions.")


def _tone_modifiers(personalities: list[str]) -> str:
    modifiers = []
    if "sarcastic" in personalities or "direct" in personalities:
        modifiers.append("Use direct language, avoid sugar-coating. Be straightforward about spending issues.")
    elif "nice" in personalities or "cute" in personalities:
        modifiers.append("Be warm and encouraging. Use supportive language even when discussing budget concerns.")
    if "humorous" in personalities:
        modifiers.append("Use light humor and wit where appropriate to keep the tone engaging.")
    return " ".join(modifiers)


def build_ai_system_prompt(ai_settings: AISettings) -> str:
    personalities = list(ai_settings.personalities)
    tone = ", ".join(personalities) if personalities else "neutral and helpful"
    modifiers = _tone_modifiers(personalities)
    modifiers_line = f"Personality modifiers: {modifiers}" if modifiers else ""

    return (
        "You are a personal financial assistant for SpendIQ, helping users manage "
        "their budgets and spending.\n"
        "\n"
        f"Tone: {tone}\n"
        f"{modifiers_line}\n"
        "\n"
        "Strictness & spending guidance:\n"
        f"{_frugal_instruction(ai_settings.frugal_score)}\n"
        "\n"
        "Response style:\n"
        f"{_advice_orientation(ai_settings.advice_score)}\n"
        "\n"
        "Guidelines:\n"
        "- Keep responses concise and actionable (2-3 sentences typically)\n"
        "- Reference specific budget categories and amounts when relevant\n"
        "- Use the user's currency preference in responses\n"
        "- Be empathetic but direct about overspending\n"
        "- Celebrate when users are on track with their budgets\n"
        "- Focus on the current month's budget unless asked about trends"
    )


# ---------------------------------------------------------------------------
# Chat context
# ---------------------------------------------------------------------------

def build_budget_context(
    month: str,
    timezone: str,
    currency: str,
    lines: list[EnrichedLine] | None,
    total_budget: float | None = None,
) -> str:
    """
    Financial context appended to the chat system prompt.

    lines=None means no budget exists for the month. total_budget defaults
    to the sum of planned amounts.
    """
    context = f"User's timezone: {timezone}, Currency: {currency}\n"
    if lines is None:
        return context + f"No budget exists for {month}."

    if total_budget is None:
        total_budget = sum((line.planned for line in lines), 0.0)

    context += f"\nBudget for {month}: {format_money(total_budget, currency)}\n\nCategory Breakdown:\n"
    total_spent = 0.0
    for line in lines:
        pct = percent_of(line.spent, line.planned)
        context += (
            f"- {line.category_name}: {format_money(line.spent, currency)} spent of "
            f"{format_money(line.planned, currency)} planned ({pct:.1f}%)\n"
        )
        total_spent += line.spent

    context += f"\nTotal spent: {format_money(total_spent, currency)} of {format_money(total_budget, currency)}"
    return context
