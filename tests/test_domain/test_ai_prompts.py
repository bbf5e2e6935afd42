"""
Tests for AI prompt building and reply parsing
"""
import json
from datetime import date

import pytest

from app.domain.ai_prompts import (
    AISettings, CategoryData, MalformedLLMResponse,
    build_ai_system_prompt, build_budget_context, build_insight_prompt,
    build_spending_pattern, category_data, days_elapsed, extract_json,
    parse_insights, remaining_days, top_category,
)
from app.domain.budget import BudgetLine, enrich_budget_lines


_CARD = {"kind": "alert", "title": "Slow down", "body": "Dining is high.", "action": "Action: cook twice."}


# --- parse_insights ---

def test_parse_insights_plain_json():
    cards = parse_insights(json.dumps([_CARD]))
    assert len(cards) == 1
    assert cards[0].kind == "alert"
    assert cards[0].title == "Slow down"


def test_parse_insights_strips_code_fence():
    reply = "Here you go:\n```json\n" + json.dumps([_CARD, {**_CARD, "kind": "positive"}]) + "\n```"
    cards = parse_insights(reply)
    assert [c.kind for c in cards] == ["alert", "positive"]


def test_parse_insights_caps_at_four():
    assert len(parse_insights(json.dumps([_CARD] * 6))) == 4


def test_parse_insights_skips_invalid_items():
    reply = json.dumps([_CARD, {"kind": "meh", "title": "x", "body": "y", "action": "z"}, {"title": "no kind"}])
    assert len(parse_insights(reply)) == 1


@pytest.mark.parametrize("reply", ["not json at all", '{"kind": "alert"}', "```json\n[oops\n```", ""])
def test_parse_insights_never_raises(reply):
    assert parse_insights(reply) == []


def test_extract_json_raises_on_garbage():
    with pytest.raises(MalformedLLMResponse):
        extract_json("definitely not json")


# --- month progress and spending pattern ---

def test_days_elapsed_current_and_past_month():
    today = date(2026, 2, 10)
    assert days_elapsed("2026-02", today) == 10
    assert remaining_days("2026-02", today) == 18
    assert days_elapsed("2026-01", today) == 31
    assert remaining_days("2026-01", today) == 0


def test_spending_pattern_comparisons():
    pattern = build_spending_pattern(
        "2026-01",
        spent=1100,
        budget=1000,
        previous_spent=1000,
        baseline_totals=[1000, 1200, 800],
        today=date(2026, 2, 10),
    )
    assert pattern.remaining == 0
    assert pattern.percent_used == 110.0
    assert pattern.compare_to_last_month_pct == 10.0
    assert pattern.compare_to_average_pct == 10.0
    assert pattern.pace_delta_pct == 10.0


def test_spending_pattern_zero_references():
    pattern = build_spending_pattern("2026-01", 50, 0, 0, [], date(2026, 2, 1))
    assert pattern.percent_used == 0
    assert pattern.compare_to_last_month_pct == 0
    assert pattern.compare_to_average_pct == 0
    assert pattern.pace_delta_pct == 0


def test_top_category_none_when_nothing_spent():
    assert top_category([CategoryData("A", 0, 100, 0, False)]) is None


def test_insight_prompt_sections():
    lines = enrich_budget_lines(
        [
            BudgetLine(category_id=8, category_name="Grocery", planned_amount=600),
            BudgetLine(category_id=10, category_name="Restaurants", planned_amount=200),
        ],
        {8: 510.5, 10: 250},
    )
    categories = category_data(lines)
    spending = build_spending_pattern("2026-02", 760.5, 800, 700, [700, 650, 800], date(2026, 2, 14))

    prompt = build_insight_prompt("2026-02", spending, top_category(categories), categories, date(2026, 2, 14))

    assert "for 2026-02" in prompt
    assert "CURRENT STATUS:" in prompt
    assert "- Total spent: $760.50 of $800.00 (95.1%)" in prompt
    assert "- Days elapsed: 14 days" in prompt
    assert "TOP SPENDING CATEGORY:\n- Grocery: $510.50 of $600.00 planned (85.1%)" in prompt
    assert "OVER-BUDGET CATEGORIES:\n- Restaurants" in prompt
    assert "- vs last month: +8.6%" in prompt
    assert prompt.endswith("Return ONLY valid JSON, no other text")


def test_insight_prompt_omits_empty_sections():
    spending = build_spending_pattern("2026-02", 0, 0, 0, [], date(2026, 2, 14))
    prompt = build_insight_prompt("2026-02", spending, None, [], date(2026, 2, 14))

    assert "TOP SPENDING CATEGORY" not in prompt
    assert "OVER-BUDGET CATEGORIES" not in prompt
    assert "under budget" in prompt


# --- system prompt ---

@pytest.mark.parametrize("score, phrase", [
    (70, "Be strict and firm"),
    (69, "Provide balanced guidance"),
    (40, "Provide balanced guidance"),
    (39, "Be generous"),
])
def test_system_prompt_frugal_thresholds(score, phrase):
    prompt = build_ai_system_prompt(AISettings(frugal_score=score))
    assert phrase in prompt


@pytest.mark.parametrize("score, phrase", [
    (60, "Focus on concrete actions"),
    (59, "balanced mix of analysis"),
    (39, "thorough analysis"),
])
def test_system_prompt_advice_thresholds(score, phrase):
    prompt = build_ai_system_prompt(AISettings(advice_score=score))
    assert phrase in prompt


def test_system_prompt_tone():
    prompt = build_ai_system_prompt(AISettings(personalities=["direct", "humorous"]))
    assert "Tone: direct, humorous" in prompt
    assert "avoid sugar-coating" in prompt
    assert "light humor" in prompt

    neutral = build_ai_system_prompt(AISettings(personalities=[]))
    assert "Tone: neutral and helpful" in neutral


def test_ai_settings_validation():
    with pytest.raises(ValueError):
        AISettings(frugal_score=101)
    with pytest.raises(ValueError):
        AISettings(personalities=["nice", "cute", "coach", "direct"])


# --- chat context ---

def test_budget_context_without_budget():
    context = build_budget_context("2026-02", "America/New_York", "USD", None)
    assert context.startswith("User's timezone: America/New_York, Currency: USD")
    assert context.endswith("No budget exists for 2026-02.")


def test_budget_context_with_lines():
    lines = enrich_budget_lines(
        [BudgetLine(category_id=8, category_name="Grocery", planned_amount=1200)], {8: 300},
    )
    context = build_budget_context("2026-02", "UTC", "USD", lines)

    assert "Budget for 2026-02: $1,200.00" in context
    assert "- Grocery: $300.00 spent of $1,200.00 planned (25.0%)" in context
    assert context.endswith("Total spent: $300.00 of $1,200.00")
