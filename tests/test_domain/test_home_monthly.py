"""
Tests for the monthly home payload builder
"""
import pytest

from app.domain.budget import BudgetLine, STATUS_ON_TRACK, STATUS_OVER, STATUS_TIGHT
from app.domain.home_monthly import CHART_COLORS, build_monthly_home_payload, chart_color
from app.domain.month import InvalidMonthFormat


def _lines():
    return [
        BudgetLine(category_id=8, category_name="Grocery", planned_amount=600, parent_category_name="Everyday"),
        BudgetLine(category_id=9, category_name="Transportation", planned_amount=300, parent_category_name="Everyday"),
    ]


def test_payload_two_lines():
    payload = build_monthly_home_payload("2026-02", _lines(), {8: 510.5, 9: 230}, None)

    assert payload.summary.budget_total == 900
    assert payload.summary.spent_total == 740.5
    assert payload.summary.remaining == 159.5
    assert payload.summary.spent_pct == 82.28
    assert payload.lines[0].status == STATUS_TIGHT
    assert payload.lines[1].status == STATUS_ON_TRACK
    assert payload.currency == "USD"


def test_payload_without_budget():
    payload = build_monthly_home_payload("2026-02", [], {8: 99}, None)

    assert payload.summary.budget_total == 0
    assert payload.summary.spent_total == 0
    assert payload.summary.remaining == 0
    assert payload.summary.spent_pct == 0
    assert payload.chart == []
    assert payload.lines == []


def test_payload_period_bounds():
    payload = build_monthly_home_payload("2026-02", [], {}, "2026-02-07T18:20:00Z")

    assert payload.period_start == "2026-02-01"
    assert payload.period_end == "2026-02-28"
    assert payload.sync.last_transaction_sync_at == "2026-02-07T18:20:00Z"


def test_payload_overspent_line():
    lines = [BudgetLine(category_id=1, category_name="Fun", planned_amount=100)]
    payload = build_monthly_home_payload("2026-03", lines, {1: 130}, None)

    line = payload.lines[0]
    assert line.remaining == 0
    assert line.progress_pct == 130.0
    assert line.status == STATUS_OVER
    assert payload.summary.remaining == 0


def test_chart_skips_unspent_lines():
    payload = build_monthly_home_payload("2026-02", _lines(), {8: 10}, None)

    assert [s.category_id for s in payload.chart] == [8]
    assert payload.chart[0].spent == 10


def test_chart_color_prefers_configured_color():
    assert chart_color(8, "#ABCDEF") == "#ABCDEF"
    assert chart_color(8) == CHART_COLORS[0]
    assert chart_color(9) == CHART_COLORS[1]


def test_chart_color_stable_when_lines_reorder():
    spend = {8: 10, 9: 20}
    forward = build_monthly_home_payload("2026-02", _lines(), spend, None)
    backward = build_monthly_home_payload("2026-02", list(reversed(_lines())), spend, None)

    assert {s.category_id: s.color for s in forward.chart} == {s.category_id: s.color for s in backward.chart}


def test_payload_is_deterministic():
    args = ("2026-02", _lines(), {8: 510.5, 9: 230}, "2026-02-07T18:20:00Z")
    assert build_monthly_home_payload(*args) == build_monthly_home_payload(*args)


def test_payload_rejects_bad_month():
    with pytest.raises(InvalidMonthFormat):
        build_monthly_home_payload("2026-2", [], {}, None)
