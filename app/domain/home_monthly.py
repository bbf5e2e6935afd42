"""
Monthly home payload: everything the client home screen needs for one month
(period, summary, chart slices, budget lines, sync info).
"""
from dataclasses import dataclass
from typing import Iterable, Mapping

from app.domain.budget import (
    BudgetLine, EnrichedLine, StatusThresholds, DEFAULT_THRESHOLDS,
    enrich_budget_lines, percent_of,
)
from app.domain.month import get_month_bounds


CHART_COLORS = (
    "#9FC5A8",
    "#6FA8DC",
    "#E8B4BC",
    "#F4D35E",
    "#A67DB8",
    "#7FDBDA",
    "#E07A5F",
    "#81B29A",
)


@dataclass(frozen=True)
class MonthlySummary:
    budget_total: float
    spent_total: float
    remaining: float
    spent_pct: float


@dataclass(frozen=True)
class ChartSlice:
    category_id: int
    category_name: str
    spent: float
    color: str


@dataclass(frozen=True)
class SyncInfo:
    last_transaction_sync_at: str | None


@dataclass(frozen=True)
class MonthlyHomePayload:
    month: str
    period_start: str
    period_end: str
    currency: str
    budget_id: int | None
    summary: MonthlySummary
    chart: list[ChartSlice]
    lines: list[EnrichedLine]
    sync: SyncInfo


def chart_color(category_id: int, color_hex: str | None = None) -> str:
    """Configured category color, else a palette color fixed per category id."""
    if color_hex:
        return color_hex
    return CHART_COLORS[category_id % len(CHART_COLORS)]


def build_chart(lines: Iterable[EnrichedLine]) -> list[ChartSlice]:
    return [
        ChartSlice(
            category_id=line.category_id,
            category_name=line.category_name,
            spent=line.spent,
            color=chart_color(line.category_id, line.color_hex),
        )
        for line in lines
        if line.spent > 0
    ]


def build_monthly_home_payload(
    month: str,
    budget_lines: Iterable[BudgetLine],
    spend_map: Mapping[int, float],
    last_transaction_sync_at: str | None,
    currency: str = "USD",
    thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
    budget_id: int | None = None,
) -> MonthlyHomePayload:
    """
    Compose the payload. An empty budget_lines list (no budget for the month)
    yields an all-zero summary with empty chart and lines.

    Raises:
        InvalidMonthFormat: month is not YYYY-MM
    """
    bounds = get_month_bounds(month)
    budget_lines = list(budget_lines)

    lines = enrich_budget_lines(budget_lines, spend_map, thresholds)

    budget_total = sum((line.planned for line in lines), 0.0)
    spent_total = sum((line.spent for line in lines), 0.0)

    return MonthlyHomePayload(
        month=month,
        period_start=bounds.period_start,
        period_end=bounds.period_end,
        currency=currency,
        budget_id=budget_id,
        summary=MonthlySummary(
            budget_total=budget_total,
            spent_total=spent_total,
            remaining=max(0.0, budget_total - spent_total),
            spent_pct=percent_of(spent_total, budget_total),
        ),
        chart=build_chart(lines),
        lines=lines,
        sync=SyncInfo(last_transaction_sync_at=last_transaction_sync_at),
    )
