"""
Budget vs spend aggregation.

Pure functions over rows already loaded by the data source:
  - aggregate_category_spend: (category_id, amount) pairs -> spend per category
  - compute_budget_status: spend/plan ratio -> on_track / tight / over
  - enrich_budget_line: planned + spend -> remaining, progress %, status
  - compute_insights: whole-budget per-category rows for the insights list

Money is float dollars throughout; percentages are rounded to 2 decimals.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Mapping


STATUS_ON_TRACK = "on_track"
STATUS_TIGHT = "tight"
STATUS_OVER = "over"

BUDGET_STATUSES = (STATUS_ON_TRACK, STATUS_TIGHT, STATUS_OVER)


@dataclass(frozen=True)
class StatusThresholds:
    """Upper ratio bounds (inclusive) of the on_track and tight tiers."""
    on_track_max: float = 0.85
    tight_max: float = 1.0


DEFAULT_THRESHOLDS = StatusThresholds()


@dataclass(frozen=True)
class BudgetLine:
    category_id: int
    category_name: str
    planned_amount: float
    parent_category_name: str | None = None
    color_hex: str | None = None


@dataclass(frozen=True)
class CategorySpend:
    category_id: int
    spent: float


@dataclass(frozen=True)
class EnrichedLine:
    category_id: int
    category_name: str
    parent_category_name: str
    color_hex: str | None
    planned: float
    spent: float
    remaining: float
    progress_pct: float
    status: str


@dataclass(frozen=True)
class BudgetInsight:
    category: str
    budget: float
    spent: float
    remaining: float  # not clamped: negative when over budget
    percent_used: float
    status: str


def round2(value: float) -> float:
    """Two decimals, ties away from zero on the exact binary value."""
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def percent_of(part: float, whole: float) -> float:
    """part/whole*100 rounded to 2 decimals; 0 when whole is 0."""
    if whole == 0:
        return 0.0
    return round2(part / whole * 100)


def aggregate_category_spend(rows: Iterable[CategorySpend | tuple[int, float]]) -> dict[int, float]:
    """
    Sum spend per category.

    Only categories present in rows appear in the result; callers treat a
    missing key as 0.
    """
    spend: dict[int, float] = {}
    for row in rows:
        if isinstance(row, CategorySpend):
            category_id, amount = row.category_id, row.spent
        else:
            category_id, amount = row
        spend[category_id] = spend.get(category_id, 0.0) + float(amount)
    return spend


def compute_budget_status(
    spent: float,
    planned: float,
    thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
) -> str:
    """
    Classify spend against plan.

    Boundaries belong to the lower tier (ratio == on_track_max -> on_track).
    A zero plan is always on_track.
    """
    ratio = 0.0 if planned == 0 else spent / planned
    if ratio <= thresholds.on_track_max:
        return STATUS_ON_TRACK
    if ratio <= thresholds.tight_max:
        return STATUS_TIGHT
    return STATUS_OVER


def enrich_budget_line(
    line: BudgetLine,
    spend_map: Mapping[int, float],
    thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
) -> EnrichedLine:
    planned = float(line.planned_amount)
    spent = float(spend_map.get(line.category_id, 0.0))
    return EnrichedLine(
        category_id=line.category_id,
        category_name=line.category_name,
        # Top-level categories act as their own parent group
        parent_category_name=line.parent_category_name or line.category_name,
        color_hex=line.color_hex,
        planned=planned,
        spent=spent,
        remaining=max(0.0, planned - spent),
        progress_pct=percent_of(spent, planned),
        status=compute_budget_status(spent, planned, thresholds),
    )


def enrich_budget_lines(
    lines: Iterable[BudgetLine],
    spend_map: Mapping[int, float],
    thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
) -> list[EnrichedLine]:
    return [enrich_budget_line(line, spend_map, thresholds) for line in lines]


def compute_insights(
    lines: Iterable[BudgetLine],
    spend_map: Mapping[int, float],
    thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
) -> list[BudgetInsight]:
    """Per-category rows for the insights list, in budget line order."""
    result = []
    for line in lines:
        budget = float(line.planned_amount)
        spent = float(spend_map.get(line.category_id, 0.0))
        result.append(BudgetInsight(
            category=line.category_name,
            budget=budget,
            spent=spent,
            remaining=budget - spent,
            percent_used=percent_of(spent, budget),
            status=compute_budget_status(spent, budget, thresholds),
        ))
    return result
