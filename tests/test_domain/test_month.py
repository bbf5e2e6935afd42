"""
Tests for calendar month helpers
"""
from datetime import date

import pytest

from app.domain.month import (
    InvalidMonthFormat, get_month_bounds, is_valid_month, month_token,
    previous_month, shift_month, days_in_month,
)


@pytest.mark.parametrize("month, end", [
    ("2026-01", "2026-01-31"),
    ("2026-02", "2026-02-28"),
    ("2028-02", "2028-02-29"),
    ("2026-04", "2026-04-30"),
    ("2026-12", "2026-12-31"),
])
def test_month_bounds_last_day(month, end):
    bounds = get_month_bounds(month)
    assert bounds.period_start == f"{month}-01"
    assert bounds.period_end == end


def test_month_bounds_dates():
    bounds = get_month_bounds("2026-02")
    assert bounds.start_date == date(2026, 2, 1)
    assert bounds.end_date == date(2026, 2, 28)


@pytest.mark.parametrize("token", ["2026-13", "2026-00", "26-02", "2026-2", "2026/02", "", " 2026-02", None])
def test_invalid_month_rejected(token):
    assert not is_valid_month(token)
    with pytest.raises(InvalidMonthFormat):
        get_month_bounds(token)


def test_invalid_month_keeps_token():
    with pytest.raises(InvalidMonthFormat) as exc:
        get_month_bounds("2026-13")
    assert exc.value.token == "2026-13"


def test_shift_month_across_years():
    assert previous_month("2026-01") == "2025-12"
    assert shift_month("2025-11", 3) == "2026-02"
    assert shift_month("2026-03", -14) == "2025-01"


def test_month_token_and_days():
    assert month_token(date(2026, 2, 17)) == "2026-02"
    assert days_in_month("2024-02") == 29
