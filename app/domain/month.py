"""
Calendar month helpers.

A month is addressed by a "YYYY-MM" token everywhere in the API; budgets and
spend queries work on the inclusive date range [periodStart, periodEnd].
"""
import calendar
import re
from dataclasses import dataclass
from datetime import date


MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class InvalidMonthFormat(ValueError):
    """Month token is not YYYY-MM."""

    def __init__(self, token):
        super().__init__(f"Invalid month {token!r}. Use YYYY-MM (e.g. 2026-02).")
        self.token = token


@dataclass(frozen=True)
class MonthBounds:
    period_start: str  # YYYY-MM-01
    period_end: str  # YYYY-MM-<last day>

    @property
    def start_date(self) -> date:
        return date.fromisoformat(self.period_start)

    @property
    def end_date(self) -> date:
        return date.fromisoformat(self.period_end)


def is_valid_month(token) -> bool:
    return isinstance(token, str) and MONTH_RE.match(token) is not None


def parse_month(token: str) -> tuple[int, int]:
    """Return (year, month) for a YYYY-MM token."""
    if not is_valid_month(token):
        raise InvalidMonthFormat(token)
    year, month = token.split("-")
    return int(year), int(month)


def month_token(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def days_in_month(token: str) -> int:
    year, month = parse_month(token)
    return calendar.monthrange(year, month)[1]


def get_month_bounds(token: str) -> MonthBounds:
    """
    First and last calendar day of the month.

    >>> get_month_bounds("2028-02")
    MonthBounds(period_start='2028-02-01', period_end='2028-02-29')
    """
    year, month = parse_month(token)
    last_day = calendar.monthrange(year, month)[1]
    return MonthBounds(
        period_start=f"{token}-01",
        period_end=f"{token}-{last_day:02d}",
    )


def shift_month(token: str, n: int) -> str:
    """Move a month token by n months (negative goes back)."""
    year, month = parse_month(token)
    idx = year * 12 + (month - 1) + n
    return f"{idx // 12:04d}-{idx % 12 + 1:02d}"


def previous_month(token: str) -> str:
    return shift_month(token, -1)
