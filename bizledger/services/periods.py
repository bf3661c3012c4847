"""
Period helpers for the AI analyses.

Derives the calendar windows (current month, current quarter) that
analyses are computed over.
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


@dataclass
class Period:
    """A calendar window with a human-readable label."""

    kind: str  # 'month' or 'quarter'
    start: date
    end: date
    label: str

    def to_dict(self) -> dict:
        return {
            "name": self.kind,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "label": self.label,
        }


def add_months(day: date, months: int) -> date:
    """First day of the month ``months`` away from ``day``'s month."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def quarter_of(day: date) -> int:
    return (day.month - 1) // 3 + 1


def month_period(today: date) -> Period:
    """Current calendar month, first to last day."""
    start = today.replace(day=1)
    end = today.replace(day=monthrange(today.year, today.month)[1])
    return Period(kind="month", start=start, end=end, label=f"{MONTH_NAMES[today.month - 1]} {today.year}")


def quarter_period(today: date) -> Period:
    """Current calendar quarter, first day of its first month to last day of its last."""
    quarter = quarter_of(today)
    start = date(today.year, (quarter - 1) * 3 + 1, 1)
    last_month = start.month + 2
    end = date(today.year, last_month, monthrange(today.year, last_month)[1])
    return Period(kind="quarter", start=start, end=end, label=f"Q{quarter} {today.year}")


def period_for(kind: str, today: date) -> Period:
    """Window for a period keyword. Unknown keywords fall back to the month."""
    if kind == "quarter":
        return quarter_period(today)
    return month_period(today)
