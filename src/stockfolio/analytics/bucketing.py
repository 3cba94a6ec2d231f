"""Date bucketing for charts.

Chooses a sampling granularity for a [start, end] span from its inclusive
day count and enumerates the representative dates at that granularity.

Granularity table (inclusive day count n):

    n >= 5400  -> YEAR      (30 * 6 * 30)
    n >= 900   -> BI_YEAR   (30 * 30)
    n >= 210   -> MONTH     (30 * 7)
    n >= 30    -> WEEK
    otherwise  -> DAY
"""

import calendar
from datetime import date, timedelta
from enum import Enum


class Granularity(str, Enum):
    """Sampling step for a date range."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    BI_YEAR = "bi-year"
    YEAR = "year"


# (minimum inclusive day count, granularity), widest first
GRANULARITY_THRESHOLDS: tuple[tuple[int, Granularity], ...] = (
    (30 * 6 * 30, Granularity.YEAR),
    (30 * 30, Granularity.BI_YEAR),
    (30 * 7, Granularity.MONTH),
    (30, Granularity.WEEK),
)

_STEP_MONTHS = {
    Granularity.MONTH: 1,
    Granularity.BI_YEAR: 6,
    Granularity.YEAR: 12,
}

_LABEL_FORMATS = {
    Granularity.DAY: "%d %b %Y",
    Granularity.MONTH: "%b %Y",
    Granularity.BI_YEAR: "%b %Y",
    Granularity.YEAR: "%Y",
}


def span_days(start: date, end: date) -> int:
    """Inclusive number of days from start to end."""
    return (end - start).days + 1


def granularity_of(start: date, end: date) -> Granularity:
    """Pick the granularity for a date span."""
    total_days = span_days(start, end)
    for minimum, granularity in GRANULARITY_THRESHOLDS:
        if total_days >= minimum:
            return granularity
    return Granularity.DAY


def add_months(day: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the month's end."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def _nth_step(start: date, granularity: Granularity, n: int) -> date:
    # Month-based steps are taken from start each time so that a run starting
    # on the 31st does not drift to the 28th after February.
    if granularity == Granularity.DAY:
        return start + timedelta(days=n)
    if granularity == Granularity.WEEK:
        return start + timedelta(weeks=n)
    return add_months(start, _STEP_MONTHS[granularity] * n)


def dates_at(start: date, end: date, granularity: Granularity) -> list[date]:
    """Enumerate dates from start in steps of ``granularity`` while <= end.

    Both endpoints are included when they fall on a step boundary. An empty
    list is returned when end is before start.
    """
    dates: list[date] = []
    n = 0
    current = start
    while current <= end:
        dates.append(current)
        n += 1
        try:
            current = _nth_step(start, granularity, n)
        except (OverflowError, ValueError):
            # The next step lies past date.max
            break
    return dates


def adjusted_dates(start: date, end: date) -> list[date]:
    """Dates for a span at its own granularity."""
    return dates_at(start, end, granularity_of(start, end))


def week_of_month(day: date) -> int:
    """Week number within the month, weeks starting on Sunday, first week = 1."""
    first = day.replace(day=1)
    leading = (first.weekday() + 1) % 7  # days before the 1st in its Sunday-based week
    return (day.day + leading - 1) // 7 + 1


def label_for(day: date, granularity: Granularity) -> str:
    """Chart label for a date at a granularity."""
    if granularity == Granularity.WEEK:
        return f"{week_of_month(day)} {day.strftime('%b %Y')}"
    return day.strftime(_LABEL_FORMATS[granularity])
