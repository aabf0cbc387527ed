"""
Expansion of recurrence rules into concrete calendar dates.

Everything here is pure: no database access, no clock, no settings. The
service layer decides what to persist.
"""

from datetime import date, datetime, timedelta
from typing import List

from dateutil.relativedelta import relativedelta

from .types import (
    END_AFTER,
    END_ON_DATE,
    HORIZON_MONTHS,
    MAX_OCCURRENCES,
    RECURRENCE_DAILY,
    RECURRENCE_MONTHLY,
    RECURRENCE_WEEKLY,
    RecurrenceRule,
)


def expand(start_date: date, rule: RecurrenceRule) -> List[date]:
    """
    Expand a recurrence rule into the ordered dates of its occurrences.

    Args:
        start_date: First day of the series (time of day is ignored)
        rule: RecurrenceRule describing the repetition

    Returns:
        Strictly increasing list of dates, never empty and never later than
        `HORIZON_MONTHS` after `start_date`. A non-recurring rule yields
        `[start_date]`.
    """
    start = _as_date(start_date)
    if not rule.is_recurring:
        return [start]

    interval = max(1, rule.interval or 1)
    end = effective_end_date(start, rule)
    max_count = effective_max_count(rule)

    if rule.type == RECURRENCE_DAILY:
        dates = _expand_daily(start, interval, end, max_count)
    elif rule.type == RECURRENCE_WEEKLY:
        dates = _expand_weekly(start, interval, _weekday_set(start, rule), end, max_count)
    elif rule.type == RECURRENCE_MONTHLY:
        dates = _expand_monthly(start, interval, end, max_count)
    else:
        dates = []

    return dates or [start]


def horizon_date(start_date: date) -> date:
    """Last date any series starting on `start_date` may reach."""
    return _as_date(start_date) + relativedelta(months=HORIZON_MONTHS)


def effective_end_date(start_date: date, rule: RecurrenceRule) -> date:
    """Bound the series by the horizon and, for `on_date` rules, the end date."""
    start = _as_date(start_date)
    ceiling = horizon_date(start)
    if rule.end_type == END_ON_DATE and rule.end_date:
        return max(start, min(ceiling, _as_date(rule.end_date)))
    return ceiling


def effective_max_count(rule: RecurrenceRule) -> int:
    if rule.end_type == END_AFTER and rule.end_after_occurrences is not None:
        return min(max(1, rule.end_after_occurrences), MAX_OCCURRENCES)
    return MAX_OCCURRENCES


def to_js_weekday(day: date) -> int:
    """Weekday index with 0=Sunday..6=Saturday."""
    return (day.weekday() + 1) % 7


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _weekday_set(start: date, rule: RecurrenceRule):
    return rule.days_of_week or frozenset({to_js_weekday(start)})


def _expand_daily(start: date, interval: int, end: date, max_count: int) -> List[date]:
    dates = []
    current = start
    step = timedelta(days=interval)
    while current <= end and len(dates) < max_count:
        dates.append(current)
        current += step
    return dates


def _expand_weekly(start, interval, weekdays, end, max_count) -> List[date]:
    # Windows are seven days long and anchored at the start date; after each
    # window the walk jumps over interval - 1 whole weeks.
    dates = []
    current = start
    days_in_window = 0
    skip = timedelta(weeks=interval - 1)
    while current <= end and len(dates) < max_count:
        if to_js_weekday(current) in weekdays:
            dates.append(current)
        current += timedelta(days=1)
        days_in_window += 1
        if days_in_window == 7:
            current += skip
            days_in_window = 0
    return dates


def _expand_monthly(start: date, interval: int, end: date, max_count: int) -> List[date]:
    # Offsets are taken from the start date, so a day missing from a short
    # month is clamped to its last day without shifting later occurrences.
    dates = []
    k = 0
    current = start
    while current <= end and len(dates) < max_count:
        dates.append(current)
        k += 1
        current = start + relativedelta(months=k * interval)
    return dates
