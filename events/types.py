"""
Data types and constants for the events calendar.

This module contains:
- RecurrenceRule, the immutable description of how an event repeats
- DTOs (Data Transfer Objects) for service layer operations
- Constants used across the application
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional
from datetime import date, time


RECURRENCE_NONE = 'none'
RECURRENCE_DAILY = 'daily'
RECURRENCE_WEEKLY = 'weekly'
RECURRENCE_MONTHLY = 'monthly'
RECURRENCE_TYPES = (RECURRENCE_NONE, RECURRENCE_DAILY, RECURRENCE_WEEKLY, RECURRENCE_MONTHLY)

END_NEVER = 'never'
END_AFTER = 'after'
END_ON_DATE = 'on_date'
END_TYPES = (END_NEVER, END_AFTER, END_ON_DATE)

# Series are never expanded past this many months from their first date.
HORIZON_MONTHS = 12
MAX_OCCURRENCES = 365

# 0=Sunday .. 6=Saturday, the convention used by the console's weekday pickers.
WEEKDAY_NAMES = ('Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday')


def _parse_int(value, default=None) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _parse_date(value) -> Optional[date]:
    if value is None or value == '':
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


@dataclass(frozen=True)
class RecurrenceRule:
    """
    How an event repeats.

    Rules are values: an edit builds a new rule rather than mutating one.
    `days_of_week` uses 0=Sunday..6=Saturday and only matters for weekly
    rules; leaving it empty repeats on the start date's weekday.
    """
    type: str = RECURRENCE_NONE
    interval: int = 1
    days_of_week: FrozenSet[int] = field(default_factory=frozenset)
    end_type: str = END_NEVER
    end_after_occurrences: Optional[int] = None
    end_date: Optional[date] = None

    def __post_init__(self):
        if self.type not in RECURRENCE_TYPES:
            raise ValueError(f"Unknown recurrence type: {self.type!r}")
        if self.end_type not in END_TYPES:
            raise ValueError(f"Unknown recurrence end type: {self.end_type!r}")
        if not isinstance(self.days_of_week, frozenset):
            object.__setattr__(self, 'days_of_week', frozenset(self.days_of_week))
        if any(not 0 <= day <= 6 for day in self.days_of_week):
            raise ValueError("Days of week must be between 0 (Sunday) and 6 (Saturday)")

    @property
    def is_recurring(self) -> bool:
        return self.type != RECURRENCE_NONE

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'RecurrenceRule':
        """
        Build a rule from its stored JSON form.

        Accepts the camelCase keys written to `Event.recurrence_rule` as well
        as snake_case keys. Malformed values fall back to safe defaults:
        unknown types and end types become `none` and `never`, weekdays
        that are not integers in 0..6 are dropped, a non-numeric interval
        becomes 1, and an unreadable occurrence count or end date is ignored.
        """
        if not data:
            return cls()

        def pick(camel: str, snake: str, default=None):
            if camel in data:
                return data[camel]
            return data.get(snake, default)

        days: Iterable[int] = pick('daysOfWeek', 'days_of_week') or ()
        if not isinstance(days, (list, tuple, set, frozenset)):
            days = ()
        end_after = pick('endAfterOccurrences', 'end_after_occurrences')
        rule_type = data.get('type')
        end_type = pick('endType', 'end_type')
        weekdays = (_parse_int(day) for day in days)
        return cls(
            type=rule_type if rule_type in RECURRENCE_TYPES else RECURRENCE_NONE,
            interval=max(1, _parse_int(data.get('interval'), 1)),
            days_of_week=frozenset(day for day in weekdays if day is not None and 0 <= day <= 6),
            end_type=end_type if end_type in END_TYPES else END_NEVER,
            end_after_occurrences=_parse_int(end_after),
            end_date=_parse_date(pick('endDate', 'end_date')),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON form stored on parent events."""
        return {
            'type': self.type,
            'interval': self.interval,
            'daysOfWeek': sorted(self.days_of_week),
            'endType': self.end_type,
            'endAfterOccurrences': self.end_after_occurrences,
            'endDate': self.end_date.isoformat() if self.end_date else None,
        }


@dataclass
class EventData:
    """DTO for event creation."""
    title: str
    start_date: date
    event_type: str = 'farm_event'
    description: str = ''
    end_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: str = ''
    max_attendees: Optional[int] = None
    category_id: Optional[int] = None
    is_active: bool = True


@dataclass
class EventUpdateData:
    """DTO for event update operations."""
    title: Optional[str] = None
    description: Optional[str] = None
    event_type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = None
    max_attendees: Optional[int] = None
    category_id: Optional[int] = None
    is_active: Optional[bool] = None
    # Optional fields explicitly set to null
    cleared: FrozenSet[str] = frozenset()
