"""Expansion of recurring meal assignments into calendar dates."""

from collections.abc import Iterable
from datetime import date, timedelta
from enum import StrEnum

DEFAULT_HORIZON_DAYS = 30
DAYS_PER_WEEK = 7
SATURDAY = 5


class RecurrenceRule(StrEnum):
    """Patterns describing which dates a meal is copied onto."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    WEEKDAYS = "weekdays"
    WEEKENDS = "weekends"
    CUSTOM = "custom"


def expand_recurrence(
    start: date,
    rule: RecurrenceRule,
    end: date | None = None,
    custom_days: Iterable[int] = (),
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> list[date]:
    """Return the ascending dates on which a meal should be instantiated.

    Custom weekday indices count from Sunday: Sunday is 0, Monday is 1,
    Saturday is 6.
    """
    if rule == RecurrenceRule.NONE:
        return [start]

    days = frozenset(custom_days)
    invalid = sorted(day for day in days if not 0 <= day < DAYS_PER_WEEK)
    if invalid:
        raise ValueError(f"Invalid weekday indices: {invalid}")

    last = end if end is not None else start + timedelta(days=horizon_days)
    dates: list[date] = []
    current = start
    while current <= last:
        if _matches(rule, start, current, days):
            dates.append(current)
        current += timedelta(days=1)
    return dates


def sunday_based_weekday(day: date) -> int:
    """Return the weekday index of ``day`` with Sunday as 0."""
    return day.isoweekday() % DAYS_PER_WEEK


def _matches(
    rule: RecurrenceRule, start: date, day: date, custom: frozenset[int]
) -> bool:
    weekday = day.weekday()
    if rule == RecurrenceRule.DAILY:
        return True
    if rule == RecurrenceRule.WEEKLY:
        return weekday == start.weekday()
    if rule == RecurrenceRule.WEEKDAYS:
        return weekday < SATURDAY
    if rule == RecurrenceRule.WEEKENDS:
        return weekday >= SATURDAY
    return sunday_based_weekday(day) in custom
