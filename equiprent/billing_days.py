"""
equiprent.billing_days
======================

Calendar arithmetic deciding which days of a rental are billable.

Each contract carries two flags, ``charge_saturdays`` and
``charge_sundays``; a weekend day whose flag is false is not billed.
All helpers work on calendar dates (ISO strings are accepted) and count
*inclusively*: a one-day span is one billable day unless that day is an
excluded weekend day.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Union

from .models import parse_date

DateLike = Union[str, date]

SATURDAY = 5
SUNDAY = 6
_ONE_DAY = timedelta(days=1)


def is_non_billable_weekend_day(day: DateLike, charge_saturdays: bool, charge_sundays: bool) -> bool:
    """True for a Saturday not charged or a Sunday not charged."""
    weekday = parse_date(day).weekday()
    if weekday == SATURDAY:
        return not charge_saturdays
    if weekday == SUNDAY:
        return not charge_sundays
    return False


def count_billable_days(start: DateLike, end: DateLike, charge_saturdays: bool, charge_sundays: bool) -> int:
    """
    Number of billable days in the closed interval ``[start, end]``.

    Returns 0 when *start* is after *end*.

    Examples
    --------
    >>> count_billable_days("2024-01-01", "2024-01-07", False, False)
    5
    """
    current, last = parse_date(start), parse_date(end)
    billable = 0
    while current <= last:
        if not is_non_billable_weekend_day(current, charge_saturdays, charge_sundays):
            billable += 1
        current += _ONE_DAY
    return billable


def advance_to_next_billable_day(day: DateLike, charge_saturdays: bool, charge_sundays: bool) -> date:
    """First billable day strictly after *day*."""
    current = parse_date(day) + _ONE_DAY
    while is_non_billable_weekend_day(current, charge_saturdays, charge_sundays):
        current += _ONE_DAY
    return current


def end_of_billable_span(start: DateLike, billable_days: int, charge_saturdays: bool, charge_sundays: bool) -> date:
    """
    Last calendar day of a span holding exactly *billable_days* billable days.

    *start* must itself be billable; it counts as day one.  Callers get
    such a start from :func:`advance_to_next_billable_day`.
    """
    current = parse_date(start)
    if billable_days < 1:
        raise ValueError("billable_days must be at least 1")
    if is_non_billable_weekend_day(current, charge_saturdays, charge_sundays):
        raise ValueError(f"span must start on a billable day, got {current.isoformat()}")
    counted = 1
    while counted < billable_days:
        current += _ONE_DAY
        if not is_non_billable_weekend_day(current, charge_saturdays, charge_sundays):
            counted += 1
    return current
