"""
equiprent.reminders
===================

Selection side of the daily return-reminder job.

Composing and sending the message is somebody else's problem; this module
only answers "which rentals should be mentioned today" and stamps the
ones that were.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Iterable, List, Union

from .models import RentalRecord, parse_date


def due_for_return(records: Iterable[RentalRecord], day: Union[str, date]) -> List[RentalRecord]:
    """Rentals expected back on *day*, not returned, not yet notified that day."""
    day = parse_date(day)
    return [
        r for r in records
        if not r.is_open_ended
        and r.expected_return_date == day
        and r.actual_return_date is None
        and r.return_notification_sent != day
    ]


def overdue_returns(records: Iterable[RentalRecord], today: Union[str, date]) -> List[RentalRecord]:
    """Fixed-term rentals whose expected return date has passed without a return."""
    today = parse_date(today)
    return [
        r for r in records
        if not r.is_open_ended
        and r.actual_return_date is None
        and r.expected_return_date < today
    ]


def mark_notified(record: RentalRecord, day: Union[str, date]) -> RentalRecord:
    return replace(record, return_notification_sent=parse_date(day))


def reminder_lines(record: RentalRecord) -> List[str]:
    """``["2x Scaffold frame", ...]`` for the message body."""
    return [f"{line.quantity}x {line.name}" for line in record.equipment]
