"""
equiprent.closure
=================

Close an open-ended rental for billing.

While open, a rental's pricing holds a daily rate.  Closing it counts the
billable days from the start date up to *today* (inclusive, honouring the
contract's weekend flags) and turns it into a fixed-term rental priced at
``billable_days × daily_rate``.  The equipment is **not** marked as
returned; that is :mod:`equiprent.finalization`'s job.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Union

from .billing_days import count_billable_days
from .errors import InvalidDate, NotOpenEnded
from .lifecycle import check_transition
from .models import FixedTermPricing, PaymentStatus, RentalRecord, RentalState, parse_date

logger = logging.getLogger(__name__)


def close_open_ended(record: RentalRecord, today: Union[str, date]) -> RentalRecord:
    """
    Return *record* closed as of *today*.

    ``today`` is sampled once by the caller so the count and the new
    expected return date agree even across midnight.
    """
    if record.state is not RentalState.OPEN_ENDED:
        raise NotOpenEnded(f"rental {record.id} is not an open-ended contract")

    today = parse_date(today)
    if today < record.rental_start_date:
        raise InvalidDate(
            f"cannot close rental {record.id} on {today.isoformat()}, "
            f"before its start date {record.rental_start_date.isoformat()}"
        )
    billable_days = count_billable_days(
        record.rental_start_date, today, record.charge_saturdays, record.charge_sundays
    )
    final_value = billable_days * record.value

    closed = replace(
        record,
        pricing=FixedTermPricing(final_value),
        # a fixed-term record spans at least one day even when none was billable
        rental_days=max(billable_days, 1),
        expected_return_date=today,
        payment_status=PaymentStatus.PENDING,
    )
    check_transition(record.state, closed.state)
    logger.info(f"Closed open-ended rental {record.id}: {billable_days} billable days, value {final_value}")
    return closed
