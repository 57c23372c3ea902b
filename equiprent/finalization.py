"""
equiprent.finalization
======================

Record the physical return of a rental's equipment.

Finalization is only allowed once the contract has a fixed price and has
been paid; it stamps ``actual_return_date`` and touches nothing else.
Finalizing twice is a benign no-op.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Union

from .errors import AlreadyFinalized, PaymentNotConfirmed, StillOpenEnded
from .lifecycle import check_transition
from .models import RentalRecord, parse_date

logger = logging.getLogger(__name__)


def finalize_rental(record: RentalRecord, today: Union[str, date], strict: bool = False) -> RentalRecord:
    """
    Return *record* marked as returned on *today*.

    An already finalized record is returned unchanged (``strict=True``
    raises :class:`AlreadyFinalized` instead).

    Raises
    ------
    StillOpenEnded
        The rental must be closed for billing first.
    PaymentNotConfirmed
        The rental is pending or overdue.
    """
    if record.actual_return_date is not None:
        if strict:
            raise AlreadyFinalized(f"rental {record.id} was already returned on {record.actual_return_date.isoformat()}")
        logger.warning(f"Rental {record.id} is already finalized")
        return record
    if record.is_open_ended:
        raise StillOpenEnded(f"rental {record.id} is open-ended; close it for billing before finalizing")
    if not record.is_paid:
        raise PaymentNotConfirmed(f"rental {record.id} has payment {record.payment_status}; it must be paid first")

    finalized = replace(record, actual_return_date=parse_date(today))
    check_transition(record.state, finalized.state)
    logger.info(f"Rental {record.id} marked as returned on {finalized.actual_return_date.isoformat()}")
    return finalized
