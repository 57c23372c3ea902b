"""
equiprent.extension
===================

Continue a finished (or finishing) rental with a new, linked contract.

An extension never modifies the source contract's price or dates.  It
creates a second, independent :class:`RentalRecord` that starts on the
first billable day after the source's expected return date and carries
the same customer and equipment lines.  The only link is a note naming
the source id and its original period.

The operation is a two-step saga, and both steps are public so callers
(and tests) can observe them separately:

1. :func:`courtesy_finalize` – if the source is already paid, mark its
   equipment as returned.  Best effort: a rejection is logged, never
   raised.
2. :func:`build_extension` – compute the successor record.

:func:`extend_rental` validates first, then runs both steps.  Persist the
two resulting records together (``registry.atomic()``); if the write of
the new contract fails, the caller discards the finalized source too.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Tuple, Union

from .billing_days import advance_to_next_billable_day, end_of_billable_span
from .errors import CannotExtendOpenEnded, InvalidAdditionalDays, RentalError
from .finalization import finalize_rental
from .lifecycle import NameLookup, create_rental
from .models import FixedTermPricing, OpenEndedPricing, PaymentMethod, PaymentStatus, RentalRecord
from .pricing import RateLookup, daily_rate_sum
from .settings import settings

logger = logging.getLogger(__name__)


class ExtensionType(Enum):
    """Shape of the successor contract."""
    FIXED = "fixed"
    OPEN_ENDED = "open_ended"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ExtensionOptions:
    """
    What the new contract should look like.

    ``additional_days`` counts *billable* days and is required for fixed
    extensions.  The weekend flags apply to the new contract only.
    """
    type: ExtensionType = ExtensionType.FIXED
    additional_days: Optional[int] = None
    charge_saturdays: bool = True
    charge_sundays: bool = True

    def __post_init__(self):
        object.__setattr__(self, "type", ExtensionType(self.type))


@dataclass
class ExtensionResult:
    """The source as it should be persisted, plus the new contract."""
    source: RentalRecord
    extension: RentalRecord
    source_finalized: bool


def validate_extension(source: RentalRecord, options: ExtensionOptions) -> None:
    """Reject before any side effect happens."""
    if source.is_open_ended:
        raise CannotExtendOpenEnded(f"rental {source.id} is open-ended; close it before extending")
    if options.type is ExtensionType.FIXED and (options.additional_days is None or options.additional_days < 1):
        raise InvalidAdditionalDays(
            f"a fixed extension needs at least one additional day, got {options.additional_days!r}"
        )


def courtesy_finalize(source: RentalRecord, today: Union[str, date]) -> Tuple[RentalRecord, bool]:
    """
    Finalize a paid source before it is extended.

    Returns ``(record, finalized)``; *finalized* is True only when this call
    stamped the return date.
    """
    if source.payment_status is not PaymentStatus.PAID or source.actual_return_date is not None:
        return source, False
    try:
        return finalize_rental(source, today), True
    except RentalError as exc:
        logger.warning(f"Could not finalize rental {source.id} before extending it: {exc}")
        return source, False


def extension_note(source: RentalRecord) -> str:
    fmt = settings.note_date_format
    return (
        f"Extension of rental ID: {source.id}. "
        f"Original period from {source.rental_start_date.strftime(fmt)} "
        f"to {source.expected_return_date.strftime(fmt)}."
    )


def build_extension(
    source: RentalRecord,
    options: ExtensionOptions,
    standard_rate: RateLookup,
    equipment_name: Optional[NameLookup] = None,
) -> RentalRecord:
    """
    Compute the successor contract for *source*.

    Lines reuse their negotiated rates; lines without one are priced at the
    inventory's *current* standard rate.
    """
    validate_extension(source, options)

    start = advance_to_next_billable_day(
        source.expected_return_date, options.charge_saturdays, options.charge_sundays
    )
    rate = daily_rate_sum(source.equipment, standard_rate)

    if options.type is ExtensionType.OPEN_ENDED:
        is_open_ended = True
        rental_days = 0
        pricing = OpenEndedPricing(rate)
    else:
        # start is billable by construction, so it is billable day one
        end = end_of_billable_span(
            start, options.additional_days, options.charge_saturdays, options.charge_sundays
        )
        is_open_ended = False
        rental_days = (end - start).days + 1
        pricing = FixedTermPricing(rate * options.additional_days)

    payment_method = source.payment_method
    if payment_method is PaymentMethod.NOT_DEFINED:
        payment_method = PaymentMethod(settings.default_payment_method)

    return create_rental(
        source.customer_id,
        source.equipment,
        start,
        is_open_ended=is_open_ended,
        rental_days=rental_days,
        customer_name=source.customer_name,
        equipment_name=equipment_name,
        pricing=pricing,
        discount_value=0,
        freight_value=0,
        charge_saturdays=options.charge_saturdays,
        charge_sundays=options.charge_sundays,
        payment_status=PaymentStatus.PENDING,
        payment_method=payment_method,
        notes=extension_note(source),
        delivery_address=source.delivery_address,
    )


def extend_rental(
    source: RentalRecord,
    options: ExtensionOptions,
    standard_rate: RateLookup,
    today: Union[str, date],
    equipment_name: Optional[NameLookup] = None,
) -> ExtensionResult:
    """
    Validate, courtesy-finalize the source, then build its successor.

    Raises
    ------
    CannotExtendOpenEnded
        The source is still open-ended.
    InvalidAdditionalDays
        A fixed extension asked for fewer than one day.
    """
    validate_extension(source, options)
    source_after, finalized = courtesy_finalize(source, today)
    extension = build_extension(source_after, options, standard_rate, equipment_name)
    logger.info(
        f"Extended rental {source.id} with a {options.type} contract starting "
        f"{extension.rental_start_date.isoformat()}"
    )
    return ExtensionResult(source=source_after, extension=extension, source_finalized=finalized)
