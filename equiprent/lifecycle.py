"""
equiprent.lifecycle
===================

State‑transition guard and the basic write operations for a
:class:`equiprent.models.RentalRecord`.

The lifecycle state is never stored; it is derived from
``actual_return_date``, the pricing variant and ``payment_status``
(see :attr:`RentalRecord.state`).  A tiny finite‑state‑machine describes
which states are legal successors of each other, and every operation
here validates the transition before handing back a **new** record.
Inputs are never mutated, so a rejected operation leaves the caller's
record exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple, Union

from .errors import (
    IllegalState,
    IllegalTransition,
    InvalidDate,
    InvalidEquipment,
    InvalidRentalDays,
    InvalidUpdate,
)
from .models import (
    EquipmentLine,
    FixedTermPricing,
    OpenEndedPricing,
    PaymentMethod,
    PaymentStatus,
    Pricing,
    RentalRecord,
    RentalState,
    expected_return_for,
    parse_date,
    to_decimal,
)
from .pricing import RateLookup, price_rental
from .settings import settings

logger = logging.getLogger(__name__)

NameLookup = Callable[[str], str]

# ---------------------------------------------------------------------
# Allowed transitions: source state → set[valid target states]
# Staying in the same state is always allowed (plain edits).
# ---------------------------------------------------------------------
RULES = {
    RentalState.OPEN_ENDED:      {RentalState.OPEN_FIXED},
    RentalState.OPEN_FIXED:      {RentalState.OPEN_ENDED, RentalState.RETURNED_UNPAID, RentalState.RETURNED_PAID},
    RentalState.RETURNED_UNPAID: {RentalState.RETURNED_PAID},
    RentalState.RETURNED_PAID:   set(),
}

UPDATABLE_FIELDS = frozenset({
    "customer_id",
    "customer_name",
    "rental_start_date",
    "rental_days",
    "is_open_ended",
    "value",
    "freight_value",
    "discount_value",
    "payment_status",
    "payment_method",
    "payment_date",
    "actual_return_date",
    "notes",
    "delivery_address",
    "charge_saturdays",
    "charge_sundays",
    "equipment",
})


def derive_state(record: RentalRecord) -> RentalState:
    """Return the lifecycle state encoded by *record*'s fields."""
    return record.state


def check_transition(current: RentalState, new: RentalState) -> None:
    """
    Raise :class:`IllegalTransition` unless *current* → *new* is legal.

    Examples
    --------
    >>> check_transition(RentalState.OPEN_ENDED, RentalState.OPEN_FIXED)
    >>> check_transition(RentalState.RETURNED_PAID, RentalState.OPEN_FIXED)
    Traceback (most recent call last):
        ...
    equiprent.errors.IllegalTransition: illegal transition RETURNED_PAID → OPEN_FIXED
    """
    if new is current:
        return
    if new not in RULES.get(current, set()):
        raise IllegalTransition(f"illegal transition {current.name} → {new.name}")


# ---------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------
def _optional_date(value: Any, field_name: str) -> Optional[date]:
    """Blank means absent; an unparsable value is logged and dropped."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return parse_date(value)
    except InvalidDate:
        logger.warning(f"Invalid {field_name} {value!r}; storing it as empty")
        return None


def _delivery_address(value: Optional[str]) -> str:
    if value is None or not value.strip():
        return settings.default_delivery_address
    return value


def _build_lines(
    equipment: Iterable[Union[EquipmentLine, Mapping[str, Any]]],
    equipment_name: Optional[NameLookup] = None,
) -> Tuple[EquipmentLine, ...]:
    """
    Normalise lines and fill missing name snapshots from the inventory.

    Raises :class:`InvalidEquipment` for a line that is not a known
    mapping of line fields, or for an equipment id listed twice.
    """
    lines = []
    seen = set()
    for item in equipment:
        if isinstance(item, EquipmentLine):
            line = item
        elif isinstance(item, Mapping):
            try:
                line = EquipmentLine(**item)
            except TypeError as exc:
                raise InvalidEquipment(f"invalid equipment line {dict(item)!r}") from exc
        else:
            raise InvalidEquipment(f"invalid equipment line {item!r}")
        if line.equipment_id in seen:
            raise InvalidEquipment(f"equipment {line.equipment_id!r} is listed more than once")
        seen.add(line.equipment_id)
        if not line.name:
            name = equipment_name(line.equipment_id) if equipment_name else None
            line = replace(line, name=name or settings.unknown_equipment_name)
        lines.append(line)
    return tuple(lines)


def _flag(value: Any, field_name: str) -> bool:
    """Only real booleans; ``"false"`` would otherwise be truthy."""
    if not isinstance(value, bool):
        raise InvalidUpdate(f"{field_name} must be true or false, got {value!r}")
    return value


def _rental_days(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidUpdate(f"rental_days must be a whole number, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidUpdate(f"rental_days must be a whole number, got {value!r}") from exc


def _pricing_for(is_open_ended: bool, value) -> Pricing:
    if is_open_ended:
        return OpenEndedPricing(to_decimal(value))
    return FixedTermPricing(to_decimal(value))


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------
def create_rental(
    customer_id: str,
    equipment: Iterable[Union[EquipmentLine, Mapping[str, Any]]],
    rental_start_date: Union[str, date],
    *,
    is_open_ended: bool = False,
    rental_days: int = 0,
    standard_rate: Optional[RateLookup] = None,
    customer_name: Optional[str] = None,
    equipment_name: Optional[NameLookup] = None,
    pricing: Optional[Pricing] = None,
    discount_value=None,
    freight_value=0,
    charge_saturdays: bool = True,
    charge_sundays: bool = True,
    payment_status: Union[PaymentStatus, str] = PaymentStatus.PENDING,
    payment_method: Union[PaymentMethod, str, None] = None,
    payment_date: Union[str, date, None] = None,
    notes: Optional[str] = None,
    delivery_address: Optional[str] = None,
) -> RentalRecord:
    """
    Build a new rental in ``OPEN_FIXED`` or ``OPEN_ENDED`` state.

    The contract is priced from *equipment* and *standard_rate* unless an
    explicit *pricing* is supplied (extensions do this).  The record has
    no ``id`` yet; the registry assigns one when it is stored.

    Raises
    ------
    InvalidDate
        *rental_start_date* is not a calendar date.
    InvalidRentalDays
        A fixed-term rental asked for fewer than one day.
    """
    try:
        start = parse_date(rental_start_date)
    except InvalidDate:
        logger.error(f"Invalid rental start date during creation: {rental_start_date!r}")
        raise

    if is_open_ended:
        rental_days = 0
    elif rental_days < 1:
        raise InvalidRentalDays(f"a fixed-term rental needs at least one day, got {rental_days}")

    lines = _build_lines(equipment, equipment_name)

    if pricing is None:
        if standard_rate is None:
            raise TypeError("standard_rate is required when no explicit pricing is given")
        pricing, computed_discount = price_rental(lines, is_open_ended, rental_days, freight_value, standard_rate)
        if discount_value is None:
            discount_value = computed_discount
    elif isinstance(pricing, OpenEndedPricing) != bool(is_open_ended):
        raise IllegalState("pricing variant does not match is_open_ended")

    record = RentalRecord(
        customer_id=customer_id,
        customer_name=customer_name or settings.unknown_customer_name,
        rental_start_date=start,
        rental_days=rental_days,
        expected_return_date=expected_return_for(start, rental_days, is_open_ended),
        pricing=pricing,
        equipment=lines,
        freight_value=freight_value,
        discount_value=discount_value if discount_value is not None else 0,
        payment_status=payment_status,
        payment_method=payment_method or PaymentMethod.NOT_DEFINED,
        payment_date=_optional_date(payment_date, "payment_date"),
        notes=notes,
        delivery_address=_delivery_address(delivery_address),
        charge_saturdays=charge_saturdays,
        charge_sundays=charge_sundays,
    )
    logger.info(
        f"Created {'open-ended' if is_open_ended else f'{rental_days}-day'} rental "
        f"for customer {customer_id} starting {start.isoformat()}"
    )
    return record


def update_rental(
    record: RentalRecord,
    changes: Mapping[str, Any],
    *,
    standard_rate: Optional[RateLookup] = None,
    customer_name: Optional[str] = None,
    equipment_name: Optional[NameLookup] = None,
    reprice: bool = False,
) -> RentalRecord:
    """
    Return a copy of *record* with *changes* applied.

    ``expected_return_date`` is re-derived whenever the start date, the
    term or open-endedness changes.  Switching open-endedness changes the
    pricing variant, so it needs either a new ``value`` or a
    *standard_rate* to re-price from; ``reprice=True`` re-prices
    unconditionally.  Blank ``payment_date`` / ``actual_return_date``
    values are stored as absent.  The resulting state must be reachable
    from the current one (a return date, once set, cannot be cleared).
    """
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise InvalidUpdate(f"unknown rental fields: {', '.join(sorted(unknown))}")

    fields: dict = {}

    if "customer_id" in changes and changes["customer_id"] != record.customer_id:
        fields["customer_id"] = changes["customer_id"]
        fields["customer_name"] = customer_name or changes.get("customer_name") or settings.unknown_customer_name
    elif "customer_name" in changes:
        fields["customer_name"] = changes["customer_name"] or settings.unknown_customer_name

    start = record.rental_start_date
    if "rental_start_date" in changes:
        try:
            start = parse_date(changes["rental_start_date"])
        except InvalidDate:
            logger.error(f"Invalid rental start date for rental {record.id}: {changes['rental_start_date']!r}")
            raise
        fields["rental_start_date"] = start

    is_open_ended = record.is_open_ended
    if "is_open_ended" in changes:
        is_open_ended = _flag(changes["is_open_ended"], "is_open_ended")
    mode_changed = is_open_ended != record.is_open_ended
    rental_days = 0 if is_open_ended else _rental_days(changes.get("rental_days", record.rental_days))
    fields["rental_days"] = rental_days

    if is_open_ended:
        fields["expected_return_date"] = start
    elif mode_changed or "rental_start_date" in changes or "rental_days" in changes:
        fields["expected_return_date"] = expected_return_for(start, rental_days, False)

    lines = record.equipment
    if "equipment" in changes:
        raw_lines = changes["equipment"]
        if isinstance(raw_lines, (str, Mapping)) or not isinstance(raw_lines, Iterable):
            raise InvalidUpdate(f"equipment must be a list of lines, got {raw_lines!r}")
        try:
            lines = _build_lines(raw_lines, equipment_name)
        except InvalidEquipment as exc:
            raise InvalidUpdate(str(exc)) from exc
        fields["equipment"] = lines

    freight = to_decimal(changes.get("freight_value", record.freight_value))
    if "freight_value" in changes:
        fields["freight_value"] = freight

    if reprice or (mode_changed and "value" not in changes):
        if standard_rate is None:
            raise InvalidUpdate("re-pricing this rental needs a standard rate lookup or an explicit value")
        pricing, computed_discount = price_rental(lines, is_open_ended, rental_days, freight, standard_rate)
        fields["pricing"] = pricing
        fields["discount_value"] = changes.get("discount_value", computed_discount)
    else:
        if "value" in changes:
            fields["pricing"] = _pricing_for(is_open_ended, changes["value"])
        if "discount_value" in changes:
            fields["discount_value"] = changes["discount_value"]

    for name in ("payment_date", "actual_return_date"):
        if name in changes:
            fields[name] = _optional_date(changes[name], name)

    if "delivery_address" in changes:
        fields["delivery_address"] = _delivery_address(changes["delivery_address"])

    for name in ("charge_saturdays", "charge_sundays"):
        if name in changes:
            fields[name] = _flag(changes[name], name)

    for name in ("payment_status", "payment_method", "notes"):
        if name in changes:
            fields[name] = changes[name]

    updated = replace(record, **fields)
    check_transition(record.state, updated.state)
    logger.info(f"Updated rental {record.id}: {', '.join(sorted(changes)) or 'no changes'}")
    return updated


def mark_paid(
    record: RentalRecord,
    payment_date: Union[str, date],
    payment_method: Union[PaymentMethod, str, None] = None,
) -> RentalRecord:
    """
    Record payment.  Legal from any state; it never finalizes the rental.

    ``payment_method`` defaults to the method already on the record.
    """
    paid = replace(
        record,
        payment_status=PaymentStatus.PAID,
        payment_date=parse_date(payment_date),
        payment_method=payment_method or record.payment_method,
    )
    check_transition(record.state, paid.state)
    logger.info(f"Rental {record.id} marked as paid on {paid.payment_date.isoformat()}")
    return paid
