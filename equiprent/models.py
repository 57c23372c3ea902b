"""
equiprent.models
================

Dataclasses and enums representing a single rental contract, its
equipment lines and its pricing.  These objects are intentionally
lightweight; they carry **no** external‑library dependencies so that
importing `equiprent` stays fast and the engine can be unit‑tested
without a database.

The contract price is modelled as a tagged union:

* :class:`FixedTermPricing` – ``total`` is the whole contract price.
* :class:`OpenEndedPricing` – ``daily_rate`` is charged per billable day
  until the rental is closed.

``RentalRecord.value`` exposes whichever number the variant holds, which
is what gets persisted in the single ``value`` column.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum, auto
from typing import Optional, Tuple, Union

from .errors import IllegalState, InvalidDate, InvalidQuantity, InvalidRentalDays


class PaymentStatus(Enum):
    """Payment progress of a contract."""
    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"

    def __str__(self) -> str:
        return self.value


class PaymentMethod(Enum):
    """How the customer paid (or intends to pay)."""
    PIX = "pix"
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    NOT_DEFINED = "not_defined"

    def __str__(self) -> str:
        return self.value


class RentalState(Enum):
    """Lifecycle phase derived from the record's fields."""
    OPEN_FIXED = auto()
    OPEN_ENDED = auto()
    RETURNED_UNPAID = auto()
    RETURNED_PAID = auto()

    def __str__(self) -> str:        # nicer REPL display
        return self.name


# ---------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------
def parse_date(value: Union[str, date, datetime]) -> date:
    """
    Return *value* as a calendar date.

    Accepts ``date`` objects, ``datetime`` objects (the time part is
    dropped) and ISO strings, either ``YYYY-MM-DD`` or a full ISO datetime.
    Anything else raises :class:`~equiprent.errors.InvalidDate`.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidDate(f"invalid date: {value!r}")
    raw = value.strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw).date()
    except ValueError as exc:
        raise InvalidDate(f"invalid date: {value!r}") from exc


def to_decimal(value) -> Decimal:
    """Convert ints, floats and numeric strings to Decimal (floats via ``str``)."""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"not a number: {value!r}") from exc


def expected_return_for(start: date, rental_days: int, is_open_ended: bool) -> date:
    """Last day of the term; the start day counts as day one."""
    if is_open_ended:
        return start
    return start + timedelta(days=max(rental_days - 1, 0))


# ---------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class EquipmentLine:
    """
    One rented item on a contract.

    Parameters
    ----------
    equipment_id : str
        Inventory identifier.
    quantity : int
        Units rented, a positive integer.
    name : str
        Snapshot of the inventory name at creation time.
    custom_daily_rate : Decimal | None
        Negotiated per-unit daily rate; ``None`` means "use the current
        standard rate of the inventory item".
    """
    equipment_id: str
    quantity: int = 1
    name: str = ""
    custom_daily_rate: Optional[Decimal] = None

    def __post_init__(self):
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise InvalidQuantity(
                f"quantity for {self.equipment_id!r} must be a positive integer, got {self.quantity!r}"
            )
        if self.custom_daily_rate is not None:
            object.__setattr__(self, "custom_daily_rate", to_decimal(self.custom_daily_rate))


@dataclass(frozen=True)
class FixedTermPricing:
    """Total price of a fixed-term contract (freight included)."""
    total: Decimal

    def __post_init__(self):
        object.__setattr__(self, "total", to_decimal(self.total))


@dataclass(frozen=True)
class OpenEndedPricing:
    """Daily rate charged on an open-ended contract while it stays open."""
    daily_rate: Decimal

    def __post_init__(self):
        object.__setattr__(self, "daily_rate", to_decimal(self.daily_rate))


Pricing = Union[FixedTermPricing, OpenEndedPricing]


# ---------------------------------------------------------------------
# The rental record
# ---------------------------------------------------------------------
@dataclass
class RentalRecord:
    """
    One rental contract.

    Parameters
    ----------
    customer_id : str
        Identifier of the customer collaborator.
    rental_start_date : datetime.date
        First day of the rental (ISO strings are accepted and parsed).
    pricing : FixedTermPricing | OpenEndedPricing
        Contract price; the variant decides whether the rental is open-ended.
    rental_days : int
        Calendar-day span for fixed terms (≥ 1), always 0 while open-ended.
    expected_return_date : datetime.date | None
        Derived from start and term when omitted.
    equipment : tuple[EquipmentLine, ...]
        Rented lines, in order.
    actual_return_date : datetime.date | None
        Set when the equipment physically comes back.
    return_notification_sent : datetime.date | None
        Last day a return reminder went out for this rental.
    """
    customer_id: str
    rental_start_date: date
    pricing: Pricing
    rental_days: int = 0
    expected_return_date: Optional[date] = None
    equipment: Tuple[EquipmentLine, ...] = ()
    customer_name: str = ""
    id: Optional[int] = None
    actual_return_date: Optional[date] = None
    freight_value: Decimal = Decimal("0")
    discount_value: Decimal = Decimal("0")
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.NOT_DEFINED
    payment_date: Optional[date] = None
    notes: Optional[str] = None
    delivery_address: str = ""
    charge_saturdays: bool = True
    charge_sundays: bool = True
    return_notification_sent: Optional[date] = None

    def __post_init__(self):
        self.rental_start_date = parse_date(self.rental_start_date)
        for name in ("actual_return_date", "payment_date", "return_notification_sent"):
            raw = getattr(self, name)
            if raw is not None:
                setattr(self, name, parse_date(raw))
        self.equipment = tuple(self.equipment)
        self.freight_value = to_decimal(self.freight_value)
        self.discount_value = to_decimal(self.discount_value)
        self.payment_status = PaymentStatus(self.payment_status)
        self.payment_method = PaymentMethod(self.payment_method)

        if self.is_open_ended:
            if self.rental_days != 0:
                raise InvalidRentalDays("an open-ended rental must have rental_days == 0")
            if self.actual_return_date is not None:
                raise IllegalState("an open-ended rental cannot carry an actual return date")
        elif self.rental_days < 1:
            raise InvalidRentalDays(f"a fixed-term rental needs at least one day, got {self.rental_days}")

        if self.expected_return_date is None:
            self.expected_return_date = expected_return_for(
                self.rental_start_date, self.rental_days, self.is_open_ended
            )
        else:
            self.expected_return_date = parse_date(self.expected_return_date)

    # Convenience helpers -------------------------------------------------
    @property
    def is_open_ended(self) -> bool:
        return isinstance(self.pricing, OpenEndedPricing)

    @property
    def value(self) -> Decimal:
        """Total price for fixed terms, daily rate while open-ended."""
        if isinstance(self.pricing, OpenEndedPricing):
            return self.pricing.daily_rate
        return self.pricing.total

    @property
    def state(self) -> RentalState:
        if self.actual_return_date is None:
            return RentalState.OPEN_ENDED if self.is_open_ended else RentalState.OPEN_FIXED
        if self.is_open_ended:
            raise IllegalState("an open-ended rental cannot carry an actual return date")
        if self.payment_status is PaymentStatus.PAID:
            return RentalState.RETURNED_PAID
        return RentalState.RETURNED_UNPAID

    @property
    def is_paid(self) -> bool:
        return self.payment_status is PaymentStatus.PAID
