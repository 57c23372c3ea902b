"""
equiprent.pricing
=================

Money computation for rental contracts.

Each equipment line is charged ``quantity × rate`` per day, where the rate
is the line's negotiated ``custom_daily_rate`` when present and the
inventory's *current* standard rate otherwise.  The standard rate comes
from a caller-supplied lookup (``equipment_id -> Decimal``), usually
:meth:`equiprent.directory.InventoryCatalog.standard_rate`.

All arithmetic is done in :class:`decimal.Decimal`.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Iterable, Mapping, Tuple

from .models import (
    EquipmentLine,
    FixedTermPricing,
    OpenEndedPricing,
    Pricing,
    to_decimal,
)

RateLookup = Callable[[str], Decimal]

ZERO = Decimal("0")


def rate_lookup(rates: Mapping[str, object]) -> RateLookup:
    """Wrap a plain ``{equipment_id: rate}`` mapping; unknown ids cost 0."""
    def _lookup(equipment_id: str) -> Decimal:
        return to_decimal(rates.get(equipment_id, ZERO))
    return _lookup


def effective_rate(line: EquipmentLine, standard_rate: RateLookup) -> Decimal:
    """Custom daily rate if negotiated, else the current standard rate."""
    if line.custom_daily_rate is not None:
        return line.custom_daily_rate
    return to_decimal(standard_rate(line.equipment_id))


def daily_rate_sum(lines: Iterable[EquipmentLine], standard_rate: RateLookup) -> Decimal:
    """Σ quantity × effective rate: what the contract costs per billable day."""
    return sum(
        (line.quantity * effective_rate(line, standard_rate) for line in lines),
        ZERO,
    )


def fixed_term_value(lines: Iterable[EquipmentLine], rental_days: int, freight_value, standard_rate: RateLookup) -> Decimal:
    """Daily rate sum × term length, plus freight."""
    return daily_rate_sum(lines, standard_rate) * rental_days + to_decimal(freight_value)


def discount(lines: Iterable[EquipmentLine], rental_days: int, standard_rate: RateLookup) -> Decimal:
    """
    Amount saved by negotiated rates over *rental_days*.

    ``max(0, standard_subtotal - custom_subtotal)``: a custom rate above
    the standard one is not reported as a surcharge.
    """
    standard_subtotal = ZERO
    custom_subtotal = ZERO
    for line in lines:
        standard_subtotal += line.quantity * to_decimal(standard_rate(line.equipment_id)) * rental_days
        custom_subtotal += line.quantity * effective_rate(line, standard_rate) * rental_days
    return max(ZERO, standard_subtotal - custom_subtotal)


def price_rental(
    lines: Iterable[EquipmentLine],
    is_open_ended: bool,
    rental_days: int,
    freight_value,
    standard_rate: RateLookup,
) -> Tuple[Pricing, Decimal]:
    """
    Return ``(pricing, discount_value)`` for a new or re-priced contract.

    Open-ended contracts are priced for a single day (the daily rate) and
    freight is left out of their value.
    """
    lines = list(lines)
    if is_open_ended:
        return OpenEndedPricing(daily_rate_sum(lines, standard_rate)), discount(lines, 1, standard_rate)
    total = fixed_term_value(lines, rental_days, freight_value, standard_rate)
    return FixedTermPricing(total), discount(lines, rental_days, standard_rate)
