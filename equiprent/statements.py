"""
equiprent.statements
====================

Money totals over stored rentals: the consolidated receipt a customer
pays in one go, and the revenue collected so far.

Open-ended rentals are left out of both.  Their ``value`` is a daily
rate, not an amount owed, so adding it to contract totals would mix
units; close them for billing first.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Optional

from .models import RentalRecord

ZERO = Decimal("0")


@dataclass
class ConsolidatedReceipt:
    """Fixed-term rentals of one customer billed together."""
    customer_id: str
    customer_name: str
    rentals: List[RentalRecord] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((r.value for r in self.rentals), ZERO)

    def __len__(self) -> int:
        return len(self.rentals)


def consolidated_receipt(
    records: Iterable[RentalRecord],
    customer_id: str,
    rental_ids: Optional[Iterable[int]] = None,
    customer_name: str = "",
) -> ConsolidatedReceipt:
    """
    Collect *customer_id*'s fixed-term rentals, optionally only *rental_ids*.

    Rentals of other customers are never included, even when their id is
    listed.  The receipt may come back empty; callers decide whether that
    is an error.
    """
    wanted = set(rental_ids) if rental_ids is not None else None
    selected = [
        r for r in records
        if r.customer_id == customer_id
        and not r.is_open_ended
        and (wanted is None or r.id in wanted)
    ]
    selected.sort(key=lambda r: (r.rental_start_date, r.id or 0))
    return ConsolidatedReceipt(customer_id, customer_name, selected)


def revenue_total(records: Iterable[RentalRecord]) -> Decimal:
    """Sum of paid fixed-term contract values."""
    return sum((r.value for r in records if r.is_paid and not r.is_open_ended), ZERO)
