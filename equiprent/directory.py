"""
equiprent.directory
===================

In‑memory registries for the engine's read-only collaborators:

* :class:`InventoryCatalog` – standard daily rates and names per
  equipment id.
* :class:`CustomerDirectory` – customer names for the record snapshot.

This module only uses the standard library so that
the engine can be unit‑tested without external services.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterator

from .models import to_decimal
from .settings import settings

logger = logging.getLogger(__name__)


@dataclass
class InventoryItem:
    """An equipment type available for rent."""
    id: str
    name: str
    daily_rental_rate: Decimal
    quantity: int = 0

    def __post_init__(self):
        self.daily_rental_rate = to_decimal(self.daily_rental_rate)


@dataclass
class Customer:
    id: str
    name: str


class InventoryCatalog:
    """
    Dictionary‑backed inventory.

    Example
    -------
    >>> inv = InventoryCatalog()
    >>> inv.add(InventoryItem("scaf-1", "Scaffold frame", Decimal("12.50"), 40))
    >>> inv.standard_rate("scaf-1")
    Decimal('12.50')
    """

    def __init__(self) -> None:
        self._items: Dict[str, InventoryItem] = {}

    def add(self, item: InventoryItem) -> None:
        """Insert or overwrite an item."""
        self._items[item.id] = item

    def get(self, equipment_id: str) -> InventoryItem:
        """Retrieve by id (raise KeyError if not present)."""
        return self._items[equipment_id]

    def standard_rate(self, equipment_id: str) -> Decimal:
        """Current daily rate; unknown ids cost nothing."""
        item = self._items.get(equipment_id)
        if item is None:
            logger.warning(f"No inventory item {equipment_id!r}; pricing it at 0")
            return Decimal("0")
        return item.daily_rental_rate

    def name_of(self, equipment_id: str) -> str:
        item = self._items.get(equipment_id)
        return item.name if item else settings.unknown_equipment_name

    def __iter__(self) -> Iterator[InventoryItem]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)


class CustomerDirectory:
    """Dictionary‑backed customer names."""

    def __init__(self) -> None:
        self._customers: Dict[str, Customer] = {}

    def add(self, customer: Customer) -> None:
        self._customers[customer.id] = customer

    def name_of(self, customer_id: str) -> str:
        customer = self._customers.get(customer_id)
        return customer.name if customer else settings.unknown_customer_name

    def __len__(self) -> int:
        return len(self._customers)
