"""
equiprent
=========

Lifecycle and billing engine for equipment-rental contracts.

Import structure
----------------
`import equiprent` is intentionally cheap: the engine sub‑modules only
use the standard library (plus pydantic-settings for configuration).
The SQLModel persistence layer is only imported when you explicitly
access :pymod:`equiprent.db` or :pymod:`equiprent.registry_db`.

Sub‑modules
~~~~~~~~~~~
- :pymod:`equiprent.models`        – ``RentalRecord`` dataclass, pricing variants, enums
- :pymod:`equiprent.billing_days`  – billable-day calendar arithmetic
- :pymod:`equiprent.pricing`       – daily-rate, contract value and discount maths
- :pymod:`equiprent.lifecycle`     – state-machine guard, create / update / mark-paid
- :pymod:`equiprent.closure`       – close an open-ended rental for billing
- :pymod:`equiprent.finalization`  – record the physical return
- :pymod:`equiprent.extension`     – continue a rental with a linked contract
- :pymod:`equiprent.reminders`     – pick rentals due back today
- :pymod:`equiprent.statements`    – consolidated receipts and revenue totals
- :pymod:`equiprent.registry`      – ``RentalRegistry`` in‑memory store
- :pymod:`equiprent.registry_db`   – SQLite-backed ``DBRentalRegistry``

Quick start
-----------
>>> from equiprent.lifecycle import create_rental
>>> from equiprent.models import EquipmentLine
>>> from equiprent.pricing import rate_lookup
>>> rental = create_rental(
...     "cust-1", [EquipmentLine("scaf-1", 2)], "2024-01-01",
...     rental_days=5, standard_rate=rate_lookup({"scaf-1": 50}),
... )
>>> rental.value
Decimal('500')
"""

__all__ = [
    "models",
    "billing_days",
    "pricing",
    "lifecycle",
    "closure",
    "finalization",
    "extension",
    "reminders",
    "statements",
    "directory",
    "registry",
    "registry_db",
]

__version__ = "0.1.0"
