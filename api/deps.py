"""
api.deps
========

FastAPI dependency providers.

`get_registry` returns a **DBRentalRegistry** so every request talks to
the persistent SQLite store; tests override it with the in‑memory
RentalRegistry.  Inventory and customers are process-wide in‑memory
directories fed through the API.
"""

from functools import lru_cache

from equiprent.db import create_all
from equiprent.directory import CustomerDirectory, InventoryCatalog
from equiprent.registry_db import DBRentalRegistry
from equiprent.settings import settings


@lru_cache
def get_registry() -> DBRentalRegistry:
    """Singleton DB‑backed rental registry (persists across requests)."""
    create_all()
    return DBRentalRegistry()


@lru_cache
def get_inventory() -> InventoryCatalog:
    """Singleton inventory catalog supplying standard rates and names."""
    return InventoryCatalog()


@lru_cache
def get_customers() -> CustomerDirectory:
    """Singleton customer directory supplying name snapshots."""
    return CustomerDirectory()


@lru_cache
def get_settings():
    """Return application settings."""
    return settings
