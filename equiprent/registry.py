"""
equiprent.registry
==================

An in‑memory store for :class:`equiprent.models.RentalRecord` objects
keyed by integer id.

The lifecycle engine never touches storage; callers load a record from a
registry, run an operation and save what comes back.  Multi-record
operations (an extension finalizes the source *and* creates a new
contract) go through :meth:`RentalRegistry.atomic` so that either every
write lands or none does.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Dict, Iterator, List

from .models import RentalRecord, RentalState

logger = logging.getLogger(__name__)


class RentalRegistry:
    """
    Dictionary‑backed registry of rentals.

    Example
    -------
    >>> reg = RentalRegistry()
    >>> stored = reg.add(record)          # doctest: +SKIP
    >>> reg.get(stored.id) is stored      # doctest: +SKIP
    True
    """

    def __init__(self) -> None:
        self._rentals: Dict[int, RentalRecord] = {}
        self._next_id = 1

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def add(self, record: RentalRecord) -> RentalRecord:
        """Store a new rental, assigning its id; returns the stored record."""
        if record.id is None:
            record = replace(record, id=self._next_id)
        self._next_id = max(self._next_id, record.id + 1)
        self._rentals[record.id] = record
        return record

    def get(self, rental_id: int) -> RentalRecord:
        """Retrieve by id (raise KeyError if not present)."""
        return self._rentals[rental_id]

    def save(self, record: RentalRecord) -> RentalRecord:
        """Overwrite an existing rental (raise KeyError if it was never added)."""
        if record.id not in self._rentals:
            raise KeyError(record.id)
        self._rentals[record.id] = record
        return record

    def find_by_state(self, state: RentalState) -> List[RentalRecord]:
        """Return all rentals currently in the given state."""
        return [r for r in self._rentals.values() if r.state is state]

    @contextmanager
    def atomic(self) -> Iterator["RentalRegistry"]:
        """Roll every write in the block back if it raises."""
        snapshot = dict(self._rentals)
        next_id = self._next_id
        try:
            yield self
        except Exception:
            logger.warning("Rolling back rental registry changes")
            self._rentals = snapshot
            self._next_id = next_id
            raise

    # ------------------------------------------------------------------
    # Dunder helpers for convenience
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[RentalRecord]:
        return iter(list(self._rentals.values()))

    def __len__(self) -> int:
        return len(self._rentals)
