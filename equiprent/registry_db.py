"""
equiprent.registry_db
=====================

SQLite‑backed implementation of the RentalRegistry public surface.

This adapter wraps the CRUD helpers in :pymod:`equiprent.db` so that any
code expecting the in‑memory RentalRegistry can switch to a persistent
store without changing its API calls.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List

from sqlmodel import Session

from equiprent.db import SessionLocal, all_rentals, get_rental, upsert_rental
from equiprent.models import RentalRecord, RentalState

logger = logging.getLogger(__name__)


class DBRentalRegistry:
    """
    Drop‑in replacement backed by SQLite.

    Methods mirror the in‑memory RentalRegistry:
    * add(record) / save(record)
    * get(rental_id)
    * find_by_state(state)
    * atomic()
    * iteration / len()
    """

    def __init__(self, session: Session | None = None) -> None:
        self._session: Session = session or SessionLocal()
        self._depth = 0

    # ------------------------------------------------------------------ CRUD
    def add(self, record: RentalRecord) -> RentalRecord:
        return self._write(record)

    def save(self, record: RentalRecord) -> RentalRecord:
        if record.id is None or get_rental(self._session, record.id) is None:
            raise KeyError(record.id)
        return self._write(record)

    def get(self, rental_id: int) -> RentalRecord:
        record = get_rental(self._session, rental_id)
        if record is None:
            raise KeyError(rental_id)
        return record

    def _write(self, record: RentalRecord) -> RentalRecord:
        """Upsert; outside atomic() a failed write is rolled back here."""
        if self._depth:
            return upsert_rental(self._session, record, commit=False)
        try:
            return upsert_rental(self._session, record, commit=True)
        except Exception:
            logger.warning(f"Rolling back failed write of rental {record.id}")
            self._session.rollback()
            raise

    def find_by_state(self, state: RentalState) -> List[RentalRecord]:
        return [r for r in all_rentals(self._session) if r.state is state]

    # ----------------------------------------------------------- transaction
    @contextmanager
    def atomic(self) -> Iterator["DBRentalRegistry"]:
        """Commit every write in the block at once, or none of them."""
        self._depth += 1
        try:
            yield self
        except Exception:
            self._depth -= 1
            self._session.rollback()
            raise
        self._depth -= 1
        if self._depth == 0:
            try:
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

    # ------------------------------------------------------ dunder helpers
    def __iter__(self) -> Iterator[RentalRecord]:
        yield from all_rentals(self._session)

    def __len__(self) -> int:
        return len(all_rentals(self._session))

    # ----------------------------------------------------- context manager
    def __enter__(self) -> "DBRentalRegistry":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._session.close()
