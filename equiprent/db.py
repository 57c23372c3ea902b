"""
equiprent.db
============

SQLite persistence layer for equiprent.

This module exposes:

* ``engine`` – a global SQLModel engine pointing at ``settings.DB_URL``
* ``SessionLocal`` – a session factory used via ``with SessionLocal() as s:``
* ``create_all()`` – helper to create tables at first run
* CRUD helpers converting between rows and :class:`RentalRecord`

The single ``value`` column holds the daily rate for open-ended rentals
and the total price otherwise; ``is_open_ended`` decides which pricing
variant it is read back into.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlmodel import Field, Session, SQLModel, create_engine, select

from equiprent.models import (
    EquipmentLine,
    FixedTermPricing,
    OpenEndedPricing,
    RentalRecord,
)
from equiprent.settings import DB_ECHO, DB_URL


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
engine = create_engine(DB_URL, echo=DB_ECHO)


# ---------------------------------------------------------------------------
# Session factory
# ---------------------------------------------------------------------------
def SessionLocal() -> Session:  # noqa: N802 (factory camel‑case for consistency with FastAPI docs)
    """Return a new Session bound to the global engine."""
    return Session(engine)


# ---------------------------------------------------------------------------
# ORM models that mirror equiprent.models.RentalRecord
# ---------------------------------------------------------------------------
class RentalDB(SQLModel, table=True):
    """SQLite‑backed representation of a :class:`RentalRecord` (without its lines)."""

    __tablename__ = "rentals"

    id: Optional[int] = Field(default=None, primary_key=True)
    customer_id: str = Field(index=True)
    customer_name: str
    rental_start_date: date
    rental_days: int
    expected_return_date: date = Field(index=True)
    actual_return_date: Optional[date] = None
    freight_value: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    discount_value: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    value: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=4)
    payment_status: str
    payment_method: str
    payment_date: Optional[date] = None
    notes: Optional[str] = None
    delivery_address: str = ""
    is_open_ended: bool = False
    charge_saturdays: bool = True
    charge_sundays: bool = True
    return_notification_sent: Optional[date] = None

    # ---------------------------------------------------------------------
    # Converters
    # ---------------------------------------------------------------------
    @classmethod
    def from_record(cls, record: RentalRecord) -> "RentalDB":
        """Create a DB row from an in‑memory record."""
        return cls(
            id=record.id,
            customer_id=record.customer_id,
            customer_name=record.customer_name,
            rental_start_date=record.rental_start_date,
            rental_days=record.rental_days,
            expected_return_date=record.expected_return_date,
            actual_return_date=record.actual_return_date,
            freight_value=record.freight_value,
            discount_value=record.discount_value,
            value=record.value,
            payment_status=record.payment_status.value,
            payment_method=record.payment_method.value,
            payment_date=record.payment_date,
            notes=record.notes,
            delivery_address=record.delivery_address,
            is_open_ended=record.is_open_ended,
            charge_saturdays=record.charge_saturdays,
            charge_sundays=record.charge_sundays,
            return_notification_sent=record.return_notification_sent,
        )

    def to_record(self, lines: List["RentalEquipmentDB"]) -> RentalRecord:
        """Convert the DB row (plus its equipment rows) back into a RentalRecord."""
        pricing = OpenEndedPricing(self.value) if self.is_open_ended else FixedTermPricing(self.value)
        return RentalRecord(
            id=self.id,
            customer_id=self.customer_id,
            customer_name=self.customer_name,
            rental_start_date=self.rental_start_date,
            rental_days=self.rental_days,
            expected_return_date=self.expected_return_date,
            actual_return_date=self.actual_return_date,
            pricing=pricing,
            equipment=tuple(line.to_line() for line in lines),
            freight_value=self.freight_value,
            discount_value=self.discount_value,
            payment_status=self.payment_status,
            payment_method=self.payment_method,
            payment_date=self.payment_date,
            notes=self.notes,
            delivery_address=self.delivery_address,
            charge_saturdays=self.charge_saturdays,
            charge_sundays=self.charge_sundays,
            return_notification_sent=self.return_notification_sent,
        )


class RentalEquipmentDB(SQLModel, table=True):
    """One equipment line, keyed by ``(rental_id, equipment_id)``."""

    __tablename__ = "rental_equipment"

    rental_id: int = Field(foreign_key="rentals.id", primary_key=True)
    equipment_id: str = Field(primary_key=True)
    position: int = 0
    quantity: int
    name: str
    custom_daily_rate: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=4)

    def to_line(self) -> EquipmentLine:
        return EquipmentLine(
            equipment_id=self.equipment_id,
            quantity=self.quantity,
            name=self.name,
            custom_daily_rate=self.custom_daily_rate,
        )


# ---------------------------------------------------------------------------
# Convenience CRUD helpers
# ---------------------------------------------------------------------------
def _equipment_rows(s: Session, rental_id: int) -> List[RentalEquipmentDB]:
    stmt = (
        select(RentalEquipmentDB)
        .where(RentalEquipmentDB.rental_id == rental_id)
        .order_by(RentalEquipmentDB.position)
    )
    return list(s.exec(stmt).all())


def upsert_rental(s: Session, record: RentalRecord, commit: bool = True) -> RentalRecord:
    """Insert or update a rental and replace its equipment rows; returns it with its id."""
    row = RentalDB.from_record(record)
    if record.id is None:
        s.add(row)
    else:
        row = s.merge(row)
    s.flush()

    for old in _equipment_rows(s, row.id):
        s.delete(old)
    s.flush()
    for position, line in enumerate(record.equipment):
        s.add(RentalEquipmentDB(
            rental_id=row.id,
            equipment_id=line.equipment_id,
            position=position,
            quantity=line.quantity,
            name=line.name,
            custom_daily_rate=line.custom_daily_rate,
        ))
    if commit:
        s.commit()
    else:
        s.flush()
    return replace(record, id=row.id)


def get_rental(s: Session, rental_id: int) -> RentalRecord | None:
    """Return a rental by id or *None* if missing."""
    db_row = s.get(RentalDB, rental_id)
    return db_row.to_record(_equipment_rows(s, rental_id)) if db_row else None


def all_rentals(s: Session) -> list[RentalRecord]:
    """Return every rental in the database, ordered by id."""
    rows = s.exec(select(RentalDB).order_by(RentalDB.id)).all()
    return [row.to_record(_equipment_rows(s, row.id)) for row in rows]


# ---------------------------------------------------------------------------
# Utility: create tables
# ---------------------------------------------------------------------------
def create_all(bind=None) -> None:
    """Create all tables for imported SQLModel subclasses (on *bind* or the global engine)."""
    SQLModel.metadata.create_all(bind or engine)

# ---------------------------------------------------------------------------
# Lightweight CLI
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    """
    Quick bootstrap / migration helper.

    Examples
    --------
    $ python -m equiprent.db --create        # first‑time table creation
    $ python -m equiprent.db --list          # dump stored rentals
    """
    import argparse
    import textwrap

    parser = argparse.ArgumentParser(
        prog="python -m equiprent.db",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            equiprent DB utilities
            ----------------------
            --create   Create all SQLModel tables (safe if they already exist)
            --list     Print one line per stored rental
            """
        ),
    )
    parser.add_argument("--create", action="store_true", help="create tables")
    parser.add_argument("--list", action="store_true", help="list rentals")
    args = parser.parse_args()

    if args.create:
        create_all()
        print("✅ equiprent schema initialised")

    if args.list:
        with SessionLocal() as session:
            for rental in all_rentals(session):
                print(
                    f"#{rental.id:04d} {rental.customer_name:<25} {rental.state.name:<16} "
                    f"{rental.rental_start_date} → {rental.expected_return_date} value={rental.value}"
                )
