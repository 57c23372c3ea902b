"""
api.rentals
===========

Endpoints driving the rental lifecycle.

Each route loads the record from the registry, runs one engine operation
with a single ``today`` sampled per request, and writes back what the
engine returned.  Extension writes two records inside one
``registry.atomic()`` block.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from equiprent.closure import close_open_ended
from equiprent.directory import CustomerDirectory, InventoryCatalog
from equiprent.errors import (
    InvalidAdditionalDays,
    InvalidDate,
    InvalidEquipment,
    InvalidQuantity,
    InvalidRentalDays,
    InvalidUpdate,
    RentalError,
)
from equiprent.extension import ExtensionOptions, extend_rental
from equiprent.finalization import finalize_rental
from equiprent.lifecycle import create_rental, mark_paid, update_rental
from equiprent.models import EquipmentLine, RentalRecord
from equiprent.registry import RentalRegistry
from equiprent.reminders import due_for_return, mark_notified, reminder_lines
from equiprent.statements import revenue_total
from api.deps import get_customers, get_inventory, get_registry
from api.schemas import (
    CreateRentalRequest,
    ExtendRequest,
    ExtensionOut,
    MarkPaidRequest,
    ReminderOut,
    RentalOut,
    RevenueOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rentals", tags=["rentals"])

# Rejections caused by bad input rather than by the rental's state
UNPROCESSABLE = (
    InvalidDate,
    InvalidAdditionalDays,
    InvalidRentalDays,
    InvalidQuantity,
    InvalidEquipment,
    InvalidUpdate,
)


def _rejection(exc: ValueError) -> HTTPException:
    """Map an engine rejection onto an HTTP error, message verbatim."""
    if isinstance(exc, RentalError) and not isinstance(exc, UNPROCESSABLE):
        status_code = 409
    else:
        status_code = 422
    logger.error(f"Rental operation rejected ({type(exc).__name__}): {exc}")
    return HTTPException(status_code=status_code, detail=str(exc))


def _load(registry: RentalRegistry, rental_id: int) -> RentalRecord:
    try:
        return registry.get(rental_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Rental {rental_id} not found")


# ---------- POST /rentals ----------
@router.post("", status_code=201, response_model=RentalOut)
def create(
    data: CreateRentalRequest,
    registry: RentalRegistry = Depends(get_registry),
    inventory: InventoryCatalog = Depends(get_inventory),
    customers: CustomerDirectory = Depends(get_customers),
):
    try:
        record = create_rental(
            data.customer_id,
            [EquipmentLine(**line.model_dump(exclude_none=True)) for line in data.equipment],
            data.rental_start_date,
            is_open_ended=data.is_open_ended,
            rental_days=data.rental_days,
            standard_rate=inventory.standard_rate,
            customer_name=customers.name_of(data.customer_id),
            equipment_name=inventory.name_of,
            freight_value=data.freight_value,
            charge_saturdays=data.charge_saturdays,
            charge_sundays=data.charge_sundays,
            payment_status=data.payment_status,
            payment_method=data.payment_method,
            payment_date=data.payment_date,
            notes=data.notes,
            delivery_address=data.delivery_address,
        )
    except ValueError as exc:
        raise _rejection(exc)
    return RentalOut.from_record(registry.add(record))


# ---------- GET /rentals/revenue ----------
@router.get("/revenue", response_model=RevenueOut)
def revenue(registry: RentalRegistry = Depends(get_registry)):
    """Total collected from paid fixed-term rentals."""
    return RevenueOut(total_revenue=revenue_total(registry))


# ---------- GET /rentals/reminders/due ----------
@router.get("/reminders/due", response_model=List[ReminderOut])
def reminders_due(
    day: Optional[date] = Query(None, description="Defaults to today"),
    registry: RentalRegistry = Depends(get_registry),
):
    day = day or date.today()
    return [
        ReminderOut(rental=RentalOut.from_record(r), lines=reminder_lines(r))
        for r in due_for_return(registry, day)
    ]


# ---------- POST /rentals/reminders/sent ----------
@router.post("/reminders/sent", response_model=List[RentalOut])
def reminders_sent(
    day: Optional[date] = Query(None, description="Defaults to today"),
    registry: RentalRegistry = Depends(get_registry),
):
    """Stamp every rental due on *day* as notified."""
    day = day or date.today()
    with registry.atomic():
        stamped = [registry.save(mark_notified(r, day)) for r in due_for_return(registry, day)]
    return [RentalOut.from_record(r) for r in stamped]


# ---------- GET /rentals/{id} ----------
@router.get("/{rental_id}", response_model=RentalOut)
def read(rental_id: int, registry: RentalRegistry = Depends(get_registry)):
    return RentalOut.from_record(_load(registry, rental_id))


# ---------- PATCH /rentals/{id} ----------
@router.patch("/{rental_id}", response_model=RentalOut)
def update(
    rental_id: int,
    changes: Dict[str, Any] = Body(...),
    reprice: bool = Query(False),
    registry: RentalRegistry = Depends(get_registry),
    inventory: InventoryCatalog = Depends(get_inventory),
    customers: CustomerDirectory = Depends(get_customers),
):
    record = _load(registry, rental_id)
    customer_name = customers.name_of(changes["customer_id"]) if "customer_id" in changes else None
    try:
        updated = update_rental(
            record,
            changes,
            standard_rate=inventory.standard_rate,
            customer_name=customer_name,
            equipment_name=inventory.name_of,
            reprice=reprice,
        )
    except ValueError as exc:
        raise _rejection(exc)
    return RentalOut.from_record(registry.save(updated))


# ---------- POST /rentals/{id}/pay ----------
@router.post("/{rental_id}/pay", response_model=RentalOut)
def pay(rental_id: int, data: MarkPaidRequest, registry: RentalRegistry = Depends(get_registry)):
    record = _load(registry, rental_id)
    try:
        paid = mark_paid(record, data.payment_date, data.payment_method)
    except ValueError as exc:
        raise _rejection(exc)
    return RentalOut.from_record(registry.save(paid))


# ---------- POST /rentals/{id}/close ----------
@router.post("/{rental_id}/close", response_model=RentalOut)
def close(
    rental_id: int,
    today: Optional[date] = Query(None, description="Defaults to the server's date"),
    registry: RentalRegistry = Depends(get_registry),
):
    record = _load(registry, rental_id)
    try:
        closed = close_open_ended(record, today or date.today())
    except ValueError as exc:
        raise _rejection(exc)
    return RentalOut.from_record(registry.save(closed))


# ---------- POST /rentals/{id}/finalize ----------
@router.post("/{rental_id}/finalize", response_model=RentalOut)
def finalize(
    rental_id: int,
    today: Optional[date] = Query(None, description="Defaults to the server's date"),
    registry: RentalRegistry = Depends(get_registry),
):
    record = _load(registry, rental_id)
    try:
        finalized = finalize_rental(record, today or date.today())
    except ValueError as exc:
        raise _rejection(exc)
    if finalized is record:
        return RentalOut.from_record(record)
    return RentalOut.from_record(registry.save(finalized))


# ---------- POST /rentals/{id}/extend ----------
@router.post("/{rental_id}/extend", status_code=201, response_model=ExtensionOut)
def extend(
    rental_id: int,
    data: ExtendRequest,
    today: Optional[date] = Query(None, description="Defaults to the server's date"),
    registry: RentalRegistry = Depends(get_registry),
    inventory: InventoryCatalog = Depends(get_inventory),
):
    source = _load(registry, rental_id)
    options = ExtensionOptions(
        type=data.type,
        additional_days=data.additional_days,
        charge_saturdays=data.charge_saturdays,
        charge_sundays=data.charge_sundays,
    )
    try:
        result = extend_rental(source, options, inventory.standard_rate, today or date.today(), inventory.name_of)
    except ValueError as exc:
        raise _rejection(exc)

    with registry.atomic():
        stored_source = registry.save(result.source) if result.source_finalized else result.source
        stored_extension = registry.add(result.extension)
    return ExtensionOut(
        source=RentalOut.from_record(stored_source),
        extension=RentalOut.from_record(stored_extension),
        source_finalized=result.source_finalized,
    )
