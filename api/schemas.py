"""
api.schemas
===========

Request and response bodies for the rental endpoints.
"""

from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict

from equiprent.models import RentalRecord

PaymentMethodName = Literal["pix", "cash", "credit_card", "debit_card", "not_defined"]


class EquipmentLineIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    equipment_id: str
    quantity: int = 1
    name: Optional[str] = None
    custom_daily_rate: Optional[Decimal] = None


class CreateRentalRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    customer_id: str
    equipment: List[EquipmentLineIn] = []
    # kept as a string so the engine reports unparsable dates itself
    rental_start_date: str
    is_open_ended: bool = False
    rental_days: int = 0
    freight_value: Decimal = Decimal("0")
    charge_saturdays: bool = True
    charge_sundays: bool = True
    payment_status: Literal["paid", "pending", "overdue"] = "pending"
    payment_method: Optional[PaymentMethodName] = None
    payment_date: Optional[str] = None
    notes: Optional[str] = None
    delivery_address: Optional[str] = None


class MarkPaidRequest(BaseModel):
    payment_date: date
    payment_method: Optional[PaymentMethodName] = None


class ExtendRequest(BaseModel):
    type: Literal["fixed", "open_ended"] = "fixed"
    additional_days: Optional[int] = None
    charge_saturdays: bool = True
    charge_sundays: bool = True


class InventoryItemIn(BaseModel):
    id: str
    name: str
    daily_rental_rate: Decimal
    quantity: int = 0


class CustomerIn(BaseModel):
    id: str
    name: str


class EquipmentLineOut(BaseModel):
    equipment_id: str
    quantity: int
    name: str
    custom_daily_rate: Optional[Decimal] = None


class RentalOut(BaseModel):
    """Flat view of a RentalRecord; ``value`` follows ``is_open_ended``."""

    id: Optional[int]
    customer_id: str
    customer_name: str
    state: str
    rental_start_date: date
    rental_days: int
    expected_return_date: date
    actual_return_date: Optional[date] = None
    is_open_ended: bool
    value: Decimal
    freight_value: Decimal
    discount_value: Decimal
    payment_status: str
    payment_method: str
    payment_date: Optional[date] = None
    notes: Optional[str] = None
    delivery_address: str
    charge_saturdays: bool
    charge_sundays: bool
    return_notification_sent: Optional[date] = None
    equipment: List[EquipmentLineOut]

    @classmethod
    def from_record(cls, record: RentalRecord) -> "RentalOut":
        return cls(
            id=record.id,
            customer_id=record.customer_id,
            customer_name=record.customer_name,
            state=record.state.name,
            rental_start_date=record.rental_start_date,
            rental_days=record.rental_days,
            expected_return_date=record.expected_return_date,
            actual_return_date=record.actual_return_date,
            is_open_ended=record.is_open_ended,
            value=record.value,
            freight_value=record.freight_value,
            discount_value=record.discount_value,
            payment_status=record.payment_status.value,
            payment_method=record.payment_method.value,
            payment_date=record.payment_date,
            notes=record.notes,
            delivery_address=record.delivery_address,
            charge_saturdays=record.charge_saturdays,
            charge_sundays=record.charge_sundays,
            return_notification_sent=record.return_notification_sent,
            equipment=[
                EquipmentLineOut(
                    equipment_id=line.equipment_id,
                    quantity=line.quantity,
                    name=line.name,
                    custom_daily_rate=line.custom_daily_rate,
                )
                for line in record.equipment
            ],
        )


class ExtensionOut(BaseModel):
    source: RentalOut
    extension: RentalOut
    source_finalized: bool


class ReminderOut(BaseModel):
    rental: RentalOut
    lines: List[str]


class ReceiptOut(BaseModel):
    customer_id: str
    customer_name: str
    rentals: List[RentalOut]
    total: Decimal


class RevenueOut(BaseModel):
    total_revenue: Decimal
