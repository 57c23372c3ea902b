"""
tests/test_extension.py
=======================

Unit tests for equiprent.extension.

The source rental runs Mon 2024-01-01 → Fri 2024-01-05.
"""

import logging
from datetime import date
from decimal import Decimal

import pytest

from equiprent import extension as extension_module
from equiprent.errors import CannotExtendOpenEnded, InvalidAdditionalDays, PaymentNotConfirmed
from equiprent.extension import (
    ExtensionOptions,
    ExtensionType,
    build_extension,
    courtesy_finalize,
    extend_rental,
)
from equiprent.models import (
    EquipmentLine,
    FixedTermPricing,
    OpenEndedPricing,
    PaymentMethod,
    PaymentStatus,
    RentalRecord,
    RentalState,
)
from equiprent.pricing import rate_lookup

NO_WEEKENDS = dict(charge_saturdays=False, charge_sundays=False)


@pytest.fixture
def source():
    return RentalRecord(
        id=7,
        customer_id="c-1",
        customer_name="Acme Construction",
        rental_start_date="2024-01-01",
        rental_days=5,
        pricing=FixedTermPricing(Decimal("930")),
        freight_value=Decimal("30"),
        discount_value=Decimal("100"),
        equipment=(
            EquipmentLine("scaffold", 2, "Scaffold frame", Decimal("40")),
            EquipmentLine("mixer", 1, "Concrete mixer"),
        ),
        payment_method=PaymentMethod.CASH,
        delivery_address="12 Harbour Road",
    )


@pytest.fixture
def current_rates():
    """Mixer's standard rate has gone up since the source was created."""
    return rate_lookup({"scaffold": Decimal("50"), "mixer": Decimal("120")})


def test_start_skips_uncharged_weekend(source, current_rates):
    """Friday expected return → Monday start when weekends are free."""
    ext = build_extension(source, ExtensionOptions(ExtensionType.OPEN_ENDED, **NO_WEEKENDS), current_rates)
    assert ext.rental_start_date == date(2024, 1, 8)


def test_start_uses_new_weekend_flags(source, current_rates):
    options = ExtensionOptions(ExtensionType.FIXED, 1, charge_saturdays=True, charge_sundays=False)
    assert build_extension(source, options, current_rates).rental_start_date == date(2024, 1, 6)


def test_fixed_extension_without_weekend_inside(source, current_rates):
    ext = build_extension(source, ExtensionOptions(ExtensionType.FIXED, 3, **NO_WEEKENDS), current_rates)
    assert ext.rental_days == 3
    assert ext.expected_return_date == date(2024, 1, 10)
    # 2×40 custom + 1×120 current standard, three billable days
    assert ext.pricing == FixedTermPricing(Decimal("600"))


def test_fixed_extension_spanning_weekend(source, current_rates):
    """Six billable days Mon→Mon cover eight calendar days, billed for six."""
    ext = build_extension(source, ExtensionOptions(ExtensionType.FIXED, 6, **NO_WEEKENDS), current_rates)
    assert ext.rental_start_date == date(2024, 1, 8)
    assert ext.expected_return_date == date(2024, 1, 15)
    assert ext.rental_days == 8
    assert ext.value == Decimal("1200")


def test_open_ended_extension(source, current_rates):
    ext = build_extension(source, ExtensionOptions("open_ended"), current_rates)
    assert ext.state is RentalState.OPEN_ENDED
    assert ext.rental_days == 0
    assert ext.pricing == OpenEndedPricing(Decimal("200"))
    assert ext.expected_return_date == ext.rental_start_date == date(2024, 1, 6)


def test_extension_carries_contract_details(source, current_rates):
    ext = build_extension(source, ExtensionOptions(ExtensionType.FIXED, 2), current_rates)
    assert ext.id is None
    assert ext.customer_id == "c-1"
    assert ext.customer_name == "Acme Construction"
    assert ext.equipment == source.equipment
    assert ext.payment_status is PaymentStatus.PENDING
    assert ext.payment_method is PaymentMethod.CASH
    assert ext.freight_value == Decimal("0")
    assert ext.discount_value == Decimal("0")
    assert ext.delivery_address == "12 Harbour Road"
    assert "rental ID: 7" in ext.notes
    assert "01/01/2024" in ext.notes and "05/01/2024" in ext.notes


def test_extension_rejects_open_ended_source(current_rates):
    open_source = RentalRecord("c-1", "2024-01-01", OpenEndedPricing(100), id=8)
    with pytest.raises(CannotExtendOpenEnded):
        extend_rental(open_source, ExtensionOptions(ExtensionType.FIXED, 3), current_rates, date(2024, 1, 9))


@pytest.mark.parametrize("days", [None, 0, -1])
def test_fixed_extension_needs_days(source, current_rates, days):
    paid = RentalRecord(**{**source.__dict__, "payment_status": PaymentStatus.PAID})
    with pytest.raises(InvalidAdditionalDays):
        extend_rental(paid, ExtensionOptions(ExtensionType.FIXED, days), current_rates, date(2024, 1, 9))


def test_paid_source_is_finalized_first(source, current_rates):
    paid = RentalRecord(**{**source.__dict__, "payment_status": PaymentStatus.PAID})
    result = extend_rental(paid, ExtensionOptions(ExtensionType.FIXED, 3), current_rates, date(2024, 1, 9))
    assert result.source_finalized
    assert result.source.actual_return_date == date(2024, 1, 9)
    assert result.source.state is RentalState.RETURNED_PAID
    assert result.source.value == paid.value
    assert result.extension.rental_start_date == date(2024, 1, 6)
    assert paid.actual_return_date is None


def test_unpaid_source_is_left_open(source, current_rates):
    result = extend_rental(source, ExtensionOptions(ExtensionType.FIXED, 3), current_rates, date(2024, 1, 9))
    assert not result.source_finalized
    assert result.source is source


def test_returned_source_can_be_extended(source, current_rates):
    returned = RentalRecord(**{**source.__dict__, "payment_status": "paid", "actual_return_date": "2024-01-05"})
    result = extend_rental(returned, ExtensionOptions(ExtensionType.FIXED, 1), current_rates, date(2024, 1, 9))
    assert not result.source_finalized
    assert result.extension.state is RentalState.OPEN_FIXED


def test_courtesy_finalize_failure_is_swallowed(source, monkeypatch, caplog):
    """A failing courtesy finalize is logged and the source returned as-is."""
    def _refuse(record, today):
        raise PaymentNotConfirmed("payment bounced")

    monkeypatch.setattr(extension_module, "finalize_rental", _refuse)
    paid = RentalRecord(**{**source.__dict__, "payment_status": PaymentStatus.PAID})
    with caplog.at_level(logging.WARNING, logger="equiprent.extension"):
        record, finalized = courtesy_finalize(paid, date(2024, 1, 9))
    assert record is paid
    assert not finalized
    assert "payment bounced" in caplog.text


def test_default_payment_method_when_source_has_none(source, current_rates):
    undefined = RentalRecord(**{**source.__dict__, "payment_method": PaymentMethod.NOT_DEFINED})
    ext = build_extension(undefined, ExtensionOptions(ExtensionType.FIXED, 1), current_rates)
    assert ext.payment_method is PaymentMethod.PIX
