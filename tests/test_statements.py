"""
tests/test_statements.py
========================

Unit tests for equiprent.statements: consolidated receipts and revenue.
"""

from decimal import Decimal

from equiprent.models import FixedTermPricing, OpenEndedPricing, RentalRecord
from equiprent.statements import consolidated_receipt, revenue_total


def _fixed(rental_id, customer="c-1", total="500", start="2024-01-01", **kwargs):
    return RentalRecord(customer, start, FixedTermPricing(Decimal(total)), rental_days=5, id=rental_id, **kwargs)


def _demo_rentals():
    return [
        _fixed(1, total="930", payment_status="paid"),
        _fixed(2, total="360", start="2023-12-01"),
        RentalRecord("c-1", "2024-01-03", OpenEndedPricing(Decimal("80")), id=3, payment_status="paid"),
        _fixed(4, customer="c-2", total="1000", payment_status="paid"),
    ]


def test_receipt_sums_fixed_term_rentals_of_customer():
    """Open-ended daily rates and other customers stay off the receipt."""
    receipt = consolidated_receipt(_demo_rentals(), "c-1", customer_name="Acme Construction")
    assert [r.id for r in receipt.rentals] == [2, 1]
    assert receipt.total == Decimal("1290")
    assert receipt.customer_name == "Acme Construction"
    assert len(receipt) == 2


def test_receipt_restricted_to_listed_ids():
    receipt = consolidated_receipt(_demo_rentals(), "c-1", rental_ids=[1, 3, 4])
    assert [r.id for r in receipt.rentals] == [1]
    assert receipt.total == Decimal("930")


def test_empty_receipt():
    receipt = consolidated_receipt(_demo_rentals(), "c-404")
    assert receipt.rentals == []
    assert receipt.total == Decimal("0")


def test_revenue_counts_paid_fixed_term_only():
    assert revenue_total(_demo_rentals()) == Decimal("1930")
    assert revenue_total([]) == Decimal("0")
