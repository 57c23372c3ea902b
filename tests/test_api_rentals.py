"""
Tests for the /rentals API endpoints.

These tests use FastAPI TestClient to drive the routes directly, with the
DB-backed registry swapped for a fresh in-memory RentalRegistry.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from api.deps import get_customers, get_inventory, get_registry
from api.main import app
from equiprent.directory import CustomerDirectory, InventoryCatalog
from equiprent.registry import RentalRegistry


FIXED_REQUEST = {
    "customer_id": "c-1",
    "rental_start_date": "2024-01-01",
    "rental_days": 5,
    "freight_value": "30",
    "equipment": [
        {"equipment_id": "scaffold", "quantity": 2, "custom_daily_rate": "40"},
        {"equipment_id": "mixer", "quantity": 1},
    ],
}


@pytest.fixture
def client():
    registry = RentalRegistry()
    inventory = InventoryCatalog()
    customers = CustomerDirectory()
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_inventory] = lambda: inventory
    app.dependency_overrides[get_customers] = lambda: customers

    test_client = TestClient(app)
    test_client.post("/inventory", json={"id": "scaffold", "name": "Scaffold frame", "daily_rental_rate": "50"})
    test_client.post("/inventory", json={"id": "mixer", "name": "Concrete mixer", "daily_rental_rate": "100"})
    test_client.post("/customers", json={"id": "c-1", "name": "Acme Construction"})
    yield test_client
    app.dependency_overrides.clear()


def _create(client, **overrides):
    response = client.post("/rentals", json={**FIXED_REQUEST, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


class TestRentalsAPI:
    """Test suite for the /rentals endpoints"""

    def test_health(self, client):
        assert client.get("/").json()["status"] == "ok"

    def test_create_fixed_rental(self, client):
        data = _create(client)
        assert data["id"] == 1
        assert data["state"] == "OPEN_FIXED"
        assert data["customer_name"] == "Acme Construction"
        assert data["expected_return_date"] == "2024-01-05"
        assert Decimal(data["value"]) == Decimal("930")
        assert Decimal(data["discount_value"]) == Decimal("100")
        assert [line["name"] for line in data["equipment"]] == ["Scaffold frame", "Concrete mixer"]

    def test_create_open_ended_rental(self, client):
        data = _create(client, is_open_ended=True, rental_days=0)
        assert data["state"] == "OPEN_ENDED"
        assert data["rental_days"] == 0
        assert Decimal(data["value"]) == Decimal("180")

    def test_create_rejects_bad_date(self, client):
        response = client.post("/rentals", json={**FIXED_REQUEST, "rental_start_date": "someday"})
        assert response.status_code == 422
        assert "someday" in response.json()["detail"]

    def test_create_rejects_zero_quantity(self, client):
        bad = {**FIXED_REQUEST, "equipment": [{"equipment_id": "mixer", "quantity": 0}]}
        assert client.post("/rentals", json=bad).status_code == 422

    def test_missing_rental(self, client):
        response = client.get("/rentals/99")
        assert response.status_code == 404
        assert "not found" in response.json()["detail"]

    def test_update_rederives_return_date(self, client):
        _create(client)
        response = client.patch("/rentals/1", json={"rental_days": 10, "notes": "site B"})
        assert response.status_code == 200
        data = response.json()
        assert data["expected_return_date"] == "2024-01-10"
        assert data["notes"] == "site B"

    def test_update_unknown_field(self, client):
        _create(client)
        assert client.patch("/rentals/1", json={"colour": "red"}).status_code == 422

    def test_pay_then_finalize(self, client):
        _create(client)
        paid = client.post("/rentals/1/pay", json={"payment_date": "2024-01-02", "payment_method": "cash"})
        assert paid.json()["payment_status"] == "paid"
        assert paid.json()["state"] == "OPEN_FIXED"

        done = client.post("/rentals/1/finalize", params={"today": "2024-01-06"})
        assert done.status_code == 200
        assert done.json()["state"] == "RETURNED_PAID"
        assert done.json()["actual_return_date"] == "2024-01-06"

        again = client.post("/rentals/1/finalize", params={"today": "2024-01-09"})
        assert again.status_code == 200
        assert again.json()["actual_return_date"] == "2024-01-06"

    def test_finalize_unpaid_conflicts(self, client):
        _create(client)
        response = client.post("/rentals/1/finalize", params={"today": "2024-01-06"})
        assert response.status_code == 409
        assert client.get("/rentals/1").json()["actual_return_date"] is None

    def test_close_open_ended(self, client):
        _create(client, is_open_ended=True, rental_days=0)
        response = client.post("/rentals/1/close", params={"today": "2024-01-10"})
        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "OPEN_FIXED"
        assert data["rental_days"] == 10
        assert data["expected_return_date"] == "2024-01-10"
        assert Decimal(data["value"]) == Decimal("1800")

    def test_close_fixed_conflicts(self, client):
        _create(client)
        assert client.post("/rentals/1/close", params={"today": "2024-01-10"}).status_code == 409

    def test_extend_paid_rental(self, client):
        _create(client)
        client.post("/rentals/1/pay", json={"payment_date": "2024-01-02"})
        response = client.post(
            "/rentals/1/extend",
            params={"today": "2024-01-06"},
            json={"type": "fixed", "additional_days": 3, "charge_saturdays": False, "charge_sundays": False},
        )
        assert response.status_code == 201, response.text
        data = response.json()
        assert data["source_finalized"] is True
        assert data["source"]["state"] == "RETURNED_PAID"

        extension = data["extension"]
        assert extension["id"] == 2
        assert extension["rental_start_date"] == "2024-01-08"
        assert extension["expected_return_date"] == "2024-01-10"
        assert Decimal(extension["value"]) == Decimal("540")
        assert extension["payment_status"] == "pending"
        assert "rental ID: 1" in extension["notes"]

        assert client.get("/rentals/1").json()["actual_return_date"] == "2024-01-06"

    def test_extend_open_ended_conflicts(self, client):
        _create(client, is_open_ended=True, rental_days=0)
        response = client.post("/rentals/1/extend", json={"type": "fixed", "additional_days": 2})
        assert response.status_code == 409

    def test_extend_without_days_is_unprocessable(self, client):
        _create(client)
        response = client.post("/rentals/1/extend", json={"type": "fixed", "additional_days": 0})
        assert response.status_code == 422
        assert client.get("/rentals/2").status_code == 404

    def test_return_reminders(self, client):
        _create(client)
        _create(client, rental_days=9)

        due = client.get("/rentals/reminders/due", params={"day": "2024-01-05"}).json()
        assert len(due) == 1
        assert due[0]["rental"]["id"] == 1
        assert due[0]["lines"] == ["2x Scaffold frame", "1x Concrete mixer"]

        sent = client.post("/rentals/reminders/sent", params={"day": "2024-01-05"}).json()
        assert [r["return_notification_sent"] for r in sent] == ["2024-01-05"]
        assert client.get("/rentals/reminders/due", params={"day": "2024-01-05"}).json() == []

    def test_update_with_null_days_is_unprocessable(self, client):
        _create(client)
        response = client.patch("/rentals/1", json={"rental_days": None})
        assert response.status_code == 422
        assert "rental_days" in response.json()["detail"]

    def test_update_with_malformed_line_is_unprocessable(self, client):
        _create(client)
        response = client.patch("/rentals/1", json={"equipment": [{"equipmentId": "mixer", "quantity": 1}]})
        assert response.status_code == 422
        assert client.get("/rentals/1").json()["equipment"][0]["equipment_id"] == "scaffold"

    def test_update_with_string_flag_is_unprocessable(self, client):
        _create(client)
        response = client.patch("/rentals/1", json={"charge_saturdays": "false"})
        assert response.status_code == 422
        assert client.get("/rentals/1").json()["charge_saturdays"] is True

    def test_create_with_repeated_equipment_is_unprocessable(self, client):
        lines = [{"equipment_id": "mixer", "quantity": 1}, {"equipment_id": "mixer", "quantity": 2}]
        response = client.post("/rentals", json={**FIXED_REQUEST, "equipment": lines})
        assert response.status_code == 422
        assert client.get("/rentals/1").status_code == 404

    def test_close_before_start_is_unprocessable(self, client):
        _create(client, is_open_ended=True, rental_days=0)
        response = client.post("/rentals/1/close", params={"today": "2023-12-31"})
        assert response.status_code == 422
        assert client.get("/rentals/1").json()["state"] == "OPEN_ENDED"

    def test_consolidated_receipt_and_revenue(self, client):
        _create(client)                                       # 930
        _create(client, rental_days=2, freight_value="0")     # 360
        _create(client, is_open_ended=True, rental_days=0)    # daily rate, never billed
        client.post("/rentals/1/pay", json={"payment_date": "2024-01-02"})

        receipt = client.get("/customers/c-1/receipt").json()
        assert receipt["customer_name"] == "Acme Construction"
        assert [r["id"] for r in receipt["rentals"]] == [1, 2]
        assert Decimal(receipt["total"]) == Decimal("1290")

        only_second = client.get("/customers/c-1/receipt", params={"rental_ids": "2,3"}).json()
        assert Decimal(only_second["total"]) == Decimal("360")

        revenue = client.get("/rentals/revenue").json()
        assert Decimal(revenue["total_revenue"]) == Decimal("930")

    def test_receipt_without_billable_rentals(self, client):
        _create(client, is_open_ended=True, rental_days=0)
        assert client.get("/customers/c-1/receipt").status_code == 404
        assert client.get("/customers/c-1/receipt", params={"rental_ids": "one"}).status_code == 422
