#!/usr/bin/env python
"""
Seed database with sample rentals for testing.

This script prices a handful of contracts against a sample inventory and
walks some of them through the lifecycle (payment, closure, return,
extension) so every state shows up in the database.
"""

import json
from datetime import date
from decimal import Decimal

from equiprent.closure import close_open_ended
from equiprent.directory import InventoryCatalog, InventoryItem
from equiprent.extension import ExtensionOptions, ExtensionType, extend_rental
from equiprent.finalization import finalize_rental
from equiprent.lifecycle import create_rental, mark_paid
from equiprent.models import EquipmentLine, PaymentMethod
from equiprent.registry_db import DBRentalRegistry

# Sample inventory with standard daily rates
SAMPLE_INVENTORY = [
    InventoryItem("scaffold-frame", "Scaffold frame 1.5m", Decimal("4.50"), 300),
    InventoryItem("platform", "Steel platform", Decimal("3.00"), 200),
    InventoryItem("mixer", "Concrete mixer 400L", Decimal("55.00"), 6),
    InventoryItem("jackhammer", "Electric jackhammer", Decimal("70.00"), 4),
]

# (customer id, customer name, lines, start, rental days or None for open-ended)
SAMPLE_RENTALS = [
    ("c-001", "Acme Construction", [EquipmentLine("scaffold-frame", 40), EquipmentLine("platform", 20)],
     date(2024, 3, 4), 30),
    ("c-002", "Widget Builders", [EquipmentLine("mixer", 1, custom_daily_rate=Decimal("45.00"))],
     date(2024, 3, 11), None),
    ("c-003", "TechStart Reformas", [EquipmentLine("jackhammer", 2)],
     date(2024, 3, 18), 5),
    ("c-004", "Sunrise Ventures", [EquipmentLine("scaffold-frame", 12)],
     date(2024, 4, 1), None),
]

# Add additional customers from sample_rentals.json if available
try:
    with open('sample_rentals.json', 'r') as f:
        sample_data = json.load(f)

    for rental_data in sample_data:
        lines = [EquipmentLine(**line) for line in rental_data.get('equipment', [])]
        SAMPLE_RENTALS.append((
            rental_data['customer_id'],
            rental_data.get('customer_name', ''),
            lines,
            date.fromisoformat(rental_data['rental_start_date']),
            rental_data.get('rental_days'),
        ))
except (FileNotFoundError, json.JSONDecodeError):
    # Continue with default sample rentals
    pass


def seed_database(today: date = date(2024, 4, 10)):
    """Add sample rentals to the database."""
    inventory = InventoryCatalog()
    for item in SAMPLE_INVENTORY:
        inventory.add(item)

    registry = DBRentalRegistry()
    stored = []
    for customer_id, name, lines, start, days in SAMPLE_RENTALS:
        rental = create_rental(
            customer_id,
            lines,
            start,
            is_open_ended=days is None,
            rental_days=days or 0,
            standard_rate=inventory.standard_rate,
            customer_name=name,
            equipment_name=inventory.name_of,
            charge_sundays=False,
        )
        rental = registry.add(rental)
        stored.append(rental)
        print(f"Added: #{rental.id} {rental.customer_name} ({rental.state.name}) value={rental.value}")

    # Walk a few contracts through the lifecycle
    paid = registry.save(mark_paid(stored[2], date(2024, 3, 22), PaymentMethod.PIX))
    returned = registry.save(finalize_rental(paid, date(2024, 3, 23)))
    print(f"Returned: #{returned.id} on {returned.actual_return_date}")

    closed = registry.save(close_open_ended(stored[1], today))
    print(f"Closed: #{closed.id} for {closed.rental_days} days, value={closed.value}")

    result = extend_rental(
        stored[0],
        ExtensionOptions(ExtensionType.FIXED, additional_days=10, charge_sundays=False),
        inventory.standard_rate,
        today,
        inventory.name_of,
    )
    with registry.atomic():
        if result.source_finalized:
            registry.save(result.source)
        extension = registry.add(result.extension)
    print(f"Extended: #{stored[0].id} → #{extension.id} from {extension.rental_start_date}")

    print(f"\nStored {len(registry)} rentals in the database!")


if __name__ == "__main__":
    # Initialize DB if needed
    from equiprent.db import create_all
    print("Ensuring database tables exist...")
    create_all()

    # Seed the database
    print("Seeding database with sample rentals...")
    seed_database()

    print("\nDone! You can now run the API server with:")
    print("python -m api.main")
