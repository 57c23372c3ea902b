from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from equiprent import __version__
from equiprent.directory import Customer, CustomerDirectory, InventoryCatalog, InventoryItem
from equiprent.registry import RentalRegistry
from equiprent.settings import API_DEBUG, API_HOST, API_PORT, settings
from equiprent.statements import consolidated_receipt
from .deps import get_customers, get_inventory, get_registry
from .schemas import CustomerIn, InventoryItemIn, ReceiptOut, RentalOut

app = FastAPI(
    title="equiprent API",
    version=__version__,
    description="HTTP layer over the rental lifecycle and billing engine.",
    debug=API_DEBUG,
)

# --- CORS ----------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)

# --- Include Routers ----------------------------------------------------------
from .rentals import router as rentals_router

app.include_router(rentals_router)

# ---------- health-check ----------
@app.get("/")
def root():
    return {"status": "ok", "msg": "equiprent API is alive"}

# ---------- POST /inventory ----------
@app.post("/inventory", status_code=201)
def add_inventory_item(item: InventoryItemIn,
                       inventory: InventoryCatalog = Depends(get_inventory)):
    inventory.add(InventoryItem(**item.model_dump()))
    return {"id": item.id}

# ---------- POST /customers ----------
@app.post("/customers", status_code=201)
def add_customer(customer: CustomerIn,
                 customers: CustomerDirectory = Depends(get_customers)):
    customers.add(Customer(**customer.model_dump()))
    return {"id": customer.id}

# ---------- GET /customers/{id}/receipt ----------
@app.get("/customers/{customer_id}/receipt", response_model=ReceiptOut)
def customer_receipt(customer_id: str,
                     rental_ids: Optional[str] = Query(None, description="Comma-separated rental ids"),
                     registry: RentalRegistry = Depends(get_registry),
                     customers: CustomerDirectory = Depends(get_customers)):
    """Consolidated receipt over the customer's fixed-term rentals."""
    ids = None
    if rental_ids:
        try:
            ids = [int(part) for part in rental_ids.split(",") if part.strip()]
        except ValueError:
            raise HTTPException(status_code=422, detail=f"invalid rental ids: {rental_ids!r}")
    receipt = consolidated_receipt(registry, customer_id, ids, customers.name_of(customer_id))
    if not receipt.rentals:
        raise HTTPException(status_code=404, detail=f"No fixed-term rentals to bill for customer {customer_id}")
    return ReceiptOut(
        customer_id=receipt.customer_id,
        customer_name=receipt.customer_name,
        rentals=[RentalOut.from_record(r) for r in receipt.rentals],
        total=receipt.total,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=API_HOST, port=API_PORT, reload=API_DEBUG)
