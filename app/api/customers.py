# app/api/customers.py

from typing import List

from fastapi import APIRouter, Depends

from app.api.deps import get_customer_store, to_http_error
from app.core.errors import ShippingError
from app.schemas.customer import CustomerOut
from app.services.store import CustomerStore


router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("/", response_model=List[CustomerOut])
async def list_customers(store: CustomerStore = Depends(get_customer_store)):
    """Read-only: customers are managed elsewhere; this feeds the tagging form."""
    try:
        return await store.list_customers()
    except ShippingError as e:
        raise to_http_error(e)
