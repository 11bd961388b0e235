# app/api/dashboard.py

from fastapi import APIRouter, Depends

from app.api.deps import get_item_service, to_http_error
from app.core.errors import ShippingError
from app.schemas.dashboard import DashboardSummary
from app.services.dashboard import summarize_items
from app.services.items import ItemService


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/", response_model=DashboardSummary)
async def get_dashboard(service: ItemService = Depends(get_item_service)):
    try:
        items = await service.list_items()
    except ShippingError as e:
        raise to_http_error(e)
    return summarize_items(items)
