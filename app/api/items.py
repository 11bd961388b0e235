# app/api/items.py

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_bulk_coordinator, get_item_service, to_http_error
from app.core.errors import ShippingError
from app.schemas.bulk import BatchRequest, BatchResult, ImportRequest
from app.schemas.item import (
    FlagUpdate,
    ItemCreate,
    ItemOut,
    ItemPatch,
    ItemTag,
    PackageRequest,
    ShipmentStatus,
)
from app.services.bulk import BulkUpdateCoordinator
from app.services.items import ItemService
from app.services.store import ItemFilter


router = APIRouter(prefix="/items", tags=["items"])


@router.get("/", response_model=List[ItemOut])
async def list_items(
    status_filter: Optional[ShipmentStatus] = Query(default=None, alias="status"),
    container_number: Optional[str] = None,
    customer_id: Optional[int] = None,
    tagged: Optional[bool] = None,
    in_container: Optional[bool] = None,
    search: Optional[str] = None,
    order_by: Literal["id", "updated"] = "id",
    service: ItemService = Depends(get_item_service),
):
    filters = ItemFilter(
        status=status_filter,
        container_number=container_number.strip().upper() if container_number else None,
        customer_id=customer_id,
        tagged=tagged,
        in_container=in_container,
        search=search.strip() if search else None,
        order_by=order_by,
    )
    try:
        return await service.list_items(filters)
    except ShippingError as e:
        raise to_http_error(e)


@router.post("/", response_model=ItemOut, status_code=status.HTTP_201_CREATED)
async def intake_item(payload: ItemCreate, service: ItemService = Depends(get_item_service)):
    """
    China warehouse intake. The item starts untagged, outside any
    container, in china_warehouse.
    """
    try:
        return await service.intake(payload)
    except ShippingError as e:
        raise to_http_error(e)


@router.post("/package", response_model=BatchResult)
async def package_items(
    payload: PackageRequest,
    coordinator: BulkUpdateCoordinator = Depends(get_bulk_coordinator),
):
    """Assign one carton number to several items."""
    try:
        return await coordinator.package_items(payload.item_ids, payload.carton_number)
    except ShippingError as e:
        raise to_http_error(e)


@router.post("/batch", response_model=BatchResult)
async def apply_batch(
    payload: BatchRequest,
    coordinator: BulkUpdateCoordinator = Depends(get_bulk_coordinator),
):
    """
    Independent per-row updates. The response always carries the success
    and failure counts; a failed row never undoes the others.
    """
    try:
        return await coordinator.apply_batch(payload.updates)
    except ShippingError as e:
        raise to_http_error(e)


@router.post("/import", response_model=BatchResult)
async def import_rows(
    payload: ImportRequest,
    coordinator: BulkUpdateCoordinator = Depends(get_bulk_coordinator),
):
    try:
        return await coordinator.import_rows(payload.rows)
    except ShippingError as e:
        raise to_http_error(e)


@router.get("/{item_id}", response_model=ItemOut)
async def get_item(item_id: int, service: ItemService = Depends(get_item_service)):
    try:
        return await service.get(item_id)
    except ShippingError as e:
        raise to_http_error(e)


@router.patch("/{item_id}", response_model=ItemOut)
async def update_item(
    item_id: int,
    payload: ItemPatch,
    service: ItemService = Depends(get_item_service),
):
    try:
        return await service.update_item(item_id, payload)
    except ShippingError as e:
        raise to_http_error(e)


@router.post("/{item_id}/tag", response_model=ItemOut)
async def tag_item(
    item_id: int,
    payload: ItemTag,
    service: ItemService = Depends(get_item_service),
):
    """
    Ghana-side tagging: customer, measurements and shipping method.
    Sea needs all three dimensions, air needs a weight.
    """
    try:
        return await service.tag_item(item_id, payload)
    except ShippingError as e:
        raise to_http_error(e)


@router.delete("/{item_id}/customer", response_model=ItemOut)
async def unassign_customer(item_id: int, service: ItemService = Depends(get_item_service)):
    try:
        return await service.unassign_customer(item_id)
    except ShippingError as e:
        raise to_http_error(e)


@router.post("/{item_id}/flags", response_model=ItemOut)
async def set_flag(
    item_id: int,
    payload: FlagUpdate,
    service: ItemService = Depends(get_item_service),
):
    try:
        return await service.set_flag(item_id, payload.flag, payload.value)
    except ShippingError as e:
        raise to_http_error(e)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: int, service: ItemService = Depends(get_item_service)):
    try:
        await service.delete_item(item_id)
    except ShippingError as e:
        raise to_http_error(e)
    return None
