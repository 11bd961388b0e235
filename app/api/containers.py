# app/api/containers.py

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_container_service, to_http_error
from app.core.errors import ShippingError
from app.schemas.container import (
    ContainerLoadRequest,
    ContainerLoadResult,
    ContainerStatusRequest,
    ContainerStatusResult,
    VirtualContainer,
)
from app.schemas.item import ItemOut, ShipmentStatus
from app.services.containers import ContainerService


router = APIRouter(prefix="/containers", tags=["containers"])


@router.get("/", response_model=List[VirtualContainer])
async def list_containers(
    status_filter: Optional[ShipmentStatus] = Query(default=None, alias="status"),
    q: Optional[str] = None,
    order: Literal["asc", "desc"] = "desc",
    strict: bool = False,
    service: ContainerService = Depends(get_container_service),
):
    """
    Containers derived from the items' container numbers. With strict=true
    a container whose members disagree on status is a 409 instead of a
    row with status=null.
    """
    try:
        return await service.list_containers(
            status=status_filter,
            search=q,
            descending=order == "desc",
            strict=strict,
        )
    except ShippingError as e:
        raise to_http_error(e)


@router.post("/load", response_model=ContainerLoadResult)
async def load_items(
    payload: ContainerLoadRequest,
    service: ContainerService = Depends(get_container_service),
):
    """Same path for a brand-new container and for adding to an existing one."""
    try:
        return await service.load_items(payload.item_ids, payload.container_number)
    except ShippingError as e:
        raise to_http_error(e)


@router.get("/{container_number}", response_model=VirtualContainer)
async def get_container(
    container_number: str,
    strict: bool = False,
    service: ContainerService = Depends(get_container_service),
):
    try:
        return await service.get_container(container_number, strict=strict)
    except ShippingError as e:
        raise to_http_error(e)


@router.delete("/{container_number}/items/{item_id}", response_model=ItemOut)
async def remove_item(
    container_number: str,
    item_id: int,
    service: ContainerService = Depends(get_container_service),
):
    try:
        return await service.remove_item(item_id, container_number)
    except ShippingError as e:
        raise to_http_error(e)


@router.post("/{container_number}/arrived", response_model=ContainerStatusResult)
async def mark_arrived(
    container_number: str,
    service: ContainerService = Depends(get_container_service),
):
    """Idempotent: items already arrived are left alone and not counted."""
    try:
        return await service.mark_arrived(container_number)
    except ShippingError as e:
        raise to_http_error(e)


@router.post("/{container_number}/status", response_model=ContainerStatusResult)
async def set_container_status(
    container_number: str,
    payload: ContainerStatusRequest,
    service: ContainerService = Depends(get_container_service),
):
    try:
        return await service.set_status(container_number, payload.status)
    except ShippingError as e:
        raise to_http_error(e)
