# app/schemas/container.py

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.bulk import BatchResult
from app.schemas.item import ShipmentStatus


class VirtualContainer(BaseModel):
    """Read-side grouping of items sharing a container number. Never stored."""

    container_number: str
    item_count: int
    total_cbm: float
    total_value_usd: float

    # None when members disagree; see status_counts
    status: Optional[ShipmentStatus] = None
    status_counts: dict[str, int] = Field(default_factory=dict)
    is_mixed_status: bool = False

    receiving_date: Optional[date] = None
    item_ids: list[int] = Field(default_factory=list)


class ContainerLoadRequest(BaseModel):
    item_ids: list[int] = Field(min_length=1)
    container_number: str = Field(min_length=1, max_length=100)


class ContainerStatusRequest(BaseModel):
    status: ShipmentStatus


class ContainerLoadResult(BaseModel):
    container_number: str
    is_new_container: bool
    batch: BatchResult


class ContainerStatusResult(BaseModel):
    container_number: str
    status: ShipmentStatus
    item_count: int
    # items whose status actually changed
    updated_count: int
    batch: BatchResult
