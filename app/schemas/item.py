# app/schemas/item.py

from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


ShipmentStatus = Literal[
    "china_warehouse",
    "in_transit",
    "arrived_ghana",
    "ready_for_pickup",
    "delivered",
    "picked_up",
]
ShippingMethod = Literal["sea", "air"]
DimensionUnit = Literal["cm", "inches"]
WeightUnit = Literal["kg", "lbs"]
ItemFlag = Literal["damaged", "missing"]

SHIPMENT_STATUSES: tuple[str, ...] = (
    "china_warehouse",
    "in_transit",
    "arrived_ghana",
    "ready_for_pickup",
    "delivered",
    "picked_up",
)


class PhotoRef(BaseModel):
    url: str = Field(min_length=1)
    order: int = 0

    model_config = ConfigDict(from_attributes=True)


# Legacy clients send bare URLs; their position becomes the order
PhotoIn = Union[str, PhotoRef]


class ItemCreate(BaseModel):
    """
    China-side intake. Only a photo is really needed; a temporary
    tracking number is generated when none is given.
    """
    model_config = ConfigDict(extra="forbid")

    tracking_number: Optional[str] = None
    name: Optional[str] = None
    quantity: int = Field(default=1, ge=1)
    receiving_date: Optional[date] = None

    length: Optional[float] = Field(default=None, gt=0)
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    dimension_unit: DimensionUnit = "cm"
    weight: Optional[float] = Field(default=None, gt=0)
    weight_unit: WeightUnit = "kg"
    shipping_method: Optional[ShippingMethod] = None

    photos: list[PhotoIn] = Field(default_factory=list)


class ItemTag(BaseModel):
    """Ghana-side tagging: customer, measurements and shipping method."""
    model_config = ConfigDict(extra="forbid")

    tracking_number: Optional[str] = None
    name: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=1)
    customer_id: int
    shipping_method: ShippingMethod

    length: Optional[float] = Field(default=None, gt=0)
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    dimension_unit: Optional[DimensionUnit] = None
    weight: Optional[float] = Field(default=None, gt=0)
    weight_unit: Optional[WeightUnit] = None


class ItemPatch(BaseModel):
    """
    Generic update. Only fields explicitly sent are applied
    (model_dump(exclude_unset=True)). receiving_date and the derived
    cost fields are not accepted.
    """
    model_config = ConfigDict(extra="forbid")

    tracking_number: Optional[str] = None
    name: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=1)

    customer_id: Optional[int] = None
    shipping_method: Optional[ShippingMethod] = None
    length: Optional[float] = Field(default=None, gt=0)
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    dimension_unit: Optional[DimensionUnit] = None
    weight: Optional[float] = Field(default=None, gt=0)
    weight_unit: Optional[WeightUnit] = None

    # "" removes the item from its container
    container_number: Optional[str] = None
    carton_number: Optional[str] = None
    status: Optional[ShipmentStatus] = None

    is_damaged: Optional[bool] = None
    is_missing: Optional[bool] = None

    photos: Optional[list[PhotoIn]] = None


class FlagUpdate(BaseModel):
    flag: ItemFlag
    value: bool


class PackageRequest(BaseModel):
    item_ids: list[int] = Field(min_length=1)
    carton_number: str = Field(min_length=1, max_length=100)


class ItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tracking_number: str
    name: Optional[str] = None
    quantity: int = 1

    customer_id: Optional[int] = None
    container_number: Optional[str] = None
    carton_number: Optional[str] = None
    receiving_date: date

    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    dimension_unit: DimensionUnit = "cm"
    weight: Optional[float] = None
    weight_unit: WeightUnit = "kg"
    shipping_method: Optional[ShippingMethod] = None

    cbm: float = 0.0
    cost_usd: float = 0.0
    cost_cedis: float = 0.0

    status: ShipmentStatus = "china_warehouse"
    is_damaged: bool = False
    is_missing: bool = False

    photos: list[PhotoRef] = Field(default_factory=list)
    thumbnail_url: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
