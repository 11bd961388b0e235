# app/schemas/settings.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RatesBase(BaseModel):
    usd_to_ghs_rate: float = Field(gt=0)
    usd_to_cny_rate: float = Field(gt=0)
    sea_shipping_rate_per_cbm: float = Field(ge=0)
    air_shipping_rate_per_kg: float = Field(ge=0)


class RatesUpdate(BaseModel):
    """Partial update; omitted fields keep their current value."""
    usd_to_ghs_rate: Optional[float] = Field(default=None, gt=0)
    usd_to_cny_rate: Optional[float] = Field(default=None, gt=0)
    sea_shipping_rate_per_cbm: Optional[float] = Field(default=None, ge=0)
    air_shipping_rate_per_kg: Optional[float] = Field(default=None, ge=0)


class RatesOut(RatesBase):
    model_config = ConfigDict(from_attributes=True)

    # False while the configured defaults are in use
    is_saved: bool = True
    updated_at: Optional[datetime] = None
