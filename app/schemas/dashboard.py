# app/schemas/dashboard.py

from pydantic import BaseModel, Field


class DashboardSummary(BaseModel):
    total_items: int
    by_status: dict[str, int] = Field(default_factory=dict)

    untagged: int
    damaged: int
    missing: int

    in_containers: int
    container_count: int

    total_cbm: float
    total_value_usd: float
    total_value_cedis: float
