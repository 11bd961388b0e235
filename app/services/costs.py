# app/services/costs.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


CM3_PER_M3 = 1_000_000
IN3_PER_M3 = 61_024
LBS_PER_KG = 2.20462


@dataclass(frozen=True)
class Rates:
    """Live freight / exchange rates. Always passed in, never read globally."""
    cbm_rate_usd: float
    weight_rate_usd_per_kg: float
    usd_to_ghs_rate: float


@dataclass(frozen=True)
class CostBreakdown:
    usd: float
    cedis: float

    def rounded(self) -> "CostBreakdown":
        # Currency precision is a presentation concern only
        return CostBreakdown(usd=round(self.usd, 2), cedis=round(self.cedis, 2))


def _positive(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    v = float(value)
    return v if v > 0 else 0.0


def compute_cbm(length: Optional[float], width: Optional[float], height: Optional[float], unit: str = "cm") -> float:
    """
    Cubic metres for a parcel. Missing or non-positive dimensions mean the
    parcel is not measurable yet, so the result is 0 rather than an error.
    """
    l, w, h = _positive(length), _positive(width), _positive(height)
    if l <= 0 or w <= 0 or h <= 0:
        return 0.0

    volume = l * w * h
    divisor = CM3_PER_M3 if unit == "cm" else IN3_PER_M3
    return round(volume / divisor, 6)


def weight_in_kg(weight: Optional[float], unit: str = "kg") -> float:
    kg = _positive(weight)
    if unit == "lbs":
        return kg / LBS_PER_KG
    return kg


def compute_cost(
    shipping_method: Optional[str],
    cbm: Optional[float],
    weight: Optional[float],
    rates: Rates,
    weight_unit: str = "kg",
) -> CostBreakdown:
    """
    Sea freight is priced by volume, air freight by weight.
    A missing input for the chosen method prices at 0.
    """
    usd = 0.0
    if shipping_method == "sea":
        usd = _positive(cbm) * rates.cbm_rate_usd
    elif shipping_method == "air":
        usd = weight_in_kg(weight, weight_unit) * rates.weight_rate_usd_per_kg

    return CostBreakdown(usd=usd, cedis=usd * rates.usd_to_ghs_rate)


def derive_costs(fields: Mapping[str, Any], rates: Rates) -> dict[str, float]:
    """Recompute cbm / cost_usd / cost_cedis from a full item field mapping."""
    method = fields.get("shipping_method")

    if method == "air":
        cbm = 0.0
    else:
        cbm = compute_cbm(
            fields.get("length"),
            fields.get("width"),
            fields.get("height"),
            fields.get("dimension_unit") or "cm",
        )

    cost = compute_cost(
        method,
        cbm,
        fields.get("weight"),
        rates,
        weight_unit=fields.get("weight_unit") or "kg",
    )

    return {"cbm": cbm, "cost_usd": cost.usd, "cost_cedis": cost.cedis}
