# app/services/dashboard.py

from __future__ import annotations

from collections import Counter
from typing import Sequence

from app.schemas.dashboard import DashboardSummary
from app.schemas.item import SHIPMENT_STATUSES, ItemOut
from app.services.containers import derive_containers
from app.services.costs import CostBreakdown


def summarize_items(items: Sequence[ItemOut]) -> DashboardSummary:
    """
    Counters for the admin dashboard, computed from the same item list the
    container view uses.
    """
    counts = Counter(i.status for i in items)
    by_status = {s: counts.get(s, 0) for s in SHIPMENT_STATUSES}

    totals = CostBreakdown(
        usd=sum(i.cost_usd or 0.0 for i in items),
        cedis=sum(i.cost_cedis or 0.0 for i in items),
    ).rounded()

    return DashboardSummary(
        total_items=len(items),
        by_status=by_status,
        untagged=sum(1 for i in items if i.customer_id is None),
        damaged=sum(1 for i in items if i.is_damaged),
        missing=sum(1 for i in items if i.is_missing),
        in_containers=sum(1 for i in items if i.container_number),
        container_count=len(derive_containers(items)),
        total_cbm=round(sum(i.cbm or 0.0 for i in items), 6),
        total_value_usd=totals.usd,
        total_value_cedis=totals.cedis,
    )
