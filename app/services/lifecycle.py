# app/services/lifecycle.py

"""
Item state machine.

Every function here is pure: it receives the current item snapshot and
returns the dict of field changes to persist, or raises ValidationError
before anything is written. Status may be set directly to any value
(bulk tools skip steps); what is enforced are the field preconditions
and the container <-> status coupling.
"""

from __future__ import annotations

import secrets
import time
from datetime import datetime, timezone
from typing import Any, Optional

from app.core.errors import ValidationError
from app.schemas.item import ItemCreate, ItemFlag, ItemOut, ItemPatch, ItemTag
from app.services.costs import Rates, derive_costs
from app.services.photos import normalize_photos


DIMENSION_FIELDS = ("length", "width", "height")
TAGGING_FIELDS = (
    "customer_id",
    "shipping_method",
    "length",
    "width",
    "height",
    "dimension_unit",
    "weight",
    "weight_unit",
)
# None on a unit means "keep the current unit"
UNIT_FIELDS = ("dimension_unit", "weight_unit")
FLAG_FIELDS: dict[str, str] = {"damaged": "is_damaged", "missing": "is_missing"}

ORIGIN_STATUS = "china_warehouse"
LOADED_STATUS = "in_transit"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_positive(value: Optional[float]) -> bool:
    return value is not None and float(value) > 0


def generate_tracking_number() -> str:
    """Temporary intake number, e.g. AFQ12345678A1B2."""
    timestamp = str(int(time.time() * 1000))[-8:]
    return f"AFQ{timestamp}{secrets.token_hex(2).upper()}"


def normalize_container_number(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    number = value.strip().upper()
    return number or None


def validate_tagging(state: dict[str, Any]) -> None:
    if not (state.get("tracking_number") or "").strip():
        raise ValidationError("Tracking number is required", field="tracking_number")
    if not state.get("customer_id"):
        raise ValidationError("A customer is required to tag an item", field="customer_id")

    method = state.get("shipping_method")
    if method not in ("sea", "air"):
        raise ValidationError("Shipping method must be 'sea' or 'air'", field="shipping_method")

    if method == "sea":
        missing = [f for f in DIMENSION_FIELDS if not _is_positive(state.get(f))]
        if missing:
            raise ValidationError(
                f"Sea shipping requires length, width and height > 0 (missing: {', '.join(missing)})",
                field=missing[0],
            )
    elif not _is_positive(state.get("weight")):
        raise ValidationError("Air shipping requires a weight > 0", field="weight")


def plan_intake(payload: ItemCreate, rates: Rates, now: Optional[datetime] = None) -> dict[str, Any]:
    now = now or _utcnow()

    fields = payload.model_dump(exclude={"photos"})
    fields.update(
        tracking_number=(payload.tracking_number or "").strip() or generate_tracking_number(),
        receiving_date=payload.receiving_date or now.date(),
        customer_id=None,
        container_number=None,
        carton_number=None,
        status=ORIGIN_STATUS,
        is_damaged=False,
        is_missing=False,
        created_at=now,
        updated_at=now,
    )
    fields["photos"] = normalize_photos(payload.photos)
    fields.update(derive_costs(fields, rates))
    return fields


def plan_mutation(
    item: ItemOut,
    patch: ItemPatch,
    rates: Rates,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    data = patch.model_dump(exclude_unset=True, exclude={"photos"})
    has_photos = "photos" in patch.model_fields_set
    if not data and not has_photos:
        raise ValidationError("No update fields provided")

    current = item.model_dump(exclude={"photos", "thumbnail_url"})
    changes: dict[str, Any] = {}

    # 1) Descriptive fields
    if "tracking_number" in data:
        tracking = (data["tracking_number"] or "").strip()
        if not tracking:
            raise ValidationError("Tracking number cannot be empty", field="tracking_number")
        changes["tracking_number"] = tracking

    if "quantity" in data:
        if data["quantity"] is None:
            raise ValidationError("Quantity cannot be empty", field="quantity")
        changes["quantity"] = data["quantity"]

    if "name" in data:
        changes["name"] = (data["name"] or "").strip() or None

    if "carton_number" in data:
        changes["carton_number"] = (data["carton_number"] or "").strip() or None

    # 2) Tagging: customer, measurements, shipping method
    tagging = {k: data[k] for k in TAGGING_FIELDS if k in data}
    if tagging:
        for key, value in tagging.items():
            if value is None and key in UNIT_FIELDS:
                continue
            changes[key] = value

        # A tagged item must stay fully measured; only dropping the
        # customer un-tags it
        state = {**current, **changes}
        if state.get("customer_id") is not None or any(v is not None for v in tagging.values()):
            validate_tagging(state)

    # 3) Container assignment drives status
    if "container_number" in data:
        number = normalize_container_number(data["container_number"])
        changes["container_number"] = number
        changes["status"] = LOADED_STATUS if number else ORIGIN_STATUS

    # 4) Explicit status wins over the container side effect
    if "status" in data:
        status = data["status"]
        if status is None:
            raise ValidationError("Status cannot be empty", field="status")
        container_after = changes["container_number"] if "container_number" in changes else current.get("container_number")
        if status == ORIGIN_STATUS and container_after:
            raise ValidationError(
                f"Item is loaded in container {container_after}; remove it from the container "
                "to return it to the China warehouse",
                field="status",
            )
        changes["status"] = status

    # 5) Flags, orthogonal to status
    for key in FLAG_FIELDS.values():
        if key in data:
            if data[key] is None:
                raise ValidationError(f"{key} must be true or false", field=key)
            changes[key] = data[key]

    if has_photos:
        changes["photos"] = normalize_photos(patch.photos or [])

    state = {**current, **changes}
    changes.update(derive_costs(state, rates))
    changes["updated_at"] = now or _utcnow()
    return changes


# Named mutations used by the services and the bulk coordinator

def tagging_patch(tag: ItemTag) -> ItemPatch:
    return ItemPatch(**tag.model_dump(exclude_none=True))


def load_patch(container_number: str) -> ItemPatch:
    return ItemPatch(container_number=container_number)


def unload_patch() -> ItemPatch:
    return ItemPatch(container_number="")


def status_patch(status: str) -> ItemPatch:
    return ItemPatch(status=status)


def flag_patch(flag: ItemFlag, value: bool) -> ItemPatch:
    return ItemPatch(**{FLAG_FIELDS[flag]: value})


def unassign_customer_patch() -> ItemPatch:
    return ItemPatch(customer_id=None)


def carton_patch(carton_number: str) -> ItemPatch:
    return ItemPatch(carton_number=carton_number)


def describe_patch(patch: ItemPatch) -> str:
    """Short human summary, e.g. 'Updated status: arrived_ghana, container: CONT-1'."""
    data = patch.model_dump(exclude_unset=True, exclude={"photos"})
    parts: list[str] = []
    if "status" in data:
        parts.append(f"status: {data['status']}")
    if "container_number" in data:
        number = normalize_container_number(data["container_number"])
        parts.append(f"container: {number or 'removed'}")
    if "customer_id" in data:
        parts.append(f"customer: {data['customer_id']}" if data["customer_id"] else "customer unassigned")
    for key in FLAG_FIELDS.values():
        if key in data:
            parts.append(f"{key}: {data[key]}")
    others = [k for k in data if k not in ("status", "container_number", "customer_id", *FLAG_FIELDS.values())]
    if others:
        parts.append(", ".join(sorted(others)))
    if "photos" in patch.model_fields_set:
        parts.append("photos")
    return "Updated " + ", ".join(parts) if parts else "Updated"
