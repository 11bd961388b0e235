# app/services/containers.py

"""
Virtual containers.

A container is never stored: it is the set of items sharing a
container_number, recomputed from the item list on every read. Loading,
unloading and bulk status changes are item updates run through the bulk
coordinator, so one bad item never blocks the rest of the container.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Optional, Sequence

from app.core.errors import AggregationInconsistency, NotFoundError, ValidationError
from app.schemas.container import ContainerLoadResult, ContainerStatusResult, VirtualContainer
from app.schemas.item import ItemOut
from app.services import lifecycle
from app.services.bulk import BulkUpdateCoordinator
from app.services.items import ItemService
from app.services.store import ItemFilter

logger = logging.getLogger(__name__)


def derive_containers(
    items: Iterable[ItemOut],
    descending: bool = True,
    strict: bool = False,
) -> list[VirtualContainer]:
    groups: dict[str, list[ItemOut]] = {}
    for item in items:
        number = lifecycle.normalize_container_number(item.container_number)
        if number:
            groups.setdefault(number, []).append(item)

    containers: list[VirtualContainer] = []
    for number, members in groups.items():
        counts = Counter(m.status for m in members)
        mixed = len(counts) > 1
        if mixed:
            if strict:
                raise AggregationInconsistency(number, dict(counts))
            logger.warning(
                "Container %s has mixed statuses: %s",
                number,
                ", ".join(f"{k}={v}" for k, v in sorted(counts.items())),
            )

        containers.append(
            VirtualContainer(
                container_number=number,
                item_count=len(members),
                total_cbm=round(sum(m.cbm or 0.0 for m in members), 6),
                total_value_usd=round(sum(m.cost_usd or 0.0 for m in members), 2),
                status=None if mixed else members[0].status,
                status_counts=dict(counts),
                is_mixed_status=mixed,
                receiving_date=min(m.receiving_date for m in members),
                item_ids=sorted(m.id for m in members),
            )
        )

    containers.sort(key=lambda c: c.container_number, reverse=descending)
    return containers


class ContainerService:
    def __init__(self, items: ItemService, coordinator: BulkUpdateCoordinator):
        self.items = items
        self.coordinator = coordinator

    async def list_containers(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        descending: bool = True,
        strict: bool = False,
    ) -> list[VirtualContainer]:
        items = await self.items.list_items(ItemFilter(in_container=True))
        containers = derive_containers(items, descending=descending, strict=strict)

        if status:
            # a mixed container shows up under each status its members have
            containers = [c for c in containers if status in c.status_counts]
        if search:
            term = search.strip().upper()
            containers = [c for c in containers if term in c.container_number]
        return containers

    async def get_container(self, container_number: str, strict: bool = False) -> VirtualContainer:
        number = lifecycle.normalize_container_number(container_number)
        if not number:
            raise ValidationError("Container number is required", field="container_number")

        members = await self.items.list_items(ItemFilter(container_number=number))
        found = derive_containers(members, strict=strict)
        if not found:
            raise NotFoundError(f"Container {number} not found")
        return found[0]

    async def load_items(self, item_ids: Sequence[int], container_number: str) -> ContainerLoadResult:
        number = lifecycle.normalize_container_number(container_number)
        if not number:
            raise ValidationError("Container number is required", field="container_number")
        if not item_ids:
            raise ValidationError("Select at least one item to load", field="item_ids")

        existing = await self.items.list_items(ItemFilter(container_number=number))
        is_new = not existing

        batch = await self.coordinator.update_items(item_ids, lifecycle.load_patch(number))
        logger.info(
            "Loaded %s/%s items into %s container %s",
            batch.success_count,
            batch.total,
            "new" if is_new else "existing",
            number,
        )
        return ContainerLoadResult(container_number=number, is_new_container=is_new, batch=batch)

    async def remove_item(self, item_id: int, container_number: Optional[str] = None) -> ItemOut:
        item = await self.items.get(item_id)
        if not item.container_number:
            raise ValidationError(f"Item {item_id} is not in a container", field="container_number")

        expected = lifecycle.normalize_container_number(container_number)
        if expected and item.container_number != expected:
            raise NotFoundError(f"Item {item_id} is not in container {expected}")

        updated = await self.items.update_item(item_id, lifecycle.unload_patch())
        logger.info("Removed item %s from container %s", item_id, item.container_number)
        return updated

    async def mark_arrived(self, container_number: str) -> ContainerStatusResult:
        return await self.set_status(container_number, "arrived_ghana")

    async def set_status(self, container_number: str, status: str) -> ContainerStatusResult:
        if status == lifecycle.ORIGIN_STATUS:
            raise ValidationError(
                "Items in a container cannot go back to the China warehouse; unload them instead",
                field="status",
            )

        container = await self.get_container(container_number)
        members = await self.items.list_items(ItemFilter(container_number=container.container_number))
        pending = [m.id for m in members if m.status != status]

        batch = await self.coordinator.update_items(pending, lifecycle.status_patch(status))
        logger.info(
            "Container %s -> %s: %s of %s items updated",
            container.container_number,
            status,
            batch.success_count,
            container.item_count,
        )
        return ContainerStatusResult(
            container_number=container.container_number,
            status=status,
            item_count=container.item_count,
            updated_count=batch.success_count,
            batch=batch,
        )
