# app/services/items.py

from __future__ import annotations

import logging
from typing import Optional

from app.core.errors import NotFoundError
from app.schemas.item import ItemCreate, ItemFlag, ItemOut, ItemPatch, ItemTag
from app.services import lifecycle
from app.services.rates import RateSource
from app.services.store import CustomerStore, ItemFilter, ItemStore

logger = logging.getLogger(__name__)


class ItemService:
    """
    Single-item operations. Each call reads the item and the live rates
    fresh, plans the mutation with the state machine and persists the
    result in one store write.
    """

    def __init__(self, store: ItemStore, customers: CustomerStore, rates: RateSource):
        self.store = store
        self.customers = customers
        self.rates = rates

    async def get(self, item_id: int) -> ItemOut:
        item = await self.store.get(item_id)
        if item is None:
            raise NotFoundError(f"Item {item_id} not found")
        return item

    async def list_items(self, filters: Optional[ItemFilter] = None) -> list[ItemOut]:
        return await self.store.list_items(filters)

    async def intake(self, payload: ItemCreate) -> ItemOut:
        fields = lifecycle.plan_intake(payload, await self.rates.current())
        item = await self.store.create(fields)
        logger.info("Intake item %s (tracking %s)", item.id, item.tracking_number)
        return item

    async def update_item(self, item_id: int, patch: ItemPatch) -> ItemOut:
        item = await self.get(item_id)

        if "customer_id" in patch.model_fields_set and patch.customer_id is not None:
            if await self.customers.get(patch.customer_id) is None:
                raise NotFoundError(f"Customer {patch.customer_id} not found")

        changes = lifecycle.plan_mutation(item, patch, await self.rates.current())
        return await self.store.update(item_id, changes)

    async def tag_item(self, item_id: int, tag: ItemTag) -> ItemOut:
        item = await self.update_item(item_id, lifecycle.tagging_patch(tag))
        logger.info(
            "Tagged item %s for customer %s (%s, cbm=%s, $%.2f)",
            item.id,
            item.customer_id,
            item.shipping_method,
            item.cbm,
            item.cost_usd,
        )
        return item

    async def unassign_customer(self, item_id: int) -> ItemOut:
        return await self.update_item(item_id, lifecycle.unassign_customer_patch())

    async def set_flag(self, item_id: int, flag: ItemFlag, value: bool) -> ItemOut:
        return await self.update_item(item_id, lifecycle.flag_patch(flag, value))

    async def delete_item(self, item_id: int) -> None:
        await self.store.delete(item_id)
        logger.info("Deleted item %s", item_id)
