"""
In-memory stores and a static rate source for engine tests.

They honour the same contracts as the SQL implementations: update and
delete raise NotFoundError for unknown ids, records come back as ItemOut
with photos sorted and a thumbnail.
"""

from __future__ import annotations

from typing import Any, Optional

from app.core.errors import NotFoundError, StoreError
from app.schemas.customer import CustomerOut
from app.schemas.item import ItemCreate, ItemOut
from app.services.costs import Rates
from app.services.photos import first_photo_url, sort_photos
from app.services.rates import RateSource
from app.services.store import CustomerStore, ItemFilter, ItemStore


TEST_RATES = Rates(cbm_rate_usd=1000.0, weight_rate_usd_per_kg=5.0, usd_to_ghs_rate=15.0)


class StaticRateSource(RateSource):
    def __init__(self, rates: Rates = TEST_RATES):
        self.rates = rates
        self.calls = 0

    async def current(self) -> Rates:
        self.calls += 1
        return self.rates


class InMemoryItemStore(ItemStore):
    def __init__(self) -> None:
        self.records: dict[int, ItemOut] = {}
        self._next_id = 1
        # ids whose update raises StoreError / RuntimeError
        self.store_failures: set[int] = set()
        self.crash_on: set[int] = set()
        # when set, list_items raises StoreError with this message
        self.list_failure: Optional[str] = None

    @staticmethod
    def _finish(record: ItemOut) -> ItemOut:
        record.photos = sort_photos(record.photos)
        record.thumbnail_url = first_photo_url(record.photos)
        return record

    async def create(self, fields: dict[str, Any]) -> ItemOut:
        record = self._finish(ItemOut(id=self._next_id, **fields))
        self.records[record.id] = record
        self._next_id += 1
        return record.model_copy(deep=True)

    async def get(self, item_id: int) -> Optional[ItemOut]:
        record = self.records.get(item_id)
        return record.model_copy(deep=True) if record else None

    async def list_items(self, filters: Optional[ItemFilter] = None) -> list[ItemOut]:
        if self.list_failure:
            raise StoreError(self.list_failure)
        filters = filters or ItemFilter()
        result = []
        for record in sorted(self.records.values(), key=lambda r: r.id):
            if filters.status and record.status != filters.status:
                continue
            if filters.container_number and record.container_number != filters.container_number:
                continue
            if filters.customer_id is not None and record.customer_id != filters.customer_id:
                continue
            if filters.tagged is not None and (record.customer_id is not None) != filters.tagged:
                continue
            if filters.in_container is not None and bool(record.container_number) != filters.in_container:
                continue
            if filters.search:
                term = filters.search.lower()
                haystack = " ".join(
                    v.lower() for v in (record.tracking_number, record.name, record.container_number) if v
                )
                if term not in haystack:
                    continue
            result.append(record.model_copy(deep=True))
        return result

    async def update(self, item_id: int, changes: dict[str, Any]) -> ItemOut:
        if item_id in self.store_failures:
            raise StoreError(f"Store error: timeout writing item {item_id}")
        if item_id in self.crash_on:
            raise RuntimeError("connection reset")
        record = self.records.get(item_id)
        if record is None:
            raise NotFoundError(f"Item {item_id} not found")
        updated = self._finish(record.model_copy(update=changes, deep=True))
        self.records[item_id] = updated
        return updated.model_copy(deep=True)

    async def delete(self, item_id: int) -> None:
        if item_id not in self.records:
            raise NotFoundError(f"Item {item_id} not found")
        del self.records[item_id]


class InMemoryCustomerStore(CustomerStore):
    def __init__(self, customers: Optional[list[CustomerOut]] = None):
        self.customers = {c.id: c for c in customers or []}

    async def list_customers(self) -> list[CustomerOut]:
        return sorted(self.customers.values(), key=lambda c: c.name)

    async def get(self, customer_id: int) -> Optional[CustomerOut]:
        return self.customers.get(customer_id)


def default_customers() -> list[CustomerOut]:
    return [
        CustomerOut(id=1, name="Kwame Mensah", phone="+233 20 000 0001"),
        CustomerOut(id=2, name="Ama Owusu", email="ama@example.com"),
    ]


def photo_item(**overrides: Any) -> ItemCreate:
    data: dict[str, Any] = {"photos": ["https://cdn.example.com/p/1.jpg"]}
    data.update(overrides)
    return ItemCreate(**data)
