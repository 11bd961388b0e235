# app/services/store.py

"""
Record store used by the item engine.

The engine only talks to the abstract ItemStore / CustomerStore. The SQL
implementation opens one short session per call and runs it in FastAPI's
threadpool, so independent calls (bulk rows) can proceed concurrently.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.errors import NotFoundError, StoreError
from app.models.customer import Customer
from app.models.item import Item, ItemPhoto
from app.schemas.customer import CustomerOut
from app.schemas.item import ItemOut
from app.services.photos import first_photo_url, sort_photos

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ItemFilter:
    status: Optional[str] = None
    container_number: Optional[str] = None
    customer_id: Optional[int] = None
    # True: has a customer, False: untagged, None: both
    tagged: Optional[bool] = None
    in_container: Optional[bool] = None
    # substring match on tracking number, name or container number
    search: Optional[str] = None
    # "updated" sorts most recently touched first, "id" keeps intake order
    order_by: str = "id"


class ItemStore(ABC):
    @abstractmethod
    async def create(self, fields: dict[str, Any]) -> ItemOut: ...

    @abstractmethod
    async def get(self, item_id: int) -> Optional[ItemOut]: ...

    @abstractmethod
    async def list_items(self, filters: Optional[ItemFilter] = None) -> list[ItemOut]: ...

    @abstractmethod
    async def update(self, item_id: int, changes: dict[str, Any]) -> ItemOut:
        """Apply changes atomically; NotFoundError when the id is unknown."""

    @abstractmethod
    async def delete(self, item_id: int) -> None: ...


class CustomerStore(ABC):
    @abstractmethod
    async def list_customers(self) -> list[CustomerOut]: ...

    @abstractmethod
    async def get(self, customer_id: int) -> Optional[CustomerOut]: ...


def item_to_record(item: Item) -> ItemOut:
    record = ItemOut.model_validate(item)
    record.photos = sort_photos(record.photos)
    record.thumbnail_url = first_photo_url(record.photos)
    return record


class SqlStoreBase:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _in_session(self, fn: Callable[[Session], T]) -> T:
        session = self._session_factory()
        try:
            return fn(session)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Store call failed: %s", e)
            raise StoreError(f"Store error: {e}") from e
        finally:
            session.close()

    async def _run(self, fn: Callable[[Session], T]) -> T:
        return await run_in_threadpool(self._in_session, fn)


class SqlItemStore(SqlStoreBase, ItemStore):

    @staticmethod
    def _apply(item: Item, changes: dict[str, Any]) -> None:
        for field, value in changes.items():
            if field == "photos":
                item.photos = [ItemPhoto(url=p.url, order=p.order) for p in value]
            else:
                setattr(item, field, value)

    async def create(self, fields: dict[str, Any]) -> ItemOut:
        def _create(db: Session) -> ItemOut:
            item = Item()
            self._apply(item, fields)
            db.add(item)
            db.commit()
            db.refresh(item)
            return item_to_record(item)

        return await self._run(_create)

    async def get(self, item_id: int) -> Optional[ItemOut]:
        def _get(db: Session) -> Optional[ItemOut]:
            item = db.get(Item, item_id)
            return item_to_record(item) if item else None

        return await self._run(_get)

    async def list_items(self, filters: Optional[ItemFilter] = None) -> list[ItemOut]:
        filters = filters or ItemFilter()

        def _list(db: Session) -> list[ItemOut]:
            query = db.query(Item)
            if filters.status:
                query = query.filter(Item.status == filters.status)
            if filters.container_number:
                query = query.filter(Item.container_number == filters.container_number)
            if filters.customer_id is not None:
                query = query.filter(Item.customer_id == filters.customer_id)
            if filters.tagged is True:
                query = query.filter(Item.customer_id.isnot(None))
            elif filters.tagged is False:
                query = query.filter(Item.customer_id.is_(None))
            if filters.in_container is True:
                query = query.filter(Item.container_number.isnot(None))
            elif filters.in_container is False:
                query = query.filter(Item.container_number.is_(None))
            if filters.search:
                term = f"%{filters.search.lower()}%"
                query = query.filter(
                    or_(
                        func.lower(Item.tracking_number).like(term),
                        func.lower(Item.name).like(term),
                        func.lower(Item.container_number).like(term),
                    )
                )

            if filters.order_by == "updated":
                query = query.order_by(Item.updated_at.desc(), Item.id.desc())
            else:
                query = query.order_by(Item.id.asc())

            return [item_to_record(i) for i in query.all()]

        return await self._run(_list)

    async def update(self, item_id: int, changes: dict[str, Any]) -> ItemOut:
        def _update(db: Session) -> ItemOut:
            item = db.get(Item, item_id)
            if item is None:
                raise NotFoundError(f"Item {item_id} not found")
            self._apply(item, changes)
            db.commit()
            db.refresh(item)
            return item_to_record(item)

        return await self._run(_update)

    async def delete(self, item_id: int) -> None:
        def _delete(db: Session) -> None:
            item = db.get(Item, item_id)
            if item is None:
                raise NotFoundError(f"Item {item_id} not found")
            db.delete(item)
            db.commit()

        await self._run(_delete)


class SqlCustomerStore(SqlStoreBase, CustomerStore):

    async def list_customers(self) -> list[CustomerOut]:
        def _list(db: Session) -> list[CustomerOut]:
            customers = db.query(Customer).order_by(Customer.name.asc()).all()
            return [CustomerOut.model_validate(c) for c in customers]

        return await self._run(_list)

    async def get(self, customer_id: int) -> Optional[CustomerOut]:
        def _get(db: Session) -> Optional[CustomerOut]:
            customer = db.get(Customer, customer_id)
            return CustomerOut.model_validate(customer) if customer else None

        return await self._run(_get)
