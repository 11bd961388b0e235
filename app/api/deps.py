# app/api/deps.py

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.core.database import get_session_factory
from app.core.errors import (
    AggregationInconsistency,
    NotFoundError,
    ShippingError,
    StoreError,
    ValidationError,
)
from app.services.bulk import BulkUpdateCoordinator
from app.services.containers import ContainerService
from app.services.items import ItemService
from app.services.rates import SqlRateSource
from app.services.store import SqlCustomerStore, SqlItemStore


def get_rate_source(factory: sessionmaker = Depends(get_session_factory)) -> SqlRateSource:
    return SqlRateSource(factory)


def get_customer_store(factory: sessionmaker = Depends(get_session_factory)) -> SqlCustomerStore:
    return SqlCustomerStore(factory)


def get_item_service(
    factory: sessionmaker = Depends(get_session_factory),
    rates: SqlRateSource = Depends(get_rate_source),
    customers: SqlCustomerStore = Depends(get_customer_store),
) -> ItemService:
    return ItemService(SqlItemStore(factory), customers, rates)


def get_bulk_coordinator(items: ItemService = Depends(get_item_service)) -> BulkUpdateCoordinator:
    return BulkUpdateCoordinator(items, concurrency=settings.BULK_CONCURRENCY)


def get_container_service(
    items: ItemService = Depends(get_item_service),
    coordinator: BulkUpdateCoordinator = Depends(get_bulk_coordinator),
) -> ContainerService:
    return ContainerService(items, coordinator)


def to_http_error(e: ShippingError) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ValidationError):
        detail = {"message": e.message, "field": e.field} if e.field else e.message
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
    if isinstance(e, AggregationInconsistency):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(e), "status_counts": e.status_counts},
        )
    if isinstance(e, StoreError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Record store unavailable")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
