# app/api/settings.py

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_rate_source, to_http_error
from app.core.errors import ShippingError
from app.schemas.settings import RatesOut, RatesUpdate
from app.services.exchange import fetch_usd_ghs_rate
from app.services.rates import SqlRateSource

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/rates", response_model=RatesOut)
async def get_rates(source: SqlRateSource = Depends(get_rate_source)):
    """Configured defaults (is_saved=false) until an admin saves the rates."""
    try:
        return await source.get_settings()
    except ShippingError as e:
        raise to_http_error(e)


@router.put("/rates", response_model=RatesOut)
async def update_rates(payload: RatesUpdate, source: SqlRateSource = Depends(get_rate_source)):
    """
    Items keep the cost computed at their last write; new rates apply from
    the next mutation of each item.
    """
    try:
        return await source.update_settings(payload)
    except ShippingError as e:
        raise to_http_error(e)


@router.post("/rates/refresh", response_model=RatesOut)
async def refresh_exchange_rate(source: SqlRateSource = Depends(get_rate_source)):
    try:
        rate = await fetch_usd_ghs_rate()
    except (httpx.HTTPError, KeyError, ValueError) as e:
        logger.warning("Exchange rate refresh failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Could not fetch the USD to GHS exchange rate",
        )

    try:
        return await source.update_settings(RatesUpdate(usd_to_ghs_rate=rate))
    except ShippingError as e:
        raise to_http_error(e)
