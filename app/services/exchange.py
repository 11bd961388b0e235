# app/services/exchange.py

from __future__ import annotations

from typing import Optional

import httpx

from app.core.config import settings


async def fetch_usd_ghs_rate(client: Optional[httpx.AsyncClient] = None) -> float:
    """USD -> GHS from the configured feed ({"rates": {"GHS": 15.42, ...}})."""
    if client is None:
        async with httpx.AsyncClient(timeout=settings.EXCHANGE_RATE_TIMEOUT) as own_client:
            return await _fetch(own_client)
    return await _fetch(client)


async def _fetch(client: httpx.AsyncClient) -> float:
    r = await client.get(settings.EXCHANGE_RATE_URL)
    r.raise_for_status()
    data = r.json()
    rate = float(data["rates"]["GHS"])  # number, e.g. 15.42
    if rate <= 0:
        raise ValueError(f"Invalid GHS rate from feed: {rate}")
    return rate
