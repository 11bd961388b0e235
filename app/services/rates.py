# app/services/rates.py

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.core.config import settings as app_settings
from app.models.system_settings import SystemSettings
from app.schemas.settings import RatesOut, RatesUpdate
from app.services.costs import Rates
from app.services.store import SqlStoreBase

logger = logging.getLogger(__name__)

SETTINGS_ID = "default"


class RateSource(ABC):
    """Provides the rates in force right now. Implementations must not cache."""

    @abstractmethod
    async def current(self) -> Rates: ...


def default_rates_out() -> RatesOut:
    return RatesOut(
        usd_to_ghs_rate=app_settings.DEFAULT_USD_TO_GHS_RATE,
        usd_to_cny_rate=app_settings.DEFAULT_USD_TO_CNY_RATE,
        sea_shipping_rate_per_cbm=app_settings.DEFAULT_SEA_RATE_PER_CBM,
        air_shipping_rate_per_kg=app_settings.DEFAULT_AIR_RATE_PER_KG,
        is_saved=False,
        updated_at=None,
    )


def to_rates(out: RatesOut) -> Rates:
    return Rates(
        cbm_rate_usd=out.sea_shipping_rate_per_cbm,
        weight_rate_usd_per_kg=out.air_shipping_rate_per_kg,
        usd_to_ghs_rate=out.usd_to_ghs_rate,
    )


class SqlRateSource(SqlStoreBase, RateSource):
    """Reads the single settings row on every call."""

    async def get_settings(self) -> RatesOut:
        def _get(db: Session) -> RatesOut:
            row = db.get(SystemSettings, SETTINGS_ID)
            if row is None:
                return default_rates_out()
            return RatesOut.model_validate(row)

        return await self._run(_get)

    async def current(self) -> Rates:
        return to_rates(await self.get_settings())

    async def update_settings(self, payload: RatesUpdate) -> RatesOut:
        data = payload.model_dump(exclude_unset=True, exclude_none=True)

        def _update(db: Session) -> RatesOut:
            row = db.get(SystemSettings, SETTINGS_ID)
            if row is None:
                base = default_rates_out().model_dump(exclude={"is_saved", "updated_at"})
                row = SystemSettings(id=SETTINGS_ID, **base)
                db.add(row)

            for field, value in data.items():
                setattr(row, field, value)
            row.updated_at = datetime.now(timezone.utc)

            db.commit()
            db.refresh(row)
            return RatesOut.model_validate(row)

        result = await self._run(_update)
        logger.info("Rates updated: %s", ", ".join(f"{k}={v}" for k, v in sorted(data.items())) or "no changes")
        return result
