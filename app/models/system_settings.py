# app/models/system_settings.py

from datetime import datetime, timezone
from sqlalchemy import Column, String, Float, DateTime
from app.core.database import Base


class SystemSettings(Base):
    """
    Admin-editable exchange and freight rates.
    A single row with id="default" is expected.
    """
    __tablename__ = "system_settings"

    id = Column(String(32), primary_key=True, default="default")

    usd_to_ghs_rate = Column(Float, nullable=False)
    usd_to_cny_rate = Column(Float, nullable=False)
    sea_shipping_rate_per_cbm = Column(Float, nullable=False)   # USD per CBM
    air_shipping_rate_per_kg = Column(Float, nullable=False)    # USD per kg

    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
