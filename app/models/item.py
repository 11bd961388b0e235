# app/models/item.py

from datetime import date, datetime, timezone
from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    Float,
    Date,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship
from app.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True)

    # Temporary tracking numbers are allowed at intake, so no unique constraint
    tracking_number = Column(String(100), index=True, nullable=False)
    name = Column(String(255), nullable=True)
    quantity = Column(Integer, nullable=False, default=1)

    # Relationships
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    container_number = Column(String(100), nullable=True, index=True)
    carton_number = Column(String(100), nullable=True)

    receiving_date = Column(Date, nullable=False, default=date.today)

    # Physical data (dimensions for sea, weight for air). Stored unrounded
    # so cbm and costs always match the persisted measurements
    length = Column(Float, nullable=True)
    width = Column(Float, nullable=True)
    height = Column(Float, nullable=True)
    dimension_unit = Column(String(10), nullable=False, default="cm")   # cm | inches
    weight = Column(Float, nullable=True)
    weight_unit = Column(String(10), nullable=False, default="kg")      # kg | lbs

    shipping_method = Column(String(10), nullable=True)  # sea | air, chosen at tagging

    # Derived values, recomputed on every write
    cbm = Column(Float, nullable=False, default=0.0)
    cost_usd = Column(Float, nullable=False, default=0.0)
    cost_cedis = Column(Float, nullable=False, default=0.0)

    status = Column(String(32), nullable=False, default="china_warehouse", index=True)

    is_damaged = Column(Boolean, nullable=False, default=False)
    is_missing = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, index=True)

    # Relations
    customer = relationship("Customer", back_populates="items")
    photos = relationship(
        "ItemPhoto",
        back_populates="item",
        order_by="ItemPhoto.order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class ItemPhoto(Base):
    __tablename__ = "item_photos"

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True)

    url = Column(String(1000), nullable=False)
    # Explicit upload position; row order in the table is not meaningful
    order = Column(Integer, nullable=False, default=0)

    item = relationship("Item", back_populates="photos")
