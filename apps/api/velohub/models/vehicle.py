# velohub/models/vehicle.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, Column, Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship

from velohub.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VehicleORM(Base):
    """Stock vehicle (aggregate root for the profit calculators).

    Sale columns (sold_*, payment_method, buyer_*, trade_in_info, warranty_*)
    are only meaningful while status == "sold"; undoing a sale clears them.
    """

    __tablename__ = "vehicles"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)

    store_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("stores.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # identification
    make = Column(String(64), nullable=False, default="")
    model = Column(String(128), nullable=False, default="")
    version = Column(String(255), nullable=True)
    year = Column(Integer, nullable=True)
    plate = Column(String(8), nullable=True, index=True)
    km = Column(Integer, nullable=True)
    color = Column(String(32), nullable=True)
    fuel = Column(String(32), nullable=True)
    transmission = Column(String(32), nullable=True)

    # available / reserved / preparation / sold
    status = Column(String(16), nullable=False, default="available", index=True)
    # {reserved_by, reserved_by_phone, signal_value, reservation_date}; only set while reserved
    reservation_details = Column(JSON, nullable=True)

    # acquisition / listing
    purchase_price = Column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    purchase_date = Column(Date, nullable=True)
    expected_sale_price = Column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    fipe_price = Column(Numeric(14, 2), nullable=True)  # advisory only

    # sale facts
    sold_price = Column(Numeric(14, 2), nullable=True)
    sold_date = Column(Date, nullable=True, index=True)
    payment_method = Column(String(64), nullable=True)
    sale_commission = Column(Numeric(14, 2), nullable=True)
    sale_commission_to = Column(String(255), nullable=True)
    buyer_name = Column(String(255), nullable=True)
    buyer_cpf = Column(String(14), nullable=True)
    buyer_phone = Column(String(32), nullable=True)
    trade_in_info = Column(JSON, nullable=True)  # {make, model, plate, value, year}
    warranty_time = Column(String(64), nullable=True)
    warranty_km = Column(String(64), nullable=True)

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    expenses = relationship(
        "VehicleExpenseORM",
        back_populates="vehicle",
        cascade="all, delete-orphan",
        order_by="VehicleExpenseORM.created_at",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_vehicles_store_status", "store_id", "status"),
        Index("ix_vehicles_store_sold_date", "store_id", "sold_date"),
    )
