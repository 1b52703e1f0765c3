# velohub/models/vehicle_expense.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Column, Date, DateTime, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import relationship

from velohub.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VehicleExpenseORM(Base):
    """Itemized cost of one vehicle (owned by it, deleted with it).

    category: maintenance / bodywork / tires / documentation / marketing /
    commission / other. employee_name is only set for commission rows.
    """

    __tablename__ = "vehicle_expenses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)

    vehicle_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("vehicles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    category = Column(String(32), nullable=False, default="other", index=True)
    description = Column(String(255), nullable=False, default="")
    amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    expense_date = Column(Date, nullable=True)
    employee_name = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    vehicle = relationship("VehicleORM", back_populates="expenses")
