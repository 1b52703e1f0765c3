# velohub/models/store_expense.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Numeric, String, Uuid

from velohub.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoreExpenseORM(Base):
    """Store OPEX

    Operating expenses of the dealership itself, not tied to a vehicle.
    Used by the sales analytics "business ROI" (profit after OPEX).
    - category: rent / utilities / payroll / marketing_store / software / taxes / office / other
    - expense_date: when the expense happened (reporting axis)
    """

    __tablename__ = "store_expenses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)

    store_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("stores.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    expense_date = Column(Date, nullable=False, index=True)
    category = Column(String(32), nullable=False, default="other", index=True)
    description = Column(String(255), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    paid = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index("ix_store_expenses_store_date", "store_id", "expense_date"),
    )
