from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Uuid

from velohub.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoreORM(Base):
    """Tenant (dealership). Every business row carries a store_id."""

    __tablename__ = "stores"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)

    name = Column(String(255), nullable=False)
    cnpj = Column(String(18), nullable=True)
    phone = Column(String(32), nullable=True)

    cep = Column(String(9), nullable=True)
    city = Column(String(128), nullable=True)
    state = Column(String(2), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
