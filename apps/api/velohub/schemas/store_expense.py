from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from velohub.schemas.common import MoneyIn

OpexCategory = Literal["rent", "utilities", "payroll", "marketing_store", "software", "taxes", "office", "other"]


class StoreExpenseCreateIn(BaseModel):
    expense_date: date = Field(..., description="YYYY-MM-DD")
    category: OpexCategory = "other"
    description: str = Field(..., min_length=1, max_length=255)
    amount: MoneyIn
    paid: bool = True


class StoreExpenseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    store_id: UUID
    expense_date: date
    category: str
    description: str
    amount: Decimal
    paid: bool
    created_at: datetime
    updated_at: datetime


class StoreExpenseListOut(BaseModel):
    items: List[StoreExpenseOut]
    total: int
