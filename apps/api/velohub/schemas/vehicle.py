# velohub/schemas/vehicle.py

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from velohub.schemas.common import MoneyIn, PageMeta

VehicleStatusIn = Literal["available", "reserved", "preparation"]
ExpenseCategoryIn = Literal["maintenance", "bodywork", "tires", "documentation", "marketing", "commission", "other"]


# ============================================================
# Expenses
# ============================================================
class VehicleExpenseCreate(BaseModel):
    category: ExpenseCategoryIn = "other"
    description: str = Field(default="", max_length=255)
    amount: MoneyIn
    expense_date: Optional[date] = None
    employee_name: Optional[str] = Field(default=None, max_length=255)


class VehicleExpenseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    category: str
    description: str
    amount: Decimal
    expense_date: Optional[date]
    employee_name: Optional[str]
    created_at: datetime


# ============================================================
# Vehicles
# ============================================================
class VehicleBase(BaseModel):
    make: str = Field(max_length=64)
    model: str = Field(max_length=128)
    version: Optional[str] = Field(default=None, max_length=255)
    year: Optional[int] = Field(default=None, ge=1900, le=2100)
    plate: Optional[str] = None
    km: Optional[int] = Field(default=None, ge=0)
    color: Optional[str] = None
    fuel: Optional[str] = None
    transmission: Optional[str] = None

    purchase_price: MoneyIn = Decimal("0")
    purchase_date: Optional[date] = None
    expected_sale_price: MoneyIn = Decimal("0")
    fipe_price: Optional[MoneyIn] = None

    notes: Optional[str] = None


class VehicleCreate(VehicleBase):
    status: VehicleStatusIn = "available"


class VehicleUpdate(BaseModel):
    make: Optional[str] = Field(default=None, max_length=64)
    model: Optional[str] = Field(default=None, max_length=128)
    version: Optional[str] = Field(default=None, max_length=255)
    year: Optional[int] = Field(default=None, ge=1900, le=2100)
    plate: Optional[str] = None
    km: Optional[int] = Field(default=None, ge=0)
    color: Optional[str] = None
    fuel: Optional[str] = None
    transmission: Optional[str] = None
    status: Optional[VehicleStatusIn] = None

    purchase_price: Optional[MoneyIn] = None
    purchase_date: Optional[date] = None
    expected_sale_price: Optional[MoneyIn] = None
    fipe_price: Optional[MoneyIn] = None

    # live commission value while the vehicle is not sold yet
    sale_commission: Optional[MoneyIn] = None
    sale_commission_to: Optional[str] = Field(default=None, max_length=255)

    notes: Optional[str] = None


class VehicleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    store_id: UUID
    make: str
    model: str
    version: Optional[str]
    year: Optional[int]
    plate: Optional[str]
    km: Optional[int]
    color: Optional[str]
    status: str

    purchase_price: Decimal
    purchase_date: Optional[date]
    expected_sale_price: Decimal
    fipe_price: Optional[Decimal]

    sold_price: Optional[Decimal]
    sold_date: Optional[date]
    payment_method: Optional[str]
    sale_commission: Optional[Decimal]
    sale_commission_to: Optional[str]
    buyer_name: Optional[str]
    trade_in_info: Optional[dict]
    reservation_details: Optional[dict] = None
    warranty_time: Optional[str]
    warranty_km: Optional[str]

    notes: Optional[str]
    expenses: List[VehicleExpenseRead] = []

    created_at: datetime
    updated_at: datetime


# ============================================================
# Reservation
# ============================================================
class ReservationIn(BaseModel):
    reserved_by: str = Field(min_length=1, max_length=255)
    reserved_by_phone: str = Field(default="", max_length=32)
    # deposit ("sinal") paid to hold the vehicle
    signal_value: MoneyIn = Decimal("0")
    reservation_date: Optional[date] = None


class VehicleListOut(BaseModel):
    items: List[VehicleRead]
    meta: PageMeta


# ============================================================
# Sale
# ============================================================
class BuyerIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    cpf: str = Field(max_length=14)
    phone: str = Field(default="", max_length=32)


class TradeInIn(BaseModel):
    make: str = Field(max_length=64)
    model: str = Field(max_length=128)
    value: MoneyIn
    plate: str = ""
    year: Optional[int] = Field(default=None, ge=1900, le=2100)


class SaleIn(BaseModel):
    # for "Troca + Volta" this is the cash part; the trade-in value is added on top
    price: MoneyIn
    payment_method: str = Field(default="Pix / Transferencia", max_length=64)
    sold_date: Optional[date] = None
    commission: MoneyIn = Decimal("0")
    commission_to: str = Field(default="", max_length=255)
    buyer: Optional[BuyerIn] = None
    trade_in: Optional[TradeInIn] = None
    warranty_time: str = Field(default="90 dias", max_length=64)
    warranty_km: str = Field(default="3000 km", max_length=64)


class VehicleFinancialsOut(BaseModel):
    vehicle_id: UUID
    status: str
    purchase_price: Decimal
    operating_expenses: Decimal
    commission: Decimal
    total_cost: Decimal
    expected_sale_price: Decimal
    projected_profit: Decimal
    gross_revenue: Decimal
    trade_in_value: Decimal
    cash_received: Decimal
    realized_profit: Decimal
    roi: float


class SaleOut(BaseModel):
    vehicle: VehicleRead
    financials: VehicleFinancialsOut
    trade_in_vehicle_id: Optional[UUID] = None
