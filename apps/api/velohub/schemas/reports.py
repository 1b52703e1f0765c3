from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

Period = Literal[
    "this_month",
    "last_month",
    "this_quarter",
    "this_year",
    "last_3",
    "last_6",
    "last_12",
    "all",
    "custom",
]


class ChartRowOut(BaseModel):
    start: date  # first day of the bucket (e.g. 2026-02-01)
    label: str  # "Fev/26" or "05/02"
    profit: Decimal
    revenue: Decimal
    invested: Decimal
    opex: Decimal
    count: int = Field(ge=0)
    stock_roi: float
    business_roi: float
    average_ticket: Decimal


class ProfitMonthlyOut(BaseModel):
    date_from: date
    date_to: date
    rows: list[ChartRowOut]
    previous_date_from: date
    previous_date_to: date
    # same filters over the range just before date_from, aligned with rows by index
    previous_rows: list[ChartRowOut]


class SaleRowOut(BaseModel):
    vehicle_id: UUID
    make: str
    model: str
    version: str
    year: Optional[int]
    plate: str
    sold_date: Optional[date]
    payment_method: str
    buyer_name: str
    sold_price: Decimal
    cash_received: Decimal
    total_cost: Decimal
    profit: Decimal
    roi: float


class SalesSummaryOut(BaseModel):
    count: int = Field(ge=0)
    revenue: Decimal
    profit: Decimal
    invested: Decimal
    opex: Decimal
    stock_roi: float
    business_profit: Decimal
    business_roi: float
    average_ticket: Decimal
    average_margin: Decimal


class BrandCountOut(BaseModel):
    name: str
    value: int


class SalesReportOut(BaseModel):
    date_from: date
    date_to: date
    summary: SalesSummaryOut
    rows: List[SaleRowOut]
    top_brands: List[BrandCountOut]
    granularity: Literal["day", "month"]
    chart: List[ChartRowOut]
    previous_date_from: date
    previous_date_to: date
    previous_chart: List[ChartRowOut]


class FilterOptionsOut(BaseModel):
    brands: List[str]
    models: List[str]
    payment_methods: List[str]


class AttentionVehicleOut(BaseModel):
    vehicle_id: UUID
    make: str
    model: str
    purchase_date: Optional[date]
    days_in_stock: int


class DashboardSummaryOut(BaseModel):
    date_from: date
    date_to: date
    in_stock_count: int = Field(ge=0)
    sold_count: int = Field(ge=0)
    inventory_value: Decimal
    potential_revenue: Decimal
    potential_profit: Decimal
    total_realized_profit: Decimal
    attention: List[AttentionVehicleOut]
    chart_profit: Decimal
    chart: List[ChartRowOut]
    inventory_by_brand: List[BrandCountOut]
