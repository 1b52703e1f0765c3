from __future__ import annotations

from collections import Counter
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence, Tuple
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from velohub.core.config import settings
from velohub.db.session import get_db
from velohub.dependencies.auth import StoreContext, get_store_context
from velohub.domain.dates import parse_iso_date
from velohub.domain.profit import cash_received, realized_profit, roi, total_cost
from velohub.domain.rollups import (
    ALL,
    ChartBucket,
    SalesFilter,
    bucket_by_month,
    bucket_chart,
    distinct_brands,
    distinct_models,
    distinct_payment_methods,
    filter_sales,
    inventory_summary,
    opex_between,
    previous_range,
    resolve_period,
    sales_summary,
    sold_vehicles,
    top_brands,
    uses_daily_buckets,
)
from velohub.domain.types import Vehicle
from velohub.schemas.reports import (
    AttentionVehicleOut,
    BrandCountOut,
    ChartRowOut,
    DashboardSummaryOut,
    FilterOptionsOut,
    Period,
    ProfitMonthlyOut,
    SaleRowOut,
    SalesReportOut,
    SalesSummaryOut,
)
from velohub.services.sale_service import load_store_expenses, load_store_vehicles

router = APIRouter(tags=["reports"])


# ============================================================
# helpers
# ============================================================
def _effective_period(period: str, date_from: Optional[date], date_to: Optional[date]) -> str:
    """Explicit dates win over the named period."""
    if date_from is not None or date_to is not None:
        return "custom"
    return period


def _date_range(
    period: str,
    date_from: Optional[date],
    date_to: Optional[date],
    sold: Sequence[Vehicle],
) -> Tuple[date, date]:
    period = _effective_period(period, date_from, date_to)
    start, end = resolve_period(
        period,
        date.today(),
        sold_dates=[parse_iso_date(v.sold_date) for v in sold],
        custom_start=date_from,
        custom_end=date_to,
    )
    if end < start:
        raise HTTPException(status_code=400, detail="date_to must be >= date_from")
    return start, end


def _row(b: ChartBucket) -> ChartRowOut:
    return ChartRowOut(
        start=b.start,
        label=b.label,
        profit=b.profit,
        revenue=b.revenue,
        invested=b.invested,
        opex=b.opex,
        count=b.count,
        stock_roi=b.stock_roi,
        business_roi=b.business_roi,
        average_ticket=b.average_ticket,
    )


def _criteria(
    start: date,
    end: date,
    brand: Optional[str],
    model: Optional[str],
    payment_method: Optional[str],
    min_profit: Optional[Decimal],
    max_profit: Optional[Decimal],
    search: Optional[str] = None,
) -> SalesFilter:
    return SalesFilter(
        start=start,
        end=end,
        brand=brand,
        model=model,
        payment_method=payment_method,
        min_profit=min_profit,
        max_profit=max_profit,
        search=search,
    )


# ============================================================
# Dashboard
# ============================================================
@router.get("/reports/dashboard", response_model=DashboardSummaryOut)
def dashboard(
    period: Period = Query(default="last_6"),
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    brand: Optional[str] = Query(default=None),
    model: Optional[str] = Query(default=None),
    payment_method: Optional[str] = Query(default=None),
    min_profit: Optional[Decimal] = Query(default=None),
    max_profit: Optional[Decimal] = Query(default=None),
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> DashboardSummaryOut:
    vehicles = load_store_vehicles(db, ctx.store_id)
    sold = sold_vehicles(vehicles)
    start, end = _date_range(period, date_from, date_to, sold)
    today = date.today()

    kpi = inventory_summary(vehicles, today, attention_days=settings.STOCK_ATTENTION_DAYS)

    criteria = _criteria(start, end, brand, model, payment_method, min_profit, max_profit)
    charted = filter_sales(sold, criteria)
    buckets = bucket_by_month(charted, start, end)

    in_stock_brands = Counter(v.make or "Outros" for v in vehicles if v.status.in_stock)

    return DashboardSummaryOut(
        date_from=start,
        date_to=end,
        in_stock_count=kpi.in_stock_count,
        sold_count=kpi.sold_count,
        inventory_value=kpi.inventory_value,
        potential_revenue=kpi.potential_revenue,
        potential_profit=kpi.potential_profit,
        total_realized_profit=kpi.realized_profit,
        attention=[
            AttentionVehicleOut(
                vehicle_id=UUID(v.id),
                make=v.make,
                model=v.model,
                purchase_date=v.purchase_date,
                days_in_stock=(today - (v.purchase_date or parse_iso_date(v.created_at) or today)).days,
            )
            for v in kpi.attention
        ],
        chart_profit=sum((b.profit for b in buckets), Decimal("0.00")),
        chart=[_row(b) for b in buckets],
        inventory_by_brand=[
            BrandCountOut(name=name, value=count)
            for name, count in sorted(in_stock_brands.items(), key=lambda kv: (-kv[1], kv[0]))
        ],
    )


# ============================================================
# Profit Monthly
# ============================================================
@router.get("/reports/profit-monthly", response_model=ProfitMonthlyOut)
def profit_monthly(
    period: Period = Query(default="last_12"),
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    brand: Optional[str] = Query(default=None),
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> ProfitMonthlyOut:
    sold = sold_vehicles(load_store_vehicles(db, ctx.store_id))
    start, end = _date_range(period, date_from, date_to, sold)

    prev_start, prev_end = previous_range(start, end)

    charted = filter_sales(sold, SalesFilter(brand=brand))
    opex = load_store_expenses(db, ctx.store_id, prev_start, end)
    buckets = bucket_by_month(charted, start, end, opex)
    previous = bucket_by_month(charted, prev_start, prev_end, opex)

    return ProfitMonthlyOut(
        date_from=start,
        date_to=end,
        rows=[_row(b) for b in buckets],
        previous_date_from=prev_start,
        previous_date_to=prev_end,
        previous_rows=[_row(b) for b in previous],
    )


# ============================================================
# Sales analytics
# ============================================================
@router.get("/reports/sales", response_model=SalesReportOut)
def sales_report(
    period: Period = Query(default="this_month"),
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    brand: Optional[str] = Query(default=None),
    model: Optional[str] = Query(default=None),
    payment_method: Optional[str] = Query(default=None),
    min_profit: Optional[Decimal] = Query(default=None),
    max_profit: Optional[Decimal] = Query(default=None),
    q: Optional[str] = Query(default=None, max_length=200),
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> SalesReportOut:
    sold = sold_vehicles(load_store_vehicles(db, ctx.store_id))
    start, end = _date_range(period, date_from, date_to, sold)

    criteria = _criteria(start, end, brand, model, payment_method, min_profit, max_profit, q)
    rows = filter_sales(sold, criteria)

    effective = _effective_period(period, date_from, date_to)
    daily = uses_daily_buckets(effective)
    prev_start, prev_end = previous_range(start, end, daily=daily)
    opex = load_store_expenses(db, ctx.store_id, prev_start, end)
    s = sales_summary(rows, opex_between(opex, start, end))

    # the chart re-applies the same filters over both ranges
    charted = filter_sales(sold, replace(criteria, start=None, end=None))
    include_year = True if effective == "custom" else None
    chart = bucket_chart(charted, start, end, opex, daily=daily, include_year=include_year)
    previous = bucket_chart(charted, prev_start, prev_end, opex, daily=daily, include_year=include_year)

    return SalesReportOut(
        date_from=start,
        date_to=end,
        summary=SalesSummaryOut(
            count=s.count,
            revenue=s.revenue,
            profit=s.profit,
            invested=s.invested,
            opex=s.opex,
            stock_roi=s.stock_roi,
            business_profit=s.business_profit,
            business_roi=s.business_roi,
            average_ticket=s.average_ticket,
            average_margin=s.average_margin,
        ),
        rows=[
            SaleRowOut(
                vehicle_id=UUID(v.id),
                make=v.make,
                model=v.model,
                version=v.version,
                year=v.year,
                plate=v.plate,
                sold_date=v.sold_date,
                payment_method=v.payment_method,
                buyer_name=v.sale.buyer.name if v.sale and v.sale.buyer else "",
                sold_price=v.sold_price,
                cash_received=cash_received(v),
                total_cost=total_cost(v),
                profit=realized_profit(v),
                roi=roi(realized_profit(v), total_cost(v)),
            )
            for v in rows
        ],
        top_brands=[BrandCountOut(name=n, value=c) for n, c in top_brands(rows)],
        granularity="day" if daily else "month",
        chart=[_row(b) for b in chart],
        previous_date_from=prev_start,
        previous_date_to=prev_end,
        previous_chart=[_row(b) for b in previous],
    )


@router.get("/reports/filter-options", response_model=FilterOptionsOut)
def filter_options(
    brand: str = Query(default=ALL),
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> FilterOptionsOut:
    sold = sold_vehicles(load_store_vehicles(db, ctx.store_id))
    return FilterOptionsOut(
        brands=distinct_brands(sold),
        models=distinct_models(sold, brand),
        payment_methods=distinct_payment_methods(sold),
    )
