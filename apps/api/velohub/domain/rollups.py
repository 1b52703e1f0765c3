# velohub/domain/rollups.py
"""
Reporting rollups shared by the dashboard and the sales analytics screen.

Both screens bucket and filter with the same functions so their totals agree.
Vehicles whose sale date is missing or unparseable are left out of any
date-based rollup instead of failing or landing in a wrong bucket.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence

from velohub.domain.dates import add_months, month_end, month_start, parse_iso_date
from velohub.domain.money import ZERO, to_money
from velohub.domain.profit import realized_profit, roi, total_cost
from velohub.domain.types import StoreExpense, Vehicle

ALL = "all"

MONTH_ABBREVIATIONS = ("Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez")

PERIODS = (
    "this_month",
    "last_month",
    "this_quarter",
    "this_year",
    "last_3",
    "last_6",
    "last_12",
    "all",
    "custom",
)


# ============================================================
# Chart buckets
# ============================================================
DAILY_PERIODS = ("this_month", "last_month", "custom")


def month_label(d: date) -> str:
    """date(2026, 2, 14) -> 'Fev/26'"""
    return f"{MONTH_ABBREVIATIONS[d.month - 1]}/{d.year % 100:02d}"


def day_label(d: date, include_year: bool = False) -> str:
    """date(2026, 2, 5) -> '05/02' (or '05/02/26')"""
    if include_year:
        return f"{d.day:02d}/{d.month:02d}/{d.year % 100:02d}"
    return f"{d.day:02d}/{d.month:02d}"


def month_keys(start: date, end: date) -> list[date]:
    """First day of every month in [start, end], chronological."""
    keys: list[date] = []
    cursor = month_start(start)
    last = month_start(end)
    while cursor <= last:
        keys.append(cursor)
        cursor = add_months(cursor, 1)
    return keys


def day_keys(start: date, end: date) -> list[date]:
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def uses_daily_buckets(period: str) -> bool:
    return period in DAILY_PERIODS


def previous_range(start: date, end: date, *, daily: bool = False) -> tuple[date, date]:
    """
    The range of equal length just before [start, end]: the same number of
    days when daily, otherwise the same number of whole months.
    """
    if daily:
        prev_end = start - timedelta(days=1)
        return prev_end - (end - start), prev_end
    months = (end.year - start.year) * 12 + (end.month - start.month) + 1
    prev_end = month_start(start) - timedelta(days=1)
    return add_months(prev_end, -(months - 1)), prev_end


@dataclass
class ChartBucket:
    start: date
    label: str
    profit: Decimal = ZERO
    revenue: Decimal = ZERO
    invested: Decimal = ZERO
    opex: Decimal = ZERO
    count: int = 0

    @property
    def stock_roi(self) -> float:
        return roi(self.profit, self.invested)

    @property
    def business_roi(self) -> float:
        return roi(self.profit - self.opex, self.invested + self.opex)

    @property
    def average_ticket(self) -> Decimal:
        if self.count == 0:
            return ZERO
        return to_money(self.revenue / self.count)


def _accumulate(
    buckets: dict[date, ChartBucket],
    key_of: Callable[[date], date],
    vehicles: Iterable[Vehicle],
    start: date,
    end: date,
    store_expenses: Iterable[StoreExpense],
) -> list[ChartBucket]:
    for v in vehicles:
        sold_at = parse_iso_date(v.sold_date)
        if sold_at is None or sold_at < start or sold_at > end:
            continue
        bucket = buckets.get(key_of(sold_at))
        if bucket is None:
            continue
        bucket.profit += realized_profit(v)
        bucket.revenue += to_money(v.sold_price)
        bucket.invested += total_cost(v)
        bucket.count += 1

    for e in store_expenses:
        spent_at = parse_iso_date(e.expense_date)
        if spent_at is None or spent_at < start or spent_at > end:
            continue
        bucket = buckets.get(key_of(spent_at))
        if bucket is not None:
            bucket.opex += to_money(e.amount)

    return [buckets[k] for k in sorted(buckets)]


def bucket_by_month(
    vehicles: Iterable[Vehicle],
    start: date,
    end: date,
    store_expenses: Iterable[StoreExpense] = (),
) -> list[ChartBucket]:
    """
    One bucket per month of [start, end] (empty months included), with the
    realized profit of every vehicle accumulated into its sale month.
    """
    buckets = {m: ChartBucket(start=m, label=month_label(m)) for m in month_keys(start, end)}
    return _accumulate(buckets, month_start, vehicles, start, end, store_expenses)


def bucket_by_day(
    vehicles: Iterable[Vehicle],
    start: date,
    end: date,
    store_expenses: Iterable[StoreExpense] = (),
    *,
    include_year: Optional[bool] = None,
) -> list[ChartBucket]:
    """Daily variant of bucket_by_month; labels carry the year when the range crosses one."""
    if include_year is None:
        include_year = start.year != end.year
    buckets = {d: ChartBucket(start=d, label=day_label(d, include_year)) for d in day_keys(start, end)}
    return _accumulate(buckets, lambda d: d, vehicles, start, end, store_expenses)


def bucket_chart(
    vehicles: Sequence[Vehicle],
    start: date,
    end: date,
    store_expenses: Sequence[StoreExpense] = (),
    *,
    daily: bool = False,
    include_year: Optional[bool] = None,
) -> list[ChartBucket]:
    if daily:
        return bucket_by_day(vehicles, start, end, store_expenses, include_year=include_year)
    return bucket_by_month(vehicles, start, end, store_expenses)


# ============================================================
# Filters
# ============================================================
def _is_set(value: Optional[str]) -> bool:
    return value is not None and value != "" and value != ALL


@dataclass(frozen=True)
class SalesFilter:
    start: Optional[date] = None
    end: Optional[date] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    payment_method: Optional[str] = None
    min_profit: Optional[Decimal] = None
    max_profit: Optional[Decimal] = None
    # free text over make, model, version, year, color, plate, buyer, sale date and price
    search: Optional[str] = None

    @property
    def has_date_range(self) -> bool:
        return self.start is not None or self.end is not None


def matches(vehicle: Vehicle, criteria: SalesFilter) -> bool:
    if criteria.has_date_range:
        sold_at = parse_iso_date(vehicle.sold_date)
        if sold_at is None:
            return False
        if criteria.start is not None and sold_at < criteria.start:
            return False
        if criteria.end is not None and sold_at > criteria.end:
            return False

    if _is_set(criteria.brand) and vehicle.make != criteria.brand:
        return False
    if _is_set(criteria.model) and vehicle.model != criteria.model:
        return False
    if _is_set(criteria.payment_method) and vehicle.payment_method != criteria.payment_method:
        return False

    if criteria.min_profit is not None or criteria.max_profit is not None:
        profit = realized_profit(vehicle)
        if criteria.min_profit is not None and profit < to_money(criteria.min_profit):
            return False
        if criteria.max_profit is not None and profit > to_money(criteria.max_profit):
            return False

    if criteria.search and not matches_search(vehicle, criteria.search):
        return False

    return True


def matches_search(vehicle: Vehicle, term: str) -> bool:
    """Case-insensitive substring match; the sale date is searched as dd/mm/yyyy."""
    needle = term.strip().lower()
    if not needle:
        return True

    sold_at = parse_iso_date(vehicle.sold_date)
    price = to_money(vehicle.sold_price)
    buyer = vehicle.sale.buyer.name if vehicle.sale and vehicle.sale.buyer else ""
    haystack = (
        vehicle.make,
        vehicle.model,
        vehicle.version,
        str(vehicle.year) if vehicle.year is not None else "",
        vehicle.color,
        vehicle.plate,
        buyer,
        sold_at.strftime("%d/%m/%Y") if sold_at else "",
        f"{price.normalize():f}" if price else "",
    )
    return any(needle in (field_value or "").lower() for field_value in haystack)


def filter_sales(vehicles: Iterable[Vehicle], criteria: SalesFilter) -> list[Vehicle]:
    """Conjunctive filter; unset criteria (None, '' or 'all') match everything."""
    return [v for v in vehicles if matches(v, criteria)]


def sold_vehicles(vehicles: Iterable[Vehicle]) -> list[Vehicle]:
    """Sold vehicles, most recent sale first (undated sales last)."""
    sold = [v for v in vehicles if v.is_sold]
    return sorted(sold, key=lambda v: parse_iso_date(v.sold_date) or date.min, reverse=True)


# ============================================================
# Filter options
# ============================================================
def _distinct(values: Iterable[Optional[str]]) -> list[str]:
    unique = {v for v in values if v}
    return [ALL, *sorted(unique, key=lambda s: (s.casefold(), s))]


def distinct_brands(vehicles: Iterable[Vehicle]) -> list[str]:
    return _distinct(v.make for v in vehicles)


def distinct_models(vehicles: Iterable[Vehicle], brand: Optional[str] = None) -> list[str]:
    if _is_set(brand):
        return _distinct(v.model for v in vehicles if v.make == brand)
    return _distinct(v.model for v in vehicles)


def distinct_payment_methods(vehicles: Iterable[Vehicle]) -> list[str]:
    return _distinct(v.payment_method for v in vehicles)


# ============================================================
# Periods
# ============================================================
def resolve_period(
    period: str,
    today: date,
    *,
    sold_dates: Sequence[Optional[date]] = (),
    custom_start: Optional[date] = None,
    custom_end: Optional[date] = None,
) -> tuple[date, date]:
    """Named chart period -> inclusive (start, end). Unknown names mean this month."""
    start = month_start(today)
    end = month_end(today)

    if period == "all":
        dates = [d for d in sold_dates if d is not None]
        if dates:
            start, end = min(dates), max(dates)
    elif period == "custom":
        start = custom_start or start
        end = custom_end or end
    elif period in ("last_3", "last_6", "last_12"):
        months_back = {"last_3": 2, "last_6": 5, "last_12": 11}[period]
        start = add_months(today, -months_back)
    elif period == "last_month":
        start = add_months(today, -1)
        end = month_end(start)
    elif period == "this_quarter":
        quarter_first = date(today.year, (today.month - 1) // 3 * 3 + 1, 1)
        start = quarter_first
        end = month_end(add_months(quarter_first, 2))
    elif period == "this_year":
        start = date(today.year, 1, 1)
        end = date(today.year, 12, 31)

    return start, end


# ============================================================
# Summaries
# ============================================================
@dataclass(frozen=True)
class SalesSummary:
    count: int
    revenue: Decimal
    profit: Decimal
    invested: Decimal
    opex: Decimal
    stock_roi: float
    business_profit: Decimal
    business_roi: float
    average_ticket: Decimal
    average_margin: Decimal


def sales_summary(vehicles: Sequence[Vehicle], opex_total=ZERO) -> SalesSummary:
    revenue = sum((to_money(v.sold_price) for v in vehicles), ZERO)
    profit = sum((realized_profit(v) for v in vehicles), ZERO)
    invested = sum((total_cost(v) for v in vehicles), ZERO)
    opex = to_money(opex_total)
    count = len(vehicles)

    business_profit = profit - opex
    return SalesSummary(
        count=count,
        revenue=revenue,
        profit=profit,
        invested=invested,
        opex=opex,
        stock_roi=roi(profit, invested),
        business_profit=business_profit,
        business_roi=roi(business_profit, invested + opex),
        average_ticket=to_money(revenue / count) if count else ZERO,
        average_margin=to_money(profit / count) if count else ZERO,
    )


def opex_between(store_expenses: Iterable[StoreExpense], start: date, end: date) -> Decimal:
    total = ZERO
    for e in store_expenses:
        spent_at = parse_iso_date(e.expense_date)
        if spent_at is not None and start <= spent_at <= end:
            total += to_money(e.amount)
    return total


@dataclass(frozen=True)
class InventorySummary:
    in_stock_count: int
    sold_count: int
    inventory_value: Decimal
    potential_revenue: Decimal
    potential_profit: Decimal
    realized_profit: Decimal
    attention: list[Vehicle] = field(default_factory=list)


def inventory_summary(vehicles: Sequence[Vehicle], today: date, *, attention_days: int = 60) -> InventorySummary:
    """
    Dashboard KPIs. Inventory value is total_cost() of every vehicle still in
    stock, the same cost basis projected_profit() uses, so potential profit
    equals the sum of projected profits.
    """
    in_stock = [v for v in vehicles if v.status.in_stock]
    sold = [v for v in vehicles if v.is_sold]

    inventory_value = sum((total_cost(v) for v in in_stock), ZERO)
    potential_revenue = sum((to_money(v.expected_sale_price) for v in in_stock), ZERO)

    attention = []
    for v in in_stock:
        since = parse_iso_date(v.purchase_date) or parse_iso_date(v.created_at)
        if since is not None and (today - since).days > attention_days:
            attention.append(v)

    return InventorySummary(
        in_stock_count=len(in_stock),
        sold_count=len(sold),
        inventory_value=inventory_value,
        potential_revenue=potential_revenue,
        potential_profit=potential_revenue - inventory_value,
        realized_profit=sum((realized_profit(v) for v in sold), ZERO),
        attention=attention,
    )


def top_brands(vehicles: Iterable[Vehicle], limit: int = 5) -> list[tuple[str, int]]:
    counts = Counter(v.make or "Outros" for v in vehicles if v.is_sold)
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]
