# velohub/adapters/vehicle_mapper.py
"""
Storage boundary: snake_case rows <-> domain Vehicle.

This is the only place that knows column / wire field names. The calculators
in velohub.domain only ever see the normalized shape.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional
from uuid import UUID

from velohub.domain.dates import parse_iso_date
from velohub.domain.money import ZERO, to_money
from velohub.domain.types import (
    Buyer,
    Expense,
    ExpenseCategory,
    SaleFacts,
    SaleSettlement,
    StoreExpense,
    TradeIn,
    TradeInIntake,
    Vehicle,
    VehicleStatus,
    Warranty,
)
from velohub.models.store_expense import StoreExpenseORM
from velohub.models.vehicle import VehicleORM
from velohub.models.vehicle_expense import VehicleExpenseORM

VEHICLE_FIELDS = (
    "id",
    "store_id",
    "make",
    "model",
    "version",
    "year",
    "plate",
    "color",
    "status",
    "purchase_price",
    "purchase_date",
    "expected_sale_price",
    "fipe_price",
    "sold_price",
    "sold_date",
    "payment_method",
    "sale_commission",
    "sale_commission_to",
    "buyer_name",
    "buyer_cpf",
    "buyer_phone",
    "trade_in_info",
    "warranty_time",
    "warranty_km",
    "created_at",
    "updated_at",
)


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _opt_id(value: Any) -> Optional[str]:
    return str(value) if value not in (None, "") else None


def _opt_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


# ============================================================
# rows -> domain
# ============================================================
def expense_from_record(rec: Mapping[str, Any]) -> Expense:
    return Expense(
        id=_opt_id(rec.get("id")),
        amount=to_money(rec.get("amount")),
        category=ExpenseCategory.parse(rec.get("category")),
        description=_text(rec.get("description")),
        expense_date=parse_iso_date(rec.get("expense_date", rec.get("date"))),
        payee=_text(rec.get("employee_name")) or None,
    )


def expense_from_orm(row: VehicleExpenseORM) -> Expense:
    return expense_from_record(
        {
            "id": row.id,
            "amount": row.amount,
            "category": row.category,
            "description": row.description,
            "expense_date": row.expense_date,
            "employee_name": row.employee_name,
        }
    )


def trade_in_from_record(info: Any) -> Optional[TradeIn]:
    if not isinstance(info, Mapping):
        return None
    return TradeIn(
        make=_text(info.get("make")),
        model=_text(info.get("model")),
        plate=_text(info.get("plate")),
        value=to_money(info.get("value")),
        year=_opt_int(info.get("year")),
    )


def vehicle_from_record(rec: Mapping[str, Any], expenses: Optional[Iterable[Expense]] = None) -> Vehicle:
    """
    Build a domain Vehicle from a snake_case mapping (DB row dict or wire
    payload). Missing or malformed numbers become 0 and unknown enum values
    fall back to their default variant.
    """
    if expenses is None:
        expenses = [expense_from_record(e) for e in rec.get("expenses") or () if isinstance(e, Mapping)]

    status = VehicleStatus.parse(rec.get("status"))
    commission = to_money(rec.get("sale_commission"))

    sale: Optional[SaleFacts] = None
    if status is VehicleStatus.SOLD:
        buyer_name = _text(rec.get("buyer_name"))
        sale = SaleFacts(
            sold_price=to_money(rec.get("sold_price")),
            sold_date=parse_iso_date(rec.get("sold_date")),
            payment_method=_text(rec.get("payment_method")),
            buyer=Buyer(
                name=buyer_name,
                cpf=_text(rec.get("buyer_cpf")),
                phone=_text(rec.get("buyer_phone")),
            ) if buyer_name else None,
            trade_in=trade_in_from_record(rec.get("trade_in_info")),
            commission=commission,
            commission_to=_text(rec.get("sale_commission_to")),
            warranty=Warranty(
                time=_text(rec.get("warranty_time")),
                km=_text(rec.get("warranty_km")),
            ),
        )

    return Vehicle(
        id=_opt_id(rec.get("id")),
        store_id=_opt_id(rec.get("store_id")),
        make=_text(rec.get("make")),
        model=_text(rec.get("model")),
        version=_text(rec.get("version")),
        year=_opt_int(rec.get("year")),
        plate=_text(rec.get("plate")),
        color=_text(rec.get("color")),
        status=status,
        purchase_price=to_money(rec.get("purchase_price")),
        purchase_date=parse_iso_date(rec.get("purchase_date")),
        expected_sale_price=to_money(rec.get("expected_sale_price")),
        reference_price=to_money(rec.get("fipe_price")),
        expenses=tuple(expenses),
        sale=sale,
        draft_commission=ZERO if sale is not None else commission,
        created_at=rec.get("created_at"),
        updated_at=rec.get("updated_at"),
    )


def vehicle_from_orm(row: VehicleORM) -> Vehicle:
    rec = {name: getattr(row, name, None) for name in VEHICLE_FIELDS}
    return vehicle_from_record(rec, [expense_from_orm(e) for e in row.expenses or ()])


def store_expense_from_orm(row: StoreExpenseORM) -> StoreExpense:
    return StoreExpense(
        amount=to_money(row.amount),
        expense_date=parse_iso_date(row.expense_date),
        category=row.category or "other",
        description=row.description or "",
        paid=bool(row.paid),
    )


# ============================================================
# domain -> rows
# ============================================================
def apply_sale(row: VehicleORM, settlement: SaleSettlement) -> list[VehicleExpenseORM]:
    """Write sale facts onto the row; returns the expense rows that were appended."""
    sale = settlement.sale

    row.status = VehicleStatus.SOLD.value
    row.reservation_details = None
    row.sold_price = sale.sold_price
    row.sold_date = sale.sold_date
    row.payment_method = sale.payment_method
    row.sale_commission = sale.commission
    row.sale_commission_to = sale.commission_to or None
    row.buyer_name = sale.buyer.name if sale.buyer else None
    row.buyer_cpf = sale.buyer.cpf if sale.buyer else None
    row.buyer_phone = sale.buyer.phone if sale.buyer else None
    row.warranty_time = sale.warranty.time if sale.warranty else None
    row.warranty_km = sale.warranty.km if sale.warranty else None
    row.trade_in_info = (
        {
            "make": sale.trade_in.make,
            "model": sale.trade_in.model,
            "plate": sale.trade_in.plate,
            "year": sale.trade_in.year,
            "value": str(sale.trade_in.value),
        }
        if sale.trade_in
        else None
    )

    added: list[VehicleExpenseORM] = []
    for e in settlement.new_expenses:
        exp = VehicleExpenseORM(
            category=e.category.value,
            description=e.description,
            amount=e.amount,
            expense_date=e.expense_date,
            employee_name=e.payee,
        )
        row.expenses.append(exp)
        added.append(exp)
    return added


def clear_sale(row: VehicleORM) -> None:
    """Undo a sale: back to stock with every sale column cleared."""
    row.status = VehicleStatus.AVAILABLE.value
    row.sold_price = None
    row.sold_date = None
    row.payment_method = None
    row.sale_commission = None
    row.sale_commission_to = None
    row.buyer_name = None
    row.buyer_cpf = None
    row.buyer_phone = None
    row.trade_in_info = None
    row.warranty_time = None
    row.warranty_km = None


def intake_to_orm(intake: TradeInIntake, store_id: UUID) -> VehicleORM:
    return VehicleORM(
        store_id=store_id,
        make=intake.make,
        model=intake.model,
        version=intake.version,
        year=intake.year,
        plate=intake.plate or None,
        status=intake.status.value,
        purchase_price=intake.purchase_price,
        purchase_date=intake.purchase_date,
        expected_sale_price=intake.expected_sale_price,
        fipe_price=ZERO,
    )
