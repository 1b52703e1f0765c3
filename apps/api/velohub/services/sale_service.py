from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from velohub.adapters.vehicle_mapper import (
    apply_sale,
    clear_sale,
    intake_to_orm,
    store_expense_from_orm,
    vehicle_from_orm,
)
from velohub.domain.profit import build_sale
from velohub.domain.types import Buyer, StoreExpense, TradeIn, Vehicle, Warranty
from velohub.models.store_expense import StoreExpenseORM
from velohub.models.vehicle import VehicleORM
from velohub.schemas.vehicle import SaleIn

logger = logging.getLogger(__name__)


# ============================================================
# Loading
# ============================================================
def get_vehicle_row(db: Session, store_id: UUID, vehicle_id: UUID) -> Optional[VehicleORM]:
    """Vehicle of this store, or None (other tenants' rows are invisible)."""
    row = db.get(VehicleORM, vehicle_id)
    if row is None or row.store_id != store_id:
        return None
    return row


def load_store_vehicles(db: Session, store_id: UUID) -> list[Vehicle]:
    rows = db.execute(
        select(VehicleORM).where(VehicleORM.store_id == store_id).order_by(VehicleORM.created_at)
    ).scalars().all()
    return [vehicle_from_orm(r) for r in rows]


def load_store_expenses(
    db: Session,
    store_id: UUID,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[StoreExpense]:
    cond = [StoreExpenseORM.store_id == store_id]
    if start is not None:
        cond.append(StoreExpenseORM.expense_date >= start)
    if end is not None:
        cond.append(StoreExpenseORM.expense_date <= end)
    rows = db.execute(select(StoreExpenseORM).where(*cond)).scalars().all()
    return [store_expense_from_orm(r) for r in rows]


# ============================================================
# Sale
# ============================================================
def sell_vehicle(
    db: Session,
    row: VehicleORM,
    body: SaleIn,
    *,
    today: date,
    trade_in_markup: float,
) -> Optional[VehicleORM]:
    """
    Record the sale on `row` and, for trade-in sales, create the incoming
    vehicle. Raises SaleValidationError before anything is written.
    Returns the trade-in vehicle row when one was created.
    """
    vehicle = vehicle_from_orm(row)

    settlement = build_sale(
        vehicle,
        price=body.price,
        payment_method=body.payment_method,
        sold_date=body.sold_date or today,
        trade_in=(
            TradeIn(
                make=body.trade_in.make,
                model=body.trade_in.model,
                value=body.trade_in.value,
                plate=body.trade_in.plate,
                year=body.trade_in.year,
            )
            if body.trade_in
            else None
        ),
        commission=body.commission,
        commission_to=body.commission_to.strip(),
        buyer=(
            Buyer(name=body.buyer.name.strip(), cpf=body.buyer.cpf, phone=body.buyer.phone)
            if body.buyer
            else None
        ),
        warranty=Warranty(time=body.warranty_time, km=body.warranty_km),
        trade_in_markup=Decimal(str(trade_in_markup)),
    )

    added = apply_sale(row, settlement)
    db.add(row)

    intake_row: Optional[VehicleORM] = None
    if settlement.trade_in_intake is not None:
        intake_row = intake_to_orm(settlement.trade_in_intake, row.store_id)
        db.add(intake_row)

    db.commit()
    db.refresh(row)
    if intake_row is not None:
        db.refresh(intake_row)

    logger.info(
        "sale recorded vehicle=%s sold_price=%s commission_expenses=%d trade_in=%s",
        row.id,
        row.sold_price,
        len(added),
        intake_row.id if intake_row is not None else None,
    )
    return intake_row


def undo_sale(db: Session, row: VehicleORM) -> None:
    """Return a sold vehicle to stock. Commission expenses stay in the ledger."""
    clear_sale(row)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("sale reversed vehicle=%s", row.id)
