# velohub/routes/vehicles.py
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from velohub.adapters.vehicle_mapper import vehicle_from_orm
from velohub.core.config import settings
from velohub.core.pagination import LimitQuery, OffsetQuery
from velohub.db.session import get_db
from velohub.dependencies.auth import StoreContext, get_store_context
from velohub.dependencies.permissions import require_roles
from velohub.domain.errors import SaleValidationError
from velohub.domain.identifiers import mask_phone, mask_plate
from velohub.domain.ledger import effective_commission
from velohub.domain.profit import projected_profit, sale_breakdown
from velohub.domain.types import Vehicle
from velohub.models.vehicle import VehicleORM
from velohub.models.vehicle_expense import VehicleExpenseORM
from velohub.schemas.common import PageMeta
from velohub.schemas.vehicle import (
    ReservationIn,
    SaleIn,
    SaleOut,
    VehicleCreate,
    VehicleExpenseCreate,
    VehicleExpenseRead,
    VehicleFinancialsOut,
    VehicleListOut,
    VehicleRead,
    VehicleUpdate,
)
from velohub.services.sale_service import get_vehicle_row, sell_vehicle, undo_sale

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


# =========================================================
# Internal helpers
# =========================================================
def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _get_or_404(db: Session, ctx: StoreContext, vehicle_id: UUID) -> VehicleORM:
    row = get_vehicle_row(db, ctx.store_id, vehicle_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return row


def _financials(vehicle_id: UUID, vehicle: Vehicle) -> VehicleFinancialsOut:
    b = sale_breakdown(vehicle)
    return VehicleFinancialsOut(
        vehicle_id=vehicle_id,
        status=vehicle.status.value,
        purchase_price=b.purchase_price,
        operating_expenses=b.operating_expenses,
        commission=effective_commission(vehicle),
        total_cost=b.total_cost,
        expected_sale_price=vehicle.expected_sale_price,
        projected_profit=projected_profit(vehicle),
        gross_revenue=b.gross_revenue,
        trade_in_value=b.trade_in_value,
        cash_received=b.cash_received,
        realized_profit=b.profit,
        roi=b.roi,
    )


# =========================================================
# CRUD
# =========================================================
@router.get("", response_model=VehicleListOut)
def list_vehicles(
    limit: int = LimitQuery,
    offset: int = OffsetQuery,
    q: str = Query("", max_length=200),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> VehicleListOut:
    cond = [VehicleORM.store_id == ctx.store_id]

    if status_filter:
        cond.append(VehicleORM.status == status_filter)

    if q.strip():
        qs = f"%{q.strip()}%"
        cond.append(
            or_(
                VehicleORM.make.ilike(qs),
                VehicleORM.model.ilike(qs),
                VehicleORM.version.ilike(qs),
                VehicleORM.plate.ilike(qs),
                VehicleORM.buyer_name.ilike(qs),
            )
        )

    stmt = (
        select(VehicleORM)
        .where(and_(*cond))
        .order_by(VehicleORM.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    items = db.execute(stmt).scalars().all()

    total = db.execute(
        select(func.count()).select_from(VehicleORM).where(and_(*cond))
    ).scalar_one()

    return VehicleListOut(
        items=items,
        meta=PageMeta(limit=limit, offset=offset, total=int(total or 0)),
    )


@router.post("", response_model=VehicleRead, status_code=status.HTTP_201_CREATED)
def create_vehicle(
    body: VehicleCreate,
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> VehicleRead:
    now = _utcnow()
    data = body.model_dump()
    data["plate"] = mask_plate(data.get("plate")) or None

    row = VehicleORM(store_id=ctx.store_id, created_at=now, updated_at=now, **data)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@router.get("/{vehicle_id}", response_model=VehicleRead)
def get_vehicle(
    vehicle_id: UUID,
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> VehicleRead:
    return _get_or_404(db, ctx, vehicle_id)


@router.put("/{vehicle_id}", response_model=VehicleRead)
def update_vehicle(
    vehicle_id: UUID,
    body: VehicleUpdate,
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> VehicleRead:
    row = _get_or_404(db, ctx, vehicle_id)
    patch = body.model_dump(exclude_unset=True)

    # sale facts are frozen once sold; use undo-sale to reopen them
    if row.status == "sold":
        frozen = {"purchase_price", "sale_commission", "sale_commission_to", "status"}
        touched = frozen & set(patch)
        if touched:
            raise HTTPException(
                status_code=409,
                detail=f"Sold vehicle: {', '.join(sorted(touched))} cannot be edited",
            )

    if "plate" in patch:
        patch["plate"] = mask_plate(patch["plate"]) or None

    # reservation data only lives while the vehicle is reserved
    if patch.get("status", "reserved") != "reserved":
        row.reservation_details = None

    for k, v in patch.items():
        setattr(row, k, v)

    row.updated_at = _utcnow()
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@router.delete("/{vehicle_id}", status_code=204)
def delete_vehicle(
    vehicle_id: UUID,
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> Response:
    row = _get_or_404(db, ctx, vehicle_id)
    db.delete(row)
    db.commit()
    logger.info("vehicle deleted id=%s store=%s", vehicle_id, ctx.store_id)
    return Response(status_code=204)


# =========================================================
# Expenses
# =========================================================
@router.post("/{vehicle_id}/expenses", response_model=VehicleExpenseRead, status_code=status.HTTP_201_CREATED)
def add_expense(
    vehicle_id: UUID,
    body: VehicleExpenseCreate,
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> VehicleExpenseRead:
    row = _get_or_404(db, ctx, vehicle_id)

    exp = VehicleExpenseORM(
        vehicle_id=row.id,
        category=body.category,
        description=body.description.strip(),
        amount=body.amount,
        expense_date=body.expense_date or date.today(),
        employee_name=(body.employee_name.strip() or None)
        if body.employee_name and body.category == "commission"
        else None,
        created_at=_utcnow(),
    )
    db.add(exp)
    row.updated_at = _utcnow()
    db.commit()
    db.refresh(exp)
    return exp


@router.delete("/{vehicle_id}/expenses/{expense_id}", status_code=204)
def delete_expense(
    vehicle_id: UUID,
    expense_id: UUID,
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> Response:
    row = _get_or_404(db, ctx, vehicle_id)
    exp = db.get(VehicleExpenseORM, expense_id)
    if exp is None or exp.vehicle_id != row.id:
        raise HTTPException(status_code=404, detail="Expense not found")

    db.delete(exp)
    row.updated_at = _utcnow()
    db.commit()
    return Response(status_code=204)


# =========================================================
# Financials / sale
# =========================================================
@router.get("/{vehicle_id}/financials", response_model=VehicleFinancialsOut)
def get_financials(
    vehicle_id: UUID,
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> VehicleFinancialsOut:
    row = _get_or_404(db, ctx, vehicle_id)
    return _financials(row.id, vehicle_from_orm(row))


@router.post("/{vehicle_id}/sell", response_model=SaleOut)
def sell(
    vehicle_id: UUID,
    body: SaleIn,
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> SaleOut:
    row = _get_or_404(db, ctx, vehicle_id)
    if row.status == "sold":
        raise HTTPException(status_code=409, detail="Vehicle already sold")

    try:
        intake = sell_vehicle(
            db,
            row,
            body,
            today=date.today(),
            trade_in_markup=settings.TRADE_IN_MARKUP,
        )
    except SaleValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    if intake is not None:
        logger.info("trade-in intake created id=%s from_sale=%s", intake.id, row.id)

    return SaleOut(
        vehicle=VehicleRead.model_validate(row),
        financials=_financials(row.id, vehicle_from_orm(row)),
        trade_in_vehicle_id=intake.id if intake is not None else None,
    )


@router.post("/{vehicle_id}/undo-sale", response_model=VehicleRead)
def undo(
    vehicle_id: UUID,
    ctx: StoreContext = Depends(require_roles("owner")),
    db: Session = Depends(get_db),
) -> VehicleRead:
    row = _get_or_404(db, ctx, vehicle_id)
    if row.status != "sold":
        raise HTTPException(status_code=409, detail="Vehicle is not sold")

    undo_sale(db, row)
    return row


# =========================================================
# Reservation
# =========================================================
@router.post("/{vehicle_id}/reserve", response_model=VehicleRead)
def reserve(
    vehicle_id: UUID,
    body: ReservationIn,
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> VehicleRead:
    row = _get_or_404(db, ctx, vehicle_id)
    if row.status == "sold":
        raise HTTPException(status_code=409, detail="Vehicle already sold")

    row.status = "reserved"
    row.reservation_details = {
        "reserved_by": body.reserved_by.strip(),
        "reserved_by_phone": mask_phone(body.reserved_by_phone),
        "signal_value": str(body.signal_value),
        "reservation_date": (body.reservation_date or date.today()).isoformat(),
    }
    row.updated_at = _utcnow()
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("vehicle reserved id=%s store=%s", vehicle_id, ctx.store_id)
    return row
