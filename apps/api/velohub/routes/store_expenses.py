from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from velohub.core.pagination import LimitQuery, OffsetQuery
from velohub.db.session import get_db
from velohub.dependencies.auth import StoreContext, get_store_context
from velohub.dependencies.permissions import require_roles
from velohub.domain.money import format_money
from velohub.models.store_expense import StoreExpenseORM
from velohub.schemas.store_expense import StoreExpenseCreateIn, StoreExpenseListOut, StoreExpenseOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["store-expenses"])

CATEGORY_LABELS = {
    "rent": "Aluguel",
    "utilities": "Contas (Agua/Luz/Internet)",
    "payroll": "Folha de Pagamento",
    "marketing_store": "Marketing Institucional",
    "software": "Sistemas/Software",
    "taxes": "Impostos",
    "office": "Material de Escritorio",
    "other": "Outros",
}


# ============================================================
# utils
# ============================================================
def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _conditions(
    store_id: UUID,
    start: Optional[date],
    end: Optional[date],
    category: Optional[str],
) -> list:
    cond = [StoreExpenseORM.store_id == store_id]
    if start is not None:
        cond.append(StoreExpenseORM.expense_date >= start)
    if end is not None:
        cond.append(StoreExpenseORM.expense_date <= end)
    if category:
        cond.append(StoreExpenseORM.category == category)
    return cond


def _get_or_404(db: Session, store_id: UUID, expense_id: UUID) -> StoreExpenseORM:
    exp = db.get(StoreExpenseORM, expense_id)
    if exp is None or exp.store_id != store_id:
        raise HTTPException(status_code=404, detail="Not found")
    return exp


# ============================================================
# endpoints
# ============================================================
@router.get("/store-expenses", response_model=StoreExpenseListOut)
def list_store_expenses(
    limit: int = LimitQuery,
    offset: int = OffsetQuery,
    start: Optional[date] = Query(default=None, description="YYYY-MM-DD"),
    end: Optional[date] = Query(default=None, description="YYYY-MM-DD"),
    category: Optional[str] = Query(default=None, max_length=32),
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> StoreExpenseListOut:
    cond = _conditions(ctx.store_id, start, end, category)

    stmt = (
        select(StoreExpenseORM)
        .where(and_(*cond))
        .order_by(StoreExpenseORM.expense_date.desc(), StoreExpenseORM.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    items = db.execute(stmt).scalars().all()

    total = db.execute(
        select(func.count()).select_from(StoreExpenseORM).where(and_(*cond))
    ).scalar_one()

    return StoreExpenseListOut(items=items, total=int(total or 0))


@router.post("/store-expenses", response_model=StoreExpenseOut, status_code=201)
def create_store_expense(
    body: StoreExpenseCreateIn,
    ctx: StoreContext = Depends(require_roles("owner")),
    db: Session = Depends(get_db),
) -> StoreExpenseOut:
    now = _utcnow()
    exp = StoreExpenseORM(
        id=uuid4(),
        store_id=ctx.store_id,
        expense_date=body.expense_date,
        category=body.category,
        description=body.description.strip(),
        amount=body.amount,
        paid=body.paid,
        created_at=now,
        updated_at=now,
    )

    db.add(exp)
    db.commit()
    db.refresh(exp)
    logger.info("store expense created id=%s store=%s amount=%s", exp.id, ctx.store_id, exp.amount)
    return exp


@router.get("/store-expenses/export")
def export_store_expenses_csv(
    start: date = Query(..., description="YYYY-MM-DD"),
    end: date = Query(..., description="YYYY-MM-DD"),
    category: Optional[str] = Query(default=None, max_length=32),
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
):
    """CSV for the accountant (UTF-8 BOM so Excel opens it with accents intact)."""
    if end < start:
        raise HTTPException(status_code=400, detail="end must be >= start")

    rows = db.execute(
        select(StoreExpenseORM)
        .where(and_(*_conditions(ctx.store_id, start, end, category)))
        .order_by(StoreExpenseORM.expense_date.asc(), StoreExpenseORM.created_at.asc())
    ).scalars().all()

    out = io.StringIO()
    writer = csv.writer(out, delimiter=";", lineterminator="\n")
    writer.writerow(["Data", "Categoria", "Descricao", "Valor", "Pago"])
    for r in rows:
        writer.writerow([
            r.expense_date.strftime("%d/%m/%Y"),
            CATEGORY_LABELS.get(r.category, r.category or ""),
            (r.description or "").replace("\r", " ").replace("\n", " "),
            format_money(r.amount),
            "Sim" if r.paid else "Nao",
        ])

    data = ("\ufeff" + out.getvalue()).encode("utf-8")

    filename = f"despesas_{start.isoformat()}_{end.isoformat()}.csv"
    return Response(
        content=data,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/store-expenses/{expense_id}", response_model=StoreExpenseOut)
def get_store_expense(
    expense_id: UUID,
    ctx: StoreContext = Depends(get_store_context),
    db: Session = Depends(get_db),
) -> StoreExpenseOut:
    return _get_or_404(db, ctx.store_id, expense_id)


@router.delete("/store-expenses/{expense_id}", status_code=204)
def delete_store_expense(
    expense_id: UUID,
    ctx: StoreContext = Depends(require_roles("owner")),
    db: Session = Depends(get_db),
) -> Response:
    exp = _get_or_404(db, ctx.store_id, expense_id)
    db.delete(exp)
    db.commit()
    return Response(status_code=204)
