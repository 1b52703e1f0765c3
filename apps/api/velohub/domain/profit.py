# velohub/domain/profit.py
"""
Sale settlement & profitability.

Every revenue surface (dashboard, sales analytics, vehicle detail, quick-sale
checkout) goes through realized_profit() so the numbers agree across screens.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from velohub.domain.errors import SaleValidationError
from velohub.domain.identifiers import is_valid_cpf, mask_plate
from velohub.domain.ledger import commission_top_up, effective_commission, operating_expenses
from velohub.domain.money import CENT, ZERO, to_money
from velohub.domain.types import (
    Buyer,
    Expense,
    ExpenseCategory,
    PaymentMethod,
    SaleFacts,
    SaleSettlement,
    TradeIn,
    TradeInIntake,
    Vehicle,
    Warranty,
)

DEFAULT_TRADE_IN_MARKUP = Decimal("1.2")
COMMISSION_EXPENSE_DESCRIPTION = "Comissao de Venda"


# ============================================================
# Core formulas
# ============================================================
def total_cost(vehicle: Vehicle) -> Decimal:
    """purchase + operating expenses + effective commission (counted once)."""
    return (
        to_money(vehicle.purchase_price)
        + operating_expenses(vehicle.expenses)
        + effective_commission(vehicle)
    )


def projected_profit(vehicle: Vehicle) -> Decimal:
    """Pre-sale valuation against the expected sale price."""
    return to_money(vehicle.expected_sale_price) - total_cost(vehicle)


def realized_profit(vehicle: Vehicle) -> Decimal:
    gross_revenue = to_money(vehicle.sold_price)

    # void / test sale
    if gross_revenue <= 0:
        return ZERO

    raw_profit = gross_revenue - total_cost(vehicle)

    # a sale below acquisition cost never shows as profitable
    if gross_revenue < to_money(vehicle.purchase_price):
        return min(raw_profit, ZERO)

    return raw_profit


def roi(profit, invested) -> float:
    """Return on investment in percent; 0 when nothing was invested."""
    invested_d = to_money(invested)
    if invested_d == 0:
        return 0.0
    return float(to_money(profit) / invested_d * 100)


def trade_in_value(vehicle: Vehicle) -> Decimal:
    sale = vehicle.sale
    if sale is None or sale.trade_in is None or not sale.method.includes_trade_in:
        return ZERO
    return to_money(sale.trade_in.value)


def cash_received(vehicle: Vehicle) -> Decimal:
    """Gross revenue minus the trade-in vehicle's value. Display only."""
    return to_money(vehicle.sold_price) - trade_in_value(vehicle)


@dataclass(frozen=True)
class SaleBreakdown:
    gross_revenue: Decimal
    trade_in_value: Decimal
    cash_received: Decimal
    purchase_price: Decimal
    operating_expenses: Decimal
    commission: Decimal
    total_cost: Decimal
    profit: Decimal
    roi: float


def sale_breakdown(vehicle: Vehicle) -> SaleBreakdown:
    cost = total_cost(vehicle)
    profit = realized_profit(vehicle)
    return SaleBreakdown(
        gross_revenue=to_money(vehicle.sold_price),
        trade_in_value=trade_in_value(vehicle),
        cash_received=cash_received(vehicle),
        purchase_price=to_money(vehicle.purchase_price),
        operating_expenses=operating_expenses(vehicle.expenses),
        commission=effective_commission(vehicle),
        total_cost=cost,
        profit=profit,
        roi=roi(profit, cost),
    )


# ============================================================
# Checkout
# ============================================================
def build_sale(
    vehicle: Vehicle,
    *,
    price,
    payment_method: str,
    sold_date: Optional[date] = None,
    trade_in: Optional[TradeIn] = None,
    commission=ZERO,
    commission_to: str = "",
    buyer: Optional[Buyer] = None,
    warranty: Optional[Warranty] = None,
    trade_in_markup: Decimal = DEFAULT_TRADE_IN_MARKUP,
) -> SaleSettlement:
    """
    Turn checkout input into the facts written onto the sold vehicle.

    For "Troca + Volta" sales `price` is the cash part and the trade-in value
    is added to obtain the gross sold price. Commission is recorded as a
    commission expense for the part not already in the ledger, and the
    vehicle-level commission field is zeroed so it is never counted twice.
    """
    method = PaymentMethod.parse(payment_method)
    entered = to_money(price)

    if entered < 0:
        raise SaleValidationError("Sale price cannot be negative.", field="price")
    if entered == 0 and not method.includes_trade_in:
        raise SaleValidationError("The sale needs a value.", field="price")

    if buyer is not None:
        if not buyer.name.strip():
            raise SaleValidationError("Buyer name is required.", field="buyer.name")
        if not is_valid_cpf(buyer.cpf):
            raise SaleValidationError("Invalid buyer CPF.", field="buyer.cpf")

    snapshot: Optional[TradeIn] = None
    gross = entered
    if method.includes_trade_in:
        if trade_in is None or not trade_in.make.strip() or not trade_in.model.strip():
            raise SaleValidationError("Trade-in make and model are required.", field="trade_in")
        value = to_money(trade_in.value)
        if value <= 0:
            raise SaleValidationError("Trade-in value is required.", field="trade_in.value")
        snapshot = TradeIn(
            make=trade_in.make.strip(),
            model=trade_in.model.strip(),
            value=value,
            plate=mask_plate(trade_in.plate),
            year=trade_in.year,
        )
        gross = entered + value

    new_expenses: tuple[Expense, ...] = ()
    top_up = commission_top_up(vehicle, to_money(commission))
    if top_up > 0:
        new_expenses = (
            Expense(
                amount=top_up,
                category=ExpenseCategory.COMMISSION,
                description=COMMISSION_EXPENSE_DESCRIPTION,
                expense_date=sold_date,
                payee=commission_to or None,
            ),
        )

    sale = SaleFacts(
        sold_price=gross,
        sold_date=sold_date,
        payment_method=method.value if method is not PaymentMethod.OTHER else str(payment_method or "").strip(),
        buyer=buyer,
        trade_in=snapshot,
        commission=ZERO,
        commission_to=commission_to,
        warranty=warranty or Warranty(),
    )

    intake: Optional[TradeInIntake] = None
    if snapshot is not None:
        intake = TradeInIntake(
            make=snapshot.make,
            model=snapshot.model,
            plate=snapshot.plate,
            year=snapshot.year,
            purchase_price=snapshot.value,
            expected_sale_price=(snapshot.value * Decimal(str(trade_in_markup))).quantize(CENT),
            purchase_date=sold_date,
        )

    return SaleSettlement(sale=sale, new_expenses=new_expenses, trade_in_intake=intake)
