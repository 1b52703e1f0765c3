# velohub/domain/ledger.py
"""
Per-vehicle expense aggregation.

The ledger itself is never mutated here. effective_commission() is the one
place every profit figure reads commission from.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from velohub.domain.money import ZERO, to_money
from velohub.domain.types import Expense, ExpenseCategory, Vehicle

COMMISSION_EPSILON = Decimal("0.01")


def total_expenses(expenses: Iterable[Expense]) -> Decimal:
    """Sum of every expense amount, category-agnostic."""
    total = ZERO
    for e in expenses:
        total += to_money(e.amount)
    return total


def total_by_category(expenses: Iterable[Expense], category: ExpenseCategory | str) -> Decimal:
    cat = ExpenseCategory.parse(category)
    total = ZERO
    for e in expenses:
        if ExpenseCategory.parse(e.category) is cat:
            total += to_money(e.amount)
    return total


def operating_expenses(expenses: Iterable[Expense]) -> Decimal:
    """Everything except commission."""
    total = ZERO
    for e in expenses:
        if ExpenseCategory.parse(e.category) is not ExpenseCategory.COMMISSION:
            total += to_money(e.amount)
    return total


def effective_commission(vehicle: Vehicle) -> Decimal:
    """
    Explicit recorded commission if positive, otherwise the sum of
    commission-category expenses. Never both.
    """
    recorded = to_money(vehicle.recorded_commission)
    if recorded > 0:
        return recorded
    return total_by_category(vehicle.expenses, ExpenseCategory.COMMISSION)


def commission_payee(vehicle: Vehicle) -> str:
    """Recorded payee, else the payee of the latest commission expense."""
    if vehicle.sale is not None and vehicle.sale.commission_to:
        return vehicle.sale.commission_to

    last: Optional[Expense] = None
    for e in vehicle.expenses:
        if ExpenseCategory.parse(e.category) is ExpenseCategory.COMMISSION:
            last = e
    return (last.payee or "") if last is not None else ""


def commission_top_up(vehicle: Vehicle, commission: Decimal) -> Decimal:
    """
    How much of `commission` is not yet covered by commission expenses.
    Differences of a cent or less are treated as already covered.
    """
    recorded = total_by_category(vehicle.expenses, ExpenseCategory.COMMISSION)
    diff = to_money(commission) - recorded
    return diff if diff > COMMISSION_EPSILON else ZERO
