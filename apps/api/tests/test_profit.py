from datetime import date
from decimal import Decimal

import pytest

from velohub.domain.errors import SaleValidationError
from velohub.domain.profit import (
    build_sale,
    cash_received,
    projected_profit,
    realized_profit,
    roi,
    sale_breakdown,
    total_cost,
    trade_in_value,
)
from velohub.domain.types import (
    Buyer,
    Expense,
    ExpenseCategory,
    SaleFacts,
    TradeIn,
    Vehicle,
    VehicleStatus,
)

D = Decimal


def _exp(amount, category):
    return Expense(amount=D(amount), category=ExpenseCategory(category))


def _sold(purchase, sold_price, expenses=(), **sale_kwargs):
    return Vehicle(
        purchase_price=D(purchase),
        status=VehicleStatus.SOLD,
        expenses=tuple(expenses),
        sale=SaleFacts(sold_price=D(sold_price), **sale_kwargs),
    )


# ============================================================
# realized profit
# ============================================================
def test_end_to_end_sale():
    v = _sold("30000", "35000", [_exp("500", "maintenance"), _exp("1000", "commission")])

    assert total_cost(v) == D("31500")
    assert realized_profit(v) == D("3500")
    assert roi(realized_profit(v), total_cost(v)) == pytest.approx(11.11, abs=0.01)


def test_trade_in_sale_counts_trade_in_as_revenue():
    v = _sold(
        "25000",
        "30000",
        payment_method="Troca + Volta",
        trade_in=TradeIn(make="Fiat", model="Uno", value=D("10000")),
    )

    assert realized_profit(v) == D("5000")
    assert trade_in_value(v) == D("10000")
    assert cash_received(v) == D("20000")


def test_trade_in_ignored_for_other_payment_methods():
    v = _sold("25000", "30000", payment_method="Dinheiro", trade_in=TradeIn(make="Fiat", model="Uno", value=D("10000")))
    assert trade_in_value(v) == D("0")
    assert cash_received(v) == D("30000")


@pytest.mark.parametrize("sold_price", ["0", "-100"])
def test_void_sale_reports_zero(sold_price):
    v = _sold("30000", sold_price, [_exp("500", "maintenance"), _exp("1000", "commission")])
    assert realized_profit(v) == D("0")


def test_unsold_vehicle_has_no_realized_profit():
    assert realized_profit(Vehicle(purchase_price=D("30000"), expected_sale_price=D("40000"))) == D("0")


@pytest.mark.parametrize("sold_price", ["1", "15000", "29999.99"])
def test_sale_below_purchase_never_profitable(sold_price):
    v = _sold("30000", sold_price, [_exp("-5000", "maintenance")])
    assert realized_profit(v) <= 0


def test_loss_above_purchase_is_not_clamped():
    v = _sold("30000", "31000", [_exp("2000", "bodywork")])
    assert realized_profit(v) == D("-1000")


def test_trade_in_heavy_sale_skips_the_clamp():
    # cash (10000) below purchase, gross (10000 + 25000) above it
    v = _sold(
        "30000",
        "35000",
        payment_method="Troca + Volta",
        trade_in=TradeIn(make="VW", model="Gol", value=D("25000")),
    )
    assert cash_received(v) == D("10000")
    assert realized_profit(v) == D("5000")


def test_commission_is_counted_once():
    expenses = [_exp("300", "commission"), _exp("300", "commission"), _exp("200", "commission")]
    v = _sold("30000", "35000", expenses, commission=D("500"))
    assert total_cost(v) == D("30500")
    assert realized_profit(v) == D("4500")


def test_vehicle_without_expenses():
    v = _sold("0", "10000")
    assert total_cost(v) == D("0")
    assert realized_profit(v) == D("10000")
    assert roi(realized_profit(v), total_cost(v)) == 0.0


# ============================================================
# projected profit / roi
# ============================================================
def test_projected_profit_includes_draft_commission():
    v = Vehicle(
        purchase_price=D("30000"),
        expected_sale_price=D("40000"),
        draft_commission=D("1000"),
        expenses=(_exp("500", "maintenance"),),
    )
    assert projected_profit(v) == D("8500")


@pytest.mark.parametrize("profit", [D("0"), D("3500"), D("-200"), None, "abc"])
def test_roi_zero_investment(profit):
    assert roi(profit, 0) == 0.0


def test_roi_percent():
    assert roi(D("250"), D("1000")) == pytest.approx(25.0)
    assert roi(D("-100"), D("1000")) == pytest.approx(-10.0)


def test_sale_breakdown():
    v = _sold(
        "25000",
        "30000",
        [_exp("400", "tires"), _exp("600", "commission")],
        payment_method="Troca + Volta",
        trade_in=TradeIn(make="Fiat", model="Uno", value=D("10000")),
    )
    b = sale_breakdown(v)
    assert b.gross_revenue == D("30000")
    assert b.trade_in_value == D("10000")
    assert b.cash_received == D("20000")
    assert b.operating_expenses == D("400")
    assert b.commission == D("600")
    assert b.total_cost == D("26000")
    assert b.profit == D("4000")
    assert b.roi == pytest.approx(15.38, abs=0.01)


# ============================================================
# checkout
# ============================================================
BUYER = Buyer(name="Joao Silva", cpf="529.982.247-25", phone="(11) 98765-4321")


def test_build_sale_plain():
    v = Vehicle(purchase_price=D("30000"), expenses=(_exp("500", "maintenance"),))
    s = build_sale(v, price=D("35000"), payment_method="Pix / Transferência", sold_date=date(2026, 2, 12), buyer=BUYER)

    assert s.sale.sold_price == D("35000")
    assert s.sale.payment_method == "Pix / Transferencia"
    assert s.sale.sold_date == date(2026, 2, 12)
    assert s.sale.commission == D("0")
    assert s.sale.warranty.time == "90 dias"
    assert s.new_expenses == ()
    assert s.trade_in_intake is None


def test_build_sale_records_commission_as_expense_top_up():
    v = Vehicle(purchase_price=D("30000"), expenses=(_exp("400", "commission"),))
    s = build_sale(
        v,
        price=D("35000"),
        payment_method="Dinheiro",
        sold_date=date(2026, 2, 12),
        commission=D("1000"),
        commission_to="Carlos",
    )

    assert len(s.new_expenses) == 1
    e = s.new_expenses[0]
    assert e.amount == D("600")
    assert e.category is ExpenseCategory.COMMISSION
    assert e.payee == "Carlos"
    assert e.expense_date == date(2026, 2, 12)
    assert s.sale.commission == D("0")
    assert s.sale.commission_to == "Carlos"

    # committed vehicle counts the full 1000 once
    sold = Vehicle(
        purchase_price=v.purchase_price,
        status=VehicleStatus.SOLD,
        expenses=v.expenses + s.new_expenses,
        sale=s.sale,
    )
    assert total_cost(sold) == D("31000")
    assert realized_profit(sold) == D("4000")


def test_build_sale_with_trade_in():
    v = Vehicle(purchase_price=D("25000"))
    s = build_sale(
        v,
        price=D("20000"),
        payment_method="Troca + Volta",
        sold_date=date(2026, 3, 1),
        trade_in=TradeIn(make=" Fiat ", model="Uno", value=D("10000"), plate="abc-1234", year=2015),
        trade_in_markup=D("1.2"),
    )

    assert s.sale.sold_price == D("30000")
    assert s.sale.trade_in.plate == "ABC1234"
    intake = s.trade_in_intake
    assert intake.make == "Fiat"
    assert intake.purchase_price == D("10000")
    assert intake.expected_sale_price == D("12000.00")
    assert intake.purchase_date == date(2026, 3, 1)
    assert intake.status is VehicleStatus.AVAILABLE


def test_build_sale_zero_cash_allowed_for_trade_in():
    s = build_sale(
        Vehicle(purchase_price=D("9000")),
        price=D("0"),
        payment_method="Troca + Volta",
        trade_in=TradeIn(make="VW", model="Gol", value=D("10000")),
    )
    assert s.sale.sold_price == D("10000")


def test_build_sale_keeps_unknown_payment_label():
    s = build_sale(Vehicle(), price=D("100"), payment_method="Boleto")
    assert s.sale.payment_method == "Boleto"


@pytest.mark.parametrize(
    "kwargs,field",
    [
        ({"price": D("-1"), "payment_method": "Dinheiro"}, "price"),
        ({"price": D("0"), "payment_method": "Dinheiro"}, "price"),
        ({"price": D("100"), "payment_method": "Dinheiro", "buyer": Buyer(name=" ", cpf="52998224725")}, "buyer.name"),
        ({"price": D("100"), "payment_method": "Dinheiro", "buyer": Buyer(name="Ana", cpf="11111111111")}, "buyer.cpf"),
        ({"price": D("100"), "payment_method": "Troca + Volta"}, "trade_in"),
        (
            {
                "price": D("100"),
                "payment_method": "Troca + Volta",
                "trade_in": TradeIn(make="Fiat", model="Uno", value=D("0")),
            },
            "trade_in.value",
        ),
    ],
)
def test_build_sale_validation(kwargs, field):
    with pytest.raises(SaleValidationError) as exc:
        build_sale(Vehicle(purchase_price=D("1000")), **kwargs)
    assert exc.value.field == field
