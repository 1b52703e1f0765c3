import uuid
from datetime import date
from decimal import Decimal

from velohub.adapters.vehicle_mapper import (
    apply_sale,
    clear_sale,
    expense_from_record,
    intake_to_orm,
    trade_in_from_record,
    vehicle_from_orm,
    vehicle_from_record,
)
from velohub.domain.profit import build_sale, realized_profit, total_cost
from velohub.domain.types import Buyer, ExpenseCategory, PaymentMethod, TradeIn, VehicleStatus
from velohub.models.vehicle import VehicleORM
from velohub.models.vehicle_expense import VehicleExpenseORM

D = Decimal


def test_vehicle_from_record_normalizes_wire_values():
    v = vehicle_from_record(
        {
            "id": "8a0c",
            "make": " Fiat ",
            "model": "Uno",
            "status": "SOLD",
            "purchase_price": "30000",
            "expected_sale_price": None,
            "sold_price": "35000.00",
            "sold_date": "2026-02-12T03:00:00.000Z",
            "payment_method": "Dinheiro",
            "buyer_name": "Joao",
            "buyer_cpf": "52998224725",
            "expenses": [
                {"amount": "500", "category": "maintenance"},
                {"amount": "1000", "category": "salary", "employee_name": "Ana"},
                "garbage",
            ],
        }
    )

    assert v.make == "Fiat"
    assert v.status is VehicleStatus.SOLD
    assert v.expected_sale_price == D("0")
    assert v.sold_date == date(2026, 2, 12)
    assert v.sale.buyer.name == "Joao"
    assert len(v.expenses) == 2
    assert v.expenses[1].category is ExpenseCategory.COMMISSION
    assert v.expenses[1].payee == "Ana"
    assert realized_profit(v) == D("3500")


def test_vehicle_from_record_defaults():
    v = vehicle_from_record({"status": "teleported", "purchase_price": "abc", "year": "x", "sale_commission": "250"})

    assert v.status is VehicleStatus.AVAILABLE
    assert v.purchase_price == D("0")
    assert v.year is None
    assert v.sale is None
    assert v.draft_commission == D("250")
    assert v.sold_price == D("0")


def test_expense_and_trade_in_records():
    e = expense_from_record({"amount": None, "category": "document", "date": "2026-01-05"})
    assert e.amount == D("0")
    assert e.category is ExpenseCategory.DOCUMENTATION
    assert e.expense_date == date(2026, 1, 5)

    assert trade_in_from_record(None) is None
    assert trade_in_from_record("Fiat Uno") is None
    t = trade_in_from_record({"make": "Fiat", "model": "Uno", "value": "10000", "year": "2015"})
    assert t.value == D("10000")
    assert t.year == 2015


def _row(**kwargs) -> VehicleORM:
    base = dict(
        id=uuid.uuid4(),
        store_id=uuid.uuid4(),
        make="Fiat",
        model="Argo",
        status="available",
        purchase_price=D("25000"),
        expected_sale_price=D("32000"),
    )
    base.update(kwargs)
    return VehicleORM(**base)


def test_apply_sale_then_read_back():
    row = _row()
    row.expenses.append(VehicleExpenseORM(category="maintenance", description="Revisao", amount=D("800")))

    settlement = build_sale(
        vehicle_from_orm(row),
        price=D("20000"),
        payment_method=PaymentMethod.TRADE_IN.value,
        sold_date=date(2026, 3, 2),
        trade_in=TradeIn(make="VW", model="Gol", value=D("10000"), plate="ABC1234"),
        commission=D("700"),
        commission_to="Bruno",
        buyer=Buyer(name="Maria", cpf="111.444.777-35"),
    )
    added = apply_sale(row, settlement)

    assert row.status == "sold"
    assert row.sold_price == D("30000")
    assert row.sale_commission == D("0")
    assert row.buyer_cpf == "111.444.777-35"
    assert row.trade_in_info["value"] == "10000.00"
    assert len(added) == 1 and added[0].employee_name == "Bruno"
    assert len(row.expenses) == 2

    v = vehicle_from_orm(row)
    assert total_cost(v) == D("26500")
    assert realized_profit(v) == D("3500")
    assert v.sale.trade_in.make == "VW"


def test_clear_sale_returns_vehicle_to_stock():
    row = _row(
        status="sold",
        sold_price=D("30000"),
        sold_date=date(2026, 3, 2),
        payment_method="Dinheiro",
        buyer_name="Maria",
    )
    clear_sale(row)

    assert row.status == "available"
    assert row.sold_price is None
    assert row.buyer_name is None
    assert vehicle_from_orm(row).sale is None


def test_intake_to_orm():
    settlement = build_sale(
        vehicle_from_orm(_row()),
        price=D("5000"),
        payment_method="Troca + Volta",
        sold_date=date(2026, 3, 2),
        trade_in=TradeIn(make="VW", model="Gol", value=D("10000")),
    )
    store_id = uuid.uuid4()
    intake = intake_to_orm(settlement.trade_in_intake, store_id)

    assert intake.store_id == store_id
    assert intake.status == "available"
    assert intake.version == "Entrada via Troca"
    assert intake.purchase_price == D("10000")
    assert intake.expected_sale_price == D("12000.00")
    assert intake.purchase_date == date(2026, 3, 2)


def test_payment_method_labels_fold_accents():
    assert PaymentMethod.parse("Pix / Transferência") is PaymentMethod.PIX
    assert PaymentMethod.parse("PIX / TRANSFERÊNCIA") is PaymentMethod.PIX
    assert PaymentMethod.parse("Cartão") is PaymentMethod.CARD
    assert PaymentMethod.parse("Cartão de Crédito") is PaymentMethod.CARD
    assert PaymentMethod.parse("Cartão de Débito") is PaymentMethod.CARD
    assert PaymentMethod.parse("Consórcio") is PaymentMethod.OTHER
    assert PaymentMethod.parse(None) is PaymentMethod.OTHER
