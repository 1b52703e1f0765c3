from datetime import date
from decimal import Decimal

import pytest

BASE = "/api/v1"

VALID_CPF = "529.982.247-25"


def _create_vehicle(client, headers, **overrides):
    body = {
        "make": "Fiat",
        "model": "Uno",
        "year": 2018,
        "plate": "abc-1d23",
        "purchase_price": "30000",
        "expected_sale_price": "R$ 40.000,00",
    }
    body.update(overrides)
    r = client.post(f"{BASE}/vehicles", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def _add_expense(client, headers, vehicle_id, category, amount, **extra):
    r = client.post(
        f"{BASE}/vehicles/{vehicle_id}/expenses",
        json={"category": category, "amount": amount, "description": category, **extra},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


def test_requires_bearer_token(client):
    r = client.get(f"{BASE}/vehicles")
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"

    r = client.get(f"{BASE}/vehicles", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_create_and_list(client, owner_headers):
    v = _create_vehicle(client, owner_headers)
    assert v["status"] == "available"
    assert v["plate"] == "ABC1D23"
    assert Decimal(v["expected_sale_price"]) == Decimal("40000")
    assert v["expenses"] == []

    _create_vehicle(client, owner_headers, make="Honda", model="Civic", plate=None)

    r = client.get(f"{BASE}/vehicles", params={"q": "civ"}, headers=owner_headers)
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["meta"]["total"] == 1
    assert data["items"][0]["model"] == "Civic"

    r = client.get(f"{BASE}/vehicles", params={"status": "available"}, headers=owner_headers)
    assert r.json()["meta"]["total"] == 2


def test_other_store_cannot_see_vehicle(client, owner_headers, other_store_headers):
    v = _create_vehicle(client, owner_headers)

    assert client.get(f"{BASE}/vehicles/{v['id']}", headers=other_store_headers).status_code == 404
    assert client.delete(f"{BASE}/vehicles/{v['id']}", headers=other_store_headers).status_code == 404
    assert client.get(f"{BASE}/vehicles", headers=other_store_headers).json()["meta"]["total"] == 0


def test_update_and_delete(client, owner_headers):
    v = _create_vehicle(client, owner_headers)

    r = client.put(f"{BASE}/vehicles/{v['id']}", json={"km": 52000, "status": "reserved"}, headers=owner_headers)
    assert r.status_code == 200, r.text
    assert r.json()["km"] == 52000
    assert r.json()["status"] == "reserved"

    assert client.delete(f"{BASE}/vehicles/{v['id']}", headers=owner_headers).status_code == 204
    assert client.get(f"{BASE}/vehicles/{v['id']}", headers=owner_headers).status_code == 404


def test_expenses_and_projected_financials(client, owner_headers):
    v = _create_vehicle(client, owner_headers)
    _add_expense(client, owner_headers, v["id"], "maintenance", "500")
    e = _add_expense(client, owner_headers, v["id"], "commission", "1000", employee_name="Ana")
    assert e["employee_name"] == "Ana"

    r = client.get(f"{BASE}/vehicles/{v['id']}/financials", headers=owner_headers)
    assert r.status_code == 200, r.text
    f = r.json()
    assert Decimal(f["operating_expenses"]) == Decimal("500")
    assert Decimal(f["commission"]) == Decimal("1000")
    assert Decimal(f["total_cost"]) == Decimal("31500")
    assert Decimal(f["projected_profit"]) == Decimal("8500")
    assert Decimal(f["realized_profit"]) == Decimal("0")

    r = client.delete(f"{BASE}/vehicles/{v['id']}/expenses/{e['id']}", headers=owner_headers)
    assert r.status_code == 204
    f = client.get(f"{BASE}/vehicles/{v['id']}/financials", headers=owner_headers).json()
    assert Decimal(f["total_cost"]) == Decimal("30500")


def test_negative_expense_rejected(client, owner_headers):
    v = _create_vehicle(client, owner_headers)
    r = client.post(
        f"{BASE}/vehicles/{v['id']}/expenses",
        json={"category": "tires", "amount": "-10"},
        headers=owner_headers,
    )
    assert r.status_code == 422


def test_sell_end_to_end(client, owner_headers):
    v = _create_vehicle(client, owner_headers)
    _add_expense(client, owner_headers, v["id"], "maintenance", "500")
    _add_expense(client, owner_headers, v["id"], "commission", "1000")

    r = client.post(
        f"{BASE}/vehicles/{v['id']}/sell",
        json={
            "price": "35000",
            "payment_method": "Dinheiro",
            "sold_date": "2026-02-12",
            "commission": "1000",
            "buyer": {"name": "Joao Silva", "cpf": VALID_CPF},
        },
        headers=owner_headers,
    )
    assert r.status_code == 200, r.text
    out = r.json()

    assert out["vehicle"]["status"] == "sold"
    assert out["vehicle"]["sold_date"] == "2026-02-12"
    assert out["vehicle"]["buyer_name"] == "Joao Silva"
    # commission already in the ledger: no extra expense
    assert len(out["vehicle"]["expenses"]) == 2
    assert out["trade_in_vehicle_id"] is None

    f = out["financials"]
    assert Decimal(f["total_cost"]) == Decimal("31500")
    assert Decimal(f["realized_profit"]) == Decimal("3500")
    assert f["roi"] == pytest.approx(11.11, abs=0.01)

    r = client.post(f"{BASE}/vehicles/{v['id']}/sell", json={"price": "1"}, headers=owner_headers)
    assert r.status_code == 409


def test_sell_adds_commission_top_up(client, owner_headers):
    v = _create_vehicle(client, owner_headers)
    _add_expense(client, owner_headers, v["id"], "commission", "400")

    r = client.post(
        f"{BASE}/vehicles/{v['id']}/sell",
        json={"price": "35000", "commission": "1000", "commission_to": "Bruno"},
        headers=owner_headers,
    )
    assert r.status_code == 200, r.text
    out = r.json()

    commissions = [e for e in out["vehicle"]["expenses"] if e["category"] == "commission"]
    assert sorted(Decimal(e["amount"]) for e in commissions) == [Decimal("400"), Decimal("600")]
    assert Decimal(out["vehicle"]["sale_commission"]) == Decimal("0")
    assert out["vehicle"]["sold_date"] == date.today().isoformat()
    assert Decimal(out["financials"]["commission"]) == Decimal("1000")
    assert Decimal(out["financials"]["realized_profit"]) == Decimal("4000")


def test_sell_with_trade_in_creates_intake(client, owner_headers):
    v = _create_vehicle(client, owner_headers, purchase_price="25000")

    r = client.post(
        f"{BASE}/vehicles/{v['id']}/sell",
        json={
            "price": "20000",
            "payment_method": "Troca + Volta",
            "trade_in": {"make": "VW", "model": "Gol", "value": "10000", "plate": "xyz9876", "year": 2014},
        },
        headers=owner_headers,
    )
    assert r.status_code == 200, r.text
    out = r.json()

    assert Decimal(out["vehicle"]["sold_price"]) == Decimal("30000")
    f = out["financials"]
    assert Decimal(f["gross_revenue"]) == Decimal("30000")
    assert Decimal(f["trade_in_value"]) == Decimal("10000")
    assert Decimal(f["cash_received"]) == Decimal("20000")
    assert Decimal(f["realized_profit"]) == Decimal("5000")

    intake = client.get(f"{BASE}/vehicles/{out['trade_in_vehicle_id']}", headers=owner_headers).json()
    assert intake["status"] == "available"
    assert intake["version"] == "Entrada via Troca"
    assert intake["plate"] == "XYZ9876"
    assert Decimal(intake["purchase_price"]) == Decimal("10000")
    assert Decimal(intake["expected_sale_price"]) == Decimal("12000")


@pytest.mark.parametrize(
    "body",
    [
        {"price": "0"},
        {"price": "1000", "buyer": {"name": "Ana", "cpf": "111.111.111-11"}},
        {"price": "1000", "payment_method": "Troca + Volta"},
    ],
)
def test_sell_validation_errors(client, owner_headers, body):
    v = _create_vehicle(client, owner_headers)
    r = client.post(f"{BASE}/vehicles/{v['id']}/sell", json=body, headers=owner_headers)
    assert r.status_code == 400, r.text

    assert client.get(f"{BASE}/vehicles/{v['id']}", headers=owner_headers).json()["status"] == "available"


def test_sold_vehicle_is_frozen(client, owner_headers):
    v = _create_vehicle(client, owner_headers)
    client.post(f"{BASE}/vehicles/{v['id']}/sell", json={"price": "35000"}, headers=owner_headers)

    r = client.put(f"{BASE}/vehicles/{v['id']}", json={"purchase_price": "1"}, headers=owner_headers)
    assert r.status_code == 409

    r = client.put(f"{BASE}/vehicles/{v['id']}", json={"notes": "IPVA pago"}, headers=owner_headers)
    assert r.status_code == 200
    assert r.json()["notes"] == "IPVA pago"


def test_undo_sale_owner_only(client, owner_headers, employee_headers):
    v = _create_vehicle(client, owner_headers)
    client.post(
        f"{BASE}/vehicles/{v['id']}/sell",
        json={"price": "35000", "commission": "500"},
        headers=employee_headers,
    )

    r = client.post(f"{BASE}/vehicles/{v['id']}/undo-sale", headers=employee_headers)
    assert r.status_code == 403

    r = client.post(f"{BASE}/vehicles/{v['id']}/undo-sale", headers=owner_headers)
    assert r.status_code == 200, r.text
    back = r.json()
    assert back["status"] == "available"
    assert back["sold_price"] is None
    assert back["buyer_name"] is None
    # the commission expense written at checkout stays in the ledger
    assert [e["category"] for e in back["expenses"]] == ["commission"]

    r = client.post(f"{BASE}/vehicles/{v['id']}/undo-sale", headers=owner_headers)
    assert r.status_code == 409


def test_reserve_stores_details_until_status_changes(client, owner_headers):
    v = _create_vehicle(client, owner_headers)

    r = client.post(
        f"{BASE}/vehicles/{v['id']}/reserve",
        json={
            "reserved_by": " Maria Souza ",
            "reserved_by_phone": "11987654321",
            "signal_value": "R$ 1.000,00",
            "reservation_date": "2026-03-02",
        },
        headers=owner_headers,
    )
    assert r.status_code == 200, r.text
    out = r.json()
    assert out["status"] == "reserved"
    assert out["reservation_details"] == {
        "reserved_by": "Maria Souza",
        "reserved_by_phone": "(11) 98765-4321",
        "signal_value": "1000.00",
        "reservation_date": "2026-03-02",
    }

    # editing other fields keeps the reservation
    r = client.put(f"{BASE}/vehicles/{v['id']}", json={"km": 1000}, headers=owner_headers)
    assert r.json()["reservation_details"]["reserved_by"] == "Maria Souza"

    r = client.put(f"{BASE}/vehicles/{v['id']}", json={"status": "available"}, headers=owner_headers)
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "available"
    assert r.json()["reservation_details"] is None


def test_sale_clears_reservation(client, owner_headers):
    v = _create_vehicle(client, owner_headers)
    client.post(
        f"{BASE}/vehicles/{v['id']}/reserve",
        json={"reserved_by": "Maria", "signal_value": "500"},
        headers=owner_headers,
    )

    r = client.post(f"{BASE}/vehicles/{v['id']}/sell", json={"price": "35000"}, headers=owner_headers)
    assert r.status_code == 200, r.text
    assert r.json()["vehicle"]["reservation_details"] is None

    r = client.post(
        f"{BASE}/vehicles/{v['id']}/reserve",
        json={"reserved_by": "Outro"},
        headers=owner_headers,
    )
    assert r.status_code == 409


def test_reserve_requires_a_name(client, owner_headers):
    v = _create_vehicle(client, owner_headers)
    r = client.post(f"{BASE}/vehicles/{v['id']}/reserve", json={"reserved_by": ""}, headers=owner_headers)
    assert r.status_code == 422


def test_oversized_masked_price_is_rejected(client, owner_headers):
    r = client.post(
        f"{BASE}/vehicles",
        json={"make": "Fiat", "model": "Uno", "purchase_price": "R$ " + "9" * 30},
        headers=owner_headers,
    )
    assert r.status_code == 422
