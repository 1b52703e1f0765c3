# velohub/domain/types.py
from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

ZERO = Decimal("0.00")


# ============================================================
# Enumerations
# ============================================================
class ExpenseCategory(str, Enum):
    MAINTENANCE = "maintenance"
    BODYWORK = "bodywork"
    TIRES = "tires"
    DOCUMENTATION = "documentation"
    MARKETING = "marketing"
    COMMISSION = "commission"
    OTHER = "other"

    @classmethod
    def parse(cls, value: object) -> "ExpenseCategory":
        """Wire value -> category. Legacy names are mapped, anything else is OTHER."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        key = _LEGACY_EXPENSE_CATEGORIES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return cls.OTHER


_LEGACY_EXPENSE_CATEGORIES = {
    "document": "documentation",
    "salary": "commission",
}


class VehicleStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    PREPARATION = "preparation"
    SOLD = "sold"

    @classmethod
    def parse(cls, value: object) -> "VehicleStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.AVAILABLE

    @property
    def in_stock(self) -> bool:
        return self is not VehicleStatus.SOLD


class PaymentMethod(str, Enum):
    PIX = "Pix / Transferencia"
    CASH = "Dinheiro"
    FINANCING = "Financiamento"
    CARD = "Cartao"
    TRADE_IN = "Troca + Volta"
    OTHER = "other"

    @classmethod
    def parse(cls, value: object) -> "PaymentMethod":
        if isinstance(value, cls):
            return value
        label = _strip_accents(str(value or "").strip()).lower()
        for member in cls:
            if member.value.lower() == label:
                return member
        # "Cartao de Credito", "Cartao de Debito"
        if label.startswith("cartao"):
            return cls.CARD
        return cls.OTHER

    @property
    def includes_trade_in(self) -> bool:
        return self is PaymentMethod.TRADE_IN


def _strip_accents(text: str) -> str:
    # older clients send accented labels ("Pix / Transferência", "Cartão de Crédito")
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


# ============================================================
# Records
# ============================================================
@dataclass(frozen=True)
class Expense:
    amount: Decimal
    category: ExpenseCategory = ExpenseCategory.OTHER
    description: str = ""
    expense_date: Optional[date] = None
    payee: Optional[str] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class TradeIn:
    make: str
    model: str
    value: Decimal
    plate: str = ""
    year: Optional[int] = None


@dataclass(frozen=True)
class Buyer:
    name: str
    cpf: str = ""
    phone: str = ""


@dataclass(frozen=True)
class Warranty:
    time: str = "90 dias"
    km: str = "3000 km"


@dataclass(frozen=True)
class SaleFacts:
    """Written once when the vehicle is sold. sold_price is gross (trade-in included)."""

    sold_price: Decimal
    sold_date: Optional[date] = None
    payment_method: str = ""
    buyer: Optional[Buyer] = None
    trade_in: Optional[TradeIn] = None
    commission: Decimal = ZERO
    commission_to: str = ""
    warranty: Optional[Warranty] = None

    @property
    def method(self) -> PaymentMethod:
        return PaymentMethod.parse(self.payment_method)


@dataclass(frozen=True)
class Vehicle:
    """Normalized vehicle shape consumed by the calculators."""

    purchase_price: Decimal = ZERO
    expected_sale_price: Decimal = ZERO
    status: VehicleStatus = VehicleStatus.AVAILABLE
    expenses: tuple[Expense, ...] = ()
    sale: Optional[SaleFacts] = None

    # commission recorded on the vehicle outside of a committed sale (live form value)
    draft_commission: Decimal = ZERO

    make: str = ""
    model: str = ""
    version: str = ""
    year: Optional[int] = None
    plate: str = ""
    color: str = ""
    reference_price: Decimal = ZERO
    purchase_date: Optional[date] = None

    id: Optional[str] = None
    store_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_sold(self) -> bool:
        return self.status is VehicleStatus.SOLD

    @property
    def sold_price(self) -> Decimal:
        return self.sale.sold_price if self.sale is not None else ZERO

    @property
    def sold_date(self) -> Optional[date]:
        return self.sale.sold_date if self.sale is not None else None

    @property
    def payment_method(self) -> str:
        return self.sale.payment_method if self.sale is not None else ""

    @property
    def recorded_commission(self) -> Decimal:
        if self.sale is not None:
            return self.sale.commission
        return self.draft_commission


@dataclass(frozen=True)
class StoreExpense:
    """Store-level operating expense (rent, payroll, ...), not tied to a vehicle."""

    amount: Decimal
    expense_date: Optional[date] = None
    category: str = "other"
    description: str = ""
    paid: bool = True


@dataclass(frozen=True)
class TradeInIntake:
    """Vehicle entering the stock as part of a trade-in sale."""

    make: str
    model: str
    purchase_price: Decimal
    expected_sale_price: Decimal
    purchase_date: Optional[date] = None
    plate: str = ""
    year: Optional[int] = None
    version: str = "Entrada via Troca"
    status: VehicleStatus = VehicleStatus.AVAILABLE


@dataclass(frozen=True)
class SaleSettlement:
    """Result of a checkout: what to write onto the sold vehicle."""

    sale: SaleFacts
    new_expenses: tuple[Expense, ...] = field(default_factory=tuple)
    trade_in_intake: Optional[TradeInIntake] = None
