# velohub/domain/money.py
"""
BRL money helpers.

Amounts are Decimal quantized to cents. Every function here is total: partial
or malformed input (live typing in a form) degrades to 0 / "" instead of
raising.
"""
from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
CURRENCY_SYMBOL = "R$"

_NON_DIGITS = re.compile(r"\D")

# wider amounts are treated as garbage
MAX_DIGITS = 100_000


def to_money(value: Any, *, default: Decimal = ZERO) -> Decimal:
    """Best-effort Decimal coercion (None / garbage / NaN -> default)."""
    if value is None or isinstance(value, bool):
        return default
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError):
        return default
    if not d.is_finite() or d.adjusted() >= MAX_DIGITS:
        return default
    try:
        with localcontext() as ctx:
            # room for every integer digit of arbitrarily long input
            ctx.prec = max(ctx.prec, d.adjusted() + 3)
            return d.quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, OverflowError):
        return default


def format_money(amount: Any = None) -> str:
    """1999.5 -> 'R$ 1.999,50'; negatives render as '-R$ 1.500,00'."""
    d = to_money(amount)
    sign = "-" if d < 0 else ""
    s = f"{d.copy_abs():,.2f}"  # 1,999.50
    s = s.replace(",", "X").replace(".", ",").replace("X", ".")
    return f"{sign}{CURRENCY_SYMBOL} {s}"


def parse_money_input(text: Any) -> Decimal:
    """
    'R$ 1.999,50' -> Decimal('1999.50').

    Every non-digit is dropped and the last two digits are cents, so the
    parser is lossy (sign and separators are ignored) but never raises.
    """
    digits = _NON_DIGITS.sub("", str(text or ""))
    if not digits:
        return ZERO
    return to_money(_cents(digits))


def mask_money_input(raw: Any) -> str:
    """ATM-style mask: digits fill from the right ('15' -> 'R$ 0,15')."""
    digits = _NON_DIGITS.sub("", str(raw or ""))
    if not digits:
        return ""
    return format_money(_cents(digits))


def _cents(digits: str) -> Decimal:
    # built from text so no context rounding or int() digit limit applies
    digits = digits.zfill(3)
    return Decimal(f"{digits[:-2]}.{digits[-2:]}")


def format_percent(value: Any, *, places: int = 1) -> str:
    try:
        v = float(value)
    except (TypeError, ValueError):
        v = 0.0
    if v != v:  # NaN
        v = 0.0
    return f"{v:.{places}f}%"


def money_sum(values) -> Decimal:
    total = ZERO
    for v in values:
        total += to_money(v)
    return total
