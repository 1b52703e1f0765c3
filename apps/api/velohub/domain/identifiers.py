# velohub/domain/identifiers.py
"""Brazilian identifier validation and incremental input masks."""
from __future__ import annotations

import re

_NON_DIGITS = re.compile(r"\D")
_NON_ALNUM = re.compile(r"[^A-Z0-9]")

_OLD_PLATE = re.compile(r"^[A-Z]{3}\d{4}$")
_MERCOSUL_PLATE = re.compile(r"^[A-Z]{3}\d[A-Z]\d{2}$")


def only_digits(value: object) -> str:
    return _NON_DIGITS.sub("", str(value or ""))


# ============================================================
# CPF
# ============================================================
def _cpf_check_digit(digits: list[int], weight_start: int) -> int:
    total = sum(d * w for d, w in zip(digits, range(weight_start, 1, -1)))
    return (total * 10) % 11 % 10


def is_valid_cpf(value: object) -> bool:
    """
    Validate an 11-digit CPF (masked or not) using its two check digits.
    Sequences of a single repeated digit are rejected.
    """
    cpf = only_digits(value)
    if len(cpf) != 11 or len(set(cpf)) == 1:
        return False

    digits = [int(c) for c in cpf]
    if _cpf_check_digit(digits[:9], 10) != digits[9]:
        return False
    return _cpf_check_digit(digits[:10], 11) == digits[10]


def mask_cpf(value: object) -> str:
    """'12345678909' -> '123.456.789-09' (partial input is masked as far as it goes)."""
    d = only_digits(value)[:11]
    if len(d) <= 3:
        return d
    if len(d) <= 6:
        return f"{d[:3]}.{d[3:]}"
    if len(d) <= 9:
        return f"{d[:3]}.{d[3:6]}.{d[6:]}"
    return f"{d[:3]}.{d[3:6]}.{d[6:9]}-{d[9:]}"


def mask_cnpj(value: object) -> str:
    d = only_digits(value)[:14]
    parts = [d[:2], d[2:5], d[5:8], d[8:12], d[12:]]
    out = parts[0]
    if parts[1]:
        out += "." + parts[1]
    if parts[2]:
        out += "." + parts[2]
    if parts[3]:
        out += "/" + parts[3]
    if parts[4]:
        out += "-" + parts[4]
    return out


# ============================================================
# Contact / address
# ============================================================
def mask_phone(value: object) -> str:
    """'11987654321' -> '(11) 98765-4321'."""
    d = only_digits(value)[:11]
    if len(d) <= 2:
        return d
    area, rest = d[:2], d[2:]
    if len(rest) <= 5:
        return f"({area}) {rest}"
    return f"({area}) {rest[:5]}-{rest[5:]}"


def mask_cep(value: object) -> str:
    """'01310100' -> '01310-100'."""
    d = only_digits(value)[:8]
    if len(d) <= 5:
        return d
    return f"{d[:5]}-{d[5:]}"


# ============================================================
# Vehicle documents
# ============================================================
def mask_plate(value: object) -> str:
    return _NON_ALNUM.sub("", str(value or "").upper())[:7]


def is_valid_plate(value: object) -> bool:
    """Old format (ABC1234) or Mercosul (ABC1D23)."""
    plate = _NON_ALNUM.sub("", str(value or "").upper())
    if not plate:
        return False
    return bool(_OLD_PLATE.match(plate) or _MERCOSUL_PLATE.match(plate))


def mask_renavam(value: object) -> str:
    # 9 digits (legacy, zero padded) or 11 digits
    return only_digits(value)[:11]


def mask_chassis(value: object) -> str:
    return _NON_ALNUM.sub("", str(value or "").upper())[:17]
