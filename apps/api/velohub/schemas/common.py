from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field

from velohub.domain.money import parse_money_input


def _coerce_money(value: Any) -> Any:
    """Accept plain numbers and masked BRL strings ('R$ 1.500,00')."""
    if isinstance(value, str):
        text = value.strip()
        try:
            return Decimal(text)
        except InvalidOperation:
            return parse_money_input(text)
    return value


MoneyIn = Annotated[Decimal, BeforeValidator(_coerce_money), Field(ge=0, max_digits=14, decimal_places=2)]


class PageMeta(BaseModel):
    limit: int = Field(ge=1, le=200)
    offset: int = Field(ge=0)
    total: int = Field(ge=0)