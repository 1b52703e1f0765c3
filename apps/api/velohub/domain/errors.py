from __future__ import annotations


class SaleValidationError(ValueError):
    """Checkout input rejected (bad price, missing trade-in data, invalid CPF)."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
