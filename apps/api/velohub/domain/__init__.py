"""
Sale settlement & profitability core.

Pure, synchronous computation over already-materialized vehicles. Nothing in
this package touches the database, the network or the request context.
"""
from __future__ import annotations

from velohub.domain.ledger import effective_commission, total_by_category, total_expenses  # noqa: F401
from velohub.domain.money import format_money, mask_money_input, parse_money_input  # noqa: F401
from velohub.domain.identifiers import is_valid_cpf  # noqa: F401
from velohub.domain.profit import projected_profit, realized_profit, roi  # noqa: F401
from velohub.domain.rollups import bucket_by_month, filter_sales  # noqa: F401
