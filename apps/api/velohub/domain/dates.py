from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional


def parse_iso_date(value: Any) -> Optional[date]:
    """
    Lenient date parsing for stored sale/purchase dates.

    Accepts date / datetime objects, 'YYYY-MM-DD' and ISO timestamps
    ('2026-02-12T03:00:00.000Z', '2026-02-12 10:00'); the time part is
    dropped without timezone conversion. Anything else -> None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    head = text.split("T", 1)[0].split(" ", 1)[0]
    try:
        return date.fromisoformat(head)
    except ValueError:
        return None


def month_start(d: date) -> date:
    return d.replace(day=1)


def add_months(d: date, months: int) -> date:
    """First day of the month `months` away from d's month."""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_end(d: date) -> date:
    return date.fromordinal(add_months(d, 1).toordinal() - 1)
