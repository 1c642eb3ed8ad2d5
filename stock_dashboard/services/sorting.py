from __future__ import annotations

from typing import Iterable

from stock_dashboard.schemas.dashboard import SortDir, SortKey
from stock_dashboard.schemas.quote import QuoteRow


def sort_rows(rows: Iterable[QuoteRow], key: SortKey, direction: SortDir = "asc") -> list[QuoteRow]:
    """Return a new list ordered by ``key``; the input is left untouched.

    Rows without a value for ``key`` (no price on a failed quote) go last in
    both directions. Equal keys keep their input order.
    """
    present: list[QuoteRow] = []
    missing: list[QuoteRow] = []
    for row in rows:
        (missing if getattr(row, key) is None else present).append(row)

    ordered = sorted(present, key=lambda row: getattr(row, key), reverse=direction == "desc")
    return ordered + missing
