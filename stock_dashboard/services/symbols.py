from __future__ import annotations


def parse_symbols(text: str | None) -> list[str]:
    """Turn "aapl, msft ,, googl" into ["AAPL", "MSFT", "GOOGL"].

    Order is preserved and duplicates are kept: each entry becomes one row.
    """
    if not text:
        return []
    return [s.strip().upper() for s in text.split(",") if s.strip()]
