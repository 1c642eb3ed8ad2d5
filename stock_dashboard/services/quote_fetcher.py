from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Any, Callable

from stock_dashboard.schemas.dashboard import CycleResult
from stock_dashboard.schemas.quote import QuoteRow
from stock_dashboard.services.quote_classifier import resolve_rule

_STATUSES = ("ok", "rate-limited", "error", "no-data")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuoteFetcher:
    """Runs one refresh cycle: sequential per-symbol fetch + classification."""

    def __init__(self, *, client, now_fn: Callable[[], datetime] | None = None) -> None:
        self.client = client
        self.now_fn = now_fn or _utcnow

        self.cycles_completed = 0
        self.cycles_failed = 0
        self.symbols_requested = 0
        self.last_cycle_counts: dict[str, int] = {status: 0 for status in _STATUSES}
        self.last_cycle_error: str | None = None

    def _fetch_body(self, symbol: str) -> Any:
        try:
            return self.client.get_global_quote(symbol)
        except Exception as exc:
            print(f"[QUOTE][symbol_fetch_error] symbol={symbol} error={exc!r}", flush=True)
            return None

    def fetch_row(self, symbol: str) -> QuoteRow:
        self.symbols_requested += 1
        body = self._fetch_body(symbol)
        rule = resolve_rule(body)
        row = QuoteRow.from_outcome(symbol, rule.classify(body))
        if row.status != "ok":
            print(f"[QUOTE][symbol_classified] symbol={symbol} rule={rule.name} status={row.status}", flush=True)
        return row

    def lookup(self, symbol: str) -> QuoteRow:
        """Ad-hoc single quote; a missing API key raises instead of yielding an error row."""
        self.client.ensure_api_key()
        return self.fetch_row(symbol)

    def fetch(self, symbols: list[str]) -> CycleResult:
        started_at: datetime | None = None
        try:
            started_at = self.now_fn()
            print(f"[QUOTE][cycle_start] symbols={','.join(symbols)}", flush=True)
            self.client.ensure_api_key()
            rows: list[QuoteRow] = []
            for symbol in symbols:
                rows.append(self.fetch_row(symbol))
        except Exception as exc:
            message = str(exc) or "Unexpected error"
            self.cycles_failed += 1
            self.last_cycle_error = message
            print(f"[QUOTE][cycle_error] error={message}", flush=True)
            completed_at = self.now_fn()
            return CycleResult(
                symbols=tuple(symbols),
                error=message,
                started_at=started_at or completed_at,
                completed_at=completed_at,
            )

        counts = Counter(row.status for row in rows)
        self.cycles_completed += 1
        self.last_cycle_error = None
        self.last_cycle_counts = {status: counts.get(status, 0) for status in _STATUSES}
        print(
            "[QUOTE][cycle_done] "
            f"target_count={len(symbols)} ok={counts['ok']} rate_limited={counts['rate-limited']} "
            f"error={counts['error']} no_data={counts['no-data']}",
            flush=True,
        )
        return CycleResult(
            symbols=tuple(symbols),
            rows=tuple(rows),
            started_at=started_at,
            completed_at=self.now_fn(),
        )

    def metrics(self) -> dict[str, int | str | None]:
        return {
            "cycles_completed": self.cycles_completed,
            "cycles_failed": self.cycles_failed,
            "symbols_requested": self.symbols_requested,
            "last_cycle_ok": self.last_cycle_counts["ok"],
            "last_cycle_rate_limited": self.last_cycle_counts["rate-limited"],
            "last_cycle_error": self.last_cycle_counts["error"],
            "last_cycle_no_data": self.last_cycle_counts["no-data"],
            "last_cycle_failure": self.last_cycle_error,
        }
