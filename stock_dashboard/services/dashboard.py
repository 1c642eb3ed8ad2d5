from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime

from stock_dashboard.errors import RefreshInProgressError
from stock_dashboard.schemas.dashboard import CycleResult, DashboardView, SortKey, SortState
from stock_dashboard.schemas.quote import QuoteRow
from stock_dashboard.services.quote_fetcher import QuoteFetcher
from stock_dashboard.services.sorting import sort_rows
from stock_dashboard.services.symbols import parse_symbols


class DashboardViewModel:
    """Mutable view state fed by refresh cycles and sort selections."""

    def __init__(self, *, fetcher: QuoteFetcher, symbols_input: str = "AAPL") -> None:
        self.fetcher = fetcher
        self._lock = threading.Lock()
        self._cycle_guard = threading.Lock()

        self.symbols_input = symbols_input
        self.rows: tuple[QuoteRow, ...] = ()
        self.loading = False
        self.error: str | None = None
        self.last_updated: datetime | None = None
        self.sort_state = SortState()

    @contextmanager
    def _loading(self, symbols_input: str):
        if not self._cycle_guard.acquire(blocking=False):
            raise RefreshInProgressError("REFRESH_IN_PROGRESS")
        try:
            with self._lock:
                self.symbols_input = symbols_input
                self.loading = True
                self.error = None
            yield
        finally:
            with self._lock:
                self.loading = False
            self._cycle_guard.release()

    def _apply(self, result: CycleResult) -> None:
        with self._lock:
            if result.ok:
                self.rows = result.rows
                self.last_updated = result.completed_at
            else:
                self.error = result.error

    def refresh(self, symbols_input: str | None = None) -> bool:
        """Run one refresh cycle. Returns False when there is nothing to fetch.

        A new ``symbols_input`` is stored only once the cycle actually starts.
        """
        if symbols_input is None:
            with self._lock:
                symbols_input = self.symbols_input
        symbols = parse_symbols(symbols_input)
        if not symbols:
            return False

        with self._loading(symbols_input):
            self._apply(self.fetcher.fetch(symbols))
        return True

    def sort(self, key: SortKey) -> SortState:
        with self._lock:
            self.sort_state = self.sort_state.toggle(key)
            return self.sort_state

    def snapshot(self) -> DashboardView:
        with self._lock:
            return DashboardView(
                symbols_input=self.symbols_input,
                rows=sort_rows(self.rows, self.sort_state.key, self.sort_state.direction),
                loading=self.loading,
                error=self.error,
                last_updated=self.last_updated,
                sort_key=self.sort_state.key,
                sort_dir=self.sort_state.direction,
            )
