from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

from stock_dashboard.schemas.quote import QuoteRow

SortKey = Literal["symbol", "price", "change_percent"]
SortDir = Literal["asc", "desc"]


class SortState(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: SortKey = "symbol"
    direction: SortDir = "asc"

    def toggle(self, key: SortKey) -> "SortState":
        if key == self.key:
            return SortState(key=key, direction="desc" if self.direction == "asc" else "asc")
        return SortState(key=key, direction="asc")


class CycleResult(BaseModel):
    """Outcome of one refresh cycle, applied to the view model in one step."""

    model_config = ConfigDict(frozen=True)

    symbols: tuple[str, ...]
    rows: tuple[QuoteRow, ...] = ()
    error: str | None = None
    started_at: datetime
    completed_at: datetime

    @property
    def ok(self) -> bool:
        return self.error is None


class DashboardView(BaseModel):
    symbols_input: str
    rows: list[QuoteRow]
    loading: bool
    error: str | None = None
    last_updated: datetime | None = None
    sort_key: SortKey
    sort_dir: SortDir


class RefreshRequest(BaseModel):
    symbols: str | None = None


class RefreshResponse(BaseModel):
    started: bool
    dashboard: DashboardView


class SortRequest(BaseModel):
    key: SortKey
