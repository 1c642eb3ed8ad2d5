from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator

QuoteStatus = Literal["ok", "rate-limited", "error", "no-data"]


class QuoteOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: QuoteStatus
    price: float | None = None
    change_percent: float | None = None

    @model_validator(mode="after")
    def _numbers_only_when_ok(self):
        has_price = self.price is not None
        has_change = self.change_percent is not None
        if self.status == "ok":
            if not (has_price and has_change):
                raise ValueError("ok quote requires price and change_percent")
        elif has_price or has_change:
            raise ValueError(f"{self.status} quote must not carry price or change_percent")
        return self


class QuoteRow(QuoteOutcome):
    symbol: str

    @classmethod
    def from_outcome(cls, symbol: str, outcome: QuoteOutcome) -> "QuoteRow":
        return cls(
            symbol=symbol,
            status=outcome.status,
            price=outcome.price,
            change_percent=outcome.change_percent,
        )
