from __future__ import annotations

import math
from typing import Any, Callable, NamedTuple

from stock_dashboard.schemas.quote import QuoteOutcome

QUOTE_FIELD = "Global Quote"
PRICE_FIELD = "05. price"
CHANGE_PERCENT_FIELD = "10. change percent"
THROTTLE_FIELDS = ("Note", "Information")
ERROR_FIELD = "Error Message"


class ClassificationRule(NamedTuple):
    name: str
    matches: Callable[[Any], bool]
    classify: Callable[[Any], QuoteOutcome]


def _to_float(value: Any) -> float | None:
    try:
        if value is None or value == "":
            return None
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def _to_percent(value: Any, default: float = 0.0) -> float:
    if isinstance(value, str):
        value = value.strip().removesuffix("%")
    parsed = _to_float(value)
    return default if parsed is None else parsed


def _quote_payload(body: dict) -> dict | None:
    quote = body.get(QUOTE_FIELD)
    return quote if isinstance(quote, dict) else None


def _quote_price(body: dict) -> float | None:
    quote = _quote_payload(body)
    if quote is None:
        return None
    return _to_float(quote.get(PRICE_FIELD))


def _is_transport_failure(body: Any) -> bool:
    return not isinstance(body, dict)


def _is_throttled(body: dict) -> bool:
    return any(isinstance(body.get(field), str) for field in THROTTLE_FIELDS)


def _is_provider_error(body: dict) -> bool:
    return bool(body.get(ERROR_FIELD))


def _is_empty_body(body: dict) -> bool:
    # Alpha Vantage sometimes answers quota exhaustion with a bare {}.
    return len(body) == 0


def _is_missing_price(body: dict) -> bool:
    return _quote_price(body) is None


def _ok_outcome(body: dict) -> QuoteOutcome:
    quote = _quote_payload(body) or {}
    return QuoteOutcome(
        status="ok",
        price=_quote_price(body),
        change_percent=_to_percent(quote.get(CHANGE_PERCENT_FIELD, "0")),
    )


def _status(status: str) -> Callable[[Any], QuoteOutcome]:
    outcome = QuoteOutcome(status=status)
    return lambda _body: outcome


# Evaluated top to bottom, first match wins. Response shapes overlap, so the
# order is part of the contract.
CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("transport-failure", _is_transport_failure, _status("error")),
    ClassificationRule("throttled", _is_throttled, _status("rate-limited")),
    ClassificationRule("provider-error", _is_provider_error, _status("error")),
    ClassificationRule("empty-body", _is_empty_body, _status("rate-limited")),
    ClassificationRule("missing-price", _is_missing_price, _status("no-data")),
    ClassificationRule("quote", lambda _body: True, _ok_outcome),
)


def resolve_rule(body: Any) -> ClassificationRule:
    """Return the first rule matching a GLOBAL_QUOTE response body.

    ``body`` is the decoded JSON, or ``None`` when the request failed or the
    body could not be decoded.
    """
    for rule in CLASSIFICATION_RULES:
        if rule.matches(body):
            return rule
    raise AssertionError("catch-all quote rule did not match")


def classify_quote(body: Any) -> QuoteOutcome:
    return resolve_rule(body).classify(body)
