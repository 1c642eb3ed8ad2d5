from __future__ import annotations

from typing import Any, Optional

import requests

from stock_dashboard.errors import QuoteProviderNotConfiguredError


class AlphaVantageClient:
    """Minimal Alpha Vantage GLOBAL_QUOTE client keyed by a static API key."""

    DEFAULT_BASE_URL = "https://www.alphavantage.co"

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        session: Optional[Any] = None,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
    ) -> None:
        self.api_key = api_key
        self.session = session or requests
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout

    def ensure_api_key(self) -> str:
        if not self.api_key:
            raise QuoteProviderNotConfiguredError("ALPHA_VANTAGE_API_KEY is not configured")
        return self.api_key

    def get_global_quote(self, symbol: str) -> Any:
        """Return the decoded JSON body for one symbol.

        Non-2xx responses raise ``requests.HTTPError`` and undecodable bodies
        raise ``ValueError``; callers treat both as transport failure.
        """
        response = self.session.get(
            f"{self.base_url}/query",
            params={
                "function": "GLOBAL_QUOTE",
                "symbol": symbol,
                "apikey": self.ensure_api_key(),
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()
