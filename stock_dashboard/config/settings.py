import os
from functools import lru_cache

from pydantic import BaseModel

from stock_dashboard.services.symbols import parse_symbols

DEFAULT_SYMBOLS = ["AAPL"]


class Settings(BaseModel):
    ALPHA_VANTAGE_API_KEY: str
    ALPHA_VANTAGE_BASE_URL: str = "https://www.alphavantage.co"
    ALPHA_VANTAGE_TIMEOUT_SEC: float = 10.0
    DASHBOARD_DEFAULT_SYMBOLS: list[str]

    @classmethod
    def from_env(cls) -> "Settings":
        default_symbols = parse_symbols(os.getenv("DASHBOARD_DEFAULT_SYMBOLS", ",".join(DEFAULT_SYMBOLS)))
        if not default_symbols:
            default_symbols = list(DEFAULT_SYMBOLS)

        return cls.model_validate(
            {
                "ALPHA_VANTAGE_API_KEY": os.getenv("ALPHA_VANTAGE_API_KEY"),
                "ALPHA_VANTAGE_BASE_URL": os.getenv("ALPHA_VANTAGE_BASE_URL", "https://www.alphavantage.co"),
                "ALPHA_VANTAGE_TIMEOUT_SEC": os.getenv("ALPHA_VANTAGE_TIMEOUT_SEC", "10"),
                "DASHBOARD_DEFAULT_SYMBOLS": default_symbols,
            }
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
