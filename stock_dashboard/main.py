from __future__ import annotations

import threading
from contextlib import asynccontextmanager

from fastapi import FastAPI

from stock_dashboard.api.routes import router
from stock_dashboard.config.settings import DEFAULT_SYMBOLS, get_settings
from stock_dashboard.errors import RefreshInProgressError
from stock_dashboard.integrations.alpha_vantage import AlphaVantageClient
from stock_dashboard.services.dashboard import DashboardViewModel
from stock_dashboard.services.quote_fetcher import QuoteFetcher


def _bind_settings(app: FastAPI) -> None:
    settings = app.state.get_settings()
    client = app.state.dashboard.fetcher.client
    client.api_key = settings.ALPHA_VANTAGE_API_KEY
    client.base_url = settings.ALPHA_VANTAGE_BASE_URL.rstrip("/")
    client.timeout = settings.ALPHA_VANTAGE_TIMEOUT_SEC
    app.state.dashboard.symbols_input = ", ".join(settings.DASHBOARD_DEFAULT_SYMBOLS)


def _initial_refresh(app: FastAPI) -> None:
    try:
        app.state.dashboard.refresh()
    except RefreshInProgressError:
        print("[APP][initial_refresh_skip] reason=refresh_in_progress", flush=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        _bind_settings(app)
    except Exception as exc:
        # keep app startup resilient without ALPHA_VANTAGE_* env; refreshes report the missing key
        print(f"[APP][settings_unavailable] error={exc!r}", flush=True)

    worker = threading.Thread(
        target=_initial_refresh,
        args=(app,),
        daemon=True,
        name='dashboard-initial-refresh',
    )
    app.state.initial_refresh_thread = worker
    print("[APP][initial_refresh_start] thread=dashboard-initial-refresh", flush=True)
    worker.start()

    try:
        yield
    finally:
        worker.join(timeout=1.0)
        print("[APP][shutdown]", flush=True)


app = FastAPI(title="Stock Quote Dashboard", version="0.1.0", lifespan=lifespan)
app.include_router(router, prefix="/v1")

# NOTE: lazy-loaded so app import does not require env during tests.
app.state.get_settings = get_settings
app.state.dashboard = DashboardViewModel(
    fetcher=QuoteFetcher(client=AlphaVantageClient()),
    symbols_input=", ".join(DEFAULT_SYMBOLS),
)
