from fastapi import APIRouter, HTTPException, Request

from stock_dashboard.errors import QuoteProviderNotConfiguredError, RefreshInProgressError
from stock_dashboard.schemas.dashboard import DashboardView, RefreshRequest, RefreshResponse, SortRequest
from stock_dashboard.schemas.quote import QuoteRow
from stock_dashboard.services.symbols import parse_symbols

router = APIRouter()


@router.get('/dashboard', response_model=DashboardView)
def get_dashboard(request: Request):
    return request.app.state.dashboard.snapshot()


@router.post('/dashboard/refresh', response_model=RefreshResponse)
def refresh_dashboard(request: Request, req: RefreshRequest | None = None):
    dashboard = request.app.state.dashboard
    try:
        started = dashboard.refresh(req.symbols if req is not None else None)
    except RefreshInProgressError as exc:
        raise HTTPException(status_code=409, detail='REFRESH_IN_PROGRESS') from exc
    return RefreshResponse(started=started, dashboard=dashboard.snapshot())


@router.post('/dashboard/sort', response_model=DashboardView)
def sort_dashboard(req: SortRequest, request: Request):
    dashboard = request.app.state.dashboard
    dashboard.sort(req.key)
    return dashboard.snapshot()


@router.get('/quotes/{symbol}', response_model=QuoteRow)
def get_quote(symbol: str, request: Request):
    symbols = parse_symbols(symbol)
    if len(symbols) != 1:
        raise HTTPException(status_code=400, detail='INVALID_SYMBOL')
    try:
        return request.app.state.dashboard.fetcher.lookup(symbols[0])
    except QuoteProviderNotConfiguredError as exc:
        raise HTTPException(status_code=503, detail='QUOTE_PROVIDER_NOT_CONFIGURED') from exc


@router.get('/metrics/quote')
def quote_metrics(request: Request):
    return request.app.state.dashboard.fetcher.metrics()
