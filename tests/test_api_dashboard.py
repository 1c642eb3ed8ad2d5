import unittest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from stock_dashboard.main import app
from stock_dashboard.services.dashboard import DashboardViewModel
from stock_dashboard.services.quote_fetcher import QuoteFetcher


class StubQuoteClient:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def ensure_api_key(self) -> str:
        return "demo-key"

    def get_global_quote(self, symbol: str):
        self.calls.append(symbol)
        if symbol == "MSFT":
            return {"Note": "5 calls per minute"}
        if symbol == "DOWN":
            raise ConnectionError("connection refused")
        price = {"AAPL": "190.10", "GOOGL": "150.25"}.get(symbol)
        if price is None:
            return {"Global Quote": {}}
        return {"Global Quote": {"05. price": price, "10. change percent": "-0.75%"}}


class DashboardApiTest(unittest.TestCase):
    def setUp(self):
        self.original_dashboard = app.state.dashboard
        self.quote_client = StubQuoteClient()
        app.state.dashboard = DashboardViewModel(
            fetcher=QuoteFetcher(client=self.quote_client),
            symbols_input="AAPL",
        )
        self.client = TestClient(app)

    def tearDown(self):
        app.state.dashboard = self.original_dashboard

    def test_dashboard_starts_empty(self):
        res = self.client.get('/v1/dashboard')
        self.assertEqual(res.status_code, 200)

        body = res.json()
        self.assertEqual(body['symbols_input'], 'AAPL')
        self.assertEqual(body['rows'], [])
        self.assertFalse(body['loading'])
        self.assertIsNone(body['error'])
        self.assertIsNone(body['last_updated'])
        self.assertEqual((body['sort_key'], body['sort_dir']), ('symbol', 'asc'))

    def test_refresh_with_symbols_returns_classified_rows(self):
        res = self.client.post('/v1/dashboard/refresh', json={'symbols': 'googl, msft, down, aapl, zzzz'})
        self.assertEqual(res.status_code, 200)

        body = res.json()
        self.assertTrue(body['started'])
        dashboard = body['dashboard']
        self.assertIsNotNone(dashboard['last_updated'])
        self.assertEqual(
            [(r['symbol'], r['status']) for r in dashboard['rows']],
            [('AAPL', 'ok'), ('DOWN', 'error'), ('GOOGL', 'ok'), ('MSFT', 'rate-limited'), ('ZZZZ', 'no-data')],
        )
        aapl = dashboard['rows'][0]
        self.assertEqual(aapl['price'], 190.1)
        self.assertEqual(aapl['change_percent'], -0.75)
        self.assertIsNone(dashboard['rows'][1]['price'])
        self.assertEqual(self.quote_client.calls, ['GOOGL', 'MSFT', 'DOWN', 'AAPL', 'ZZZZ'])

    def test_refresh_without_body_uses_stored_symbols(self):
        res = self.client.post('/v1/dashboard/refresh')
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.json()['started'])
        self.assertEqual(self.quote_client.calls, ['AAPL'])

    def test_refresh_with_blank_symbols_is_a_no_op(self):
        res = self.client.post('/v1/dashboard/refresh', json={'symbols': ' , '})
        self.assertEqual(res.status_code, 200)
        self.assertFalse(res.json()['started'])
        self.assertEqual(self.quote_client.calls, [])
        self.assertEqual(res.json()['dashboard']['symbols_input'], 'AAPL')

    def test_refresh_while_loading_returns_409(self):
        guard = app.state.dashboard._cycle_guard
        guard.acquire()
        try:
            res = self.client.post('/v1/dashboard/refresh', json={'symbols': 'tsla'})
        finally:
            guard.release()

        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.json()['detail'], 'REFRESH_IN_PROGRESS')
        self.assertEqual(self.client.get('/v1/dashboard').json()['symbols_input'], 'AAPL')

    def test_sort_toggles_and_orders_rows(self):
        self.client.post('/v1/dashboard/refresh', json={'symbols': 'aapl, msft, googl'})

        res = self.client.post('/v1/dashboard/sort', json={'key': 'price'})
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual((body['sort_key'], body['sort_dir']), ('price', 'asc'))
        self.assertEqual([r['symbol'] for r in body['rows']], ['GOOGL', 'AAPL', 'MSFT'])

        body = self.client.post('/v1/dashboard/sort', json={'key': 'price'}).json()
        self.assertEqual((body['sort_key'], body['sort_dir']), ('price', 'desc'))
        self.assertEqual([r['symbol'] for r in body['rows']], ['AAPL', 'GOOGL', 'MSFT'])

    def test_sort_rejects_unknown_key(self):
        res = self.client.post('/v1/dashboard/sort', json={'key': 'volume'})
        self.assertEqual(res.status_code, 422)

    def test_single_quote_lookup_does_not_touch_dashboard(self):
        res = self.client.get('/v1/quotes/googl')
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()['symbol'], 'GOOGL')
        self.assertEqual(res.json()['status'], 'ok')
        self.assertEqual(self.client.get('/v1/dashboard').json()['rows'], [])

    def test_single_quote_lookup_rejects_lists(self):
        res = self.client.get('/v1/quotes/aapl,msft')
        self.assertEqual(res.status_code, 400)

    def test_single_quote_lookup_without_api_key_returns_503(self):
        from stock_dashboard.integrations.alpha_vantage import AlphaVantageClient

        session = MagicMock()
        app.state.dashboard = DashboardViewModel(
            fetcher=QuoteFetcher(client=AlphaVantageClient(session=session)),
            symbols_input="AAPL",
        )

        res = self.client.get('/v1/quotes/aapl')

        self.assertEqual(res.status_code, 503)
        self.assertEqual(res.json()['detail'], 'QUOTE_PROVIDER_NOT_CONFIGURED')
        session.get.assert_not_called()
        self.assertEqual(self.client.get('/v1/metrics/quote').json()['symbols_requested'], 0)

    def test_single_quote_lookup_is_counted_in_metrics(self):
        self.client.get('/v1/quotes/aapl')
        self.client.get('/v1/quotes/msft')

        payload = self.client.get('/v1/metrics/quote').json()
        self.assertEqual(payload['symbols_requested'], 2)
        self.assertEqual(payload['cycles_completed'], 0)

    def test_missing_api_key_surfaces_as_top_level_error(self):
        from stock_dashboard.integrations.alpha_vantage import AlphaVantageClient

        app.state.dashboard = DashboardViewModel(
            fetcher=QuoteFetcher(client=AlphaVantageClient()),
            symbols_input="AAPL",
        )

        body = self.client.post('/v1/dashboard/refresh').json()['dashboard']

        self.assertEqual(body['error'], 'ALPHA_VANTAGE_API_KEY is not configured')
        self.assertEqual(body['rows'], [])
        self.assertIsNone(body['last_updated'])
        self.assertFalse(body['loading'])

    def test_quote_metrics_reflect_last_cycle(self):
        self.client.post('/v1/dashboard/refresh', json={'symbols': 'aapl, msft, down'})

        res = self.client.get('/v1/metrics/quote')
        self.assertEqual(res.status_code, 200)
        payload = res.json()
        self.assertEqual(payload['cycles_completed'], 1)
        self.assertEqual(payload['cycles_failed'], 0)
        self.assertEqual(payload['last_cycle_ok'], 1)
        self.assertEqual(payload['last_cycle_rate_limited'], 1)
        self.assertEqual(payload['last_cycle_error'], 1)
        self.assertIsNone(payload['last_cycle_failure'])


if __name__ == '__main__':
    unittest.main()
