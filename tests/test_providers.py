"""Tests for the quote providers.

**Feature: market-tracker**
"""

import asyncio
import time

import httpx
import pytest

from markettracker.errors import RateLimited, UpstreamError, ValidationError
from markettracker.providers import DemoProvider, FinnhubProvider, history_window
from markettracker.providers.demo import DEMO_QUOTES
from markettracker.security import RateLimiter

from conftest import FakeClock


QUOTE_PAYLOAD = {"c": 5225.18, "d": 12.65, "dp": 0.24, "h": 5230.15, "l": 5210.25, "o": 5215.33, "pc": 5212.53}

CANDLE_PAYLOAD = {
    "s": "ok",
    "t": [1714521600, 1714608000],
    "o": [100.0, 101.0],
    "h": [102.0, 103.0],
    "l": [99.0, 100.5],
    "c": [101.0, 102.5],
    "v": [1000, 1500],
}


def run_finnhub(handler, call, limits=None):
    """Run ``call(provider)`` against a mocked transport.

    Returns:
        (result or raised exception, list of requests sent)
    """
    requests = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    async def _run():
        transport = httpx.MockTransport(recording_handler)
        async with httpx.AsyncClient(transport=transport) as client:
            provider = FinnhubProvider(
                api_key="secret-token",
                rate_limiter=RateLimiter(limits=limits, clock=FakeClock()),
                client=client,
            )
            try:
                return await call(provider)
            except Exception as e:
                return e

    return asyncio.run(_run()), requests


def ok(payload):
    return lambda request: httpx.Response(200, json=payload)


class TestFinnhubQuotes:
    """Quote requests."""

    def test_get_quote(self):
        result, requests = run_finnhub(ok(QUOTE_PAYLOAD), lambda p: p.get_quote(" ^gspc "))

        assert result.c == 5225.18
        assert result.current == 5225.18
        assert result.change == 12.65
        assert result.change_percent == 0.24
        assert len(requests) == 1
        assert requests[0].url.path == "/api/v1/quote"
        assert requests[0].url.params["symbol"] == "^GSPC"

    def test_token_sent_in_header_only(self):
        _, requests = run_finnhub(ok(QUOTE_PAYLOAD), lambda p: p.get_quote("AAPL"))

        assert requests[0].headers["X-Finnhub-Token"] == "secret-token"
        assert "secret-token" not in str(requests[0].url)

    def test_null_deltas(self):
        payload = {"c": 0, "d": None, "dp": None, "h": 0, "l": 0, "o": 0, "pc": 0}
        result, _ = run_finnhub(ok(payload), lambda p: p.get_quote("UNKNOWN"))
        assert result.d == 0.0
        assert result.dp == 0.0

    @pytest.mark.parametrize("symbol", ["", "<script>", "AAPL; DROP", "BINANCE:BTC", None])
    def test_invalid_symbol_never_hits_network(self, symbol):
        result, requests = run_finnhub(ok(QUOTE_PAYLOAD), lambda p: p.get_quote(symbol))

        assert isinstance(result, ValidationError)
        assert result.field == "symbol"
        assert requests == []

    def test_rate_limited_never_hits_network(self):
        async def call(provider):
            await provider.get_quote("AAPL")
            await provider.get_quote("MSFT")
            return await provider.get_quote("IBM")

        result, requests = run_finnhub(ok(QUOTE_PAYLOAD), call, limits={"quotes": 2, "candles": 1})

        assert isinstance(result, RateLimited)
        assert result.category == "quotes"
        assert len(requests) == 2

    def test_invalid_input_does_not_consume_quota(self):
        async def call(provider):
            with pytest.raises(ValidationError):
                await provider.get_quote("<bad>")
            return await provider.get_quote("AAPL")

        result, requests = run_finnhub(ok(QUOTE_PAYLOAD), call, limits={"quotes": 1, "candles": 1})
        assert result.c == 5225.18
        assert len(requests) == 1

    @pytest.mark.parametrize("status", [401, 403, 429, 500, 503])
    def test_non_success_status(self, status):
        result, _ = run_finnhub(
            lambda request: httpx.Response(status, json={"error": "nope"}),
            lambda p: p.get_quote("AAPL"),
        )
        assert isinstance(result, UpstreamError)
        assert result.status == status

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result, _ = run_finnhub(handler, lambda p: p.get_quote("AAPL"))
        assert isinstance(result, UpstreamError)
        assert result.status is None

    def test_malformed_body(self):
        result, _ = run_finnhub(
            lambda request: httpx.Response(200, text="<html>"),
            lambda p: p.get_quote("AAPL"),
        )
        assert isinstance(result, UpstreamError)

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            FinnhubProvider(api_key="", rate_limiter=RateLimiter())


class TestFinnhubCandles:
    """Candle requests."""

    def _window(self):
        now = int(time.time())
        return now - 86400 * 30, now

    def test_get_candles(self):
        from_ts, to_ts = self._window()
        result, requests = run_finnhub(
            ok(CANDLE_PAYLOAD), lambda p: p.get_candles("aapl", "D", from_ts, to_ts)
        )

        assert result.symbol == "AAPL"
        assert result.closes == [101.0, 102.5]
        assert result.candles[1].volume == 1500
        params = requests[0].url.params
        assert requests[0].url.path == "/api/v1/stock/candle"
        assert params["resolution"] == "D"
        assert params["from"] == str(from_ts)
        assert params["to"] == str(to_ts)

    @pytest.mark.parametrize("payload", [
        {"s": "no_data"},
        {"s": "ok"},
        {"s": "ok", "t": [1], "o": [1], "h": [1], "l": [1]},
        [],
    ])
    def test_no_data_is_empty_series(self, payload):
        from_ts, to_ts = self._window()
        result, _ = run_finnhub(ok(payload), lambda p: p.get_candles("AAPL", "D", from_ts, to_ts))
        assert result.is_empty

    def test_missing_volume(self):
        payload = {k: v for k, v in CANDLE_PAYLOAD.items() if k != "v"}
        from_ts, to_ts = self._window()
        result, _ = run_finnhub(ok(payload), lambda p: p.get_candles("AAPL", "D", from_ts, to_ts))
        assert [c.volume for c in result.candles] == [0.0, 0.0]

    @pytest.mark.parametrize("field,values", [
        ("t", [1714521600, None]),
        ("c", [101.0, None]),
        ("o", [100.0, "abc"]),
        ("h", [102.0, -1.0]),
    ])
    def test_malformed_rows_are_upstream_errors(self, field, values):
        payload = dict(CANDLE_PAYLOAD, **{field: values})
        from_ts, to_ts = self._window()

        result, requests = run_finnhub(ok(payload), lambda p: p.get_candles("AAPL", "D", from_ts, to_ts))

        assert isinstance(result, UpstreamError)
        assert result.status == 200
        assert len(requests) == 1

    @pytest.mark.parametrize("resolution,from_ts,to_ts,field", [
        ("10", 1609459200, 1609545600, "resolution"),
        ("d", 1609459200, 1609545600, "resolution"),
        ("D", 0, 1609545600, "from"),
        ("D", 1609459200, -5, "to"),
        ("D", 1609459200, int(time.time()) * 1000, "to"),
        ("D", "1609459200", 1609545600, "from"),
        ("D", 1609545600, 1609459200, "range"),
    ])
    def test_invalid_input_never_hits_network(self, resolution, from_ts, to_ts, field):
        result, requests = run_finnhub(
            ok(CANDLE_PAYLOAD), lambda p: p.get_candles("AAPL", resolution, from_ts, to_ts)
        )
        assert isinstance(result, ValidationError)
        assert result.field == field
        assert requests == []

    def test_candles_use_own_quota(self):
        from_ts, to_ts = self._window()

        async def call(provider):
            await provider.get_quote("AAPL")
            await provider.get_candles("AAPL", "D", from_ts, to_ts)
            return await provider.get_candles("AAPL", "D", from_ts, to_ts)

        def handler(request):
            if request.url.path.endswith("/quote"):
                return httpx.Response(200, json=QUOTE_PAYLOAD)
            return httpx.Response(200, json=CANDLE_PAYLOAD)

        result, requests = run_finnhub(handler, call, limits={"quotes": 1, "candles": 1})
        assert isinstance(result, RateLimited)
        assert result.category == "candles"
        assert len(requests) == 2


class TestFinnhubNewsAndConstituents:
    """News and index constituents."""

    def test_news(self):
        payload = [
            {"id": 1, "headline": "Markets rally", "source": "Reuters", "url": "https://x", "datetime": 1714521600},
            {"id": "not-a-number"},
        ]
        result, requests = run_finnhub(ok(payload), lambda p: p.get_market_news("crypto"))

        assert [item.headline for item in result] == ["Markets rally"]
        assert result[0].published == 1714521600
        assert requests[0].url.params["category"] == "crypto"

    def test_invalid_news_category(self):
        result, requests = run_finnhub(ok([]), lambda p: p.get_market_news("gossip"))
        assert isinstance(result, ValidationError)
        assert requests == []

    def test_constituents(self):
        payload = {"symbol": "^GSPC", "constituents": ["AAPL", "MSFT"]}
        result, requests = run_finnhub(ok(payload), lambda p: p.get_index_constituents("^gspc"))

        assert result == ["AAPL", "MSFT"]
        assert requests[0].url.path == "/api/v1/index/constituents"
        assert requests[0].url.params["symbol"] == "^GSPC"

    def test_constituents_missing(self):
        result, _ = run_finnhub(ok({}), lambda p: p.get_index_constituents("^GSPC"))
        assert result == []


class TestDemoProvider:
    """Offline demo provider."""

    def test_known_quote(self):
        quote = asyncio.run(DemoProvider().get_quote("binance:btcusdt"))
        assert quote == DEMO_QUOTES["BINANCE:BTCUSDT"]

    def test_unknown_quote_is_seeded(self):
        first = asyncio.run(DemoProvider(seed=7).get_quote("AAPL"))
        second = asyncio.run(DemoProvider(seed=7).get_quote("AAPL"))
        assert first == second
        assert 100 <= first.c <= 200

    def test_validation_applies(self):
        with pytest.raises(ValidationError):
            asyncio.run(DemoProvider().get_quote("<script>"))
        with pytest.raises(ValidationError):
            asyncio.run(DemoProvider().get_candles("AAPL", "H", 1, 2))

    def test_candles(self):
        resolution, from_ts, to_ts = history_window("1M")
        series = asyncio.run(DemoProvider(seed=1).get_candles("^GSPC", resolution, from_ts, to_ts))

        assert series.resolution == "D"
        assert len(series.candles) == 31
        assert all(c.low <= min(c.open, c.close) for c in series.candles)
        assert all(c.high >= max(c.open, c.close) for c in series.candles)
        timestamps = [c.timestamp for c in series.candles]
        assert timestamps == sorted(timestamps)


class TestHistoryWindow:
    """Display period to candle request mapping."""

    @pytest.mark.parametrize("period,resolution,days", [
        ("1M", "D", 30),
        ("6M", "W", 180),
        ("1Y", "W", 365),
        ("ALL", "M", 5 * 365),
        ("1y", "W", 365),
        ("bogus", "D", 30),
    ])
    def test_periods(self, period, resolution, days):
        now = 1_700_000_000
        assert history_window(period, now=now) == (resolution, now - days * 86400, now)
