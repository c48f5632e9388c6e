"""Demo quote provider used when no API key is configured."""

import random
from datetime import datetime, timedelta
from typing import Optional

from markettracker.errors import ValidationError
from markettracker.models import Candle, CandleSeries, NewsItem, Quote
from markettracker.providers.base import (
    NEWS_CATEGORIES,
    BaseQuoteProvider,
    validate_candle_request,
    validate_symbol,
)
from markettracker.symbols import CRYPTO_SYMBOLS, MARKET_INDICES


DEMO_QUOTES = {
    MARKET_INDICES["CAC 40"]: Quote(c=8120.75, d=32.45, dp=0.42, h=8145.12, l=8088.54, o=8095.20, pc=8088.30),
    MARKET_INDICES["S&P 500"]: Quote(c=5225.18, d=12.65, dp=0.24, h=5230.15, l=5210.25, o=5215.33, pc=5212.53),
    MARKET_INDICES["NASDAQ"]: Quote(c=16350.45, d=-42.12, dp=-0.26, h=16450.30, l=16320.10, o=16415.60, pc=16392.57),
    MARKET_INDICES["FTSE 100"]: Quote(c=7935.11, d=15.32, dp=0.19, h=7940.75, l=7920.44, o=7925.20, pc=7919.79),
    MARKET_INDICES["DAX"]: Quote(c=17680.28, d=54.80, dp=0.31, h=17698.52, l=17625.48, o=17630.25, pc=17625.48),
    MARKET_INDICES["Nikkei 225"]: Quote(c=38914.25, d=-102.35, dp=-0.26, h=39118.45, l=38850.32, o=39025.76, pc=39016.60),
    CRYPTO_SYMBOLS["Bitcoin"]: Quote(c=62135.45, d=952.30, dp=1.56, h=62500.00, l=61050.25, o=61183.15, pc=61183.15),
    CRYPTO_SYMBOLS["Ethereum"]: Quote(c=3450.72, d=45.18, dp=1.32, h=3470.50, l=3410.25, o=3415.20, pc=3405.54),
    CRYPTO_SYMBOLS["Binance Coin"]: Quote(c=570.45, d=-5.80, dp=-1.01, h=580.15, l=565.20, o=576.25, pc=576.25),
    CRYPTO_SYMBOLS["Solana"]: Quote(c=142.85, d=3.25, dp=2.32, h=145.00, l=139.50, o=140.10, pc=139.60),
    CRYPTO_SYMBOLS["Cardano"]: Quote(c=0.62, d=0.015, dp=2.48, h=0.63, l=0.61, o=0.61, pc=0.605),
    CRYPTO_SYMBOLS["XRP"]: Quote(c=0.56, d=-0.02, dp=-3.45, h=0.58, l=0.55, o=0.58, pc=0.58),
}

RESOLUTION_STEPS = {
    "1": timedelta(minutes=1),
    "5": timedelta(minutes=5),
    "15": timedelta(minutes=15),
    "30": timedelta(minutes=30),
    "60": timedelta(hours=1),
    "D": timedelta(days=1),
    "W": timedelta(weeks=1),
    "M": timedelta(days=30),
}

MAX_DEMO_CANDLES = 500


class DemoProvider(BaseQuoteProvider):
    """Offline provider serving fixed quotes and synthetic history.

    Inputs go through the same validation as the live provider, so the
    demo mode exercises the same error paths.
    """

    def __init__(self, seed: Optional[int] = None):
        """Initialize the demo provider.

        Args:
            seed: Seed for the random generator, for reproducible output.
        """
        self._random = random.Random(seed)

    async def get_quote(self, symbol: str) -> Quote:
        clean_symbol = validate_symbol(symbol)
        quote = DEMO_QUOTES.get(clean_symbol)
        if quote is not None:
            return quote

        # Unknown symbols get a plausible random quote
        rnd = self._random
        return Quote(
            c=100 + rnd.random() * 100,
            d=(rnd.random() - 0.3) * 10,
            dp=(rnd.random() - 0.3) * 5,
            h=100 + rnd.random() * 120,
            l=100 + rnd.random() * 80,
            o=100 + rnd.random() * 100,
            pc=100 + rnd.random() * 100,
        )

    async def get_candles(
        self, symbol: str, resolution: str, from_ts: int, to_ts: int
    ) -> CandleSeries:
        clean_symbol = validate_candle_request(symbol, resolution, from_ts, to_ts)

        step = RESOLUTION_STEPS[resolution]
        end = datetime.fromtimestamp(to_ts)
        span = timedelta(seconds=to_ts - from_ts)
        points = min(int(span / step) + 1, MAX_DEMO_CANDLES)

        base = DEMO_QUOTES.get(clean_symbol)
        value = base.pc if base is not None else 100.0
        is_positive = base is None or base.d >= 0
        volatility = 0.005 if is_positive else 0.006
        trend = 0.001 if is_positive else -0.001

        candles = []
        timestamp = end - step * (points - 1)
        for i in range(points):
            open_price = value
            random_factor = (self._random.random() - 0.5) * volatility
            trend_factor = trend * i / max(points, 1)
            value = value * (1 + random_factor + trend_factor)
            candles.append(
                Candle(
                    timestamp=timestamp,
                    open=open_price,
                    high=max(open_price, value) * (1 + volatility / 4),
                    low=min(open_price, value) * (1 - volatility / 4),
                    close=value,
                    volume=float(self._random.randint(1_000, 100_000)),
                )
            )
            timestamp += step

        return CandleSeries(symbol=clean_symbol, resolution=resolution, candles=candles)

    async def get_market_news(self, category: str = "general") -> list[NewsItem]:
        if category not in NEWS_CATEGORIES:
            raise ValidationError("category", category)
        return [
            NewsItem(
                id=1,
                headline="Demo mode: configure a Finnhub API key for live news",
                source="MarketTracker",
                category=category,
            )
        ]

    async def get_index_constituents(self, symbol: str) -> list[str]:
        validate_symbol(symbol)
        return []
