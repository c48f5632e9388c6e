"""Finnhub quote provider over async HTTP."""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from markettracker.errors import RateLimited, UpstreamError, ValidationError
from markettracker.models import CandleSeries, NewsItem, Quote
from markettracker.providers.base import (
    NEWS_CATEGORIES,
    BaseQuoteProvider,
    validate_candle_request,
    validate_symbol,
)
from markettracker.security.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = "https://finnhub.io/api/v1"
DEFAULT_TIMEOUT = 10.0

TOKEN_HEADER = "X-Finnhub-Token"


class FinnhubProvider(BaseQuoteProvider):
    """Quote provider backed by the Finnhub REST API.

    Every request is validated, then counted against the shared rate
    limiter, and only then sent. The API token travels in a header so it
    never shows up in URLs or logs.
    """

    def __init__(
        self,
        api_key: str,
        rate_limiter: RateLimiter,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the Finnhub provider.

        Args:
            api_key: Finnhub API token.
            rate_limiter: Process-wide rate limiter.
            base_url: API root URL.
            timeout: Request timeout in seconds.
            client: Preconfigured HTTP client (tests inject a mock transport).
        """
        if not api_key:
            raise ValueError("Finnhub API key is required")
        self._api_key = api_key
        self._rate_limiter = rate_limiter
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any], category: str) -> Any:
        """Issue a throttled GET and decode the JSON body."""
        if not self._rate_limiter.is_request_allowed(category):
            raise RateLimited(category)

        url = f"{self._base_url}{path}"
        try:
            response = await self._client.get(
                url, params=params, headers={TOKEN_HEADER: self._api_key}
            )
        except httpx.HTTPError as e:
            logger.warning("Request to %s failed: %s", path, e.__class__.__name__)
            raise UpstreamError(None, f"Request to {path} failed: {e.__class__.__name__}") from e

        if not response.is_success:
            logger.warning("Request to %s returned %d", path, response.status_code)
            raise UpstreamError(response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(response.status_code, f"Malformed response from {path}") from e

    async def get_quote(self, symbol: str) -> Quote:
        clean_symbol = validate_symbol(symbol)
        payload = await self._get("/quote", {"symbol": clean_symbol}, "quotes")
        try:
            return Quote.model_validate(payload)
        except PydanticValidationError as e:
            raise UpstreamError(200, f"Unexpected quote payload for {clean_symbol}") from e

    async def get_candles(
        self, symbol: str, resolution: str, from_ts: int, to_ts: int
    ) -> CandleSeries:
        clean_symbol = validate_candle_request(symbol, resolution, from_ts, to_ts)
        payload = await self._get(
            "/stock/candle",
            {
                "symbol": clean_symbol,
                "resolution": resolution,
                "from": from_ts,
                "to": to_ts,
            },
            "candles",
        )
        try:
            series = CandleSeries.from_payload(clean_symbol, resolution, payload)
        except (PydanticValidationError, TypeError, ValueError, OverflowError, OSError) as e:
            raise UpstreamError(200, f"Unexpected candle payload for {clean_symbol}") from e
        if series.is_empty:
            logger.info("No candle data for %s (%s)", clean_symbol, resolution)
        return series

    async def get_market_news(self, category: str = "general") -> list[NewsItem]:
        if category not in NEWS_CATEGORIES:
            raise ValidationError("category", category)
        payload = await self._get("/news", {"category": category}, "quotes")
        if not isinstance(payload, list):
            return []
        items = []
        for entry in payload:
            try:
                items.append(NewsItem.model_validate(entry))
            except PydanticValidationError:
                logger.debug("Skipping malformed news entry")
        return items

    async def get_index_constituents(self, symbol: str) -> list[str]:
        clean_symbol = validate_symbol(symbol)
        payload = await self._get("/index/constituents", {"symbol": clean_symbol}, "quotes")
        if not isinstance(payload, dict):
            return []
        constituents = payload.get("constituents")
        if not isinstance(constituents, list):
            return []
        return [str(item) for item in constituents]
