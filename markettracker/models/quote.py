"""Quote and candle data models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Quote(BaseModel):
    """Point-in-time price snapshot as returned by the quote service.

    Field names follow the upstream payload: ``c`` current, ``o`` open,
    ``h`` high, ``l`` low, ``pc`` previous close, ``d`` change and
    ``dp`` change percent.
    """

    c: float = Field(..., description="Current price")
    o: float = Field(default=0.0, description="Open price of the day")
    h: float = Field(default=0.0, description="High price of the day")
    l: float = Field(default=0.0, description="Low price of the day")
    pc: float = Field(default=0.0, description="Previous close")
    d: float = Field(default=0.0, description="Change")
    dp: float = Field(default=0.0, description="Change percent")

    model_config = {"frozen": True}

    @field_validator("o", "h", "l", "pc", "d", "dp", mode="before")
    @classmethod
    def _none_as_zero(cls, value):
        # The API sends null deltas for symbols without a previous close
        return 0.0 if value is None else value

    @property
    def current(self) -> float:
        return self.c

    @property
    def change(self) -> float:
        return self.d

    @property
    def change_percent(self) -> float:
        return self.dp


class Candle(BaseModel):
    """Represents a single OHLCV candle."""

    timestamp: datetime = Field(..., description="Candle open time")
    open: float = Field(..., ge=0, description="Opening price")
    high: float = Field(..., ge=0, description="High price")
    low: float = Field(..., ge=0, description="Low price")
    close: float = Field(..., ge=0, description="Closing price")
    volume: float = Field(default=0.0, ge=0, description="Traded volume")

    model_config = {"frozen": True}


class CandleSeries(BaseModel):
    """Candles for one symbol at one resolution, oldest first."""

    symbol: str
    resolution: str
    candles: list[Candle] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return not self.candles

    @property
    def closes(self) -> list[float]:
        return [candle.close for candle in self.candles]

    @classmethod
    def from_payload(cls, symbol: str, resolution: str, payload: dict) -> "CandleSeries":
        """Build a series from the upstream ``{s, t, o, h, l, c, v}`` payload.

        A status other than ``"ok"`` or missing arrays mean "no data" and
        give an empty series.
        """
        if not isinstance(payload, dict) or payload.get("s") != "ok":
            return cls(symbol=symbol, resolution=resolution)

        times = payload.get("t")
        opens = payload.get("o")
        highs = payload.get("h")
        lows = payload.get("l")
        closes = payload.get("c")
        if not all(isinstance(arr, list) for arr in (times, opens, highs, lows, closes)):
            return cls(symbol=symbol, resolution=resolution)

        volumes = payload.get("v")
        if not isinstance(volumes, list):
            volumes = []

        candles = []
        for i, ts in enumerate(times):
            if i >= min(len(opens), len(highs), len(lows), len(closes)):
                break
            candles.append(
                Candle(
                    timestamp=datetime.fromtimestamp(ts),
                    open=opens[i],
                    high=highs[i],
                    low=lows[i],
                    close=closes[i],
                    volume=volumes[i] if i < len(volumes) else 0.0,
                )
            )
        return cls(symbol=symbol, resolution=resolution, candles=candles)


class NewsItem(BaseModel):
    """A market news headline."""

    id: Optional[int] = Field(default=None, description="Upstream news ID")
    headline: str = Field(default="", description="Headline text")
    source: str = Field(default="", description="Publisher")
    url: str = Field(default="", description="Article URL")
    summary: str = Field(default="", description="Short summary")
    category: str = Field(default="", description="News category")
    published: Optional[int] = Field(
        default=None, alias="datetime", description="Publication time (epoch seconds)"
    )

    model_config = {"frozen": True, "populate_by_name": True}
