"""Configuration loading for MarketTracker.

Settings come from ``~/.config/markettracker/config.toml`` with
environment variables taking precedence:

    [finnhub]
    api_key = "..."

    [rate_limits]
    quotes = 60
    candles = 30

    [monitor]
    poll_interval = 60
    sound = true
"""

import logging
import os
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field
from rich.logging import RichHandler

logger = logging.getLogger(__name__)


CONFIG_DIR = Path.home() / ".config" / "markettracker"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "markettracker.db"

ENV_API_KEY = "FINNHUB_API_KEY"
ENV_LOG_LEVEL = "MARKETTRACKER_LOG_LEVEL"


class FinnhubSettings(BaseModel):
    api_key: Optional[str] = Field(default=None, description="Finnhub API token")
    base_url: str = Field(default="https://finnhub.io/api/v1", description="API root URL")
    timeout: float = Field(default=10.0, gt=0, description="Request timeout in seconds")


class RateLimitSettings(BaseModel):
    quotes: int = Field(default=60, ge=0, description="Quote requests per window")
    candles: int = Field(default=30, ge=0, description="Candle requests per window")
    window_seconds: int = Field(default=60, gt=0, description="Window length")

    def as_limits(self) -> dict[str, int]:
        return {"quotes": self.quotes, "candles": self.candles}


class MonitorSettings(BaseModel):
    poll_interval: float = Field(default=60.0, gt=0, description="Seconds between cycles")
    sound: bool = Field(default=True, description="Ring the terminal bell on alerts")


class StorageSettings(BaseModel):
    db_path: Path = Field(default=DEFAULT_DB_PATH, description="SQLite file for alerts")


class Settings(BaseModel):
    """All MarketTracker settings."""

    finnhub: FinnhubSettings = Field(default_factory=FinnhubSettings)
    rate_limits: RateLimitSettings = Field(default_factory=RateLimitSettings)
    monitor: MonitorSettings = Field(default_factory=MonitorSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    log_level: str = Field(default="WARNING", description="Logging level name")

    @property
    def demo_mode(self) -> bool:
        """True when no API key is configured."""
        return not self.finnhub.api_key


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings from the config file and environment.

    A missing or unreadable file gives the defaults.

    Args:
        config_path: TOML file, defaults to ~/.config/markettracker/config.toml.

    Returns:
        Validated settings.
    """
    config_path = config_path or DEFAULT_CONFIG_PATH
    data: dict = {}
    if config_path.exists():
        try:
            data = toml.load(config_path)
        except (toml.TomlDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable config %s: %s", config_path, e)
            data = {}

    settings = Settings.model_validate(data)

    api_key = os.environ.get(ENV_API_KEY)
    if api_key:
        settings = settings.model_copy(
            update={"finnhub": settings.finnhub.model_copy(update={"api_key": api_key})}
        )

    log_level = os.environ.get(ENV_LOG_LEVEL)
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level})

    return settings


def setup_logging(level: str = "WARNING") -> None:
    """Route log records through rich."""
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
