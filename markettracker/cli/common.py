"""Shared helpers for CLI commands."""

import click
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.panel import Panel

from markettracker.config import Settings, load_settings, setup_logging
from markettracker.db import AlertStore, SqliteKeyValueStore
from markettracker.errors import StorageError
from markettracker.providers import BaseQuoteProvider, DemoProvider, FinnhubProvider
from markettracker.security import RateLimiter

console = Console()


def error_panel(message: str, detail: str = "") -> None:
    """Print an error panel and exit with status 1."""
    body = f"[red]{message}[/red]"
    if detail:
        body += f"\n\n{detail}"
    console.print(Panel(
        body,
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def get_settings(ctx: click.Context) -> Settings:
    """Load settings once per invocation and configure logging."""
    obj = ctx.ensure_object(dict)
    if "settings" not in obj:
        try:
            settings = load_settings(obj.get("config_path"))
        except PydanticValidationError as e:
            error_panel("Invalid configuration:", str(e))
        setup_logging(settings.log_level)
        obj["settings"] = settings
    return obj["settings"]


def get_alert_store(settings: Settings) -> AlertStore:
    """Get the alert store backed by the configured SQLite file."""
    try:
        kv_store = SqliteKeyValueStore(settings.storage.db_path)
    except StorageError as e:
        error_panel("Cannot open alert storage:", str(e))
    return AlertStore(kv_store)


def get_provider(settings: Settings) -> BaseQuoteProvider:
    """Get the live provider, or the demo one when no API key is set."""
    if settings.demo_mode:
        return DemoProvider()

    limits = settings.rate_limits
    rate_limiter = RateLimiter(
        limits=limits.as_limits(),
        window_ms=limits.window_seconds * 1000,
    )
    return FinnhubProvider(
        api_key=settings.finnhub.api_key,
        rate_limiter=rate_limiter,
        base_url=settings.finnhub.base_url,
        timeout=settings.finnhub.timeout,
    )


def demo_notice(settings: Settings) -> None:
    if settings.demo_mode:
        console.print("[dim]Demo mode: set FINNHUB_API_KEY for live data[/dim]")
