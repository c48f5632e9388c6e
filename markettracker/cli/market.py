"""Market data commands for MarketTracker CLI.

Handles quotes, price history, market overviews, news and index
constituents.
"""

import asyncio
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from markettracker.cli.common import (
    console,
    demo_notice,
    error_panel,
    get_provider,
    get_settings,
)
from markettracker.alerts.monitor import fetch_quotes
from markettracker.errors import MarketTrackerError
from markettracker.formatters import calculate_percent_change, format_change, format_number
from markettracker.models import Quote
from markettracker.providers import NEWS_CATEGORIES, history_window
from markettracker.providers.base import HISTORY_PERIODS
from markettracker.symbols import SYMBOL_TABLES, find_symbol, is_crypto


def resolve_symbol(value: str) -> tuple[str, str]:
    """Resolve a display name or raw symbol.

    Returns:
        (display name, symbol); raw symbols are their own display name.
    """
    found = find_symbol(value)
    if found is not None:
        return found
    return value, value


def quotes_table(title: str, table: dict[str, str], quotes: dict[str, Quote]) -> Table:
    """Build a rich table of quotes for one symbol table."""
    out = Table(title=title, show_header=True, header_style="bold cyan")
    out.add_column("Market", style="bold")
    out.add_column("Symbol", style="dim")
    out.add_column("Price", justify="right")
    out.add_column("Change", justify="right")
    out.add_column("High", justify="right")
    out.add_column("Low", justify="right")

    for name, symbol in table.items():
        quote = quotes.get(name)
        if quote is None:
            out.add_row(name, symbol, "[dim]n/a[/dim]", "", "", "")
            continue
        crypto = is_crypto(symbol)
        out.add_row(
            name,
            symbol,
            format_number(quote.current, is_crypto=crypto),
            format_change(quote.change, quote.change_percent),
            format_number(quote.h, is_crypto=crypto),
            format_number(quote.l, is_crypto=crypto),
        )
    return out


@click.command()
@click.argument("symbol")
@click.pass_context
def quote(ctx: click.Context, symbol: str) -> None:
    """Show the current quote for a market.

    SYMBOL is a display name (e.g., "S&P 500", Bitcoin) or a raw
    symbol (e.g., ^GSPC, AAPL, BINANCE:BTCUSDT).
    """
    settings = get_settings(ctx)
    name, raw_symbol = resolve_symbol(symbol)

    async def _run() -> Quote:
        async with get_provider(settings) as provider:
            return await provider.get_quote(raw_symbol)

    try:
        result = asyncio.run(_run())
    except MarketTrackerError as e:
        error_panel(f"Failed to fetch quote for {symbol}:", str(e))

    crypto = is_crypto(raw_symbol.upper())
    demo_notice(settings)
    console.print(Panel(
        f"Price:      [bold]{format_number(result.current, is_crypto=crypto)}[/bold]\n"
        f"Change:     {format_change(result.change, result.change_percent)}\n"
        f"Open:       {format_number(result.o, is_crypto=crypto)}\n"
        f"High:       {format_number(result.h, is_crypto=crypto)}\n"
        f"Low:        {format_number(result.l, is_crypto=crypto)}\n"
        f"Prev close: {format_number(result.pc, is_crypto=crypto)}",
        title=f"[bold]{name}[/bold]",
        border_style="cyan",
    ))


@click.command()
@click.argument("symbol")
@click.option(
    "-p", "--period",
    default="1M",
    type=click.Choice(list(HISTORY_PERIODS), case_sensitive=False),
    help="History period (default: 1M)",
)
@click.option(
    "-n", "--rows",
    default=10,
    type=int,
    help="Number of most recent candles to display (default: 10)",
)
@click.pass_context
def history(ctx: click.Context, symbol: str, period: str, rows: int) -> None:
    """Show price history for a market.

    SYMBOL is a display name or a raw symbol.
    """
    settings = get_settings(ctx)
    name, raw_symbol = resolve_symbol(symbol)
    resolution, from_ts, to_ts = history_window(period)

    async def _run():
        async with get_provider(settings) as provider:
            return await provider.get_candles(raw_symbol, resolution, from_ts, to_ts)

    try:
        series = asyncio.run(_run())
    except MarketTrackerError as e:
        error_panel(f"Failed to fetch history for {symbol}:", str(e))

    demo_notice(settings)
    if series.is_empty:
        console.print(f"[yellow]No data for {name} ({period})[/yellow]")
        return

    crypto = is_crypto(series.symbol)
    table = Table(
        title=f"{name} - {period.upper()} ({len(series.candles)} candles)",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Date", style="dim")
    table.add_column("Open", justify="right")
    table.add_column("High", justify="right")
    table.add_column("Low", justify="right")
    table.add_column("Close", justify="right")

    for candle in series.candles[-rows:]:
        table.add_row(
            candle.timestamp.strftime("%Y-%m-%d %H:%M"),
            format_number(candle.open, is_crypto=crypto),
            format_number(candle.high, is_crypto=crypto),
            format_number(candle.low, is_crypto=crypto),
            format_number(candle.close, is_crypto=crypto),
        )
    console.print(table)

    first, last = series.candles[0].close, series.candles[-1].close
    change = calculate_percent_change(last, first)
    console.print(f"Period change: {format_change(last - first, change)}")


@click.command()
@click.option(
    "-t", "--table", "table_name",
    default="all",
    type=click.Choice(["all"] + list(SYMBOL_TABLES)),
    help="Which markets to show (default: all)",
)
@click.pass_context
def markets(ctx: click.Context, table_name: str) -> None:
    """Show quotes for all tracked indices and cryptocurrencies."""
    settings = get_settings(ctx)
    tables = SYMBOL_TABLES if table_name == "all" else {table_name: SYMBOL_TABLES[table_name]}

    async def _run():
        async with get_provider(settings) as provider:
            return await fetch_quotes(provider, tables)

    prices, failed = asyncio.run(_run())

    demo_notice(settings)
    for key, table in tables.items():
        console.print(quotes_table(key.capitalize(), table, prices.get(key, {})))
    if failed:
        console.print(f"[yellow]Could not load: {', '.join(failed)}[/yellow]")


@click.command()
@click.option(
    "-c", "--category",
    default="general",
    type=click.Choice(list(NEWS_CATEGORIES)),
    help="News category (default: general)",
)
@click.option("-n", "--limit", default=10, type=int, help="Number of headlines (default: 10)")
@click.pass_context
def news(ctx: click.Context, category: str, limit: int) -> None:
    """Show market news headlines."""
    settings = get_settings(ctx)

    async def _run():
        async with get_provider(settings) as provider:
            return await provider.get_market_news(category)

    try:
        items = asyncio.run(_run())
    except MarketTrackerError as e:
        error_panel("Failed to fetch news:", str(e))

    demo_notice(settings)
    if not items:
        console.print(f"[dim]No {category} news[/dim]")
        return

    for item in items[:limit]:
        source = f" [dim]({item.source})[/dim]" if item.source else ""
        console.print(f"• {item.headline}{source}")
        if item.url:
            console.print(f"  [dim]{item.url}[/dim]")


@click.command()
@click.argument("index")
@click.pass_context
def components(ctx: click.Context, index: str) -> None:
    """List the constituents of an index.

    INDEX is a display name (e.g., "S&P 500") or an index symbol (^GSPC).
    """
    settings = get_settings(ctx)
    name, raw_symbol = resolve_symbol(index)

    async def _run():
        async with get_provider(settings) as provider:
            return await provider.get_index_constituents(raw_symbol)

    try:
        symbols = asyncio.run(_run())
    except MarketTrackerError as e:
        error_panel(f"Failed to fetch constituents of {index}:", str(e))

    demo_notice(settings)
    if not symbols:
        console.print(f"[dim]No constituents available for {name}[/dim]")
        return

    console.print(Panel(
        ", ".join(symbols),
        title=f"[bold]{name}[/bold] ({len(symbols)} constituents)",
        border_style="cyan",
    ))
