"""Polling command for MarketTracker CLI.

Drives the polling cycle on a fixed period: every cycle fetches all
tracked quotes, evaluates the stored alerts and notifies the ones that
fire.
"""

import asyncio
from datetime import datetime
from typing import Optional

import click

from markettracker.alerts import AlertEvaluator, ConsoleNotifier, MarketMonitor
from markettracker.cli.common import (
    console,
    demo_notice,
    get_alert_store,
    get_provider,
    get_settings,
)
from markettracker.cli.market import quotes_table
from markettracker.symbols import SYMBOL_TABLES


async def run_watch(monitor: MarketMonitor, interval: float, cycles: Optional[int]) -> int:
    """Run cycles until stopped or the cycle count is reached.

    Returns:
        Number of alerts triggered overall.
    """
    completed = 0
    total_triggered = 0
    while True:
        result = await monitor.run_cycle()
        completed += 1
        total_triggered += len(result.triggered)

        console.rule(f"[dim]Updated {datetime.now():%H:%M:%S}[/dim]")
        for key, table in SYMBOL_TABLES.items():
            console.print(quotes_table(key.capitalize(), table, result.prices.get(key, {})))
        if result.failed:
            console.print(f"[yellow]Could not load: {', '.join(result.failed)}[/yellow]")

        if cycles is not None and completed >= cycles:
            return total_triggered
        await asyncio.sleep(interval)


@click.command()
@click.option(
    "-i", "--interval",
    default=None,
    type=click.FloatRange(min=1.0),
    help="Seconds between updates (default: monitor.poll_interval, 60)",
)
@click.option(
    "-n", "--cycles",
    default=None,
    type=click.IntRange(min=1),
    help="Stop after this many updates (default: run until Ctrl-C)",
)
@click.option("--no-sound", is_flag=True, help="Do not ring the bell on alerts.")
@click.pass_context
def watch(ctx: click.Context, interval: Optional[float], cycles: Optional[int], no_sound: bool) -> None:
    """Poll quotes periodically and fire price alerts.

    \b
    Examples:
      markettracker watch               # Update every minute until Ctrl-C
      markettracker watch -i 30 -n 10   # Ten updates, 30 seconds apart
    """
    settings = get_settings(ctx)
    interval = interval or settings.monitor.poll_interval
    store = get_alert_store(settings)
    notifier = ConsoleNotifier(console=console, sound=settings.monitor.sound and not no_sound)

    async def _run() -> int:
        async with get_provider(settings) as provider:
            monitor = MarketMonitor(
                provider=provider,
                evaluator=AlertEvaluator(store),
                notifier=notifier,
            )
            return await run_watch(monitor, interval, cycles)

    demo_notice(settings)
    pending = sum(1 for alert in store.list() if not alert.triggered)
    console.print(f"[dim]Watching {pending} pending alerts, updating every {interval:g}s[/dim]")

    try:
        triggered = asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped[/dim]")
        return

    console.print(f"[dim]Done, {triggered} alerts triggered[/dim]")
