"""Alert management commands for MarketTracker CLI.

Handles creating, listing, removing and re-arming price alerts.
"""

from typing import Optional

import click
from pydantic import ValidationError as PydanticValidationError
from rich.panel import Panel
from rich.table import Table

from markettracker.cli.common import console, error_panel, get_alert_store, get_settings
from markettracker.errors import StorageError
from markettracker.formatters import format_number
from markettracker.models import AlertDraft, AlertType
from markettracker.symbols import SYMBOL_TABLES, find_symbol, is_crypto


def _available_names() -> str:
    lines = []
    for key, table in SYMBOL_TABLES.items():
        lines.append(f"  {key.capitalize()}: {', '.join(table)}")
    return "\n".join(lines)


@click.command("alert")
@click.argument("name")
@click.argument("direction", type=click.Choice([t.value for t in AlertType]))
@click.argument("price", type=float)
@click.pass_context
def create_alert(ctx: click.Context, name: str, direction: str, price: float) -> None:
    """Create a price alert.

    NAME is a tracked market (e.g., Bitcoin, "S&P 500").
    DIRECTION is "above" or "below".
    PRICE is the threshold; the alert fires when the price reaches it.

    \b
    Examples:
      markettracker alert Bitcoin above 70000
      markettracker alert "CAC 40" below 7500
    """
    settings = get_settings(ctx)

    found = find_symbol(name)
    if found is None:
        error_panel(f"Unknown market: {name}", f"[bold]Available markets:[/bold]\n{_available_names()}")
    display_name, symbol = found

    try:
        draft = AlertDraft(symbol=symbol, name=display_name, type=direction, price=price)
    except PydanticValidationError as e:
        error_panel("Invalid alert:", str(e))

    try:
        alert = get_alert_store(settings).append(draft)
    except StorageError as e:
        error_panel("Failed to create alert:", str(e))

    console.print(Panel(
        f"[bold green]Alert Created[/bold green]\n\n"
        f"ID:        {alert.id}\n"
        f"Market:    {alert.name}\n"
        f"Symbol:    {alert.symbol}\n"
        f"Condition: price {alert.type.value} {format_number(alert.price, is_crypto=is_crypto(alert.symbol))}",
        title="[bold]New Alert[/bold]",
        border_style="green",
    ))


@click.command("alerts")
@click.option(
    "--remove", "remove_id",
    type=int,
    default=None,
    help="Remove alert with specified ID.",
)
@click.option(
    "--reset", "reset_id",
    type=int,
    default=None,
    help="Re-arm the triggered alert with specified ID.",
)
@click.pass_context
def list_alerts(ctx: click.Context, remove_id: Optional[int], reset_id: Optional[int]) -> None:
    """Display or manage alerts.

    Shows all alerts. Use --remove ID to delete one or --reset ID to
    re-arm one that has triggered.

    \b
    Examples:
      markettracker alerts              # List all alerts
      markettracker alerts --remove 5   # Remove alert with ID 5
      markettracker alerts --reset 5    # Re-arm alert with ID 5
    """
    settings = get_settings(ctx)
    store = get_alert_store(settings)

    try:
        if remove_id is not None:
            alert = store.get(remove_id)
            if alert is None:
                console.print(f"[yellow]Alert with ID {remove_id} not found[/yellow]")
                return
            store.remove(remove_id)
            console.print(f"[green]✓ Removed alert {remove_id} ({alert.name} {alert.type.value} {alert.price:g})[/green]")
            return

        if reset_id is not None:
            alert = store.get(reset_id)
            if alert is None:
                console.print(f"[yellow]Alert with ID {reset_id} not found[/yellow]")
                return
            store.reset(reset_id)
            console.print(f"[green]✓ Re-armed alert {reset_id} ({alert.name} {alert.type.value} {alert.price:g})[/green]")
            return
    except StorageError as e:
        error_panel("Failed to update alerts:", str(e))

    alerts = store.list()
    if not alerts:
        console.print(Panel(
            "[dim]No alerts set. Use 'markettracker alert NAME above|below PRICE' to create one.[/dim]",
            title="[bold]Alerts[/bold]",
            border_style="dim",
        ))
        return

    table = Table(
        title="Price Alerts",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("ID", style="dim")
    table.add_column("Market", style="bold")
    table.add_column("Condition")
    table.add_column("Created", style="dim")
    table.add_column("Status", justify="center")

    for alert in alerts:
        if alert.triggered:
            status = f"[yellow]✓ Triggered {alert.triggered_at:%Y-%m-%d %H:%M}[/yellow]"
        else:
            status = "[green]● Pending[/green]"
        price = format_number(alert.price, is_crypto=is_crypto(alert.symbol))
        table.add_row(
            str(alert.id),
            alert.name,
            f"{alert.type.value} {price}",
            alert.created_at.strftime("%Y-%m-%d %H:%M"),
            status,
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(alerts)} alerts[/dim]")
    console.print("[dim]Use 'markettracker alerts --remove ID' or '--reset ID' to manage an alert[/dim]")
