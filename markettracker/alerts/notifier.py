"""Presentation of triggered alerts."""

from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console
from rich.panel import Panel

from markettracker.formatters import format_number
from markettracker.models import Alert, AlertType
from markettracker.symbols import is_crypto


class Notifier(ABC):
    """Receives each alert triggered during a polling cycle."""

    @abstractmethod
    def notify(self, alert: Alert, current_price: float) -> None:
        """Present a triggered alert to the user."""
        pass


def alert_message(alert: Alert, current_price: float) -> str:
    direction = "above" if alert.type is AlertType.ABOVE else "below"
    crypto = is_crypto(alert.symbol)
    return (
        f"Price {direction} {format_number(alert.price, is_crypto=crypto)} "
        f"(current: {format_number(current_price, is_crypto=crypto)})"
    )


class ConsoleNotifier(Notifier):
    """Prints a panel per alert and optionally rings the terminal bell."""

    def __init__(self, console: Optional[Console] = None, sound: bool = True):
        self._console = console or Console()
        self._sound = sound

    def notify(self, alert: Alert, current_price: float) -> None:
        self._console.print(Panel(
            f"[bold]{alert_message(alert, current_price)}[/bold]\n\n"
            f"[dim]Alert {alert.id} on {alert.symbol}. "
            f"Use 'markettracker alerts --reset {alert.id}' to re-arm it.[/dim]",
            title=f"[bold yellow]Price alert: {alert.name}[/bold yellow]",
            border_style="yellow",
        ))
        if self._sound:
            self._console.bell()
