"""Main CLI entry point for MarketTracker.

Command modules are imported on first use so that ``--help`` and the
alert commands start without loading the HTTP stack.
"""

import importlib
from pathlib import Path
from typing import Optional

import click


class LazyGroup(click.Group):
    """Click group resolving commands from ``"module:attribute"`` paths."""

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._lazy = dict(lazy_subcommands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(set(super().list_commands(ctx)) | set(self._lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        command = super().get_command(ctx, cmd_name)
        if command is None and cmd_name in self._lazy:
            command = self._import_command(cmd_name)
            self.add_command(command, cmd_name)
        return command

    def _import_command(self, cmd_name: str) -> click.Command:
        module_name, _, attr = self._lazy[cmd_name].partition(":")
        command = getattr(importlib.import_module(module_name), attr, None)
        if not isinstance(command, click.Command):
            raise click.ClickException(
                f"'{self._lazy[cmd_name]}' does not name a command for '{cmd_name}'"
            )
        return command


LAZY_SUBCOMMANDS = {
    # Market data
    "quote": "markettracker.cli.market:quote",
    "history": "markettracker.cli.market:history",
    "markets": "markettracker.cli.market:markets",
    "news": "markettracker.cli.market:news",
    "components": "markettracker.cli.market:components",
    # Polling
    "watch": "markettracker.cli.watch:watch",
    # Alerts
    "alert": "markettracker.cli.alerts:create_alert",
    "alerts": "markettracker.cli.alerts:list_alerts",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.toml (default: ~/.config/markettracker/config.toml)",
)
@click.version_option(package_name="markettracker")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path]) -> None:
    """MarketTracker - stock index and crypto quotes with price alerts.

    \b
    Quick Start:
      markettracker markets                    # Quotes for all tracked markets
      markettracker alert Bitcoin above 70000  # Create a price alert
      markettracker watch                      # Poll every minute and fire alerts
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
