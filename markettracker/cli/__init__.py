"""CLI commands for MarketTracker.

This package provides the command-line interface: quotes, history,
the polling watcher and alert management.
"""

from markettracker.cli.main import cli, main

__all__ = ["cli", "main"]
