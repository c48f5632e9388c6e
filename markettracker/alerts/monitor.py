"""One polling cycle: fetch every tracked quote, then evaluate alerts."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from markettracker.alerts.evaluator import AlertEvaluator
from markettracker.alerts.notifier import Notifier
from markettracker.errors import RateLimited, UpstreamError, ValidationError
from markettracker.models import Alert, Quote
from markettracker.providers.base import BaseQuoteProvider
from markettracker.symbols import SYMBOL_TABLES

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    """Outcome of one polling cycle."""

    prices: dict[str, dict[str, Quote]] = field(default_factory=dict)
    triggered: list[Alert] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def all_prices(self) -> dict[str, Quote]:
        """Quotes from every table keyed by display name."""
        merged: dict[str, Quote] = {}
        for table_prices in self.prices.values():
            merged.update(table_prices)
        return merged


async def fetch_quote(provider: BaseQuoteProvider, name: str, symbol: str) -> Optional[Quote]:
    """Fetch one quote; a failure only drops this symbol for the cycle."""
    try:
        return await provider.get_quote(symbol)
    except ValidationError as e:
        logger.error("Invalid symbol for %s: %s", name, e)
    except RateLimited as e:
        logger.warning("Skipping %s this cycle: %s", name, e)
    except UpstreamError as e:
        logger.warning("Failed to load %s: %s", name, e)
    return None


async def fetch_quotes(
    provider: BaseQuoteProvider, symbol_tables: Mapping[str, Mapping[str, str]]
) -> tuple[dict[str, dict[str, Quote]], list[str]]:
    """Fetch quotes for every table entry concurrently.

    Returns:
        (quotes per table keyed by display name, names that failed)
    """
    prices: dict[str, dict[str, Quote]] = {}
    failed: list[str] = []
    for table_name, table in symbol_tables.items():
        names = list(table)
        quotes = await asyncio.gather(
            *(fetch_quote(provider, name, table[name]) for name in names)
        )
        prices[table_name] = {}
        for name, quote in zip(names, quotes):
            if quote is None:
                failed.append(name)
            else:
                prices[table_name][name] = quote
    return prices, failed


class MarketMonitor:
    """Runs polling cycles over the symbol tables.

    The monitor never schedules itself; a caller invokes run_cycle on
    whatever period it likes.
    """

    def __init__(
        self,
        provider: BaseQuoteProvider,
        evaluator: AlertEvaluator,
        symbol_tables: Optional[Mapping[str, Mapping[str, str]]] = None,
        notifier: Optional[Notifier] = None,
    ):
        self._provider = provider
        self._evaluator = evaluator
        self._tables = SYMBOL_TABLES if symbol_tables is None else symbol_tables
        self._notifier = notifier

    async def run_cycle(self) -> CycleResult:
        """Run one full cycle and notify triggered alerts."""
        prices, failed = await fetch_quotes(self._provider, self._tables)
        result = CycleResult(prices=prices, failed=failed)

        all_prices = result.all_prices
        result.triggered = self._evaluator.evaluate(all_prices)

        if self._notifier is not None:
            for alert in result.triggered:
                try:
                    self._notifier.notify(alert, all_prices[alert.name].current)
                except Exception as e:
                    logger.error("Error in alert notifier: %s", e)

        if failed:
            logger.info("Cycle finished with %d missing quotes", len(failed))
        return result
