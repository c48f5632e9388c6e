"""Symbol tables mapping display names to upstream identifiers."""

from typing import Mapping, Optional


MARKET_INDICES = {
    "CAC 40": "^FCHI",
    "S&P 500": "^GSPC",
    "NASDAQ": "^IXIC",
    "FTSE 100": "^FTSE",
    "DAX": "^GDAXI",
    "Nikkei 225": "^N225",
}

CRYPTO_SYMBOLS = {
    "Bitcoin": "BINANCE:BTCUSDT",
    "Ethereum": "BINANCE:ETHUSDT",
    "Binance Coin": "BINANCE:BNBUSDT",
    "Solana": "BINANCE:SOLUSDT",
    "Cardano": "BINANCE:ADAUSDT",
    "XRP": "BINANCE:XRPUSDT",
}

SYMBOL_TABLES = {
    "indices": MARKET_INDICES,
    "crypto": CRYPTO_SYMBOLS,
}


def find_symbol(
    name: str, tables: Optional[Mapping[str, Mapping[str, str]]] = None
) -> Optional[tuple[str, str]]:
    """Look up a display name across the symbol tables.

    The match is case-insensitive so "bitcoin" finds "Bitcoin".

    Args:
        name: Display name, e.g. "S&P 500".
        tables: Tables to search, defaults to SYMBOL_TABLES.

    Returns:
        (canonical name, symbol) or None if not found.
    """
    tables = SYMBOL_TABLES if tables is None else tables
    wanted = name.strip().casefold()
    for table in tables.values():
        for display_name, symbol in table.items():
            if display_name.casefold() == wanted:
                return display_name, symbol
    return None


def is_crypto(symbol: str) -> bool:
    return symbol in CRYPTO_SYMBOLS.values() or symbol.startswith("BINANCE:")
