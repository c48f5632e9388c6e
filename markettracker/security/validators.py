"""Validation of user-supplied values before they reach a request URL.

Every request-building path calls these predicates and refuses to issue
the request when one of them fails.
"""

import re
import time
from typing import Any, Optional


# Tickers and caret-prefixed index codes (AAPL, BRK.B, ^GSPC)
STOCK_SYMBOL_PATTERN = re.compile(r"[A-Z0-9.^-]{1,20}", re.IGNORECASE | re.ASCII)

# Crypto pairs quoted in USDT on Binance (BINANCE:BTCUSDT)
CRYPTO_SYMBOL_PATTERN = re.compile(r"BINANCE:[A-Z]{2,10}USDT", re.ASCII)

VALID_RESOLUTIONS = frozenset({"1", "5", "15", "30", "60", "D", "W", "M"})

# Tolerated clock skew for timestamps in the future
MAX_FUTURE_SKEW_SECONDS = 86400


def is_valid_symbol(value: Any) -> bool:
    """Check whether a symbol has a supported format.

    Args:
        value: Candidate symbol.

    Returns:
        True for tickers, index codes and BINANCE:XXXUSDT pairs.
    """
    if not value or not isinstance(value, str):
        return False
    return bool(
        STOCK_SYMBOL_PATTERN.fullmatch(value) or CRYPTO_SYMBOL_PATTERN.fullmatch(value)
    )


def sanitize_symbol(raw: Any) -> Optional[str]:
    """Normalize a raw symbol and validate it.

    Args:
        raw: Raw user or configuration input.

    Returns:
        The trimmed, upper-cased symbol, or None if it is not acceptable.
    """
    if not raw or not isinstance(raw, str) or not raw.isascii():
        return None

    symbol = raw.strip().upper()
    return symbol if is_valid_symbol(symbol) else None


def is_valid_resolution(value: Any) -> bool:
    """Check a candle resolution against the supported set."""
    return isinstance(value, str) and value in VALID_RESOLUTIONS


def is_valid_timestamp(value: Any, now: Optional[int] = None) -> bool:
    """Check a UNIX timestamp in seconds.

    Args:
        value: Candidate timestamp.
        now: Reference epoch seconds, defaults to the current time.

    Returns:
        True if value is a positive integer no more than one day ahead of now.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    if now is None:
        now = int(time.time())
    return 0 < value <= now + MAX_FUTURE_SKEW_SECONDS
