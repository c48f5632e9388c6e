"""Display formatting helpers."""

from datetime import datetime
from typing import Optional


def format_number(value: Optional[float], is_crypto: bool = False, decimals: int = 2) -> str:
    """Format a price for display.

    Args:
        value: Number to format.
        is_crypto: Show at least three decimals for sub-unit crypto prices.
        decimals: Decimal places for regular values.

    Returns:
        Formatted string with thousands separators, "M"/"B" suffixes for
        large values.
    """
    if value is None:
        return f"{0:.{decimals}f}"

    if is_crypto and 0 < value < 1:
        return f"{value:.{max(decimals, 3)}f}"

    if value >= 1_000_000_000:
        return f"{value / 1_000_000_000:,.2f} B"
    if value >= 1_000_000:
        return f"{value / 1_000_000:,.2f} M"

    return f"{value:,.{decimals}f}"


def calculate_percent_change(current: float, previous: Optional[float]) -> float:
    """Percentage change from previous to current; 0 without a previous value."""
    if not previous:
        return 0.0
    return (current - previous) / abs(previous) * 100


def format_change(change: float, change_percent: float) -> str:
    """Format a change with rich color markup."""
    color = "green" if change >= 0 else "red"
    sign = "+" if change >= 0 else ""
    return f"[{color}]{sign}{change:,.2f} ({sign}{change_percent:.2f}%)[/{color}]"


def format_relative(timestamp: datetime, now: Optional[datetime] = None) -> str:
    """Describe how long ago a timestamp was."""
    now = now or datetime.now()
    diff = int((now - timestamp).total_seconds())

    if diff < 60:
        return f"{diff} seconds ago"
    if diff < 3600:
        return f"{diff // 60} minutes ago"
    if diff < 86400:
        return f"{diff // 3600} hours ago"
    if diff < 2592000:
        return f"{diff // 86400} days ago"
    return timestamp.strftime("%Y-%m-%d")
