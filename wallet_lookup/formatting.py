"""Display helpers shared by the CLI and the Discord bot."""

import time
from decimal import ROUND_DOWN, Decimal


def short(value: str, n: int = 4) -> str:
    """Shorten an address or signature to ``abcd...wxyz``."""
    if len(value) <= 2 * n + 3:
        return value
    return f"{value[:n]}...{value[-n:]}"


def time_ago(timestamp: int, now: float | None = None) -> str:
    """Unix timestamp to a compact relative time like ``5m ago``."""
    seconds = max(0, int((time.time() if now is None else now) - timestamp))
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


def format_sol(balance: Decimal, places: int = 4) -> str:
    """Truncate (not round) a SOL balance for display."""
    quantum = Decimal(1).scaleb(-places)
    return f"{balance.quantize(quantum, rounding=ROUND_DOWN):,.{places}f}"


def format_amount(amount: Decimal) -> str:
    """Token amount without trailing zeros."""
    if amount == amount.to_integral_value():
        return f"{amount.quantize(Decimal(1)):,}"
    return f"{amount.normalize():,f}"
