from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from idleminer.offline import OfflineEarnings
    from idleminer.runtime import GameRuntime


def format_amount(amount: Decimal, places: int = 2) -> str:
    return f"{Decimal(amount):,.{places}f}"


def format_duration(seconds: int) -> str:
    """Compact ``1h 2m 3s`` rendering; zero hours and minutes are omitted."""
    hours, rem = divmod(int(seconds), 3600)
    minutes, secs = divmod(rem, 60)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    parts.append(f"{secs}s")
    return " ".join(parts)


def format_offline_earnings(earnings: OfflineEarnings, symbol: str = "CR") -> str:
    return (
        f"Offline earnings: {format_amount(earnings.amount)} {symbol} "
        f"({format_duration(earnings.elapsed_seconds)})"
    )


def format_status_report(runtime: GameRuntime) -> str:
    """Format the current game state for console output."""
    state = runtime.get_state()
    symbol = runtime.config.currency_symbol
    lines: list[str] = []

    lines.append("=" * 20 + f" {runtime.config.name} " + "=" * 20)
    lines.append(f"Balance:      {format_amount(state.balance)} {symbol}")
    lines.append(f"Hashrate:     {state.hashrate:,} H/s")
    lines.append(f"Total mined:  {format_amount(state.mined)} {symbol}")
    lines.append(f"Mining speed: {format_amount(runtime.accrual_per_tick, 6)} {symbol}")
    lines.append("")

    lines.append("UPGRADES:")
    for status in runtime.get_upgrade_statuses():
        marker = "  *" if status.affordable else "   "
        lines.append(
            f"{marker} {status.display_name:.<20s} owned {status.owned:<4d} "
            f"price {status.price:,} {symbol} (+{status.hashrate_increment} H/s)"
        )

    return "\n".join(lines)
