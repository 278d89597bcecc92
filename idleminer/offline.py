from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from idleminer.definition import GameConfig
    from idleminer.state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OfflineEarnings:
    """Catch-up credit granted for time spent away."""

    amount: Decimal
    elapsed_seconds: int
    credited_seconds: int


class OfflineReconciler:
    """Credits earnings accrued between the last save and now."""

    def __init__(self, config: GameConfig) -> None:
        self.config = config

    def elapsed_seconds(self, state: GameState, now_ms: int) -> int | None:
        if state.last_save_timestamp is None:
            return None
        return max(0, (now_ms - state.last_save_timestamp) // 1000)

    def compute(self, hashrate: int, seconds: int) -> Decimal:
        """Earnings for *seconds* offline at *hashrate*, capped at the offline limit."""
        if hashrate == 0:
            return Decimal(0)
        capped = min(seconds, self.config.offline_cap_seconds)
        return Decimal(hashrate) / self.config.accrual_divisor * capped

    def apply(self, state: GameState, now_ms: int) -> OfflineEarnings | None:
        """Credit offline earnings to *state*. Returns None when nothing was credited."""
        elapsed = self.elapsed_seconds(state, now_ms)
        if elapsed is None:
            return None

        earnings = self.compute(state.hashrate, elapsed)
        if earnings <= 0:
            return None

        state.credit(earnings)
        credited = min(elapsed, self.config.offline_cap_seconds)
        logger.info(
            "Credited %s offline earnings for %ds away (%ds counted)",
            earnings,
            elapsed,
            credited,
        )
        return OfflineEarnings(
            amount=earnings, elapsed_seconds=elapsed, credited_seconds=credited
        )
