from __future__ import annotations

import logging
from decimal import Decimal
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from idleminer.clock import Clock, TimerHandle
    from idleminer.definition import GameConfig
    from idleminer.state import GameState

logger = logging.getLogger(__name__)


class MiningStatus(Enum):
    IDLE = auto()
    IN_PROGRESS = auto()


class ManualMiningAction:
    """A single player-triggered mining attempt paced by a fixed countdown.

    Only one attempt can be in flight. Once started it always completes:
    progress advances ``mining_step_pct`` points every
    ``mining_step_interval`` seconds and the payout lands at 100%.
    """

    def __init__(
        self,
        state: GameState,
        config: GameConfig,
        clock: Clock,
        on_progress: Callable[[int], None] | None = None,
        on_complete: Callable[[Decimal], None] | None = None,
    ) -> None:
        self.state = state
        self.config = config
        self.clock = clock
        self.on_progress = on_progress
        self.on_complete = on_complete
        self.status = MiningStatus.IDLE
        self.progress = 0
        self._handle: TimerHandle | None = None

    @property
    def in_progress(self) -> bool:
        return self.status is MiningStatus.IN_PROGRESS

    def start(self) -> bool:
        """Begin a mining attempt. Returns False if one is already running."""
        if self.in_progress:
            return False
        self.status = MiningStatus.IN_PROGRESS
        self.progress = 0
        self._handle = self.clock.call_later(self.config.mining_step_interval, self._step)
        logger.debug("Manual mining started")
        return True

    def abandon(self) -> bool:
        """Drop an in-flight attempt without paying out. Returns False if idle.

        Only for tearing the game down; players cannot cancel a mine.
        """
        if not self.in_progress:
            return False
        if self._handle is not None:
            self._handle.cancel()
        logger.info("Manual mining abandoned at %d%%", self.progress)
        self._reset()
        return True

    def payout(self) -> Decimal:
        """Amount a completed attempt yields at the current hashrate."""
        cfg = self.config
        return cfg.manual_base_reward + Decimal(self.state.hashrate) / cfg.manual_hashrate_divisor

    def _step(self) -> None:
        self.progress = min(100, self.progress + self.config.mining_step_pct)
        if self.on_progress is not None:
            self.on_progress(self.progress)
        if self.progress >= 100:
            self._complete()
        else:
            self._handle = self.clock.call_later(
                self.config.mining_step_interval, self._step
            )

    def _complete(self) -> None:
        amount = self.payout()
        self.state.credit(amount)
        self._reset()
        logger.debug("Manual mining completed: %s", amount)
        if self.on_complete is not None:
            self.on_complete(amount)

    def _reset(self) -> None:
        self.status = MiningStatus.IDLE
        self.progress = 0
        self._handle = None
