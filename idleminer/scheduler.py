from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from idleminer.clock import Clock, TimerHandle
    from idleminer.definition import GameConfig
    from idleminer.state import GameState

logger = logging.getLogger(__name__)


class AccrualScheduler:
    """Fixed-period accrual of hashrate into balance, with periodic autosave."""

    def __init__(
        self,
        state: GameState,
        config: GameConfig,
        clock: Clock,
        on_accrue: Callable[[Decimal], None] | None = None,
        autosave: Callable[[], None] | None = None,
    ) -> None:
        self.state = state
        self.config = config
        self.clock = clock
        self.on_accrue = on_accrue
        self.autosave = autosave
        self._handle: TimerHandle | None = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        """Begin ticking. A scheduler that is already running is restarted."""
        if self._handle is not None:
            self.stop()
        self._schedule_next()
        logger.debug("Accrual scheduler started (%.3fs period)", self.config.tick_interval)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            logger.debug("Accrual scheduler stopped")

    def tick(self) -> Decimal:
        """Credit one period of accrual. Returns the amount credited."""
        state = self.state
        if state.hashrate <= 0:
            return Decimal(0)

        amount = Decimal(state.hashrate) / self.config.accrual_divisor
        state.credit(amount)
        if self.on_accrue is not None:
            self.on_accrue(amount)

        if self._autosave_due() and self.autosave is not None:
            self.autosave()
        return amount

    def _autosave_due(self) -> bool:
        last = self.state.last_save_timestamp
        if last is None:
            return True
        return self.clock.now_ms() - last > self.config.autosave_interval_ms

    def _schedule_next(self) -> None:
        self._handle = self.clock.call_later(self.config.tick_interval, self._on_timer)

    def _on_timer(self) -> None:
        fired = self._handle
        self.tick()
        # Callbacks may have stopped or restarted the scheduler during the tick
        if self._handle is fired:
            self._schedule_next()
