from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from idleminer.clock import Clock, VirtualClock
from idleminer.definition import GameDefinition, default_definition
from idleminer.errors import UnknownUpgradeType
from idleminer.events import Event, EventBus, Handler
from idleminer.mining import ManualMiningAction
from idleminer.offline import OfflineEarnings, OfflineReconciler
from idleminer.persistence import PersistenceGateway, Snapshot
from idleminer.purchase import PurchaseResult, purchase_upgrade
from idleminer.scheduler import AccrualScheduler
from idleminer.state import GameState
from idleminer.storage import KeyValueStore, MemoryStore
from idleminer.upgrade import UpgradeStatus
from idleminer.withdrawal import WithdrawalResult, request_withdrawal

logger = logging.getLogger(__name__)


class GameRuntime:
    """Authoritative game logic processor.

    Owns exactly one :class:`GameState` and is the only thing that mutates it.
    Front ends drive it through the command methods and observe it through
    :attr:`events`.
    """

    def __init__(
        self,
        definition: GameDefinition | None = None,
        clock: Clock | None = None,
        store: KeyValueStore | None = None,
        events: EventBus | None = None,
    ) -> None:
        definition = definition if definition is not None else default_definition()
        errors = definition.validate()
        if errors:
            raise ValueError(
                "Invalid GameDefinition:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        self.definition = definition
        self.config = definition.config
        self.clock = clock if clock is not None else VirtualClock()
        self.store = store if store is not None else MemoryStore()
        self.events = events if events is not None else EventBus()
        self.state = GameState(definition)

        self.persistence = PersistenceGateway(
            self.state,
            definition,
            self.store,
            self.clock,
            on_saved=self._on_saved,
        )
        self.reconciler = OfflineReconciler(self.config)
        self.scheduler = AccrualScheduler(
            self.state,
            self.config,
            self.clock,
            on_accrue=self._on_accrue,
            autosave=self.save,
        )
        self.mining = ManualMiningAction(
            self.state,
            self.config,
            self.clock,
            on_progress=self._on_mining_progress,
            on_complete=self._on_mined,
        )
        self._booted = False

    # ── Lifecycle ────────────────────────────────────────────────────

    def boot(self) -> OfflineEarnings | None:
        """Load the saved game and credit offline earnings. Startup only."""
        if self._booted:
            raise RuntimeError("GameRuntime has already been booted")
        self._booted = True

        if not self.load():
            return None

        earnings = self.reconciler.apply(self.state, self.clock.now_ms())
        if earnings is not None:
            self.events.emit(
                Event.OFFLINE_EARNINGS,
                amount=earnings.amount,
                elapsed_seconds=earnings.elapsed_seconds,
            )
            self._emit_balance()
        return earnings

    def start(self) -> OfflineEarnings | None:
        """Boot if needed, then begin automatic accrual."""
        earnings = self.boot() if not self._booted else None
        self.scheduler.start()
        return earnings

    def stop(self) -> None:
        self.scheduler.stop()

    def shutdown(self) -> None:
        """Stop accruing and write the on-exit save.

        A manual mine still in flight is dropped unpaid so nothing lands
        after the final save.
        """
        self.mining.abandon()
        self.stop()
        self.save()

    @property
    def running(self) -> bool:
        return self.scheduler.running

    # ── Player commands ──────────────────────────────────────────────

    def save(self) -> bool:
        return self.persistence.save()

    def load(self) -> bool:
        loaded = self.persistence.load()
        if loaded:
            self._emit_balance()
        return loaded

    def export_snapshot(self) -> Snapshot:
        return self.persistence.export_snapshot()

    def start_manual_mine(self) -> bool:
        """Begin a manual mining attempt. False if one is already in flight."""
        return self.mining.start()

    def buy_upgrade(self, upgrade_id: str) -> PurchaseResult:
        result = purchase_upgrade(self.state, self.definition, upgrade_id)
        if not result.success:
            self._emit_error(result.error, result.reason)
            return result

        self.events.emit(
            Event.UPGRADE_PURCHASED,
            upgrade=upgrade_id,
            increment=result.hashrate_increment,
        )
        self._emit_balance()
        self.save()
        return result

    def withdraw(self, amount: Any, destination: str | None) -> WithdrawalResult:
        result = request_withdrawal(self.state, self.config, amount, destination)
        if not result.success:
            self._emit_error(result.error, result.reason)
            return result

        self.events.emit(
            Event.WITHDRAWAL_ACCEPTED,
            amount=result.amount,
            destination=result.destination,
        )
        self._emit_balance()
        self.save()
        return result

    def subscribe(self, event: Event, handler: Handler) -> None:
        self.events.subscribe(event, handler)

    # ── Queries ──────────────────────────────────────────────────────

    def get_state(self) -> GameState:
        """Return live reference to game state."""
        return self.state

    @property
    def accrual_per_tick(self) -> Decimal:
        return Decimal(self.state.hashrate) / self.config.accrual_divisor

    def compute_price(self, upgrade_id: str) -> int:
        udef = self.definition.get_upgrade(upgrade_id)
        if udef is None:
            raise UnknownUpgradeType(upgrade_id)
        return udef.price(self.state.owned(upgrade_id))

    def get_upgrade_statuses(self) -> list[UpgradeStatus]:
        result: list[UpgradeStatus] = []
        for udef in self.definition.upgrades:
            price = udef.price(self.state.owned(udef.id))
            result.append(
                UpgradeStatus(
                    id=udef.id,
                    display_name=udef.display_name,
                    owned=self.state.owned(udef.id),
                    price=price,
                    hashrate_increment=udef.hashrate_increment,
                    affordable=self.state.balance >= price,
                )
            )
        return result

    def compute_time_to_afford(self, upgrade_id: str) -> float | None:
        """Seconds of automatic accrual until affordable. None if never."""
        needed = self.compute_price(upgrade_id) - self.state.balance
        if needed <= 0:
            return 0.0
        if self.state.hashrate <= 0:
            return None
        per_second = self.accrual_per_tick * self.config.tick_rate
        return float(needed / per_second)

    # ── Private helpers ──────────────────────────────────────────────

    def _emit_balance(self) -> None:
        self.events.emit(
            Event.BALANCE_CHANGED,
            balance=self.state.balance,
            mined=self.state.mined,
            hashrate=self.state.hashrate,
        )

    def _emit_error(self, kind, message: str) -> None:
        logger.debug("Rejected command: %s (%s)", kind.value, message)
        self.events.emit(Event.ERROR, kind=kind, message=message)

    def _on_accrue(self, amount: Decimal) -> None:
        self._emit_balance()

    def _on_mining_progress(self, progress: int) -> None:
        self.events.emit(Event.MINING_PROGRESS, progress=progress)

    def _on_mined(self, amount: Decimal) -> None:
        self.events.emit(Event.MINING_COMPLETED, amount=amount)
        self._emit_balance()
        self.save()

    def _on_saved(self, timestamp: int) -> None:
        self.events.emit(Event.GAME_SAVED, timestamp=timestamp)
