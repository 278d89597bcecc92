"""MCP server wrapping GameRuntime for interactive AI playtesting.

The runtime is driven by a VirtualClock: game time only passes through the
``wait`` and ``go_offline`` tools, so a playtester can fast-forward through
accrual and offline catch-up deterministically.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from mcp.server.fastmcp import FastMCP

from idleminer.clock import VirtualClock
from idleminer.definition import GameDefinition, default_definition
from idleminer.events import Event
from idleminer.runtime import GameRuntime
from idleminer.storage import FileStore, KeyValueStore, MemoryStore

# Maximum seconds per wait() call (1 hour of 10 Hz ticks)
_MAX_WAIT = 3600
# Maximum seconds per go_offline() call (48 hours, twice the offline cap)
_MAX_OFFLINE = 172800

_RECORDED_EVENTS = (
    Event.MINING_COMPLETED,
    Event.OFFLINE_EARNINGS,
    Event.UPGRADE_PURCHASED,
    Event.WITHDRAWAL_ACCEPTED,
    Event.ERROR,
)


@dataclass
class _GameHolder:
    """Holds the active runtime plus everything needed to rebuild it."""

    definition: GameDefinition
    clock: VirtualClock
    store: KeyValueStore
    runtime: GameRuntime | None = None
    _event_log: list[dict[str, Any]] = field(default_factory=list)

    def launch(self) -> dict[str, Any] | None:
        """Create and start a fresh runtime against the shared clock and store."""
        self.runtime = GameRuntime(self.definition, clock=self.clock, store=self.store)
        for event in _RECORDED_EVENTS:
            self.runtime.subscribe(event, self._recorder(event))
        earnings = self.runtime.start()
        if earnings is None:
            return None
        return {
            "amount": _num(earnings.amount),
            "elapsed_seconds": earnings.elapsed_seconds,
            "credited_seconds": earnings.credited_seconds,
        }

    def drain_events(self) -> list[dict[str, Any]]:
        events, self._event_log = self._event_log, []
        return events

    def _recorder(self, event: Event):
        def _record(**payload: Any) -> None:
            entry: dict[str, Any] = {"event": event.value}
            for key, value in payload.items():
                entry[key] = _json_value(value)
            self._event_log.append(entry)

        return _record


def _num(value: Decimal, places: int = 4) -> float:
    return round(float(value), places)


def _json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return _num(value)
    if isinstance(value, Enum):
        return value.value
    return value


# ── Tool logic functions (testable without MCP protocol) ────────────


def _tool_get_game_info(holder: _GameHolder) -> dict[str, Any]:
    cfg = holder.definition.config
    return {
        "name": cfg.name,
        "currency": cfg.currency_symbol,
        "tick_interval": cfg.tick_interval,
        "accrual_divisor": cfg.accrual_divisor,
        "autosave_interval_ms": cfg.autosave_interval_ms,
        "offline_cap_seconds": cfg.offline_cap_seconds,
        "mining_duration": cfg.mining_duration,
        "min_withdrawal": _num(cfg.min_withdrawal),
        "upgrades": [
            {
                "id": u.id,
                "display_name": u.display_name,
                "base_price": _num(u.base_price),
                "hashrate_increment": u.hashrate_increment,
            }
            for u in holder.definition.upgrades
        ],
    }


def _tool_get_game_state(holder: _GameHolder) -> dict[str, Any]:
    rt = holder.runtime
    state = rt.get_state()
    return {
        "time_ms": holder.clock.now_ms(),
        "balance": _num(state.balance),
        "hashrate": state.hashrate,
        "mined": _num(state.mined),
        "accrual_per_tick": _num(rt.accrual_per_tick, 6),
        "upgrades": {uid: us.owned for uid, us in state.upgrades.items()},
        "mining_in_progress": rt.mining.in_progress,
        "mining_progress": rt.mining.progress,
        "last_save_timestamp": state.last_save_timestamp,
    }


def _tool_get_upgrades(holder: _GameHolder) -> dict[str, Any]:
    rt = holder.runtime
    result = []
    for status in rt.get_upgrade_statuses():
        time_to_afford = rt.compute_time_to_afford(status.id)
        result.append({
            "id": status.id,
            "display_name": status.display_name,
            "owned": status.owned,
            "price": status.price,
            "hashrate_increment": status.hashrate_increment,
            "affordable": status.affordable,
            "time_to_afford": (
                round(time_to_afford, 2) if time_to_afford is not None else None
            ),
        })
    return {"upgrades": result}


def _tool_buy_upgrade(holder: _GameHolder, upgrade_id: str) -> dict[str, Any]:
    if holder.definition.get_upgrade(upgrade_id) is None:
        return {"error": f"Unknown upgrade: {upgrade_id!r}"}

    result = holder.runtime.buy_upgrade(upgrade_id)
    if result.success:
        return {
            "success": True,
            "upgrade_id": upgrade_id,
            "price_paid": result.price,
            "new_owned": result.new_owned,
            "hashrate": holder.runtime.get_state().hashrate,
        }
    return {
        "success": False,
        "error": result.error.value,
        "reason": result.reason,
        "price": result.price,
    }


def _tool_start_manual_mine(holder: _GameHolder) -> dict[str, Any]:
    rt = holder.runtime
    started = rt.start_manual_mine()
    if not started:
        return {
            "started": False,
            "reason": "Mining already in progress",
            "progress": rt.mining.progress,
        }
    return {
        "started": True,
        "completes_in": holder.definition.config.mining_duration,
        "expected_payout": _num(rt.mining.payout()),
    }


def _tool_withdraw(
    holder: _GameHolder, amount: str, destination: str
) -> dict[str, Any]:
    result = holder.runtime.withdraw(amount, destination)
    if result.success:
        return {
            "success": True,
            "amount": _num(result.amount),
            "destination": result.destination,
            "new_balance": _num(holder.runtime.get_state().balance),
        }
    return {"success": False, "error": result.error.value, "reason": result.reason}


def _tool_wait(holder: _GameHolder, seconds: float) -> dict[str, Any]:
    if seconds <= 0:
        return {"error": "Seconds must be positive"}
    if seconds > _MAX_WAIT:
        return {"error": f"Cannot wait more than {_MAX_WAIT} seconds per call"}

    holder.clock.advance(seconds)
    state = holder.runtime.get_state()
    return {
        "waited": seconds,
        "balance": _num(state.balance),
        "mined": _num(state.mined),
        "hashrate": state.hashrate,
        "events": holder.drain_events(),
    }


def _tool_go_offline(holder: _GameHolder, seconds: float) -> dict[str, Any]:
    if seconds <= 0:
        return {"error": "Seconds must be positive"}
    if seconds > _MAX_OFFLINE:
        return {"error": f"Cannot stay offline more than {_MAX_OFFLINE} seconds"}
    if holder.runtime.mining.in_progress:
        return {"error": "Finish the manual mining action before going offline"}

    holder.runtime.shutdown()
    holder.clock.advance(seconds)
    earnings = holder.launch()
    holder.drain_events()
    state = holder.runtime.get_state()
    return {
        "offline_seconds": seconds,
        "offline_earnings": earnings,
        "balance": _num(state.balance),
    }


def _tool_save(holder: _GameHolder) -> dict[str, Any]:
    ok = holder.runtime.save()
    return {
        "success": ok,
        "last_save_timestamp": holder.runtime.get_state().last_save_timestamp,
    }


def _tool_export_snapshot(holder: _GameHolder) -> dict[str, Any]:
    snapshot = holder.runtime.export_snapshot()
    return {"filename": snapshot.filename, "snapshot": snapshot.payload}


def _tool_new_game(holder: _GameHolder) -> dict[str, Any]:
    if holder.runtime.mining.in_progress:
        return {"error": "Finish the manual mining action before starting over"}
    holder.runtime.stop()
    holder.store.delete(holder.definition.config.storage_key)
    holder.launch()
    holder.drain_events()
    return {"success": True, "message": "Game reset to initial state"}


# ── Server factory ──────────────────────────────────────────────────


def create_holder(
    definition: GameDefinition | None = None,
    store: KeyValueStore | None = None,
    start_ms: int | None = None,
) -> _GameHolder:
    holder = _GameHolder(
        definition=definition if definition is not None else default_definition(),
        clock=VirtualClock(
            start_ms if start_ms is not None else int(time.time() * 1000)
        ),
        store=store if store is not None else MemoryStore(),
    )
    holder.launch()
    return holder


def create_server(save_dir: str | None = None) -> FastMCP:
    """Create an MCP server wrapping a GameRuntime on a virtual clock."""
    store = FileStore(save_dir) if save_dir else MemoryStore()
    holder = create_holder(store=store)

    mcp = FastMCP(name=f"idleminer: {holder.definition.config.name}")

    @mcp.tool()
    def get_game_info() -> dict[str, Any]:
        """Get static game overview: tuning constants and the upgrade catalog."""
        return _tool_get_game_info(holder)

    @mcp.tool()
    def get_game_state() -> dict[str, Any]:
        """Get current state: balance, hashrate, mined total, owned upgrades, mining progress."""
        return _tool_get_game_state(holder)

    @mcp.tool()
    def get_upgrades() -> dict[str, Any]:
        """Get every upgrade with its current price, affordability and time-to-afford."""
        return _tool_get_upgrades(holder)

    @mcp.tool()
    def buy_upgrade(upgrade_id: str) -> dict[str, Any]:
        """Buy one unit of an upgrade (gpu, farm, asic)."""
        return _tool_buy_upgrade(holder, upgrade_id)

    @mcp.tool()
    def start_manual_mine() -> dict[str, Any]:
        """Start a 2.5s manual mining action. Use wait() to let it complete."""
        return _tool_start_manual_mine(holder)

    @mcp.tool()
    def withdraw(amount: str, destination: str) -> dict[str, Any]:
        """Withdraw from the balance to a wallet address (minimum 100)."""
        return _tool_withdraw(holder, amount, destination)

    @mcp.tool()
    def wait(seconds: float) -> dict[str, Any]:
        """Advance game time by the given seconds (max 3600), running accrual ticks."""
        return _tool_wait(holder, seconds)

    @mcp.tool()
    def go_offline(seconds: float) -> dict[str, Any]:
        """Save, close the game for the given seconds, then reload with offline earnings."""
        return _tool_go_offline(holder, seconds)

    @mcp.tool()
    def save() -> dict[str, Any]:
        """Save the game now."""
        return _tool_save(holder)

    @mcp.tool()
    def export_snapshot() -> dict[str, Any]:
        """Export a standalone snapshot of the game state."""
        return _tool_export_snapshot(holder)

    @mcp.tool()
    def new_game() -> dict[str, Any]:
        """Erase the save and start over."""
        return _tool_new_game(holder)

    return mcp
