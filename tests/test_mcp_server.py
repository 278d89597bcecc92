"""Tests for MCP server tool functions."""

import json
from decimal import Decimal

from idleminer.storage import MemoryStore

from idleminer.mcp.server import (
    _GameHolder,
    _tool_buy_upgrade,
    _tool_export_snapshot,
    _tool_get_game_info,
    _tool_get_game_state,
    _tool_get_upgrades,
    _tool_go_offline,
    _tool_new_game,
    _tool_save,
    _tool_start_manual_mine,
    _tool_wait,
    _tool_withdraw,
    create_holder,
)

KEY = "cryptoMinerProSimulator"
START = 1_700_000_000_000


def _make_holder(balance: int = 0, store=None) -> _GameHolder:
    holder = create_holder(store=store, start_ms=START)
    if balance:
        state = holder.runtime.get_state()
        state.balance = Decimal(balance)
        state.mined = Decimal(balance)
    return holder


# ── get_game_info ────────────────────────────────────────────────────


class TestGetGameInfo:
    def test_returns_expected_structure(self):
        result = _tool_get_game_info(_make_holder())
        assert result["name"] == "Crypto Miner Pro"
        assert result["currency"] == "CR"
        assert result["tick_interval"] == 0.1
        assert result["min_withdrawal"] == 100.0
        assert result["mining_duration"] == 2.5

    def test_catalog(self):
        result = _tool_get_game_info(_make_holder())
        upgrades = {u["id"]: u for u in result["upgrades"]}
        assert list(upgrades) == ["gpu", "farm", "asic"]
        assert upgrades["farm"]["base_price"] == 1000.0
        assert upgrades["asic"]["hashrate_increment"] == 500


# ── get_game_state ───────────────────────────────────────────────────


class TestGetGameState:
    def test_initial_values(self):
        result = _tool_get_game_state(_make_holder())
        assert result["time_ms"] == START
        assert result["balance"] == 0.0
        assert result["hashrate"] == 0
        assert result["upgrades"] == {"gpu": 0, "farm": 0, "asic": 0}
        assert result["mining_in_progress"] is False
        assert result["last_save_timestamp"] is None

    def test_after_purchase(self):
        holder = _make_holder(balance=150)
        _tool_buy_upgrade(holder, "gpu")
        result = _tool_get_game_state(holder)
        assert result["balance"] == 50.0
        assert result["hashrate"] == 5
        assert result["accrual_per_tick"] == 0.0005
        assert result["last_save_timestamp"] == START


# ── buy_upgrade ──────────────────────────────────────────────────────


class TestBuyUpgrade:
    def test_success(self):
        holder = _make_holder(balance=1000)
        result = _tool_buy_upgrade(holder, "farm")
        assert result["success"] is True
        assert result["price_paid"] == 1000
        assert result["new_owned"] == 1
        assert result["hashrate"] == 50

    def test_price_rises(self):
        holder = _make_holder(balance=1000)
        _tool_buy_upgrade(holder, "gpu")
        upgrades = {u["id"]: u for u in _tool_get_upgrades(holder)["upgrades"]}
        assert upgrades["gpu"]["price"] == 115
        assert upgrades["gpu"]["owned"] == 1

    def test_insufficient_funds(self):
        result = _tool_buy_upgrade(_make_holder(), "asic")
        assert result["success"] is False
        assert result["error"] == "InsufficientFunds"
        assert result["price"] == 10000

    def test_unknown_upgrade(self):
        result = _tool_buy_upgrade(_make_holder(), "quantum")
        assert "error" in result


# ── get_upgrades ─────────────────────────────────────────────────────


class TestGetUpgrades:
    def test_time_to_afford_without_hashrate(self):
        upgrades = _tool_get_upgrades(_make_holder())["upgrades"]
        assert all(u["time_to_afford"] is None for u in upgrades)
        assert not any(u["affordable"] for u in upgrades)

    def test_time_to_afford_with_hashrate(self):
        holder = _make_holder(balance=100)
        _tool_buy_upgrade(holder, "gpu")
        upgrades = {u["id"]: u for u in _tool_get_upgrades(holder)["upgrades"]}
        # 115 at 0.005 per second
        assert upgrades["gpu"]["time_to_afford"] == 23000.0


# ── manual mining ────────────────────────────────────────────────────


class TestManualMine:
    def test_completes_after_wait(self):
        holder = _make_holder()
        result = _tool_start_manual_mine(holder)
        assert result["started"] is True
        assert result["expected_payout"] == 1.0

        _tool_wait(holder, 1.0)
        assert _tool_get_game_state(holder)["mining_progress"] == 40

        result = _tool_wait(holder, 1.5)
        assert result["balance"] == 1.0
        assert {"event": "mining-completed", "amount": 1.0} in result["events"]
        assert _tool_get_game_state(holder)["mining_in_progress"] is False

    def test_cannot_start_twice(self):
        holder = _make_holder()
        _tool_start_manual_mine(holder)
        result = _tool_start_manual_mine(holder)
        assert result["started"] is False
        assert "progress" in result

    def test_payout_scales_with_hashrate(self):
        holder = _make_holder(balance=10000)
        _tool_buy_upgrade(holder, "asic")
        assert _tool_start_manual_mine(holder)["expected_payout"] == 6.0


# ── withdraw ─────────────────────────────────────────────────────────


class TestWithdraw:
    def test_success(self):
        holder = _make_holder(balance=300)
        result = _tool_withdraw(holder, "150", "wallet-1")
        assert result["success"] is True
        assert result["new_balance"] == 150.0
        events = _tool_wait(holder, 0.1)["events"]
        assert {
            "event": "withdrawal-accepted",
            "amount": 150.0,
            "destination": "wallet-1",
        } in events

    def test_missing_destination(self):
        holder = _make_holder(balance=300)
        result = _tool_withdraw(holder, "150", "  ")
        assert result["success"] is False
        assert result["error"] == "MissingDestination"

    def test_not_a_number(self):
        holder = _make_holder(balance=300)
        result = _tool_withdraw(holder, "lots", "wallet-1")
        assert result["error"] == "BelowMinimumWithdrawal"
        assert _tool_get_game_state(holder)["balance"] == 300.0

    def test_more_than_balance(self):
        holder = _make_holder(balance=300)
        result = _tool_withdraw(holder, "301", "wallet-1")
        assert result["error"] == "InsufficientFunds"


# ── wait ─────────────────────────────────────────────────────────────


class TestWait:
    def test_accrual(self):
        holder = _make_holder(balance=10000)
        _tool_buy_upgrade(holder, "asic")
        result = _tool_wait(holder, 10)
        # 100 ticks at 0.05
        assert result["balance"] == 5.0
        assert result["mined"] == 10005.0

    def test_autosave(self):
        store = MemoryStore()
        holder = _make_holder(balance=100, store=store)
        _tool_buy_upgrade(holder, "gpu")
        _tool_wait(holder, 31)
        saved = json.loads(store.get(KEY))
        assert saved["lastSaveTimestamp"] > START

    def test_negative_seconds(self):
        assert "error" in _tool_wait(_make_holder(), -1)

    def test_exceeds_max(self):
        assert "error" in _tool_wait(_make_holder(), 3601)


# ── go_offline ───────────────────────────────────────────────────────


class TestGoOffline:
    def test_credits_offline_earnings(self):
        holder = _make_holder(balance=10000)
        _tool_buy_upgrade(holder, "asic")
        result = _tool_go_offline(holder, 100)
        assert result["offline_earnings"] == {
            "amount": 5.0,
            "elapsed_seconds": 100,
            "credited_seconds": 100,
        }
        assert result["balance"] == 5.0
        assert holder.runtime.running

    def test_capped_at_one_day(self):
        holder = _make_holder(balance=10000)
        _tool_buy_upgrade(holder, "asic")
        result = _tool_go_offline(holder, 100000)
        assert result["offline_earnings"]["credited_seconds"] == 86400
        assert result["offline_earnings"]["amount"] == 4320.0

    def test_no_earnings_without_hashrate(self):
        result = _tool_go_offline(_make_holder(), 60)
        assert result["offline_earnings"] is None

    def test_refused_while_mining(self):
        holder = _make_holder()
        _tool_start_manual_mine(holder)
        assert "error" in _tool_go_offline(holder, 60)

    def test_exceeds_max(self):
        assert "error" in _tool_go_offline(_make_holder(), 172801)


# ── save / export ────────────────────────────────────────────────────


class TestSaveAndExport:
    def test_save(self):
        store = MemoryStore()
        holder = _make_holder(balance=42, store=store)
        result = _tool_save(holder)
        assert result == {"success": True, "last_save_timestamp": START}
        assert json.loads(store.get(KEY))["balance"] == 42

    def test_export_snapshot(self):
        holder = _make_holder(balance=42)
        result = _tool_export_snapshot(holder)
        assert result["filename"] == "idleminer_save_2023-11-14.json"
        assert result["snapshot"]["balance"] == 42
        assert "saveTime" in result["snapshot"]


# ── new_game ─────────────────────────────────────────────────────────


class TestNewGame:
    def test_resets_state(self):
        store = MemoryStore()
        holder = _make_holder(balance=1000, store=store)
        _tool_buy_upgrade(holder, "gpu")
        result = _tool_new_game(holder)
        assert result["success"] is True
        state = _tool_get_game_state(holder)
        assert state["balance"] == 0.0
        assert state["upgrades"]["gpu"] == 0
        assert store.get(KEY) is None

    def test_refused_while_mining(self):
        holder = _make_holder()
        _tool_start_manual_mine(holder)
        assert "error" in _tool_new_game(holder)
