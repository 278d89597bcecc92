"""Durable save/load of GameState and one-shot snapshot export.

The stored record is a single JSON object under ``GameConfig.storage_key``::

    {
      "balance": number, "hashrate": number, "mined": number,
      "upgrades": {"<id>": {"owned": int, "price": number, "hashrate": number}},
      "lastSaveTimestamp": number | null
    }

``price`` and ``hashrate`` inside an upgrade record are the catalog's base
price and hashrate increment. They are written for readability and ignored on
load; the running definition is authoritative.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Callable

from idleminer.errors import CorruptSaveData

if TYPE_CHECKING:
    from idleminer.clock import Clock
    from idleminer.definition import GameDefinition
    from idleminer.state import GameState
    from idleminer.storage import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """A standalone exported copy of the game state."""

    payload: dict[str, Any]
    save_time: str
    filename: str

    @property
    def text(self) -> str:
        return json.dumps(self.payload, indent=2)


@dataclass
class _Decoded:
    balance: Decimal = Decimal(0)
    mined: Decimal = Decimal(0)
    owned: dict[str, int] = field(default_factory=dict)
    hashrate: int | None = None
    last_save_timestamp: int | None = None


def _to_number(value: Decimal) -> int | float:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def serialize(state: GameState, definition: GameDefinition) -> dict[str, Any]:
    """Full persisted representation of *state*."""
    return {
        "balance": _to_number(state.balance),
        "hashrate": state.hashrate,
        "mined": _to_number(state.mined),
        "upgrades": {
            udef.id: {
                "owned": state.owned(udef.id),
                "price": _to_number(udef.base_price),
                "hashrate": udef.hashrate_increment,
            }
            for udef in definition.upgrades
        },
        "lastSaveTimestamp": state.last_save_timestamp,
    }


def _read_amount(data: dict[str, Any], key: str, quantum: Decimal) -> Decimal:
    value = data.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, (int, Decimal)):
        raise CorruptSaveData(f"{key!r} is not a number: {value!r}")
    amount = Decimal(value)
    if not amount.is_finite() or amount < 0:
        raise CorruptSaveData(f"{key!r} must be a non-negative number: {value!r}")
    # Floats written by save() come back as the exact ledger step
    try:
        return amount.quantize(quantum)
    except InvalidOperation as exc:
        raise CorruptSaveData(f"{key!r} is out of range: {value!r}") from exc


def _read_count(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, Decimal)):
        raise CorruptSaveData(f"{what} is not a number: {value!r}")
    if isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            raise CorruptSaveData(f"{what} is not a whole number: {value!r}")
        value = int(value)
    if value < 0:
        raise CorruptSaveData(f"{what} cannot be negative: {value!r}")
    return value


def decode(raw: str, definition: GameDefinition) -> _Decoded:
    """Parse and validate a stored payload. Raises CorruptSaveData."""
    try:
        data = json.loads(raw, parse_float=Decimal)
    except ValueError as exc:
        raise CorruptSaveData(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise CorruptSaveData(f"Expected an object, got {type(data).__name__}")

    quantum = definition.config.amount_quantum
    decoded = _Decoded(
        balance=_read_amount(data, "balance", quantum),
        mined=_read_amount(data, "mined", quantum),
    )

    if data.get("hashrate") is not None:
        decoded.hashrate = _read_count(data["hashrate"], "'hashrate'")

    upgrades = data.get("upgrades", {})
    if upgrades is None:
        upgrades = {}
    if not isinstance(upgrades, dict):
        raise CorruptSaveData(f"'upgrades' is not an object: {upgrades!r}")
    for uid, record in upgrades.items():
        if definition.get_upgrade(uid) is None:
            logger.debug("Ignoring saved upgrade %r not in catalog", uid)
            continue
        if not isinstance(record, dict):
            raise CorruptSaveData(f"Upgrade {uid!r} is not an object: {record!r}")
        decoded.owned[uid] = _read_count(record.get("owned", 0), f"{uid!r} owned")

    ts = data.get("lastSaveTimestamp")
    if ts is not None:
        decoded.last_save_timestamp = _read_count(ts, "'lastSaveTimestamp'")

    return decoded


class PersistenceGateway:
    """Saves and restores one GameState through a key-value store."""

    def __init__(
        self,
        state: GameState,
        definition: GameDefinition,
        store: KeyValueStore,
        clock: Clock,
        on_saved: Callable[[int], None] | None = None,
    ) -> None:
        self.state = state
        self.definition = definition
        self.store = store
        self.clock = clock
        self.on_saved = on_saved

    @property
    def key(self) -> str:
        return self.definition.config.storage_key

    def save(self) -> bool:
        """Stamp and persist the state. Returns False if the store write failed."""
        timestamp = self.clock.now_ms()
        data = serialize(self.state, self.definition)
        data["lastSaveTimestamp"] = timestamp
        try:
            self.store.set(self.key, json.dumps(data))
        except OSError:
            logger.exception("Failed to save game under %r", self.key)
            return False
        self.state.last_save_timestamp = timestamp
        logger.debug("Game saved at %d", timestamp)
        if self.on_saved is not None:
            self.on_saved(timestamp)
        return True

    def load(self) -> bool:
        """Restore saved state. Returns False (state untouched) if none is usable."""
        try:
            raw = self.store.get(self.key)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read saved game %r: %s", self.key, exc)
            return False
        if raw is None:
            logger.info("No saved game under %r; starting fresh", self.key)
            return False

        try:
            decoded = decode(raw, self.definition)
        except CorruptSaveData as exc:
            logger.warning("Ignoring corrupt save data under %r: %s", self.key, exc)
            return False

        self._apply(decoded)
        logger.info(
            "Loaded saved game: balance=%s hashrate=%d",
            self.state.balance,
            self.state.hashrate,
        )
        return True

    def export_snapshot(self) -> Snapshot:
        """Portable copy of the current state. Touches neither state nor store."""
        now = datetime.fromtimestamp(self.clock.now_ms() / 1000, tz=timezone.utc)
        save_time = now.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        payload = serialize(self.state, self.definition)
        payload["saveTime"] = save_time
        return Snapshot(
            payload=payload,
            save_time=save_time,
            filename=f"idleminer_save_{now.date().isoformat()}.json",
        )

    def _apply(self, decoded: _Decoded) -> None:
        state = self.state
        state.balance = decoded.balance
        state.mined = decoded.mined
        for udef in self.definition.upgrades:
            state.upgrades[udef.id].owned = decoded.owned.get(udef.id, 0)
        state.hashrate = state.derived_hashrate(self.definition)
        if decoded.hashrate is not None and decoded.hashrate != state.hashrate:
            logger.warning(
                "Saved hashrate %d disagrees with owned upgrades; using %d",
                decoded.hashrate,
                state.hashrate,
            )
        state.last_save_timestamp = decoded.last_save_timestamp
