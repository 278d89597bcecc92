# idleminer — Idle Crypto Mining Game Engine

from idleminer.errors import ErrorKind, UnknownUpgradeType, CorruptSaveData
from idleminer.cost_scaling import CostScaling
from idleminer.upgrade import UpgradeDef, UpgradeState, UpgradeStatus
from idleminer.definition import GameConfig, GameDefinition, default_definition
from idleminer.pricing import price
from idleminer.state import GameState
from idleminer.clock import Clock, TimerHandle, VirtualClock, AsyncioClock
from idleminer.events import Event, EventBus
from idleminer.scheduler import AccrualScheduler
from idleminer.mining import ManualMiningAction, MiningStatus
from idleminer.offline import OfflineEarnings, OfflineReconciler
from idleminer.purchase import PurchaseResult, purchase_upgrade
from idleminer.withdrawal import WithdrawalResult, request_withdrawal
from idleminer.storage import KeyValueStore, MemoryStore, FileStore
from idleminer.persistence import PersistenceGateway, Snapshot
from idleminer.export import write_snapshot
from idleminer.runtime import GameRuntime
from idleminer.formatting import format_status_report

__all__ = [
    # Errors
    "ErrorKind",
    "UnknownUpgradeType",
    "CorruptSaveData",
    # Pricing
    "CostScaling",
    "price",
    # Data model
    "UpgradeDef",
    "UpgradeState",
    "UpgradeStatus",
    "GameConfig",
    "GameDefinition",
    "default_definition",
    "GameState",
    # Timing
    "Clock",
    "TimerHandle",
    "VirtualClock",
    "AsyncioClock",
    # Events
    "Event",
    "EventBus",
    # Engine components
    "AccrualScheduler",
    "ManualMiningAction",
    "MiningStatus",
    "OfflineEarnings",
    "OfflineReconciler",
    "PurchaseResult",
    "purchase_upgrade",
    "WithdrawalResult",
    "request_withdrawal",
    # Persistence
    "KeyValueStore",
    "MemoryStore",
    "FileStore",
    "PersistenceGateway",
    "Snapshot",
    "write_snapshot",
    # Runtime
    "GameRuntime",
    # Formatting
    "format_status_report",
]
