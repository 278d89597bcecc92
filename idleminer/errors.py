from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Error taxonomy shared by results and ``error`` events."""

    INSUFFICIENT_FUNDS = "InsufficientFunds"
    MISSING_DESTINATION = "MissingDestination"
    BELOW_MINIMUM_WITHDRAWAL = "BelowMinimumWithdrawal"
    CORRUPT_SAVE_DATA = "CorruptSaveData"
    UNKNOWN_UPGRADE_TYPE = "UnknownUpgradeType"


class UnknownUpgradeType(KeyError):
    """Raised when an upgrade id outside the catalog reaches the engine."""

    kind = ErrorKind.UNKNOWN_UPGRADE_TYPE

    def __init__(self, upgrade_id: str) -> None:
        super().__init__(upgrade_id)
        self.upgrade_id = upgrade_id

    def __str__(self) -> str:
        return f"Unknown upgrade type: {self.upgrade_id!r}"


class CorruptSaveData(ValueError):
    """A persisted payload could not be decoded into a GameState.

    Only ever raised inside the persistence layer; ``load()`` absorbs it.
    """

    kind = ErrorKind.CORRUPT_SAVE_DATA
