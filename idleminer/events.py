from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Event(str, Enum):
    """Channels the engine emits on. Payloads are keyword arguments."""

    BALANCE_CHANGED = "balance-changed"  # balance, mined, hashrate
    MINING_PROGRESS = "mining-progress"  # progress
    MINING_COMPLETED = "mining-completed"  # amount
    OFFLINE_EARNINGS = "offline-earnings"  # amount, elapsed_seconds
    UPGRADE_PURCHASED = "upgrade-purchased"  # upgrade, increment
    WITHDRAWAL_ACCEPTED = "withdrawal-accepted"  # amount, destination
    ERROR = "error"  # kind, message
    GAME_SAVED = "game-saved"  # timestamp


Handler = Callable[..., Any]


class EventBus:
    """Synchronous publish/subscribe channel between engine and front ends.

    Handlers run in subscription order on the caller's stack. A failing
    handler is logged and skipped.
    """

    def __init__(self) -> None:
        self._handlers: dict[Event, list[Handler]] = {}

    def subscribe(self, event: Event, handler: Handler) -> None:
        event = Event(event)
        handlers = self._handlers.setdefault(event, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug("Subscribed %r to %s", handler, event.value)

    def unsubscribe(self, event: Event, handler: Handler) -> None:
        event = Event(event)
        handlers = self._handlers.get(event)
        if not handlers:
            return
        if handler in handlers:
            handlers.remove(handler)
        if not handlers:
            del self._handlers[event]

    def clear(self) -> None:
        self._handlers.clear()

    def emit(self, event: Event, **payload: Any) -> None:
        event = Event(event)
        handlers = list(self._handlers.get(event, []))
        if not handlers:
            return
        logger.debug("Emitting %s to %d handler(s): %s", event.value, len(handlers), payload)
        for handler in handlers:
            try:
                handler(**payload)
            except Exception:
                logger.exception("Handler %r failed for %s", handler, event.value)
