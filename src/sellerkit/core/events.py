"""Observer registry for gateway request/response/error events."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from typing import Any

from sellerkit.models.enums import EventPhase
from sellerkit.models.events import ObservabilityEvent

logger = logging.getLogger("sellerkit.events")

Observer = Callable[[Any], Any]


def _safe_invoke(cb: Observer, event: ObservabilityEvent) -> None:
    """Invoke an observer, scheduling coroutines as tasks.

    Failures are logged and never propagate to the caller.
    """
    try:
        result = cb(event)
        if asyncio.coroutines.iscoroutine(result):
            try:
                asyncio.get_running_loop().create_task(result)
            except RuntimeError:
                result.close()
                logger.warning(
                    "Async observer %r called outside an event loop; skipped",
                    cb,
                )
    except Exception:
        logger.exception(
            "Observer error",
            extra={"correlation_id": getattr(event, "correlation_id", None)},
        )


class EventBus:
    """Holds one ordered observer list per :class:`EventPhase`.

    Registration is append-only and guarded by a lock; emission iterates a
    snapshot so observers registered mid-emit only see later events.
    """

    def __init__(self) -> None:
        self._observers: dict[EventPhase, list[Observer]] = {phase: [] for phase in EventPhase}
        self._lock = threading.Lock()

    def subscribe(self, phase: EventPhase | str, cb: Observer) -> None:
        """Append *cb* to the observers of *phase*."""
        if not callable(cb):
            raise TypeError(f"Observer must be callable, got {type(cb).__name__}")
        with self._lock:
            self._observers[EventPhase(phase)].append(cb)

    def observers(self, phase: EventPhase | str) -> tuple[Observer, ...]:
        with self._lock:
            return tuple(self._observers[EventPhase(phase)])

    def emit(self, phase: EventPhase | str, event: ObservabilityEvent) -> None:
        """Deliver *event* to every observer of *phase* in registration order."""
        for cb in self.observers(phase):
            _safe_invoke(cb, event)

    def clear(self) -> None:
        with self._lock:
            for observers in self._observers.values():
                observers.clear()
