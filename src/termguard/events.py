"""Typed event channels with synchronous, ordered delivery."""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[T], None]


class Subscription:
    """Handle returned by Emitter.subscribe; dispose() detaches the listener."""

    def __init__(self, emitter: Emitter, listener: Callable) -> None:
        self._emitter = emitter
        self._listener = listener
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._emitter._remove(self._listener)


class Emitter(Generic[T]):
    def __init__(self, name: str = "") -> None:
        self.name = name
        self._listeners: list[Listener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self, listener)

    def fire(self, event: T) -> None:
        # Snapshot so listeners may unsubscribe while being notified.
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener for %s event raised", self.name or "unnamed")

    def dispose(self) -> None:
        self._listeners.clear()

    def _remove(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass
