"""Observer bus — synchronous fan-out of center events to registered observers."""

from __future__ import annotations

import logging
from typing import Callable, Protocol, runtime_checkable

from ..types import CenterEvent

logger = logging.getLogger(__name__)


@runtime_checkable
class Observer(Protocol):
    def observe(self, event: CenterEvent) -> None: ...


class CallbackObserver:
    """Adapts a plain callable to the Observer protocol."""

    def __init__(self, fn: Callable[[CenterEvent], None]) -> None:
        self._fn = fn

    def observe(self, event: CenterEvent) -> None:
        self._fn(event)


class ObserverBus:
    """Delivers every event to every observer in registration order.

    Observer failures are logged and swallowed so they never reach the turn
    that emitted the event.
    """

    def __init__(self, observers: list[Observer] | None = None) -> None:
        self._observers: list[Observer] = list(observers or [])

    def add(self, observer: Observer | Callable[[CenterEvent], None]) -> Observer:
        if not isinstance(observer, Observer):
            observer = CallbackObserver(observer)
        self._observers.append(observer)
        return observer

    def remove(self, observer: Observer) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    @property
    def observers(self) -> list[Observer]:
        return list(self._observers)

    def emit(self, event: CenterEvent) -> None:
        for observer in list(self._observers):
            try:
                observer.observe(event)
            except Exception:
                logger.exception("Observer %r failed on %s", observer, getattr(event, "type", "?"))
