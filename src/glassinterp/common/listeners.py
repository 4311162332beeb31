"""Synchronous listener registry used by the pipeline components."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from glassinterp.common.logging import get_logger

T = TypeVar("T")

Listener = Callable[[T], None]
Unsubscribe = Callable[[], None]


class ListenerRegistry(Generic[T]):
    """Fan-out of values to subscribed callbacks.

    A failing listener is logged and skipped; the remaining listeners
    still receive the value.
    """

    def __init__(self, channel: str) -> None:
        self.channel = channel
        self._listeners: list[Listener[T]] = []
        self.logger = get_logger("listeners", channel=channel)

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener[T]) -> Unsubscribe:
        """Register a listener.

        Args:
            listener: Callback receiving each emitted value.

        Returns:
            Function removing the listener. Calling it twice is harmless.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, value: T) -> None:
        """Deliver a value to every current listener."""
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception as e:
                self.logger.exception("listener_error", error=str(e))

    def clear(self) -> None:
        self._listeners.clear()
