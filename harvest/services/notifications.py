"""
Synchronous publish/subscribe fan-out of newly processed readings.

``publish`` calls every registered callback in subscription order. A failing
callback is logged and skipped; it never prevents delivery to the remaining
subscribers and never propagates to the publisher. The subscriber list is
copied under a lock before delivery, so callbacks may subscribe or
unsubscribe (including themselves) while a publish is in progress.

CHANGELOG:
- 2026-10-18: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from harvest.models import ProcessedReading

logger = logging.getLogger(__name__)

Callback = Callable[[ProcessedReading], None]
Unsubscribe = Callable[[], None]


class _Subscription:
    """Handle identifying one registration of a callback."""

    __slots__ = ("callback",)

    def __init__(self, callback: Callback) -> None:
        self.callback = callback


class NotificationBus:
    """Registry of reading observers with synchronous delivery."""

    def __init__(self) -> None:
        self._subscriptions: list[_Subscription] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Callback) -> Unsubscribe:
        """Register *callback* and return a function that removes it.

        The returned function is idempotent: calling it after the
        subscription was already removed is a no-op.
        """
        subscription = _Subscription(callback)
        with self._lock:
            self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            with self._lock:
                for index, existing in enumerate(self._subscriptions):
                    if existing is subscription:
                        del self._subscriptions[index]
                        break

        return unsubscribe

    def publish(self, reading: ProcessedReading) -> int:
        """Deliver *reading* to every current subscriber.

        Args:
            reading: The newly processed reading.

        Returns:
            int: Number of callbacks that completed without raising.
        """
        with self._lock:
            subscriptions = list(self._subscriptions)

        delivered = 0
        for subscription in subscriptions:
            try:
                subscription.callback(reading)
            except Exception:
                logger.error(
                    "Subscriber %r failed for reading %s",
                    subscription.callback,
                    reading.id,
                    exc_info=True,
                )
            else:
                delivered += 1
        return delivered

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)
