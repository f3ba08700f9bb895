"""
Name: In-Process Event Channel

Responsibilities:
  - Fan out lifecycle events to every subscriber, in subscription order
  - Isolate subscribers: one failing subscriber never affects the others
    or the publisher

Notes:
  - Synchronous, at most once, no retries
"""

from __future__ import annotations

from threading import Lock
from typing import Callable

from ...crosscutting.logger import logger
from ...domain.events import LifecycleEvent

Subscriber = Callable[[LifecycleEvent], None]


class InProcessEventChannel:
    """R: LifecycleEventSink that calls subscribers inline."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._subscribers: list[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> None:
        with self._lock:
            self._subscribers.append(subscriber)

    def publish(self, event: LifecycleEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers)

        for subscriber in subscribers:
            try:
                subscriber(event)
            except Exception as exc:
                logger.error(
                    "Lifecycle event subscriber failed",
                    exc_info=True,
                    extra={
                        "event_type": type(event).__name__,
                        "task_id": event.task_id,
                        "error": str(exc),
                    },
                )
