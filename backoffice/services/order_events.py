"""Best-effort change feed for order records.

Observers subscribe by table and, optionally, by event type (``INSERT``,
``UPDATE``, ``DELETE``). Events are fanned out after the originating transaction
commits. Delivery is in-process and at-most-once: a handler that raises is logged
and skipped, so observers must be able to reconcile by re-reading current state.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from backoffice.utils.time import utc_now

logger = logging.getLogger(__name__)

EVENT_TYPES: tuple[str, ...] = ("INSERT", "UPDATE", "DELETE")


@dataclass(frozen=True)
class ChangeEvent:
    """Row-level change notification."""

    table: str
    event_type: str
    record: dict[str, Any]
    occurred_at: datetime = field(default_factory=utc_now)


ChangeHandler = Callable[[ChangeEvent], None]


class ChangeFeed:
    """Observer registry with synchronous fan-out."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[tuple[str, str | None, ChangeHandler]] = []

    def subscribe(self, table: str, handler: ChangeHandler, event_type: str | None = None) -> Callable[[], None]:
        """Register ``handler`` and return a callable that unregisters it."""
        if event_type is not None and event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown event type: {event_type!r}")
        entry = (table, event_type, handler)
        with self._lock:
            self._subscribers.append(entry)

        def _unsubscribe() -> None:
            with self._lock:
                if entry in self._subscribers:
                    self._subscribers.remove(entry)

        return _unsubscribe

    def publish(self, event: ChangeEvent) -> int:
        """Deliver ``event`` to matching subscribers; return how many succeeded."""
        with self._lock:
            targets = [
                handler
                for table, event_type, handler in self._subscribers
                if table == event.table and event_type in (None, event.event_type)
            ]

        delivered = 0
        for handler in targets:
            try:
                handler(event)
            except Exception:
                logger.exception("[EVENTS] Subscriber failed for %s %s", event.table, event.event_type)
                continue
            delivered += 1
        return delivered

    def clear(self) -> None:
        with self._lock:
            self._subscribers.clear()


change_feed: ChangeFeed = ChangeFeed()
