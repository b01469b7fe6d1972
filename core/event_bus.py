"""
Event bus for domain events.

Synchronous in-process pub/sub. Handlers run in the publisher's thread.
Handler errors are logged and never propagate: the row write that
triggered the event has already committed.
"""

import logging
from typing import Callable, Dict, List

from core.events import DomainEvent

logger = logging.getLogger(__name__)


class EventBus:
    """Subscribe by event class name, publish by event instance."""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}

    def subscribe(self, event_type: str, callback: Callable):
        """
        Args:
            event_type: Event class name, e.g. 'TicketStatusChanged'
            callback: Called with the event instance
        """
        self._subscribers.setdefault(event_type, []).append(callback)

    def subscriber_count(self, event_type: str) -> int:
        return len(self._subscribers.get(event_type, []))

    def publish(self, event: DomainEvent):
        """Call every subscriber of the event's type in subscription order."""
        event_type = event.__class__.__name__

        for callback in self._subscribers.get(event_type, []):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Handler %s failed for %s (event_id=%s)",
                    getattr(callback, "__name__", repr(callback)),
                    event_type,
                    event.event_id,
                )
