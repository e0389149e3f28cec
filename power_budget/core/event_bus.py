# power_budget/core/event_bus.py
"""
Observer bus owned by an allocator.

Status reports and lifecycle events are published here instead of being
printed. Handlers subscribed to ``ALL_EVENTS`` see every event, in order.
"""

import logging
from collections import Counter

logger = logging.getLogger(__name__)

ALL_EVENTS = "*"


class EventBus:
    """Synchronous publish/subscribe for allocator events.

    Args:
        source (str, optional): Name stamped on events published without
            an explicit source, normally the owning allocator's name.
    """

    def __init__(self, source=None):
        self.source = source
        self.subscribers = {}
        self.published = Counter()
        self.debug_mode = False

    def subscribe(self, event_type, callback):
        """Register ``callback`` for ``event_type`` (or ``ALL_EVENTS``)."""
        self.subscribers.setdefault(event_type, []).append(callback)
        return callback

    def unsubscribe(self, event_type, callback):
        handlers = self.subscribers.get(event_type, [])
        if callback in handlers:
            handlers.remove(callback)
            return True
        return False

    def publish(self, event_type, data=None, source=None):
        """Deliver an event to its own handlers, then to ``ALL_EVENTS`` handlers.

        A failing handler is logged and skipped; it never interrupts the
        allocator that published the event.

        Returns:
            int: Number of handlers that ran without raising.
        """
        event = {"type": event_type, "data": data, "source": source or self.source}
        self.published[event_type] += 1

        if self.debug_mode:
            logger.debug(f"{event['source'] or 'bus'}: {event_type} {data!r}")

        handlers = list(self.subscribers.get(event_type, []))
        if event_type != ALL_EVENTS:
            handlers += self.subscribers.get(ALL_EVENTS, [])

        delivered = 0
        for callback in handlers:
            try:
                callback(event)
                delivered += 1
            except Exception as e:
                logger.error(f"Handler for {event_type} failed: {e}")
        return delivered

    def clear(self):
        """Drop every subscription and reset the published counts."""
        self.subscribers = {}
        self.published.clear()

    def enable_debug(self, enabled=True):
        """Log every published event at DEBUG level."""
        self.debug_mode = enabled
