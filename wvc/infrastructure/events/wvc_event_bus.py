"""
WVC Event Bus - Thread-safe publish/subscribe for version control events.

Design Decisions:
- Thread-safe via RLock so handlers may publish further events
- Bounded history to prevent unbounded growth in long sessions
- Subscribing to a base class receives every subclass event, so
  ``subscribe(WVCEvent, handler)`` observes everything

Usage:
    bus = WVCEventBus()
    bus.subscribe(CommitCreatedEvent, handle_commit)
    bus.publish(CommitCreatedEvent(commit_hash="0000abcd"))
    recent = bus.get_history(limit=10)
"""

from typing import Type, Callable, List, Dict, Optional, Any
from threading import RLock
from datetime import datetime
from collections import deque
import logging

from wvc.domain.events import WVCEvent

logger = logging.getLogger(__name__)


class WVCEventBus:
    """
    Thread-safe event bus with bounded history.

    Handler exceptions are logged and never propagate to the publisher;
    events are only published after engine state has been swapped in.
    """

    def __init__(self, max_history: int = 1000):
        """
        Initialize the bus.

        Args:
            max_history: Maximum events kept in history
        """
        self._lock = RLock()
        self._subscribers: Dict[Type, List[Callable[[Any], None]]] = {}
        self._event_history: deque = deque(maxlen=max_history)
        self._max_history = max_history

    # ═══════════════════════════════════════════════════════════════
    # Core Pub/Sub Operations
    # ═══════════════════════════════════════════════════════════════

    def subscribe(
        self,
        event_type: Type[WVCEvent],
        handler: Callable[[WVCEvent], None]
    ) -> None:
        """
        Subscribe to an event type and its subclasses.

        Subscribing the same handler twice is a no-op.
        """
        with self._lock:
            handlers = self._subscribers.setdefault(event_type, [])
            if handler not in handlers:
                handlers.append(handler)

    def unsubscribe(
        self,
        event_type: Type[WVCEvent],
        handler: Callable[[WVCEvent], None]
    ) -> None:
        with self._lock:
            handlers = self._subscribers.get(event_type)
            if handlers and handler in handlers:
                handlers.remove(handler)

    def publish(self, event: WVCEvent) -> None:
        """
        Record an event and deliver it synchronously.

        Args:
            event: The event instance to publish
        """
        with self._lock:
            self._event_history.append(event)
            handlers: List[Callable[[Any], None]] = []
            for cls in type(event).__mro__:
                handlers.extend(self._subscribers.get(cls, []))

        # Call handlers outside lock to prevent deadlock
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {type(event).__name__}: {e}")

    def publish_all(self, events: List[WVCEvent]) -> None:
        for event in events:
            self.publish(event)

    # ═══════════════════════════════════════════════════════════════
    # History and Query Operations
    # ═══════════════════════════════════════════════════════════════

    def get_history(
        self,
        event_type: Optional[Type[WVCEvent]] = None,
        since: Optional[datetime] = None,
        limit: int = 100
    ) -> List[WVCEvent]:
        """
        Get event history with optional filtering.

        Args:
            event_type: Filter by event type (subclasses included)
            since: Only events at or after this timestamp
            limit: Maximum number of events to return

        Returns:
            List of events (most recent first)
        """
        with self._lock:
            events = list(self._event_history)

        if event_type is not None:
            events = [e for e in events if isinstance(e, event_type)]
        if since is not None:
            events = [e for e in events if e.timestamp >= since]

        return list(reversed(events[-limit:])) if limit > 0 else []

    def clear_history(self) -> None:
        with self._lock:
            self._event_history.clear()

    def get_subscriber_count(
        self,
        event_type: Optional[Type[WVCEvent]] = None
    ) -> int:
        with self._lock:
            if event_type is not None:
                return len(self._subscribers.get(event_type, []))
            return sum(len(h) for h in self._subscribers.values())

    @property
    def max_history(self) -> int:
        return self._max_history


# ═══════════════════════════════════════════════════════════════
# Global Instance Management
# ═══════════════════════════════════════════════════════════════

_global_wvc_event_bus: Optional[WVCEventBus] = None


def get_wvc_event_bus() -> WVCEventBus:
    """
    Get the process-wide event bus, creating it on first call.
    """
    global _global_wvc_event_bus
    if _global_wvc_event_bus is None:
        _global_wvc_event_bus = WVCEventBus()
    return _global_wvc_event_bus


def set_wvc_event_bus(bus: WVCEventBus) -> None:
    global _global_wvc_event_bus
    _global_wvc_event_bus = bus


def reset_wvc_event_bus() -> None:
    """Next call to get_wvc_event_bus() creates a new instance."""
    global _global_wvc_event_bus
    _global_wvc_event_bus = None
