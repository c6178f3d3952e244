# =============================================================================
# marina_core/state/events.py
# In-process broadcast between independently mounted consumers
# =============================================================================
"""
EventBus - tiny observer used in place of browser CustomEvents.

Setters publish after persisting, so a subscriber that re-reads storage inside
its callback always sees the new value. Events are not persisted.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional
import logging

logger = logging.getLogger(__name__)

# Settings events
DATA_SOURCE_CHANGED = "dataSourceChanged"
FORCED_MODE_CHANGED = "forcedModeChanged"
CONNECTION_FREQUENCY_CHANGED = "connectionFrequencyChanged"
OFFLINE_SIMULATION_CHANGED = "mockDataOfflineChanged"

# Runtime events
CONNECTIVITY_CHANGED = "connectivityChanged"
CONNECTIVITY_RESTORED = "connectivityRestored"
SYNC_COMPLETED = "syncCompleted"
SYNC_FAILED = "syncFailed"


@dataclass(frozen=True)
class BroadcastEvent:
    """One published event."""
    name: str
    detail: Mapping[str, Any] = field(default_factory=dict)
    published_at: datetime = field(default_factory=datetime.now)


EventCallback = Callable[[BroadcastEvent], None]


class EventBus:
    """
    Name-keyed publish/subscribe.

    Usage:
        bus = get_event_bus()
        bus.subscribe(FORCED_MODE_CHANGED, lambda e: print(e.detail))
        bus.publish(FORCED_MODE_CHANGED, {"forced_mode": "mock"})
    """

    def __init__(self):
        self._subscribers: Dict[str, List[EventCallback]] = {}
        self.history: List[BroadcastEvent] = []
        self.keep_history = False

    def subscribe(self, name: str, callback: EventCallback) -> None:
        """Register a callback for one event name."""
        callbacks = self._subscribers.setdefault(name, [])
        if callback not in callbacks:
            callbacks.append(callback)

    def unsubscribe(self, name: str, callback: EventCallback) -> None:
        """Remove a registered callback."""
        callbacks = self._subscribers.get(name, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def publish(self, name: str, detail: Optional[Mapping[str, Any]] = None) -> BroadcastEvent:
        """Deliver an event to every subscriber of its name."""
        event = BroadcastEvent(name=name, detail=dict(detail or {}))
        if self.keep_history:
            self.history.append(event)

        for callback in list(self._subscribers.get(name, [])):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Error in {name} subscriber: {e}")

        return event

    def subscriber_count(self, name: str) -> int:
        return len(self._subscribers.get(name, []))


# Singleton accessor
_event_bus: Optional[EventBus] = None


def get_event_bus() -> EventBus:
    """Get the global EventBus instance."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus
