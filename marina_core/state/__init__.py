# =============================================================================
# marina_core/state/__init__.py
# Persisted operator settings and in-process broadcast
# =============================================================================

from marina_core.state.storage import (
    StorageBackend,
    InMemoryStorage,
    JsonFileStorage,
    get_settings_storage,
)

from marina_core.state.events import (
    BroadcastEvent,
    EventBus,
    get_event_bus,
)

from marina_core.state.settings import (
    ConnectionSettings,
    ALLOWED_INTERVALS,
    DEFAULT_INTERVAL,
)

__all__ = [
    "StorageBackend",
    "InMemoryStorage",
    "JsonFileStorage",
    "get_settings_storage",
    "BroadcastEvent",
    "EventBus",
    "get_event_bus",
    "ConnectionSettings",
    "ALLOWED_INTERVALS",
    "DEFAULT_INTERVAL",
]
