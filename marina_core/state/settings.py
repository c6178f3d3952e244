# =============================================================================
# marina_core/state/settings.py
# Operator setting: connection-check frequency
# =============================================================================

from __future__ import annotations
from typing import Optional
import logging

from marina_core.errors import InvalidSettingError
from marina_core.state.events import CONNECTION_FREQUENCY_CHANGED, EventBus, get_event_bus
from marina_core.state.storage import StorageBackend, get_settings_storage

logger = logging.getLogger(__name__)

FREQUENCY_KEY = "connectionFrequency"
ALLOWED_INTERVALS = (5, 10, 30, 60, 300)
DEFAULT_INTERVAL = 5


class ConnectionSettings:
    """
    Connection-check frequency in seconds, persisted under
    ``connectionFrequency``.

    Reads always go to storage; nothing is cached on the instance.
    """

    def __init__(
        self,
        storage: Optional[StorageBackend] = None,
        bus: Optional[EventBus] = None,
        default_interval: int = DEFAULT_INTERVAL,
    ):
        if default_interval not in ALLOWED_INTERVALS:
            raise InvalidSettingError(
                f"Default interval must be one of {ALLOWED_INTERVALS}",
                setting=FREQUENCY_KEY,
                value=default_interval,
            )
        self._storage = storage or get_settings_storage()
        self._bus = bus or get_event_bus()
        self.default_interval = default_interval

    def get_interval_seconds(self) -> int:
        raw = self._storage.get(FREQUENCY_KEY)
        if raw is None:
            return self.default_interval
        try:
            value = int(raw)
        except ValueError:
            logger.warning(f"Ignoring malformed {FREQUENCY_KEY}={raw!r}")
            return self.default_interval
        if value not in ALLOWED_INTERVALS:
            logger.warning(f"Ignoring unsupported {FREQUENCY_KEY}={value}")
            return self.default_interval
        return value

    def set_interval_seconds(self, seconds: int) -> None:
        """Persist a new frequency and broadcast it."""
        if seconds not in ALLOWED_INTERVALS:
            raise InvalidSettingError(
                f"Connection frequency must be one of {ALLOWED_INTERVALS} seconds",
                setting=FREQUENCY_KEY,
                value=seconds,
            )
        self._storage.set(FREQUENCY_KEY, str(seconds))
        self._bus.publish(CONNECTION_FREQUENCY_CHANGED, {"interval_seconds": seconds})
        logger.info(f"Connection frequency set to {seconds}s")

    def reset(self) -> None:
        self.set_interval_seconds(self.default_interval)
