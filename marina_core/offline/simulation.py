# =============================================================================
# marina_core/offline/simulation.py
# Offline Simulation Switch
# =============================================================================
"""
Operator override that makes the connectivity prober report offline even
when the backend answers. Used for demos and for rehearsing the offline UI.

The switch only stores a flag and announces it. It does not touch the mode
store, the provider factory or the sync orchestrator; the prober reads the
flag at the start of every probe.
"""

from __future__ import annotations
from typing import Optional
import logging

from marina_core.state.events import OFFLINE_SIMULATION_CHANGED, EventBus, get_event_bus
from marina_core.state.storage import StorageBackend, get_settings_storage

logger = logging.getLogger(__name__)

SIMULATION_KEY = "mockDataOffline"


class OfflineSimulationSwitch:
    """Persisted ``mockDataOffline`` flag."""

    def __init__(
        self,
        storage: Optional[StorageBackend] = None,
        bus: Optional[EventBus] = None,
    ):
        self._storage = storage or get_settings_storage()
        self._bus = bus or get_event_bus()

    def is_simulated_offline(self) -> bool:
        return self._storage.get(SIMULATION_KEY) == "true"

    def set_simulated_offline(self, enabled: bool) -> None:
        enabled = bool(enabled)
        self._storage.set(SIMULATION_KEY, "true" if enabled else "false")
        self._bus.publish(OFFLINE_SIMULATION_CHANGED, {"is_offline": enabled})
        logger.info(f"Offline simulation {'enabled' if enabled else 'disabled'}")
