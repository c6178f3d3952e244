# =============================================================================
# marina_core/datasource/mode_store.py
# Mode Store - current data source plus the operator lock
# =============================================================================
"""
ModeStore - holds the data-source selection (mock | database) and the
optional forced-mode lock.

State lives only in the storage backend. Every read goes to storage and every
mutation writes through before broadcasting, so independently constructed
stores over the same storage always agree.

Usage:
    store = ModeStore(storage, bus)
    store.set_forced_mode(ForcedMode.DATABASE)
    store.get_mode()                   # DataSourceMode.DATABASE
    store.set_mode(DataSourceMode.MOCK)  # raises LockedError
"""

from __future__ import annotations
import json
from typing import Any, Dict, Optional
import logging

from marina_core.datasource.modes import DataSourceMode, ForcedMode
from marina_core.errors import LockedError
from marina_core.state.events import (
    DATA_SOURCE_CHANGED,
    FORCED_MODE_CHANGED,
    EventBus,
    get_event_bus,
)
from marina_core.state.settings import ConnectionSettings
from marina_core.state.storage import StorageBackend, get_settings_storage

logger = logging.getLogger(__name__)

MODE_KEY = "dataSource"
FORCED_MODE_KEY = "forcedDataSourceMode"
DEFAULT_MODE = DataSourceMode.MOCK


class ModeStore:
    """Persisted data-source selection with a forced-mode lock."""

    def __init__(
        self,
        storage: Optional[StorageBackend] = None,
        bus: Optional[EventBus] = None,
        settings: Optional[ConnectionSettings] = None,
    ):
        self._storage = storage or get_settings_storage()
        self._bus = bus or get_event_bus()
        self._settings = settings or ConnectionSettings(self._storage, self._bus)

    # =========================================================================
    # READS
    # =========================================================================

    def get_forced_mode(self) -> ForcedMode:
        raw = self._storage.get(FORCED_MODE_KEY)
        forced = ForcedMode.parse(raw)
        if forced is None:
            if raw is not None:
                logger.warning(f"Ignoring malformed {FORCED_MODE_KEY}={raw!r}")
            return ForcedMode.NONE
        return forced

    def get_mode(self) -> DataSourceMode:
        """Current data source; a lock always wins over the stored selection."""
        pinned = self.get_forced_mode().pinned_mode
        if pinned is not None:
            return pinned
        return DataSourceMode.parse(self._storage.get(MODE_KEY)) or DEFAULT_MODE

    @property
    def is_locked(self) -> bool:
        return self.get_forced_mode() is not ForcedMode.NONE

    @property
    def is_demo_mode(self) -> bool:
        return self.get_mode() is DataSourceMode.MOCK

    @property
    def is_live_mode(self) -> bool:
        return self.get_mode() is DataSourceMode.DATABASE

    @property
    def mode_label(self) -> str:
        forced = self.get_forced_mode()
        if forced is ForcedMode.MOCK:
            return "Demo Mode (Forced)"
        if forced is ForcedMode.DATABASE:
            return "Production Mode (Forced)"
        return "Demo Mode" if self.is_demo_mode else "Production Mode"

    @property
    def mode_description(self) -> str:
        forced = self.get_forced_mode()
        if forced is ForcedMode.MOCK:
            return "Using sample data - mode locked to demo"
        if forced is ForcedMode.DATABASE:
            return "Using live database data - mode locked to production"
        if self.is_demo_mode:
            return "Using sample data for demonstration"
        return "Using live database data"

    def get_config(self) -> Dict[str, Any]:
        """Snapshot for UI display."""
        mode = self.get_mode()
        forced = self.get_forced_mode()
        return {
            "current_source": mode.value,
            "forced_mode": forced.value,
            "is_locked": forced is not ForcedMode.NONE,
            "is_mock_mode": mode is DataSourceMode.MOCK,
            "is_database_mode": mode is DataSourceMode.DATABASE,
            "label": self.mode_label,
            "description": self.mode_description,
        }

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def set_mode(self, mode: DataSourceMode) -> None:
        """
        Select a data source.

        Raises:
            LockedError: a forced mode pins a different source
        """
        mode = DataSourceMode(mode)
        forced = self.get_forced_mode()
        pinned = forced.pinned_mode
        if pinned is not None and mode is not pinned:
            logger.warning(
                f"Data source switch to {mode.value} blocked - forced to {forced.value} mode"
            )
            raise LockedError(
                f"Data source is locked to {forced.value} mode; unlock it before switching",
                forced_mode=forced.value,
                attempted_mode=mode.value,
            )

        previous = DataSourceMode.parse(self._storage.get(MODE_KEY)) or DEFAULT_MODE
        self._storage.set(MODE_KEY, mode.value)
        self._bus.publish(
            DATA_SOURCE_CHANGED,
            {
                "new_source": mode.value,
                "previous_source": previous.value,
                "forced_mode": forced.value,
            },
        )
        logger.info(f"Data source updated: {previous.value} -> {mode.value}")

    def toggle_mode(self) -> DataSourceMode:
        """Flip between demo and live data; refused while locked."""
        current = self.get_mode()
        target = (
            DataSourceMode.DATABASE
            if current is DataSourceMode.MOCK
            else DataSourceMode.MOCK
        )
        self.set_mode(target)
        return target

    def set_forced_mode(self, forced: ForcedMode) -> None:
        """Apply or release the lock. A lock also selects its mode."""
        forced = ForcedMode(forced)
        self._storage.set(FORCED_MODE_KEY, json.dumps(forced.value))
        self._bus.publish(FORCED_MODE_CHANGED, {"forced_mode": forced.value})
        logger.info(f"Forced mode set to {forced.value}")

        if forced.pinned_mode is not None:
            self.set_mode(forced.pinned_mode)

    def reset(self) -> None:
        """
        Restore every operator setting: unlock, demo data, no simulated
        outage, default connection frequency.
        """
        # Imported here to keep the datasource package free of offline imports
        from marina_core.offline.simulation import OfflineSimulationSwitch

        self.set_forced_mode(ForcedMode.NONE)
        self.set_mode(DEFAULT_MODE)
        OfflineSimulationSwitch(self._storage, self._bus).set_simulated_offline(False)
        self._settings.reset()
        logger.info("All data source settings reset")
