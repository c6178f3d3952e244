# =============================================================================
# marina_core/offline/connection_manager.py
# Connectivity Prober - backend reachability and online/offline transitions
# =============================================================================
"""
ConnectivityProber - probes the backend selected by the mode store and turns
probe outcomes into a small state machine:

    UNKNOWN --success--> ONLINE
    UNKNOWN --failure--> OFFLINE
    ONLINE  --failure--> OFFLINE   (clears any restored notice)
    OFFLINE --success--> ONLINE    (one-shot "connectivity restored" notice)

Features:
- Probes via create_provider(mode).get_sync_status(), bounded by a timeout
- Offline simulation flag overrides every probe
- Monitoring loop on the event loop, woken early by settings changes
- Callbacks for state transitions
"""

from __future__ import annotations
import asyncio
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging

from marina_core.datasource.mode_store import ModeStore
from marina_core.datasource.modes import DataSourceMode
from marina_core.datasource.providers import DataProvider, create_provider
from marina_core.errors import MarinaError
from marina_core.logging import LogContext
from marina_core.offline.simulation import OfflineSimulationSwitch
from marina_core.offline.snapshots import (
    ConnectivitySnapshot,
    ConnectivityState,
    ConnectivityTransition,
)
from marina_core.state.events import (
    CONNECTION_FREQUENCY_CHANGED,
    CONNECTIVITY_CHANGED,
    CONNECTIVITY_RESTORED,
    DATA_SOURCE_CHANGED,
    FORCED_MODE_CHANGED,
    OFFLINE_SIMULATION_CHANGED,
    BroadcastEvent,
    EventBus,
    get_event_bus,
)
from marina_core.state.settings import ConnectionSettings

logger = logging.getLogger(__name__)

TransitionCallback = Callable[[ConnectivityTransition], None]

WAKE_EVENTS = (
    DATA_SOURCE_CHANGED,
    FORCED_MODE_CHANGED,
    CONNECTION_FREQUENCY_CHANGED,
    OFFLINE_SIMULATION_CHANGED,
)


def _parse_time(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


class ConnectivityProber:
    """
    Tracks whether the current backend is reachable.

    Usage:
        prober = ConnectivityProber(mode_store, simulation, settings)
        snapshot = await prober.probe()
        if prober.is_offline:
            ...
    """

    # Configuration
    PROBE_TIMEOUT = 8.0             # Seconds before a probe counts as failed
    OFFLINE_CHECK_INTERVAL = 10     # Minimum seconds between checks while offline
    RESTORED_NOTICE_SECONDS = 5.0   # How long the restored notice stays up

    def __init__(
        self,
        mode_store: Optional[ModeStore] = None,
        simulation: Optional[OfflineSimulationSwitch] = None,
        settings: Optional[ConnectionSettings] = None,
        provider_factory: Callable[[DataSourceMode], DataProvider] = create_provider,
        probe_timeout: float = PROBE_TIMEOUT,
        offline_interval: float = OFFLINE_CHECK_INTERVAL,
        restored_notice_seconds: float = RESTORED_NOTICE_SECONDS,
        bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._bus = bus or get_event_bus()
        self._mode_store = mode_store or ModeStore(bus=self._bus)
        self._simulation = simulation or OfflineSimulationSwitch(bus=self._bus)
        self._settings = settings or ConnectionSettings(bus=self._bus)
        self._provider_factory = provider_factory
        self.probe_timeout = probe_timeout
        self.offline_interval = offline_interval
        self.restored_notice_seconds = restored_notice_seconds
        self._clock = clock

        self._snapshot = ConnectivitySnapshot()
        self._callbacks: List[TransitionCallback] = []
        self._restored_active = False
        self._restored_handle: Optional[asyncio.TimerHandle] = None

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._monitor_task: Optional[asyncio.Task] = None
        self._current_probe: Optional[asyncio.Task] = None
        self._wake: Optional[asyncio.Event] = None
        self.probe_count = 0

    @property
    def snapshot(self) -> ConnectivitySnapshot:
        """Latest probe outcome."""
        return self._snapshot

    @property
    def state(self) -> ConnectivityState:
        return self._snapshot.state

    @property
    def is_online(self) -> bool:
        return self._snapshot.state is ConnectivityState.ONLINE

    @property
    def is_offline(self) -> bool:
        return self._snapshot.state is ConnectivityState.OFFLINE

    @property
    def restored_notice_active(self) -> bool:
        """True for a short while after an OFFLINE -> ONLINE transition."""
        return self._restored_active

    @property
    def is_monitoring(self) -> bool:
        return self._monitor_task is not None and not self._monitor_task.done()

    # =========================================================================
    # PROBING
    # =========================================================================

    async def probe(self) -> ConnectivitySnapshot:
        """
        Perform one reachability check and update state.

        Only one probe runs at a time; a caller arriving while one is in
        flight (the monitoring loop and a manual "check connection") joins it
        and receives the same snapshot. Never raises: timeouts and provider
        failures become an offline snapshot.
        """
        if self._current_probe is not None and not self._current_probe.done():
            logger.debug("Probe already in progress - joining in-flight probe")
        else:
            self._current_probe = asyncio.get_running_loop().create_task(
                self._run_probe(), name="ConnectivityProbe"
            )
        # Cancelling this caller leaves the shared probe running
        return await asyncio.shield(self._current_probe)

    async def _run_probe(self) -> ConnectivitySnapshot:
        self.probe_count += 1

        if self._simulation.is_simulated_offline():
            return self._apply(
                online=False,
                simulated=True,
                error="Offline simulation enabled",
            )

        mode = self._mode_store.get_mode()
        started = time.monotonic()
        status: Dict[str, Any] = {}
        error: Optional[str] = None
        try:
            provider = self._provider_factory(mode)
            with LogContext(
                logger,
                f"Probing {mode.value} backend",
                level=logging.DEBUG,
                expected=(MarinaError, asyncio.TimeoutError),
            ):
                result = await asyncio.wait_for(provider.get_sync_status(), timeout=self.probe_timeout)
            status = result if isinstance(result, dict) else {}
            if status.get("isOnline") is False:
                error = "Backend reports offline"
        except asyncio.TimeoutError:
            error = f"Probe timed out after {self.probe_timeout:g}s"
        except MarinaError as e:
            error = e.message
        except Exception as e:
            error = str(e) or e.__class__.__name__
        latency_ms = (time.monotonic() - started) * 1000

        # The flag may have been raised while the probe was in flight
        if self._simulation.is_simulated_offline():
            return self._apply(online=False, simulated=True, error="Offline simulation enabled")

        if error is not None:
            logger.debug(f"Probe of {mode.value} backend failed: {error}")
            return self._apply(online=False, error=error)

        return self._apply(
            online=True,
            latency_ms=status.get("serverLatency", round(latency_ms, 1)),
            last_sync=_parse_time(status.get("lastSync")),
            next_sync=_parse_time(status.get("nextSync")),
        )

    async def check_connection(self) -> ConnectivitySnapshot:
        """Force an immediate connection check."""
        return await self.probe()

    def _apply(
        self,
        online: bool,
        simulated: bool = False,
        error: Optional[str] = None,
        latency_ms: Optional[float] = None,
        last_sync: Optional[datetime] = None,
        next_sync: Optional[datetime] = None,
    ) -> ConnectivitySnapshot:
        previous = self._snapshot
        snapshot = ConnectivitySnapshot(
            state=ConnectivityState.ONLINE if online else ConnectivityState.OFFLINE,
            is_online=online,
            last_checked_at=self._clock(),
            last_sync=last_sync,
            next_sync=next_sync,
            latency_ms=latency_ms,
            consecutive_failures=0 if online else previous.consecutive_failures + 1,
            simulated=simulated,
            error=error,
        )
        self._snapshot = snapshot

        if previous.state is not snapshot.state:
            self._on_transition(ConnectivityTransition(previous.state, snapshot.state, snapshot))

        return snapshot

    def _on_transition(self, transition: ConnectivityTransition) -> None:
        logger.info(
            f"Connectivity changed: {transition.previous.value} -> {transition.current.value}"
            + (" (simulated)" if transition.snapshot.simulated else "")
        )

        if transition.is_restored:
            self._start_restored_notice()
        elif transition.current is ConnectivityState.OFFLINE:
            self._clear_restored_notice()

        self._bus.publish(
            CONNECTIVITY_CHANGED,
            {
                "previous": transition.previous.value,
                "current": transition.current.value,
                "simulated": transition.snapshot.simulated,
                "error": transition.snapshot.error,
            },
        )
        self._notify_callbacks(transition)

    # =========================================================================
    # RESTORED NOTICE
    # =========================================================================

    def _start_restored_notice(self) -> None:
        self._cancel_restored_timer()
        self._restored_active = True
        self._bus.publish(CONNECTIVITY_RESTORED, {"seconds": self.restored_notice_seconds})

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; restored notice will not auto-clear")
            return
        self._restored_handle = loop.call_later(
            self.restored_notice_seconds, self._clear_restored_notice
        )

    def _cancel_restored_timer(self) -> None:
        if self._restored_handle is not None:
            self._restored_handle.cancel()
            self._restored_handle = None

    def _clear_restored_notice(self) -> None:
        self._cancel_restored_timer()
        if self._restored_active:
            self._restored_active = False
            logger.debug("Connectivity restored notice cleared")

    # =========================================================================
    # MONITORING
    # =========================================================================

    def current_interval(self) -> float:
        """Seconds until the next scheduled probe."""
        interval = self._settings.get_interval_seconds()
        if self.is_offline:
            return max(interval, self.offline_interval)
        return interval

    def start_monitoring(self) -> asyncio.Task:
        """
        Start the monitoring loop on the running event loop.

        Must be called from a coroutine or callback on that loop.
        """
        if self.is_monitoring:
            return self._monitor_task

        self._loop = asyncio.get_running_loop()
        self._wake = asyncio.Event()
        for name in WAKE_EVENTS:
            self._bus.subscribe(name, self._on_setting_changed)

        self._monitor_task = self._loop.create_task(
            self._monitoring_loop(), name="ConnectivityMonitor"
        )
        logger.debug("Connectivity monitoring started")
        return self._monitor_task

    async def stop_monitoring(self) -> None:
        """Stop the monitoring loop and any in-flight probe; drop the notice timer."""
        for name in WAKE_EVENTS:
            self._bus.unsubscribe(name, self._on_setting_changed)

        tasks = [t for t in (self._monitor_task, self._current_probe) if t is not None and not t.done()]
        self._monitor_task = None
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass

        self._clear_restored_notice()
        logger.debug("Connectivity monitoring stopped")

    async def _monitoring_loop(self) -> None:
        while True:
            self._wake.clear()
            await self.probe()

            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self.current_interval())
            except asyncio.TimeoutError:
                pass

    def wake(self) -> None:
        """Ask the monitoring loop to re-probe now. Safe from any thread."""
        if self._loop is None or self._wake is None or self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._wake.set)

    def _on_setting_changed(self, event: BroadcastEvent) -> None:
        logger.debug(f"{event.name} received - re-probing")
        self.wake()

    # =========================================================================
    # CALLBACKS
    # =========================================================================

    def register_callback(self, callback: TransitionCallback) -> None:
        """
        Register a callback for connectivity state changes.

        Args:
            callback: Function called with a ConnectivityTransition
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: TransitionCallback) -> None:
        """Remove a registered callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self, transition: ConnectivityTransition) -> None:
        for callback in list(self._callbacks):
            try:
                callback(transition)
            except Exception as e:
                logger.error(f"Error in connectivity callback: {e}")

    def get_status_display(self) -> Dict[str, Any]:
        """Get status information for UI display."""
        snapshot = self._snapshot
        return {
            "status": snapshot.state.value,
            "is_online": snapshot.is_online,
            "simulated": snapshot.simulated,
            "restored": self._restored_active,
            "last_check": snapshot.last_checked_at.isoformat() if snapshot.last_checked_at else None,
            "latency_ms": snapshot.latency_ms,
            "failures": snapshot.consecutive_failures,
            "error": snapshot.error,
            "check_interval": self.current_interval(),
            "data_source": self._mode_store.get_mode().value,
        }
