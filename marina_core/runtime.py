# =============================================================================
# marina_core/runtime.py
# Wiring and background event loop for the Streamlit app
# =============================================================================
"""
MarinaRuntime - builds every component once and hosts the asyncio event loop
on a background thread.

Streamlit re-runs page scripts on its own threads, so page code never awaits
directly. It hands coroutines to the runtime loop instead:

    runtime = get_runtime()
    page = runtime.fetch_page("contracts")
    tick = runtime.run(runtime.orchestrator.sync_now())
"""

from __future__ import annotations
import asyncio
import threading
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Awaitable, Optional, TypeVar
import logging

import httpx

from marina_core.api import APIConfig, MarinaAPIClient
from marina_core.config import MarinaConfig, load_config
from marina_core.datasource import (
    DataProvider,
    DataSourceMode,
    ModeStore,
    PageData,
    create_provider,
    fetch_page_data,
)
from marina_core.errors import ProbeTimeout
from marina_core.offline import (
    ConnectivityProber,
    OfflineSimulationSwitch,
    StatusBoard,
    SyncOrchestrator,
)
from marina_core.state import (
    ConnectionSettings,
    EventBus,
    JsonFileStorage,
    StorageBackend,
    get_event_bus,
    get_settings_storage,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Upper bound for a UI call waiting on the loop
RUN_TIMEOUT = 30.0


class MarinaRuntime:
    """All components of one back-office session."""

    def __init__(
        self,
        config: Optional[MarinaConfig] = None,
        storage: Optional[StorageBackend] = None,
        bus: Optional[EventBus] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or load_config()
        if storage is None:
            storage = (
                JsonFileStorage(self.config.settings_path)
                if self.config.settings_path
                else get_settings_storage()
            )
        self.storage = storage
        self.bus = bus or get_event_bus()

        self.settings = ConnectionSettings(
            self.storage, self.bus, default_interval=self.config.default_poll_interval
        )
        self.mode_store = ModeStore(self.storage, self.bus, self.settings)
        self.simulation = OfflineSimulationSwitch(self.storage, self.bus)
        self.client = MarinaAPIClient(
            APIConfig(base_url=self.config.api_base_url, timeout=self.config.probe_timeout),
            transport=transport,
        )
        self.prober = ConnectivityProber(
            mode_store=self.mode_store,
            simulation=self.simulation,
            settings=self.settings,
            provider_factory=self.create_provider,
            probe_timeout=self.config.probe_timeout,
            offline_interval=self.config.offline_poll_interval,
            restored_notice_seconds=self.config.restored_notice_seconds,
            bus=self.bus,
        )
        self.orchestrator = SyncOrchestrator(
            mode_store=self.mode_store,
            prober=self.prober,
            settings=self.settings,
            provider_factory=self.create_provider,
            feed_timeout=self.config.feed_timeout,
            bus=self.bus,
        )
        self.orchestrator.initialize()
        self.board = StatusBoard(self.mode_store, self.prober, self.orchestrator)

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None

    def create_provider(self, mode: DataSourceMode) -> DataProvider:
        return create_provider(mode, client=self.client, demo_latency=self.config.demo_latency)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self) -> None:
        """Start the loop thread, the prober and the sync timer."""
        if self.is_running:
            return

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever,
            daemon=True,
            name="MarinaRuntime",
        )
        self._thread.start()
        self.run(self._start_services())
        logger.info(f"Marina runtime started ({self.mode_store.mode_label})")

    async def _start_services(self) -> None:
        self.prober.start_monitoring()
        self.orchestrator.start()

    def stop(self) -> None:
        """Stop timers, close the HTTP client and the loop thread."""
        if not self.is_running:
            return

        self.run(self._stop_services())
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)
        self._loop.close()
        self._loop = None
        self._thread = None
        logger.info("Marina runtime stopped")

    async def _stop_services(self) -> None:
        await self.orchestrator.stop()
        await self.prober.stop_monitoring()
        await self.client.aclose()

    def run(self, coro: Awaitable[T], timeout: float = RUN_TIMEOUT) -> T:
        """
        Execute a coroutine on the runtime loop and wait for its result.

        Raises:
            RuntimeError: the runtime has not been started
            ProbeTimeout: the coroutine did not finish within ``timeout``
        """
        if self._loop is None or not self.is_running:
            raise RuntimeError("Marina runtime is not running; call start() first")

        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        try:
            return future.result(timeout)
        except FutureTimeout as e:
            future.cancel()
            raise ProbeTimeout("Background operation timed out", timeout=timeout) from e

    # =========================================================================
    # PAGE HELPERS
    # =========================================================================

    def fetch_page(self, data_type: str) -> PageData:
        return self.run(
            fetch_page_data(self.mode_store, data_type, provider_factory=self.create_provider)
        )

    def sync_now(self) -> Any:
        return self.run(self.orchestrator.sync_now())

    def check_connection(self) -> Any:
        return self.run(self.prober.check_connection())


# Singleton accessor; one runtime per server process, shared by every browser session
_runtime: Optional[MarinaRuntime] = None
_runtime_lock = threading.Lock()


def get_runtime() -> MarinaRuntime:
    """
    Get the process-wide MarinaRuntime, starting it on first use.

    Returns:
        MarinaRuntime singleton
    """
    global _runtime
    if _runtime is None:
        with _runtime_lock:
            if _runtime is None:
                runtime = MarinaRuntime()
                runtime.start()
                _runtime = runtime
    return _runtime
