# =============================================================================
# marina_core/offline/sync_engine.py
# Sync Orchestrator - deduplicated, partially-failable feed refresh
# =============================================================================
"""
SyncOrchestrator - refreshes the status, pending-operations and notifications
feeds together.

Features:
- Single in-flight tick; triggers during a tick join it
- Feeds fetched concurrently, each with its own timeout
- Partial failure: a failed feed gets a labelled fallback stub
- Timer ticks suspended while offline, manual syncs always run
- One immediate tick when connectivity is restored
"""

from __future__ import annotations
import asyncio
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional
import logging

from marina_core.datasource.mode_store import ModeStore
from marina_core.datasource.modes import DataSourceMode
from marina_core.datasource.providers import DataProvider, create_provider
from marina_core.errors import AggregateSyncFailure, ErrorKind, MarinaError, ProbeTimeout
from marina_core.offline.connection_manager import ConnectivityProber
from marina_core.offline.snapshots import (
    ConnectivityTransition,
    Feed,
    FeedOutcome,
    SyncCycleResult,
    TickResult,
)
from marina_core.state.events import SYNC_COMPLETED, SYNC_FAILED, EventBus, get_event_bus
from marina_core.state.settings import ConnectionSettings

logger = logging.getLogger(__name__)

TickCallback = Callable[[TickResult], None]

FEED_METHODS = {
    Feed.STATUS: "get_sync_status",
    Feed.OPERATIONS: "get_pending_operations",
    Feed.NOTIFICATIONS: "get_notifications",
}


def fallback_payload(feed: Feed, message: str, now: datetime) -> Any:
    """Clearly labelled stand-in shown for a feed that failed this tick."""
    if feed is Feed.STATUS:
        return {
            "isOnline": False,
            "lastSync": None,
            "nextSync": None,
            "pendingOperations": 0,
            "failedOperations": 0,
            "connectionQuality": "OFFLINE",
            "type": "SYSTEM_FALLBACK",
            "error": message,
            "is_fallback": True,
        }
    if feed is Feed.OPERATIONS:
        return [
            {
                "id": "fallback-operations",
                "operationType": "SYSTEM_FALLBACK",
                "status": "PENDING",
                "priority": "LOW",
                "createdAt": now.isoformat(),
                "metadata": {
                    "title": "Using fallback data - operations temporarily unavailable",
                    "details": message,
                },
                "is_fallback": True,
            }
        ]
    return [
        {
            "id": "fallback-notification",
            "type": "SYSTEM_INFO",
            "title": "System Status",
            "message": "Notifications temporarily unavailable - using fallback data",
            "priority": "INFO",
            "timestamp": now.isoformat(),
            "status": "unread",
            "details": message,
            "is_fallback": True,
        }
    ]


class SyncOrchestrator:
    """
    Runs sync ticks against the provider for the current data source.

    Usage:
        orchestrator = SyncOrchestrator(mode_store, prober)
        orchestrator.initialize()
        result = await orchestrator.sync_now()
    """

    FEED_TIMEOUT = 8.0      # Seconds per feed fetch

    def __init__(
        self,
        mode_store: Optional[ModeStore] = None,
        prober: Optional[ConnectivityProber] = None,
        settings: Optional[ConnectionSettings] = None,
        provider_factory: Callable[[DataSourceMode], DataProvider] = create_provider,
        feed_timeout: float = FEED_TIMEOUT,
        tick_interval: Optional[float] = None,
        bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._bus = bus or get_event_bus()
        self._mode_store = mode_store or ModeStore(bus=self._bus)
        self._settings = settings or ConnectionSettings(bus=self._bus)
        self._prober = prober
        self._provider_factory = provider_factory
        self.feed_timeout = feed_timeout
        self.tick_interval = tick_interval
        self._clock = clock

        self._current_cycle: Optional[asyncio.Task] = None
        self._pending_restore = False
        self._last_result: Optional[TickResult] = None
        self._callbacks: List[TickCallback] = []
        self._timer_task: Optional[asyncio.Task] = None
        self._initialized = False
        self.tick_count = 0

    @property
    def is_syncing(self) -> bool:
        return self._current_cycle is not None and not self._current_cycle.done()

    @property
    def last_result(self) -> Optional[TickResult]:
        return self._last_result

    @property
    def is_running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    def _is_suspended(self) -> bool:
        return self._prober is not None and self._prober.is_offline

    def initialize(self) -> None:
        """Hook into the prober so a restored connection triggers one tick."""
        if self._initialized:
            return

        if self._prober is not None:
            self._prober.register_callback(self._on_connectivity_change)

        self._initialized = True
        logger.info("SyncOrchestrator initialized")

    def _on_connectivity_change(self, transition: ConnectivityTransition) -> None:
        if not transition.is_restored:
            return

        if self.is_syncing:
            # The running tick started against the down backend
            logger.info("Connection restored during a sync - refreshing once it settles")
            self._pending_restore = True
        else:
            logger.info("Connection restored, triggering sync")
            self.trigger()

    # =========================================================================
    # TICKS
    # =========================================================================

    def trigger(self, manual: bool = False) -> Optional[asyncio.Task]:
        """
        Start a tick on the running loop.

        Returns the in-flight task when a tick is already running, or None
        when timer ticks are suspended because the prober reports offline.
        """
        if self.is_syncing:
            logger.debug("Sync already in progress - joining in-flight tick")
            return self._current_cycle

        if not manual and self._is_suspended():
            logger.debug("Sync suspended while offline")
            return None

        task = asyncio.get_running_loop().create_task(self._run_cycle(manual), name="SyncTick")
        self._current_cycle = task
        task.add_done_callback(self._release_cycle)
        return task

    def _release_cycle(self, task: asyncio.Task) -> None:
        if self._current_cycle is task:
            self._current_cycle = None

        if self._pending_restore and not task.cancelled():
            self._pending_restore = False
            logger.info("Running the sync deferred by the restored connection")
            self.trigger()

    async def sync_now(self) -> TickResult:
        """Run a tick immediately, even while offline, and wait for it."""
        task = self.trigger(manual=True)
        # Cancelling this caller leaves the shared tick running
        return await asyncio.shield(task)

    async def _run_cycle(self, manual: bool) -> TickResult:
        started_at = self._clock()
        self.tick_count += 1
        mode = self._mode_store.get_mode()
        provider = self._provider_factory(mode)
        feeds = tuple(FEED_METHODS)

        settled = await asyncio.gather(
            *(self._fetch_feed(getattr(provider, FEED_METHODS[feed])) for feed in feeds),
            return_exceptions=True,
        )
        results = tuple(self._settle(feed, outcome) for feed, outcome in zip(feeds, settled))

        completed_at = self._clock()
        aggregate = None
        if not any(r.succeeded for r in results):
            aggregate = AggregateSyncFailure(
                feeds={r.feed.value: r.message or r.outcome.value for r in results}
            )

        tick = TickResult(
            results=results,
            started_at=started_at,
            completed_at=completed_at,
            last_sync=completed_at,
            next_sync=completed_at + timedelta(seconds=self.current_interval()),
            manual=manual,
            aggregate_failure=aggregate,
        )
        self._last_result = tick
        self._report(tick, mode)
        return tick

    async def _fetch_feed(self, fetch: Callable[[], Any]) -> Any:
        return await asyncio.wait_for(fetch(), timeout=self.feed_timeout)

    def _settle(self, feed: Feed, outcome: Any) -> SyncCycleResult:
        now = self._clock()
        if not isinstance(outcome, BaseException):
            logger.debug(f"Feed {feed.value} refreshed")
            return SyncCycleResult(feed=feed, outcome=FeedOutcome.SUCCESS, payload=outcome, completed_at=now)

        if not isinstance(outcome, Exception):
            raise outcome

        if isinstance(outcome, (asyncio.TimeoutError, ProbeTimeout)):
            message = f"{feed.value} request timed out - backend may be offline"
            result_kind, error = FeedOutcome.TIMED_OUT, ErrorKind.TIMEOUT
        elif isinstance(outcome, MarinaError):
            message = outcome.message
            result_kind, error = FeedOutcome.FAILURE, outcome.kind
        else:
            logger.error(f"Unexpected error in {feed.value} feed: {outcome}")
            message = str(outcome) or outcome.__class__.__name__
            result_kind, error = FeedOutcome.FAILURE, ErrorKind.UNEXPECTED

        logger.warning(f"Feed {feed.value} failed: {message}")
        return SyncCycleResult(
            feed=feed,
            outcome=result_kind,
            payload=fallback_payload(feed, message, now),
            error=error,
            message=message,
            completed_at=now,
        )

    def _report(self, tick: TickResult, mode: DataSourceMode) -> None:
        if tick.aggregate_failure is not None:
            logger.error(f"Sync failed ({mode.value}): {tick.aggregate_failure.message}")
            self._bus.publish(SYNC_FAILED, tick.aggregate_failure.to_dict())
        else:
            failed = [f.value for f in tick.failed_feeds]
            logger.info(
                f"Sync complete ({mode.value}): {len(tick.results) - len(failed)} ok"
                + (f", failed: {', '.join(failed)}" if failed else "")
            )
            self._bus.publish(
                SYNC_COMPLETED,
                {"manual": tick.manual, "failed_feeds": failed, "last_sync": tick.last_sync.isoformat()},
            )
        self._notify_callbacks(tick)

    # =========================================================================
    # TIMER
    # =========================================================================

    def start(self) -> asyncio.Task:
        """Start the periodic tick loop on the running event loop."""
        if self.is_running:
            return self._timer_task

        self.initialize()
        self._timer_task = asyncio.get_running_loop().create_task(self._sync_loop(), name="SyncTimer")
        logger.info("Sync orchestrator started")
        return self._timer_task

    async def stop(self) -> None:
        """Stop the tick loop and cancel any in-flight tick."""
        tasks = [t for t in (self._timer_task, self._current_cycle) if t is not None and not t.done()]
        self._timer_task = None
        self._pending_restore = False
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("Sync orchestrator stopped")

    def current_interval(self) -> float:
        """Seconds between timer ticks; ``tick_interval`` overrides the operator setting."""
        if self.tick_interval is not None:
            return self.tick_interval
        return self._settings.get_interval_seconds()

    async def _sync_loop(self) -> None:
        while True:
            await asyncio.sleep(self.current_interval())

            task = self.trigger()
            if task is None:
                continue
            try:
                await asyncio.shield(task)
            except Exception as e:
                logger.error(f"Sync error: {e}")

    # =========================================================================
    # CALLBACKS
    # =========================================================================

    def register_callback(self, callback: TickCallback) -> None:
        """Register a callback invoked with every completed TickResult."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: TickCallback) -> None:
        """Remove a registered callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self, tick: TickResult) -> None:
        for callback in list(self._callbacks):
            try:
                callback(tick)
            except Exception as e:
                logger.error(f"Error in sync callback: {e}")

    def get_status_display(self) -> Dict[str, Any]:
        """Get sync status for UI display."""
        tick = self._last_result
        return {
            "is_syncing": self.is_syncing,
            "suspended": self._is_suspended(),
            "last_sync": tick.last_sync.isoformat() if tick else None,
            "next_sync": tick.next_sync.isoformat() if tick else None,
            "last_success": tick.success if tick else None,
            "failed_feeds": [f.value for f in tick.failed_feeds] if tick else [],
            "error": tick.aggregate_failure.message if tick and tick.aggregate_failure else None,
            "ticks": self.tick_count,
        }
