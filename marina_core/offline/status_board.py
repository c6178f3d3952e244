# =============================================================================
# marina_core/offline/status_board.py
# Presentation state for connectivity, sync and data-source indicators
# =============================================================================
"""
StatusBoard - read-only view over the prober, the orchestrator and the mode
store. Pages render the StatusView it builds; nothing here mutates state.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from marina_core.datasource.mode_store import ModeStore
from marina_core.offline.connection_manager import ConnectivityProber
from marina_core.offline.snapshots import ConnectivityState, TickResult
from marina_core.offline.sync_engine import SyncOrchestrator


@dataclass(frozen=True)
class Banner:
    """One message strip shown at the top of a page."""
    level: str          # success | info | warning | error
    icon: str
    title: str
    message: str = ""


@dataclass(frozen=True)
class StatusView:
    connectivity: ConnectivityState
    simulated: bool
    restored_notice: bool
    show_offline_banner: bool
    is_syncing: bool
    last_tick: Optional[TickResult]
    aggregate_error: Optional[str]
    is_locked: bool
    is_demo: bool
    mode_label: str
    last_checked_at: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def banners(self) -> Tuple[Banner, ...]:
        banners = []
        if self.restored_notice:
            banners.append(Banner(
                "success", "✅", "Connectivity restored",
                "The marina office is reachable again. Data is being refreshed.",
            ))
        if self.show_offline_banner:
            if self.simulated:
                banners.append(Banner(
                    "warning", "🧪", "Offline (simulated)",
                    "Offline simulation is enabled in Settings.",
                ))
            else:
                banners.append(Banner(
                    "error", "📡", "Offline",
                    self.error or "The marina backend cannot be reached.",
                ))
        if self.aggregate_error:
            banners.append(Banner("error", "⚠️", "Sync failed", self.aggregate_error))
        if self.is_locked:
            banners.append(Banner("info", "🔒", "Locked", self.mode_label))
        return tuple(banners)


class StatusBoard:
    """Builds StatusViews for the UI."""

    def __init__(
        self,
        mode_store: ModeStore,
        prober: ConnectivityProber,
        orchestrator: SyncOrchestrator,
    ):
        self._mode_store = mode_store
        self._prober = prober
        self._orchestrator = orchestrator

    def view(self) -> StatusView:
        snapshot = self._prober.snapshot
        tick = self._orchestrator.last_result
        aggregate = tick.aggregate_failure if tick else None
        return StatusView(
            connectivity=snapshot.state,
            simulated=snapshot.simulated,
            restored_notice=self._prober.restored_notice_active,
            show_offline_banner=snapshot.state is ConnectivityState.OFFLINE,
            is_syncing=self._orchestrator.is_syncing,
            last_tick=tick,
            aggregate_error=aggregate.message if aggregate else None,
            is_locked=self._mode_store.is_locked,
            is_demo=self._mode_store.is_demo_mode,
            mode_label=self._mode_store.mode_label,
            last_checked_at=snapshot.last_checked_at,
            error=snapshot.error,
        )
