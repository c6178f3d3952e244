# =============================================================================
# marina_core/offline/__init__.py
# Connectivity monitoring and feed synchronisation
# =============================================================================
"""
Connectivity & Sync

    ModeStore ──► create_provider(mode) ──► get_sync_status()
                                                 │
                     ┌───────────────────────────┘
                     ▼
          ┌────────────────────┐  restored   ┌──────────────────┐
          │ ConnectivityProber │ ──────────► │ SyncOrchestrator │
          │ UNKNOWN/ONLINE/    │  suspends   │ status, ops,     │
          │ OFFLINE            │ ──────────► │ notifications    │
          └────────────────────┘             └──────────────────┘
                     ▲                                │
     OfflineSimulationSwitch                          ▼
                                                 StatusBoard

Usage:
------
from marina_core.offline import ConnectivityProber, SyncOrchestrator

prober = ConnectivityProber(mode_store)
orchestrator = SyncOrchestrator(mode_store, prober)
orchestrator.initialize()

snapshot = await prober.probe()
tick = await orchestrator.sync_now()
"""

from marina_core.offline.snapshots import (
    ConnectivityState,
    ConnectivitySnapshot,
    ConnectivityTransition,
    Feed,
    FeedOutcome,
    SyncCycleResult,
    TickResult,
)

from marina_core.offline.simulation import (
    OfflineSimulationSwitch,
    SIMULATION_KEY,
)

from marina_core.offline.connection_manager import ConnectivityProber

from marina_core.offline.sync_engine import (
    SyncOrchestrator,
    fallback_payload,
)

from marina_core.offline.status_board import (
    Banner,
    StatusBoard,
    StatusView,
)

__all__ = [
    # Snapshots
    "ConnectivityState",
    "ConnectivitySnapshot",
    "ConnectivityTransition",
    "Feed",
    "FeedOutcome",
    "SyncCycleResult",
    "TickResult",
    # Simulation
    "OfflineSimulationSwitch",
    "SIMULATION_KEY",
    # Prober
    "ConnectivityProber",
    # Orchestrator
    "SyncOrchestrator",
    "fallback_payload",
    # Presentation
    "Banner",
    "StatusBoard",
    "StatusView",
]
