# =============================================================================
# marina_core/offline/snapshots.py
# Immutable connectivity and sync results
# =============================================================================
"""
Values handed from the prober and the orchestrator to everything else.
They are created once per probe / tick and replaced wholesale, never edited.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from marina_core.errors import AggregateSyncFailure, ErrorKind


class ConnectivityState(Enum):
    """Connectivity states reported by the prober."""
    UNKNOWN = "unknown"         # Before the first probe settles
    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True)
class ConnectivitySnapshot:
    """Outcome of one probe."""
    state: ConnectivityState = ConnectivityState.UNKNOWN
    is_online: bool = False
    last_checked_at: Optional[datetime] = None
    last_sync: Optional[datetime] = None
    next_sync: Optional[datetime] = None
    latency_ms: Optional[float] = None
    consecutive_failures: int = 0
    simulated: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "is_online": self.is_online,
            "last_checked_at": _iso(self.last_checked_at),
            "last_sync": _iso(self.last_sync),
            "next_sync": _iso(self.next_sync),
            "latency_ms": self.latency_ms,
            "consecutive_failures": self.consecutive_failures,
            "simulated": self.simulated,
            "error": self.error,
        }


@dataclass(frozen=True)
class ConnectivityTransition:
    """Delivered to prober callbacks when the state changes."""
    previous: ConnectivityState
    current: ConnectivityState
    snapshot: ConnectivitySnapshot

    @property
    def is_restored(self) -> bool:
        """True only for OFFLINE -> ONLINE."""
        return (
            self.previous is ConnectivityState.OFFLINE
            and self.current is ConnectivityState.ONLINE
        )

    @property
    def is_lost(self) -> bool:
        return (
            self.previous is not ConnectivityState.OFFLINE
            and self.current is ConnectivityState.OFFLINE
        )


class Feed(Enum):
    """Feeds refreshed on every sync tick."""
    STATUS = "status"
    OPERATIONS = "operations"
    NOTIFICATIONS = "notifications"


class FeedOutcome(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class SyncCycleResult:
    """How one feed settled within a tick."""
    feed: Feed
    outcome: FeedOutcome
    payload: Any = None
    error: Optional[ErrorKind] = None
    message: Optional[str] = None
    completed_at: datetime = field(default_factory=datetime.now)

    @property
    def succeeded(self) -> bool:
        return self.outcome is FeedOutcome.SUCCESS


@dataclass(frozen=True)
class TickResult:
    """Aggregate of one sync tick across all feeds."""
    results: Tuple[SyncCycleResult, ...]
    started_at: datetime
    completed_at: datetime
    last_sync: datetime
    next_sync: datetime
    manual: bool = False
    aggregate_failure: Optional[AggregateSyncFailure] = None

    @property
    def success(self) -> bool:
        return any(r.succeeded for r in self.results)

    @property
    def failed_feeds(self) -> Tuple[Feed, ...]:
        return tuple(r.feed for r in self.results if not r.succeeded)

    def result_for(self, feed: Feed) -> Optional[SyncCycleResult]:
        for result in self.results:
            if result.feed is feed:
                return result
        return None

    def payload(self, feed: Feed) -> Any:
        result = self.result_for(feed)
        return result.payload if result else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "manual": self.manual,
            "started_at": _iso(self.started_at),
            "completed_at": _iso(self.completed_at),
            "last_sync": _iso(self.last_sync),
            "next_sync": _iso(self.next_sync),
            "feeds": {
                r.feed.value: {
                    "outcome": r.outcome.value,
                    "error": r.error.value if r.error else None,
                    "message": r.message,
                }
                for r in self.results
            },
            "aggregate_failure": (
                self.aggregate_failure.to_dict() if self.aggregate_failure else None
            ),
        }


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
