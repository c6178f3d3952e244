# =============================================================================
# marina_core/datasource/providers.py
# Data Provider Factory - demo vs live backend
# =============================================================================
"""
Providers behind every page-level fetch.

    MockDataProvider      -> static demo dataset, always available
    DatabaseDataProvider  -> marina backend over HTTP, never substitutes demo data

``create_provider`` is a pure mapping from a DataSourceMode to a provider; it
never probes and never caches.
"""

from __future__ import annotations
import asyncio
import copy
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging

from marina_core.api import (
    MARINA_OVERVIEW_ENDPOINT,
    USER_PROFILE_ENDPOINT,
    MarinaAPIClient,
    get_api_client,
)
from marina_core.datasource import demo_data
from marina_core.datasource.modes import DataSourceMode
from marina_core.errors import ErrorKind, ProviderError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

LIST_ENDPOINTS = {
    "contracts": "/api/contracts",
    "invoices": "/api/invoices",
    "boats": "/api/boats",
    "berths": "/api/berths",
    "work_orders": "/api/work-orders",
}


class DataProvider(ABC):
    """Interface every data source implements. All methods are coroutines."""

    mode: DataSourceMode

    @abstractmethod
    async def get_user_profile(self) -> Record:
        pass

    @abstractmethod
    async def update_user_profile(self, patch: Record) -> Record:
        pass

    @abstractmethod
    async def get_dashboard_stats(self) -> Record:
        pass

    @abstractmethod
    async def get_marina_overview(self) -> Record:
        pass

    @abstractmethod
    async def get_sync_status(self) -> Record:
        pass

    @abstractmethod
    async def get_pending_operations(self) -> List[Record]:
        pass

    @abstractmethod
    async def get_notifications(self) -> List[Record]:
        pass

    @abstractmethod
    async def get_recent_activity(self) -> List[Record]:
        pass

    @abstractmethod
    async def get_contracts(self) -> List[Record]:
        pass

    @abstractmethod
    async def get_invoices(self) -> List[Record]:
        pass

    @abstractmethod
    async def get_boats(self) -> List[Record]:
        pass

    @abstractmethod
    async def get_berths(self) -> List[Record]:
        pass

    @abstractmethod
    async def get_work_orders(self) -> List[Record]:
        pass


def _check_patch(patch: Any) -> None:
    if not isinstance(patch, dict):
        raise ProviderError(
            "Profile update must be a mapping of fields",
            kind=ErrorKind.INVALID,
            endpoint=USER_PROFILE_ENDPOINT,
        )


# =============================================================================
# DEMO DATA
# =============================================================================

class MockDataProvider(DataProvider):
    """
    Serves the demo dataset. Results are deep copies, so callers may mutate
    them freely. ``latency`` adds an artificial delay to mimic the network.
    """

    mode = DataSourceMode.MOCK

    def __init__(
        self,
        latency: float = 0.0,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.latency = latency
        self._clock = clock
        self._profile = copy.deepcopy(demo_data.DEMO_USER_PROFILE)

    async def _serve(self, value: Any) -> Any:
        if self.latency > 0:
            await asyncio.sleep(self.latency)
        return copy.deepcopy(value)

    async def get_user_profile(self) -> Record:
        return await self._serve(self._profile)

    async def update_user_profile(self, patch: Record) -> Record:
        _check_patch(patch)
        self._profile.update(patch)
        logger.debug(f"Demo profile updated: {sorted(patch)}")
        return await self._serve(self._profile)

    async def get_dashboard_stats(self) -> Record:
        return await self._serve(demo_data.DEMO_DASHBOARD_STATS)

    async def get_marina_overview(self) -> Record:
        return await self._serve(demo_data.demo_marina_overview(self._clock()))

    async def get_sync_status(self) -> Record:
        return await self._serve(demo_data.demo_sync_status(self._clock()))

    async def get_pending_operations(self) -> List[Record]:
        return await self._serve(demo_data.DEMO_PENDING_OPERATIONS)

    async def get_notifications(self) -> List[Record]:
        return await self._serve(demo_data.DEMO_NOTIFICATIONS)

    async def get_recent_activity(self) -> List[Record]:
        return await self._serve(demo_data.DEMO_RECENT_ACTIVITY)

    async def get_contracts(self) -> List[Record]:
        return await self._serve(demo_data.demo_contracts())

    async def get_invoices(self) -> List[Record]:
        return await self._serve(demo_data.demo_invoices())

    async def get_boats(self) -> List[Record]:
        return await self._serve(demo_data.demo_boats())

    async def get_berths(self) -> List[Record]:
        return await self._serve(demo_data.demo_berths())

    async def get_work_orders(self) -> List[Record]:
        return await self._serve(demo_data.demo_work_orders())


# =============================================================================
# LIVE BACKEND
# =============================================================================

class DatabaseDataProvider(DataProvider):
    """
    Reads the live backend through ``MarinaAPIClient``; the shared client
    from ``get_api_client()`` when none is injected.

    Every failure propagates as ProviderError / ProbeTimeout. There is no
    fallback to demo data here: a live page with no backend shows an error.
    """

    mode = DataSourceMode.DATABASE

    def __init__(self, client: Optional[MarinaAPIClient] = None):
        self.client = client or get_api_client()

    @staticmethod
    def _expect_dict(payload: Any, endpoint: str) -> Record:
        if isinstance(payload, dict) and "success" in payload:
            if not payload["success"]:
                raise ProviderError(
                    payload.get("error") or f"{endpoint} reported failure",
                    kind=ErrorKind.UNAVAILABLE,
                    endpoint=endpoint,
                )
            payload = payload.get("data")
        if not isinstance(payload, dict):
            raise ProviderError(
                f"{endpoint} returned an unexpected body",
                kind=ErrorKind.INVALID,
                endpoint=endpoint,
            )
        return payload

    @staticmethod
    def _expect_list(payload: Any, key: str, endpoint: str) -> List[Record]:
        # Accept a bare array or an envelope keyed by the resource name
        if isinstance(payload, dict):
            if payload.get("success") is False:
                raise ProviderError(
                    payload.get("error") or f"{endpoint} reported failure",
                    kind=ErrorKind.UNAVAILABLE,
                    endpoint=endpoint,
                )
            for candidate in (key, "data", "items"):
                if isinstance(payload.get(candidate), list):
                    return payload[candidate]
        if isinstance(payload, list):
            return payload
        raise ProviderError(
            f"{endpoint} did not return a list",
            kind=ErrorKind.INVALID,
            endpoint=endpoint,
        )

    async def _get_list(self, name: str) -> List[Record]:
        endpoint = LIST_ENDPOINTS[name]
        payload = await self.client.get_json(endpoint)
        return self._expect_list(payload, name, endpoint)

    async def get_user_profile(self) -> Record:
        payload = await self.client.get_json(USER_PROFILE_ENDPOINT)
        return self._expect_dict(payload, USER_PROFILE_ENDPOINT)

    async def update_user_profile(self, patch: Record) -> Record:
        _check_patch(patch)
        payload = await self.client.put_json(USER_PROFILE_ENDPOINT, patch)
        return self._expect_dict(payload, USER_PROFILE_ENDPOINT)

    async def get_marina_overview(self) -> Record:
        payload = await self.client.get_json(MARINA_OVERVIEW_ENDPOINT)
        return self._expect_dict(payload, MARINA_OVERVIEW_ENDPOINT)

    async def get_dashboard_stats(self) -> Record:
        """Dashboard counters derived from the marina overview report."""
        overview = await self.get_marina_overview()
        return overview_to_dashboard_stats(overview)

    async def get_sync_status(self) -> Record:
        return await self.client.fetch_sync_status()

    async def get_pending_operations(self) -> List[Record]:
        return await self.client.fetch_operations()

    async def get_notifications(self) -> List[Record]:
        return await self.client.fetch_notifications()

    async def get_recent_activity(self) -> List[Record]:
        # The backend has no activity feed; live mode shows none
        return []

    async def get_contracts(self) -> List[Record]:
        return await self._get_list("contracts")

    async def get_invoices(self) -> List[Record]:
        return await self._get_list("invoices")

    async def get_boats(self) -> List[Record]:
        return await self._get_list("boats")

    async def get_berths(self) -> List[Record]:
        return await self._get_list("berths")

    async def get_work_orders(self) -> List[Record]:
        return await self._get_list("work_orders")


def overview_to_dashboard_stats(overview: Record) -> Record:
    """Map a marina overview report onto the dashboard stats shape."""
    summary = overview.get("summary") or {}
    contracts = overview.get("contracts") or {}
    berths = overview.get("berths") or {}
    boats = overview.get("boats") or {}
    customers = overview.get("customers") or {}
    maintenance = overview.get("maintenance") or {}

    return {
        "contracts": {
            "total": contracts.get("total", 0),
            "active": contracts.get("active", 0),
            "pending": contracts.get("pending", 0),
            "expired": contracts.get("expired", 0),
        },
        "invoices": {
            "total": 0,
            "paid": 0,
            "pending": 0,
            "overdue": 0,
        },
        "bookings": {
            "total": contracts.get("total", 0),
            "active": contracts.get("active", 0),
        },
        "payments": {"total": 0, "completed": 0, "pending": 0, "failed": 0},
        "owners": {
            "total": customers.get("total", summary.get("totalCustomers", 0)),
            "withContracts": customers.get("withContracts", 0),
        },
        "boats": {
            "total": boats.get("total", summary.get("totalBoats", 0)),
            "active": boats.get("active", 0),
            "inactive": boats.get("inactive", 0),
        },
        "berths": {
            "total": berths.get("total", summary.get("totalBerths", 0)),
            "occupied": berths.get("occupied", 0),
            "available": berths.get("available", 0),
        },
        "workOrders": {
            "total": maintenance.get("total", 0),
            "completed": maintenance.get("completed", 0),
            "inProgress": maintenance.get("inProgress", 0),
            "pending": maintenance.get("pending", 0),
        },
        "financial": {
            "totalRevenue": summary.get("totalRevenue", 0),
            "monthlyRevenue": summary.get("monthlyRevenue", 0),
            "outstandingAmount": summary.get("outstandingAmount", 0),
        },
    }


def create_provider(
    mode: DataSourceMode,
    *,
    client: Optional[MarinaAPIClient] = None,
    demo_latency: float = 0.0,
) -> DataProvider:
    """Return a fresh provider for ``mode``."""
    mode = DataSourceMode(mode)
    if mode is DataSourceMode.DATABASE:
        return DatabaseDataProvider(client)
    return MockDataProvider(latency=demo_latency)
