# =============================================================================
# marina_core/datasource/fetch.py
# Page-level data fetching through the current provider
# =============================================================================
"""
Single entry point used by pages to load their data.

The mode store is read on every call, so a page rendered right after a mode
switch (or a lock) already reads from the new source. A provider failure is
returned as an error state; demo data is only ever served when the selected
mode is MOCK.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Optional
import logging

from marina_core.datasource.mode_store import ModeStore
from marina_core.datasource.modes import DataSourceMode
from marina_core.datasource.providers import DataProvider, create_provider
from marina_core.errors import MarinaError
from marina_core.logging import LogContext

logger = logging.getLogger(__name__)

PAGE_DATA_METHODS = {
    "dashboard": "get_dashboard_stats",
    "overview": "get_marina_overview",
    "profile": "get_user_profile",
    "sync_status": "get_sync_status",
    "activity": "get_recent_activity",
    "operations": "get_pending_operations",
    "notifications": "get_notifications",
    "contracts": "get_contracts",
    "invoices": "get_invoices",
    "boats": "get_boats",
    "berths": "get_berths",
    "work_orders": "get_work_orders",
}


@dataclass(frozen=True)
class PageData:
    """Result of one page fetch."""
    data: Any
    error: Optional[MarinaError]
    source: DataSourceMode
    is_demo: bool

    @property
    def ok(self) -> bool:
        return self.error is None


async def fetch_page_data(
    mode_store: ModeStore,
    data_type: str,
    *,
    provider_factory: Callable[[DataSourceMode], DataProvider] = create_provider,
) -> PageData:
    """
    Load ``data_type`` from the provider for the current mode.

    Raises:
        ValueError: unknown ``data_type``
    """
    method_name = PAGE_DATA_METHODS.get(data_type)
    if method_name is None:
        raise ValueError(
            f"Unknown data type '{data_type}'. Expected one of {sorted(PAGE_DATA_METHODS)}"
        )

    mode = mode_store.get_mode()
    provider = provider_factory(mode)
    try:
        with LogContext(logger, f"Loading {data_type} ({mode.value})", level=logging.DEBUG, expected=(MarinaError,)):
            data = await getattr(provider, method_name)()
    except MarinaError as e:
        return PageData(data=None, error=e, source=mode, is_demo=mode is DataSourceMode.MOCK)

    return PageData(data=data, error=None, source=mode, is_demo=mode is DataSourceMode.MOCK)
